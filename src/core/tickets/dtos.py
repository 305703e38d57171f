"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento das entidades para o transporte.

Tipos de DTOs:
- Input DTOs: dados de uma intent já decodificada
- Query DTOs: parâmetros de leitura
- Output DTOs: dados de resposta (para a camada de transporte)

Os cargos do ator (`ator_cargos`) vêm sempre da plataforma e
são usados apenas para a verificação de staff.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from src.core.shared.events import agora_utc

from .entities import TicketEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    Imutável (frozen=True) para garantir que dados
    recebidos não sejam alterados acidentalmente.

    Attributes:
        workspace_id: Tenant
        dono_id: Ator que está abrindo o ticket
        categoria: Categoria do painel
        motivo: Texto livre (None usa o motivo padrão)
        conversa_ref: Referência já escolhida pelo transporte (opcional)
    """

    workspace_id: str
    dono_id: str
    categoria: str
    motivo: Optional[str] = None
    conversa_ref: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "dono_id": self.dono_id,
            "categoria": self.categoria,
            "motivo": self.motivo,
            "conversa_ref": self.conversa_ref,
        }


@dataclass(frozen=True)
class AssumirTicketInputDTO:
    """
    Attributes:
        workspace_id: Tenant
        ticket_id: Ticket alvo
        staff_id: Quem está assumindo
        ator_cargos: Cargos do ator na plataforma
    """

    workspace_id: str
    ticket_id: str
    staff_id: str
    ator_cargos: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "ticket_id": self.ticket_id,
            "staff_id": self.staff_id,
            "ator_cargos": list(self.ator_cargos),
        }


@dataclass(frozen=True)
class FecharTicketInputDTO:
    """
    Attributes:
        workspace_id: Tenant
        ticket_id: Ticket alvo
        fechado_por: Quem está fechando (staff ou dono)
        motivo: Motivo do fechamento (opcional)
        ator_cargos: Cargos do ator na plataforma
    """

    workspace_id: str
    ticket_id: str
    fechado_por: str
    motivo: Optional[str] = None
    ator_cargos: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "ticket_id": self.ticket_id,
            "fechado_por": self.fechado_por,
            "motivo": self.motivo,
            "ator_cargos": list(self.ator_cargos),
        }


@dataclass(frozen=True)
class ReabrirTicketInputDTO:
    workspace_id: str
    ticket_id: str
    ator_id: str
    ator_cargos: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "ticket_id": self.ticket_id,
            "ator_id": self.ator_id,
            "ator_cargos": list(self.ator_cargos),
        }


@dataclass(frozen=True)
class ParticipanteInputDTO:
    """
    DTO de entrada para adicionar/remover participante.

    Attributes:
        ator_id: Staff executando a operação
        alvo_id: Ator que ganha ou perde acesso
    """

    workspace_id: str
    ticket_id: str
    ator_id: str
    alvo_id: str
    ator_cargos: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "ticket_id": self.ticket_id,
            "ator_id": self.ator_id,
            "alvo_id": self.alvo_id,
            "ator_cargos": list(self.ator_cargos),
        }


# =============================================================================
# QUERY DTOs (Leitura)
# =============================================================================

@dataclass(frozen=True)
class ListarMeusTicketsQueryDTO:
    """Tickets de um dono, mais recentes primeiro."""

    workspace_id: str
    dono_id: str
    limite: int = 5


@dataclass(frozen=True)
class TranscriptQueryDTO:
    workspace_id: str
    ticket_id: str
    ator_id: str
    ator_cargos: Tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    Attributes:
        id: ID zero-padded
        workspace_id: Tenant
        conversa_ref: Conversa hospedeira
        dono_id: Criador
        categoria: Valor da categoria (ex: "billing")
        motivo: Motivo de abertura
        status: Valor do status (ex: "open")
        assumido_por / fechado_por / motivo_fechamento: Campos de transição
        criado_em / assumido_em / fechado_em / reaberto_em: Timestamps
    """

    id: str
    workspace_id: str
    conversa_ref: str
    dono_id: str
    categoria: str
    motivo: str
    status: str
    assumido_por: Optional[str]
    fechado_por: Optional[str]
    motivo_fechamento: Optional[str]
    criado_em: datetime
    assumido_em: Optional[datetime] = None
    fechado_em: Optional[datetime] = None
    reaberto_em: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entity: TicketEntity, workspace_id: str) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity
            workspace_id: Tenant dono do ticket
        """
        return cls(
            id=entity.id,
            workspace_id=workspace_id,
            conversa_ref=entity.conversa_ref,
            dono_id=entity.dono_id,
            categoria=entity.categoria.value,
            motivo=entity.motivo,
            status=entity.status.value,
            assumido_por=entity.assumido_por,
            fechado_por=entity.fechado_por,
            motivo_fechamento=entity.motivo_fechamento,
            criado_em=entity.criado_em,
            assumido_em=entity.assumido_em,
            fechado_em=entity.fechado_em,
            reaberto_em=entity.reaberto_em,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "conversa_ref": self.conversa_ref,
            "dono_id": self.dono_id,
            "categoria": self.categoria,
            "motivo": self.motivo,
            "status": self.status,
            "assumido_por": self.assumido_por,
            "fechado_por": self.fechado_por,
            "motivo_fechamento": self.motivo_fechamento,
            "criado_em": self.criado_em.isoformat(),
            "assumido_em": self.assumido_em.isoformat() if self.assumido_em else None,
            "fechado_em": self.fechado_em.isoformat() if self.fechado_em else None,
            "reaberto_em": self.reaberto_em.isoformat() if self.reaberto_em else None,
        }


@dataclass
class TicketListItemDTO:
    """DTO enxuto para a listagem "meus tickets"."""

    id: str
    status: str
    categoria: str
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketListItemDTO":
        return cls(
            id=entity.id,
            status=entity.status.value,
            categoria=entity.categoria.value,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "categoria": self.categoria,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class TranscriptOutputDTO:
    """
    Dados mínimos para reconstruir um transcript.

    O histórico de mensagens pertence à plataforma; o core entrega
    o registro do ticket e a conversa de onde buscá-lo.
    """

    ticket: TicketOutputDTO
    gerado_em: datetime = field(default_factory=agora_utc)

    def to_dict(self) -> dict:
        return {
            "ticket": self.ticket.to_dict(),
            "gerado_em": self.gerado_em.isoformat(),
        }

"""
Entidades do Domínio de Tickets.

Este módulo define as entidades de domínio que encapsulam
as regras de ciclo de vida de um ticket de suporte.

Entidades:
- TicketEntity: Ticket pertencente a um workspace
- TicketStatus: Estados possíveis de um ticket
- TicketCategoria: Categorias oferecidas no painel

Regras de Negócio Encapsuladas:
- Validação de motivo e categoria na criação
- Transições de status controladas (máquina de estados)
- Claim exatamente uma vez por ciclo aberto
- Fechamento nunca é repetido silenciosamente
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from src.core.shared.events import agora_utc
from src.core.shared.exceptions import (
    ValidationError,
    InvalidStateError,
    AlreadyClosedError,
    AlreadyClaimedError,
    CannotRemoveOwnerError,
)


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        ABERTO → ASSUMIDO → FECHADO
           │                   ↑ │
           └───────────────────┘ │
        REABERTO ←───────────────┘

    REABERTO se comporta exatamente como ABERTO em todas as
    operações seguintes; existe apenas para registrar que o
    ticket já foi fechado uma vez.
    """

    ABERTO = "open"
    ASSUMIDO = "claimed"
    FECHADO = "closed"
    REABERTO = "reopened"

    @property
    def ativo(self) -> bool:
        """Conta para a cota de tickets por usuário."""
        return self is not TicketStatus.FECHADO

    @property
    def aguardando_staff(self) -> bool:
        """Aberto ou reaberto: ainda pode ser assumido."""
        return self in (TicketStatus.ABERTO, TicketStatus.REABERTO)

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum.

        Args:
            value: Nome ("ABERTO") ou valor ("open") do enum

        Returns:
            TicketStatus correspondente

        Raises:
            ValueError: Se valor inválido
        """
        try:
            return cls[value.upper()]
        except KeyError:
            pass

        for status in cls:
            if status.value == value.lower():
                return status

        raise ValueError(f"Status inválido: {value}")


class TicketCategoria(Enum):
    """Categorias do menu de criação de ticket."""

    GERAL = "general"
    TECNICO = "technical"
    FINANCEIRO = "billing"
    DENUNCIA = "report"
    OUTRO = "other"

    @classmethod
    def from_string(cls, value: str) -> "TicketCategoria":
        """
        Converte string para enum (case-insensitive).

        Raises:
            ValueError: Se categoria desconhecida
        """
        normalizado = (value or "").strip().lower()
        for categoria in cls:
            if categoria.value == normalizado or categoria.name.lower() == normalizado:
                return categoria
        raise ValueError(f"Categoria inválida: {value}")


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Um ticket sempre pertence a um WorkspaceConfig e só é criado
    pelo fluxo de criação (que reserva o ID no mesmo save).

    Invariantes:
    - id, conversa_ref, dono_id e categoria são imutáveis
    - assumido_por é definido uma única vez por ciclo aberto
      e só é limpo ao reabrir
    - fechado_por/motivo_fechamento existem apenas enquanto FECHADO

    Attributes:
        id: ID zero-padded ("0001"), único no workspace
        conversa_ref: Referência opaca à conversa remota
        dono_id: Ator que criou o ticket
        categoria: Categoria escolhida na criação
        motivo: Texto livre informado na criação
        status: Estado atual
        assumido_por: Staff que assumiu o ticket
        criado_em / assumido_em / fechado_em / reaberto_em: Timestamps
        fechado_por: Quem fechou
        motivo_fechamento: Motivo informado ao fechar

    Example:
        ticket = TicketEntity.criar(
            ticket_id="0001",
            conversa_ref="conv-abc",
            dono_id="u1",
            categoria="billing",
            motivo="help",
        )
        ticket.assumir("staffA")
        ticket.fechar("staffA", "resolved")
        ticket.reabrir()
    """

    id: str
    conversa_ref: str
    dono_id: str
    categoria: TicketCategoria = TicketCategoria.GERAL
    motivo: str = ""
    status: TicketStatus = TicketStatus.ABERTO

    assumido_por: Optional[str] = None
    fechado_por: Optional[str] = None
    motivo_fechamento: Optional[str] = None

    criado_em: datetime = field(default_factory=agora_utc)
    assumido_em: Optional[datetime] = None
    fechado_em: Optional[datetime] = None
    reaberto_em: Optional[datetime] = None

    MOTIVO_MAX_LENGTH: ClassVar[int] = 1000
    MOTIVO_PADRAO: ClassVar[str] = "No reason provided"
    ID_DIGITOS: ClassVar[int] = 4

    @classmethod
    def formatar_id(cls, numero: int) -> str:
        """Formata o número sequencial com zeros à esquerda (1 -> "0001")."""
        return str(numero).zfill(cls.ID_DIGITOS)

    @classmethod
    def criar(
        cls,
        ticket_id: str,
        conversa_ref: str,
        dono_id: str,
        categoria: str,
        motivo: Optional[str] = None,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        Args:
            ticket_id: ID já reservado pelo TicketRegistry
            conversa_ref: Referência da conversa que hospedará o ticket
            dono_id: Ator que está abrindo o ticket
            categoria: Uma das categorias do painel (case-insensitive)
            motivo: Texto livre (máx. 1000 caracteres)

        Returns:
            Nova instância com status ABERTO

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        if not dono_id:
            raise ValidationError("Dono do ticket é obrigatório", field="dono_id")
        if not conversa_ref:
            raise ValidationError("Referência de conversa é obrigatória", field="conversa_ref")

        return cls(
            id=ticket_id,
            conversa_ref=conversa_ref,
            dono_id=dono_id,
            categoria=cls._validar_categoria(categoria),
            motivo=cls._validar_motivo(motivo),
            status=TicketStatus.ABERTO,
        )

    @classmethod
    def _validar_categoria(cls, categoria: str) -> TicketCategoria:
        try:
            return TicketCategoria.from_string(categoria)
        except ValueError:
            validas = ", ".join(c.value for c in TicketCategoria)
            raise ValidationError(
                f"Categoria inválida: {categoria!r} (esperado: {validas})",
                field="categoria",
            )

    @classmethod
    def _validar_motivo(cls, motivo: Optional[str]) -> str:
        if motivo is None:
            return cls.MOTIVO_PADRAO

        motivo_limpo = motivo.strip()
        if not motivo_limpo:
            raise ValidationError("Motivo não pode ser vazio", field="motivo")
        if len(motivo_limpo) > cls.MOTIVO_MAX_LENGTH:
            raise ValidationError(
                f"Motivo deve ter no máximo {cls.MOTIVO_MAX_LENGTH} caracteres",
                field="motivo",
            )
        return motivo_limpo

    # =========================================================================
    # Transições
    # =========================================================================

    def assumir(self, staff_id: str) -> None:
        """
        Staff assume o ticket (ABERTO/REABERTO → ASSUMIDO).

        Regras:
        - Ticket fechado não pode ser assumido
        - Claim é exatamente-uma-vez: segundo claim falha

        Raises:
            InvalidStateError: Se ticket fechado
            AlreadyClaimedError: Se já assumido
        """
        if not staff_id:
            raise ValidationError("ID do staff é obrigatório", field="staff_id")

        if self.status == TicketStatus.FECHADO:
            raise InvalidStateError(
                f"Ticket {self.id} está fechado e não pode ser assumido",
                rule="assumir_requer_aberto",
            )

        if self.assumido_por or self.status == TicketStatus.ASSUMIDO:
            raise AlreadyClaimedError(
                f"Ticket {self.id} já foi assumido por {self.assumido_por}",
                claimed_by=self.assumido_por,
            )

        if not self.status.aguardando_staff:
            raise InvalidStateError(
                f"Ticket {self.id} não pode ser assumido a partir de {self.status.value}",
                rule="assumir_requer_aberto",
            )

        self.status = TicketStatus.ASSUMIDO
        self.assumido_por = staff_id
        self.assumido_em = agora_utc()

    def fechar(self, fechado_por: str, motivo: Optional[str] = None) -> None:
        """
        Fecha o ticket (qualquer estado não fechado → FECHADO).

        Campos históricos (assumido_por, assumido_em, reaberto_em)
        são preservados.

        Raises:
            AlreadyClosedError: Se já fechado (campos de fechamento intactos)
        """
        if self.status == TicketStatus.FECHADO:
            raise AlreadyClosedError(f"Ticket {self.id} já está fechado")

        self.status = TicketStatus.FECHADO
        self.fechado_por = fechado_por
        self.motivo_fechamento = (motivo or "").strip() or self.MOTIVO_PADRAO
        self.fechado_em = agora_utc()

    def reabrir(self) -> None:
        """
        Reabre um ticket fechado (FECHADO → REABERTO).

        Limpa os campos de fechamento e o claim, permitindo que
        o ticket seja assumido novamente.

        Raises:
            InvalidStateError: Se ticket não está fechado
        """
        if self.status != TicketStatus.FECHADO:
            raise InvalidStateError(
                f"Apenas tickets fechados podem ser reabertos (atual: {self.status.value})",
                rule="apenas_fechado_pode_reabrir",
            )

        self.status = TicketStatus.REABERTO
        self.fechado_por = None
        self.motivo_fechamento = None
        self.fechado_em = None
        self.assumido_por = None
        self.reaberto_em = agora_utc()

    def validar_remocao_participante(self, alvo_id: str) -> None:
        """
        Garante que o criador nunca é removido da conversa.

        Raises:
            CannotRemoveOwnerError: Se alvo_id é o dono
        """
        if alvo_id == self.dono_id:
            raise CannotRemoveOwnerError(
                f"O criador do ticket {self.id} não pode ser removido"
            )

    @property
    def esta_ativo(self) -> bool:
        return self.status.ativo

    @property
    def esta_assumido(self) -> bool:
        return self.assumido_por is not None

    # =========================================================================
    # Documento JSON
    # =========================================================================

    def to_document(self) -> Dict[str, Any]:
        """Converte para o documento persistido (chaves camelCase)."""
        return {
            "id": self.id,
            "conversationRef": self.conversa_ref,
            "ownerId": self.dono_id,
            "category": self.categoria.value,
            "reason": self.motivo,
            "status": self.status.value,
            "claimedBy": self.assumido_por,
            "closedBy": self.fechado_por,
            "closeReason": self.motivo_fechamento,
            "createdAt": _iso(self.criado_em),
            "claimedAt": _iso(self.assumido_em),
            "closedAt": _iso(self.fechado_em),
            "reopenedAt": _iso(self.reaberto_em),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "TicketEntity":
        """
        Reconstrói a entidade a partir do documento persistido.

        Bypassa validações do factory method, pois os dados
        já foram validados na criação original.
        """
        return cls(
            id=doc["id"],
            conversa_ref=doc["conversationRef"],
            dono_id=doc["ownerId"],
            categoria=TicketCategoria(doc["category"]),
            motivo=doc.get("reason") or cls.MOTIVO_PADRAO,
            status=TicketStatus(doc["status"]),
            assumido_por=doc.get("claimedBy"),
            fechado_por=doc.get("closedBy"),
            motivo_fechamento=doc.get("closeReason"),
            criado_em=_parse(doc.get("createdAt")) or agora_utc(),
            assumido_em=_parse(doc.get("claimedAt")),
            fechado_em=_parse(doc.get("closedAt")),
            reaberto_em=_parse(doc.get("reopenedAt")),
        )

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id}, "
            f"dono={self.dono_id}, "
            f"status={self.status.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None

"""
Domain Events do Domínio de Tickets.

Este módulo define os eventos de domínio que são disparados
quando uma transição de ticket é persistida com sucesso.

Eventos:
- TicketCriadoEvent: Novo ticket foi criado
- TicketAssumidoEvent: Staff assumiu o ticket
- TicketFechadoEvent: Ticket foi fechado
- TicketReabertoEvent: Ticket foi reaberto
- ParticipanteAdicionadoEvent: Ator ganhou acesso à conversa
- ParticipanteRemovidoEvent: Ator perdeu acesso à conversa

Uso:
    Eventos são criados nos use cases, depois que a mutação do
    workspace retornou, e publicados pelo UnitOfWork após o commit.

    with uow:
        ticket = repository.mutate(workspace_id, mutacao)
        uow.publish_event(TicketCriadoEvent(...))
"""

from dataclasses import dataclass
from typing import Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketEvent(DomainEvent):
    """Base dos eventos cujo agregado é um Ticket."""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketCriadoEvent(TicketEvent):
    """
    Evento: Ticket foi criado.

    Handlers típicos:
    - Registrar auditoria
    - Atualizar dashboard do workspace

    Attributes:
        dono_id: Ator que abriu o ticket
        categoria: Categoria escolhida
        conversa_ref: Conversa pedida ao colaborador
    """

    dono_id: str = ""
    categoria: str = ""
    conversa_ref: str = ""


@dataclass
class TicketAssumidoEvent(TicketEvent):
    """
    Evento: Staff assumiu o ticket.

    Attributes:
        staff_id: Quem assumiu
    """

    staff_id: str = ""


@dataclass
class TicketFechadoEvent(TicketEvent):
    """
    Evento: Ticket foi fechado.

    Attributes:
        fechado_por: Quem fechou (staff ou dono)
        motivo: Motivo do fechamento
        dono_id: Criador do ticket
        assumido_por: Staff que havia assumido (se houver)
    """

    fechado_por: str = ""
    motivo: str = ""
    dono_id: str = ""
    assumido_por: Optional[str] = None


@dataclass
class TicketReabertoEvent(TicketEvent):
    """
    Evento: Ticket foi reaberto.

    Attributes:
        reaberto_por: Staff que reabriu
    """

    reaberto_por: str = ""


@dataclass
class ParticipanteAdicionadoEvent(TicketEvent):
    """Evento: Ator ganhou acesso à conversa do ticket."""

    participante_id: str = ""
    adicionado_por: str = ""


@dataclass
class ParticipanteRemovidoEvent(TicketEvent):
    """Evento: Ator perdeu acesso à conversa do ticket."""

    participante_id: str = ""
    removido_por: str = ""

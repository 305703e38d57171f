"""
Domínio de Tickets - Ciclo de vida de tickets de suporte.

Este módulo contém toda a lógica de negócio relacionada a tickets
de um workspace, incluindo:
- Entidades (TicketEntity, TicketStatus, TicketCategoria)
- Domain Events (TicketCriado, TicketAssumido, TicketFechado, ...)
- Platform Actions (pedidos declarativos ao colaborador externo)
- DTOs (Input/Output Data Transfer Objects)

Registry, estatísticas e use cases dependem do domínio de
workspaces e são importados diretamente dos seus módulos
(src.core.tickets.registry, .stats, .use_cases).

Características do Domínio:
- IDs sequenciais por workspace, nunca reutilizados
- Transições controladas na entidade
- Eventos e ações publicados só após a gravação
"""

from .entities import TicketEntity, TicketStatus, TicketCategoria
from .events import (
    TicketCriadoEvent,
    TicketAssumidoEvent,
    TicketFechadoEvent,
    TicketReabertoEvent,
    ParticipanteAdicionadoEvent,
    ParticipanteRemovidoEvent,
)
from .actions import (
    CriarConversaAction,
    ConcederAcessoAction,
    RevogarAcessoAction,
    PublicarMensagemAction,
    AgendarExclusaoConversaAction,
)
from .dtos import (
    CriarTicketInputDTO,
    AssumirTicketInputDTO,
    FecharTicketInputDTO,
    ReabrirTicketInputDTO,
    ParticipanteInputDTO,
    TicketOutputDTO,
    TicketListItemDTO,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketCategoria",
    # Events
    "TicketCriadoEvent",
    "TicketAssumidoEvent",
    "TicketFechadoEvent",
    "TicketReabertoEvent",
    "ParticipanteAdicionadoEvent",
    "ParticipanteRemovidoEvent",
    # Actions
    "CriarConversaAction",
    "ConcederAcessoAction",
    "RevogarAcessoAction",
    "PublicarMensagemAction",
    "AgendarExclusaoConversaAction",
    # DTOs
    "CriarTicketInputDTO",
    "AssumirTicketInputDTO",
    "FecharTicketInputDTO",
    "ReabrirTicketInputDTO",
    "ParticipanteInputDTO",
    "TicketOutputDTO",
    "TicketListItemDTO",
]

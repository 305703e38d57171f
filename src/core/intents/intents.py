"""
Intents - Eventos externos já normalizados pelo transporte.

Cada comando ou interação da plataforma é decodificado uma única vez
em uma das variantes abaixo. O core nunca inspeciona payloads
específicos da plataforma.

`actor_roles` carrega os cargos do ator informados pela plataforma;
são usados apenas pela verificação de staff.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union


# =============================================================================
# CICLO DE VIDA
# =============================================================================

@dataclass(frozen=True)
class CreateTicket:
    workspace_id: str
    actor_id: str
    category: str
    reason: Optional[str] = None
    conversation_ref: Optional[str] = None


@dataclass(frozen=True)
class ClaimTicket:
    workspace_id: str
    ticket_id: str
    actor_id: str
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CloseTicket:
    workspace_id: str
    ticket_id: str
    actor_id: str
    reason: Optional[str] = None
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReopenTicket:
    workspace_id: str
    ticket_id: str
    actor_id: str
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AddParticipant:
    workspace_id: str
    ticket_id: str
    actor_id: str
    target_id: str
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RemoveParticipant:
    workspace_id: str
    ticket_id: str
    actor_id: str
    target_id: str
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# ADMINISTRAÇÃO DO WORKSPACE
# =============================================================================

@dataclass(frozen=True)
class ConfigureSetting:
    """value=None restaura o padrão da configuração."""

    workspace_id: str
    key: str
    value: Any = None


@dataclass(frozen=True)
class AddStaff:
    workspace_id: str
    target_id: str


@dataclass(frozen=True)
class RemoveStaff:
    workspace_id: str
    target_id: str


@dataclass(frozen=True)
class AddStaffRole:
    workspace_id: str
    role_id: str


@dataclass(frozen=True)
class RemoveStaffRole:
    workspace_id: str
    role_id: str


# =============================================================================
# CONSULTAS
# =============================================================================

@dataclass(frozen=True)
class QueryStats:
    workspace_id: str


@dataclass(frozen=True)
class ListMyTickets:
    workspace_id: str
    actor_id: str
    limit: int = 5


@dataclass(frozen=True)
class ListStaff:
    workspace_id: str


@dataclass(frozen=True)
class QueryTranscript:
    workspace_id: str
    ticket_id: str
    actor_id: str
    actor_roles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LookupTicket:
    """Identifica o ticket hospedado na conversa onde o comando foi emitido."""

    workspace_id: str
    conversation_ref: str


Intent = Union[
    CreateTicket,
    ClaimTicket,
    CloseTicket,
    ReopenTicket,
    AddParticipant,
    RemoveParticipant,
    ConfigureSetting,
    AddStaff,
    RemoveStaff,
    AddStaffRole,
    RemoveStaffRole,
    QueryStats,
    ListMyTickets,
    ListStaff,
    QueryTranscript,
    LookupTicket,
]


@dataclass(frozen=True)
class IntentResult:
    """
    Resultado tipado de uma intent.

    Attributes:
        ok: True se a intent foi aplicada
        value: Payload serializável do resultado (quando ok)
        error: DomainException.to_dict() (quando não ok)
    """

    ok: bool
    value: Any = None
    error: Optional[dict] = None

    @classmethod
    def sucesso(cls, value: Any = None) -> "IntentResult":
        return cls(ok=True, value=value)

    @classmethod
    def falha(cls, error: dict) -> "IntentResult":
        return cls(ok=False, error=error)

    @property
    def error_code(self) -> Optional[str]:
        return self.error.get("error") if self.error else None

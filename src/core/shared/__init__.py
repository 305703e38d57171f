"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events e Platform Actions
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    PermissionDeniedError,
    BusinessRuleViolationError,
    InvalidStateError,
    AlreadyClosedError,
    AlreadyClaimedError,
    QuotaExceededError,
    CannotRemoveOwnerError,
    StorageUnavailableError,
    ConcurrencyError,
)
from .events import DomainEvent
from .actions import PlatformAction
from .interfaces import UnitOfWork, EventPublisher, ActionDispatcher

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "PermissionDeniedError",
    "BusinessRuleViolationError",
    "InvalidStateError",
    "AlreadyClosedError",
    "AlreadyClaimedError",
    "QuotaExceededError",
    "CannotRemoveOwnerError",
    "StorageUnavailableError",
    "ConcurrencyError",
    "DomainEvent",
    "PlatformAction",
    "UnitOfWork",
    "EventPublisher",
    "ActionDispatcher",
]

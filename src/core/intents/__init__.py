"""
Intents - União fechada de comandos e seu dispatcher.
"""

from .intents import (
    Intent,
    IntentResult,
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
)
from .dispatcher import IntentDispatcher

__all__ = [
    "Intent",
    "IntentResult",
    "IntentDispatcher",
    "CreateTicket",
    "ClaimTicket",
    "CloseTicket",
    "ReopenTicket",
    "AddParticipant",
    "RemoveParticipant",
    "ConfigureSetting",
    "AddStaff",
    "RemoveStaff",
    "AddStaffRole",
    "RemoveStaffRole",
    "QueryStats",
    "ListMyTickets",
    "ListStaff",
    "QueryTranscript",
    "LookupTicket",
]

"""
Persistência chave/valor.

- KeyValueStore: port implementado pelos backends
- InMemoryKeyValueStore: backend do próprio processo
- keys: esquema lógico de chaves
"""

from .ports import KeyValueStore, VERSAO_AUSENTE
from .memory import InMemoryKeyValueStore
from .keys import workspace_key, ticket_key, ticket_pattern

__all__ = [
    "KeyValueStore",
    "VERSAO_AUSENTE",
    "InMemoryKeyValueStore",
    "workspace_key",
    "ticket_key",
    "ticket_pattern",
]

"""
Backend em memória do KeyValueStore.

Útil para:
- Testes unitários e de concorrência
- Desenvolvimento local (TICKET_STORAGE_BACKEND=memory)

Os documentos são guardados serializados em JSON, de modo que
quem lê recebe sempre uma cópia independente e nenhum chamador
consegue alterar o estado armazenado por referência.
"""

from contextlib import contextmanager
from fnmatch import fnmatchcase
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging
import threading

from src.core.shared.exceptions import StorageUnavailableError

from .ports import KeyValueStore, VERSAO_AUSENTE
from .serialization import dumps_document, loads_document

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """
    KeyValueStore em memória, thread-safe.

    Um único lock protege o mapa; a aquisição é limitada por
    `timeout` segundos e, se estourar, a operação falha com
    StorageUnavailableError em vez de bloquear o chamador.

    Example:
        store = InMemoryKeyValueStore(timeout=5)
        store.set("workspace:W1", {"tickets": {}})
        store.get("workspace:W1")
    """

    def __init__(self, timeout: float = 5.0):
        self._timeout = timeout
        self._lock = threading.RLock()
        self._data: Dict[str, Tuple[str, int]] = {}

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            raise StorageUnavailableError(
                f"Timeout de {self._timeout}s aguardando o store em memória",
                key=key,
            )
        try:
            yield
        finally:
            self._lock.release()

    def get(self, key: str) -> Optional[Any]:
        value, _ = self.get_versioned(key)
        return value

    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        with self._locked(key):
            entry = self._data.get(key)
        if entry is None:
            return None, VERSAO_AUSENTE
        raw, version = entry
        return loads_document(raw), version

    def set(self, key: str, value: Any) -> bool:
        raw = dumps_document(key, value)
        with self._locked(key):
            _, version = self._data.get(key, (None, VERSAO_AUSENTE))
            self._data[key] = (raw, version + 1)
        logger.debug(f"[MEMORY] set {key} -> v{version + 1}")
        return True

    def set_if_version(self, key: str, value: Any, expected_version: int) -> bool:
        raw = dumps_document(key, value)
        with self._locked(key):
            _, current = self._data.get(key, (None, VERSAO_AUSENTE))
            if current != expected_version:
                logger.debug(
                    f"[MEMORY] conflito em {key}: esperado v{expected_version}, atual v{current}"
                )
                return False
            self._data[key] = (raw, current + 1)
        return True

    def delete(self, key: str) -> bool:
        with self._locked(key):
            return self._data.pop(key, None) is not None

    def scan(self, pattern: str) -> List[str]:
        with self._locked(pattern):
            keys = list(self._data)
        return sorted(k for k in keys if fnmatchcase(k, pattern))

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        with self._locked("*"):
            self._data.clear()

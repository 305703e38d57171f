"""
RedisKeyValueStore - Backend sobre um serviço Redis remoto.

Cada chave guarda um envelope JSON `{"v": <versão>, "data": <documento>}`.
O compare-and-swap usa WATCH/MULTI/EXEC: se outra conexão alterar a
chave entre o WATCH e o EXEC, o Redis aborta a transação (WatchError)
e a escrita é reportada como conflito.

Toda chamada é limitada por `socket_timeout`; erros de conexão ou
timeout viram StorageUnavailableError.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple
import logging

import redis
from redis.exceptions import RedisError, WatchError

from src.core.shared.exceptions import StorageUnavailableError
from src.core.storage.ports import KeyValueStore, VERSAO_AUSENTE
from src.core.storage.serialization import dumps_document, loads_document

logger = logging.getLogger(__name__)

# set() incondicional repete a transação em WatchError até este limite
MAX_TENTATIVAS_SET = 10


@contextmanager
def _traduzir_erros(key: str) -> Iterator[None]:
    try:
        yield
    except WatchError:
        raise
    except RedisError as e:
        logger.error(f"[REDIS] falha para {key}: {e}")
        raise StorageUnavailableError(f"Redis indisponível: {e}", key=key) from e


class RedisKeyValueStore(KeyValueStore):
    """
    KeyValueStore em Redis.

    Example:
        store = RedisKeyValueStore.from_url("redis://localhost:6379/0", timeout=5)
        store.set("workspace:W1", {"tickets": {}})
    """

    def __init__(self, client: "redis.Redis"):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0) -> "RedisKeyValueStore":
        """
        Cria store a partir de uma URL redis://.

        Args:
            url: URL de conexão
            timeout: Limite em segundos para conexão e comandos
        """
        client = redis.Redis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    # =========================================================================
    # Envelope
    # =========================================================================

    @staticmethod
    def _abrir(raw: Any) -> Tuple[Optional[Any], int]:
        envelope = loads_document(raw)
        if envelope is None:
            return None, VERSAO_AUSENTE
        return envelope["data"], int(envelope["v"])

    @staticmethod
    def _fechar(key: str, value: Any, version: int) -> str:
        return dumps_document(key, {"v": version, "data": value})

    # =========================================================================
    # KeyValueStore
    # =========================================================================

    def get(self, key: str) -> Optional[Any]:
        value, _ = self.get_versioned(key)
        return value

    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        with _traduzir_erros(key):
            raw = self._client.get(key)
        return self._abrir(raw)

    def set(self, key: str, value: Any) -> bool:
        # valida o documento antes de abrir a transação
        dumps_document(key, value)
        for _ in range(MAX_TENTATIVAS_SET):
            try:
                self._gravar(key, value, expected_version=None)
                logger.debug(f"[REDIS] set {key}")
                return True
            except WatchError:
                logger.debug(f"[REDIS] set {key} concorrente; repetindo")

        logger.error(f"[REDIS] set {key} desistiu após {MAX_TENTATIVAS_SET} conflitos")
        raise StorageUnavailableError(
            f"Escrita de {key} sob contenção contínua", key=key
        )

    def set_if_version(self, key: str, value: Any, expected_version: int) -> bool:
        dumps_document(key, value)
        try:
            return self._gravar(key, value, expected_version)
        except WatchError:
            logger.debug(f"[REDIS] conflito em {key}: esperado v{expected_version}")
            return False

    def delete(self, key: str) -> bool:
        with _traduzir_erros(key):
            return self._client.delete(key) > 0

    def scan(self, pattern: str) -> List[str]:
        with _traduzir_erros(pattern):
            keys = [
                k.decode("utf-8") if isinstance(k, bytes) else k
                for k in self._client.scan_iter(match=pattern)
            ]
        return sorted(set(keys))

    # =========================================================================
    # Internos
    # =========================================================================

    def _gravar(self, key: str, value: Any, expected_version: Optional[int]) -> bool:
        """
        WATCH + leitura da versão + MULTI/EXEC.

        Returns:
            False se a versão atual difere da esperada

        Raises:
            WatchError: Chave alterada por outra conexão antes do EXEC
        """
        with _traduzir_erros(key):
            with self._client.pipeline() as pipe:
                pipe.watch(key)
                _, atual = self._abrir(pipe.get(key))
                if expected_version is not None and atual != expected_version:
                    pipe.unwatch()
                    logger.debug(
                        f"[REDIS] conflito em {key}: esperado v{expected_version}, atual v{atual}"
                    )
                    return False
                pipe.multi()
                pipe.set(key, self._fechar(key, value, atual + 1))
                pipe.execute()
        return True

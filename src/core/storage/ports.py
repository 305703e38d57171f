"""
Port de Persistência - KeyValueStore.

Contrato chave/valor sobre um backend intercambiável:
- Memória do processo (InMemoryKeyValueStore)
- Documento em banco via Django ORM (DjangoKeyValueStore)
- Serviço remoto Redis (RedisKeyValueStore)

Todos os valores são documentos JSON-serializáveis. Esta camada
não oferece transação entre múltiplas chaves; a atomicidade de um
workspace é construída acima, no WorkspaceRepository, usando a
primitiva de compare-and-swap por chave (set_if_version).

Falhas nunca são engolidas: backends traduzem seus erros nativos
(timeout de lock, DatabaseError, ConnectionError) para
StorageUnavailableError e o chamador decide a política de retry.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple


# Versão reportada para chaves inexistentes
VERSAO_AUSENTE = 0


class KeyValueStore(ABC):
    """
    Interface para stores chave/valor versionados.

    Cada chave carrega um número de versão inteiro que começa em 1
    na primeira escrita e é incrementado a cada escrita subsequente.
    Chaves ausentes reportam versão 0.

    Example:
        valor, versao = store.get_versioned("workspace:W1")
        valor["nextTicketNumber"] += 1
        if not store.set_if_version("workspace:W1", valor, versao):
            # outro processo escreveu antes: recarregar e tentar de novo
            ...
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Busca valor por chave.

        Args:
            key: Chave lógica (ex: "workspace:W1")

        Returns:
            Cópia do documento armazenado ou None se ausente

        Raises:
            StorageUnavailableError: Timeout ou falha do backend
        """
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """
        Grava valor incondicionalmente (last writer wins).

        Args:
            key: Chave lógica
            value: Documento JSON-serializável

        Returns:
            True quando gravado

        Raises:
            ValidationError: Valor não serializável em JSON
            StorageUnavailableError: Timeout ou falha do backend
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove chave.

        Returns:
            True se a chave existia, False caso contrário

        Raises:
            StorageUnavailableError: Timeout ou falha do backend
        """
        raise NotImplementedError

    @abstractmethod
    def scan(self, pattern: str) -> List[str]:
        """
        Lista chaves que casam com um padrão glob (curinga `*`).

        Args:
            pattern: Padrão, ex: "ticket:W1:*"

        Returns:
            Chaves encontradas, em ordem lexicográfica
        """
        raise NotImplementedError

    @abstractmethod
    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        """
        Busca valor e versão atual.

        Returns:
            Tupla (documento ou None, versão); versão 0 se ausente
        """
        raise NotImplementedError

    @abstractmethod
    def set_if_version(self, key: str, value: Any, expected_version: int) -> bool:
        """
        Compare-and-swap: grava apenas se a versão atual é a esperada.

        Com expected_version == 0, grava apenas se a chave não existe.

        Args:
            key: Chave lógica
            value: Documento JSON-serializável
            expected_version: Versão lida anteriormente via get_versioned

        Returns:
            True se gravou; False se houve escrita concorrente
        """
        raise NotImplementedError

"""
DjangoKeyValueStore - Backend de documentos sobre o Django ORM.

Cada chave é uma linha de `kv_records`. O compare-and-swap é um
UPDATE condicional (`WHERE key = ? AND version = ?`) ou, para chaves
novas, um INSERT protegido pela primary key: em ambos os casos o
banco decide qual escritor vence.

Erros do banco (lock do SQLite estourando `timeout`, conexão perdida)
viram StorageUnavailableError.
"""

from contextlib import contextmanager
from fnmatch import fnmatchcase
from typing import Any, Iterator, List, Optional, Tuple
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from src.core.shared.exceptions import StorageUnavailableError
from src.core.storage.ports import KeyValueStore, VERSAO_AUSENTE
from src.core.storage.serialization import dumps_document, loads_document

from .models import KeyValueRecord

logger = logging.getLogger(__name__)

# set() alterna UPDATE e INSERT até este limite
MAX_TENTATIVAS_SET = 10


@contextmanager
def _traduzir_erros(key: str) -> Iterator[None]:
    try:
        yield
    except DatabaseError as e:
        logger.error(f"[DJANGO] falha no banco para {key}: {e}")
        raise StorageUnavailableError(f"Banco indisponível: {e}", key=key) from e


class DjangoKeyValueStore(KeyValueStore):
    """
    KeyValueStore persistido em banco relacional.

    Example:
        store = DjangoKeyValueStore()
        store.set_if_version("workspace:W1", doc, 0)   # True, cria v1
        store.set_if_version("workspace:W1", doc, 0)   # False, já existe
    """

    def get(self, key: str) -> Optional[Any]:
        value, _ = self.get_versioned(key)
        return value

    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        with _traduzir_erros(key):
            row = (
                KeyValueRecord.objects
                .filter(key=key)
                .values_list("document", "version")
                .first()
            )
        if row is None:
            return None, VERSAO_AUSENTE
        raw, version = row
        return loads_document(raw), version

    def set(self, key: str, value: Any) -> bool:
        raw = dumps_document(key, value)
        with _traduzir_erros(key):
            for _ in range(MAX_TENTATIVAS_SET):
                if self._atualizar(key, raw) or self._inserir(key, raw):
                    logger.debug(f"[DJANGO] set {key}")
                    return True
                # outra escrita criou a linha entre o UPDATE e o INSERT

        logger.error(f"[DJANGO] set {key} desistiu após {MAX_TENTATIVAS_SET} tentativas")
        raise StorageUnavailableError(
            f"Escrita de {key} sob contenção contínua", key=key
        )

    def set_if_version(self, key: str, value: Any, expected_version: int) -> bool:
        raw = dumps_document(key, value)
        with _traduzir_erros(key):
            if expected_version == VERSAO_AUSENTE:
                gravado = self._inserir(key, raw)
            else:
                gravado = self._atualizar(key, raw, expected_version)
        if not gravado:
            logger.debug(f"[DJANGO] conflito em {key}: esperado v{expected_version}")
        return gravado

    def delete(self, key: str) -> bool:
        with _traduzir_erros(key):
            removidos, _ = KeyValueRecord.objects.filter(key=key).delete()
        return removidos > 0

    def scan(self, pattern: str) -> List[str]:
        prefixo = pattern.split("*", 1)[0].split("?", 1)[0]
        with _traduzir_erros(pattern):
            keys = KeyValueRecord.objects.filter(
                key__startswith=prefixo
            ).values_list("key", flat=True)
            keys = list(keys)
        return sorted(k for k in keys if fnmatchcase(k, pattern))

    # =========================================================================
    # Internos
    # =========================================================================

    @staticmethod
    def _atualizar(key: str, raw: str, expected_version: Optional[int] = None) -> bool:
        filtro = KeyValueRecord.objects.filter(key=key)
        if expected_version is not None:
            filtro = filtro.filter(version=expected_version)
        return filtro.update(
            document=raw, version=F("version") + 1, updated_at=timezone.now()
        ) == 1

    @staticmethod
    def _inserir(key: str, raw: str) -> bool:
        try:
            with transaction.atomic():
                KeyValueRecord.objects.create(key=key, document=raw, version=1)
        except IntegrityError:
            return False
        return True

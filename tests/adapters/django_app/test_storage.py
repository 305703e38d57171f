"""
Testes de integração do DjangoKeyValueStore.

Usam o banco de testes do pytest-django (SQLite em memória por padrão).
"""

from unittest.mock import patch

import pytest
from django.db import OperationalError

from src.adapters.django_app.storage.models import KeyValueRecord
from src.adapters.django_app.storage.store import MAX_TENTATIVAS_SET, DjangoKeyValueStore
from src.core.shared.exceptions import StorageUnavailableError
from src.core.storage import VERSAO_AUSENTE
from src.core.workspaces.repository import WorkspaceRepository


pytestmark = pytest.mark.django_db


@pytest.fixture
def django_store():
    return DjangoKeyValueStore()


class TestDjangoKeyValueStore:

    def test_chave_ausente(self, django_store):
        assert django_store.get_versioned("workspace:W1") == (None, VERSAO_AUSENTE)

    def test_set_cria_e_atualiza(self, django_store):
        django_store.set("workspace:W1", {"a": 1})
        django_store.set("workspace:W1", {"a": 2})

        assert django_store.get_versioned("workspace:W1") == ({"a": 2}, 2)
        assert KeyValueRecord.objects.count() == 1

    def test_set_if_version(self, django_store):
        assert django_store.set_if_version("k", {"n": 1}, VERSAO_AUSENTE)
        assert not django_store.set_if_version("k", {"n": 2}, VERSAO_AUSENTE)
        assert not django_store.set_if_version("k", {"n": 2}, 5)
        assert django_store.set_if_version("k", {"n": 3}, 1)

        assert django_store.get_versioned("k") == ({"n": 3}, 2)

    def test_delete(self, django_store):
        django_store.set("k", 1)

        assert django_store.delete("k")
        assert not django_store.delete("k")

    def test_scan(self, django_store):
        django_store.set("ticket:W1:0001", {})
        django_store.set("ticket:W1:0002", {})
        django_store.set("ticket:W10:0001", {})
        django_store.set("workspace:W1", {})

        assert django_store.scan("ticket:W1:*") == ["ticket:W1:0001", "ticket:W1:0002"]
        assert django_store.scan("workspace:*") == ["workspace:W1"]

    def test_set_sob_contencao_continua(self, django_store):
        with patch.object(DjangoKeyValueStore, "_atualizar", return_value=False) as atualizar, \
                patch.object(DjangoKeyValueStore, "_inserir", return_value=False):
            with pytest.raises(StorageUnavailableError):
                django_store.set("k", {"a": 1})

        assert atualizar.call_count == MAX_TENTATIVAS_SET

    def test_erro_de_banco_vira_storage_unavailable(self, django_store):
        with patch.object(
            KeyValueRecord.objects, "filter", side_effect=OperationalError("database is locked")
        ):
            with pytest.raises(StorageUnavailableError):
                django_store.get("workspace:W1")


class TestRepositorioSobreDjango:

    def test_mutate_persiste_no_banco(self, django_store):
        repository = WorkspaceRepository(django_store, retry_backoff=0)

        repository.mutate("W1", lambda c: c.adicionar_staff("staffA"))

        assert repository.load("W1").staff_members == ["staffA"]
        assert KeyValueRecord.objects.get(key="workspace:W1").version == 2

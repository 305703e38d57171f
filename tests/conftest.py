"""
Configurações globais do Pytest para o GuildTickets.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures compartilhadas. Os testes do core usam apenas
fakes em memória; os testes de adapters Django usam pytest-django.
"""

from pathlib import Path

import pytest

from src.adapters.shared.unit_of_work import InMemoryUnitOfWork
from src.core.storage.memory import InMemoryKeyValueStore
from src.core.tickets.registry import TicketRegistry
from src.core.workspaces.authorization import StaffAuthorizationPolicy
from src.core.workspaces.repository import WorkspaceRepository


WORKSPACE_ID = "W1"


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container global entre testes.

    Garante que cada teste inicia com store e locks limpos.
    """
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


@pytest.fixture
def workspace_id():
    return WORKSPACE_ID


@pytest.fixture
def store():
    """Store em memória isolado por teste."""
    return InMemoryKeyValueStore(timeout=2)


@pytest.fixture
def repository(store):
    """Repositório sem espera entre retentativas."""
    return WorkspaceRepository(store, lock_timeout=2, retry_backoff=0, max_conflict_retries=5)


@pytest.fixture
def registry(repository):
    return TicketRegistry(repository)


@pytest.fixture
def policy(repository):
    return StaffAuthorizationPolicy(repository)


@pytest.fixture
def uow():
    """Fixture para Unit of Work em memória."""
    return InMemoryUnitOfWork()


@pytest.fixture
def staff(repository, workspace_id):
    """Registra staffA e staffB como staff explícito do workspace."""
    def adicionar(config):
        config.adicionar_staff("staffA")
        config.adicionar_staff("staffB")

    repository.mutate(workspace_id, adicionar)
    return ["staffA", "staffB"]


def pytest_configure(config):
    """Configuração do pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )

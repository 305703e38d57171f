"""
Testes para o Container de Dependency Injection.
"""

import pytest

from src.config.container import Container, dispatch_intent, get_container, reset_container
from src.core.intents import CreateTicket, IntentDispatcher, QueryStats
from src.core.storage.memory import InMemoryKeyValueStore


@pytest.fixture
def memoria(settings):
    settings.TICKET_STORAGE_BACKEND = "memory"
    settings.EVENT_PUBLISHER_MODE = "sync"
    reset_container()
    return settings


class TestContainer:

    def test_get_container_e_global(self, memoria):
        assert get_container() is get_container()

    def test_store_e_repository_singleton(self, memoria):
        container = get_container()

        assert isinstance(container.key_value_store(), InMemoryKeyValueStore)
        assert container.workspace_repository() is container.workspace_repository()
        assert container.ticket_registry().repository is container.workspace_repository()

    def test_uow_e_dispatcher_por_chamada(self, memoria):
        container = get_container()

        assert container.unit_of_work() is not container.unit_of_work()
        assert isinstance(container.intent_dispatcher(), IntentDispatcher)
        assert container.intent_dispatcher() is not container.intent_dispatcher()

    def test_configuracao_do_settings(self, memoria):
        memoria.CONVERSATION_DELETE_DELAY_SECONDS = 9
        reset_container()

        service = get_container().fechar_ticket_service()

        assert service.delete_delay_seconds == 9

    def test_backend_django(self):
        container = Container()
        container.config.from_dict({"storage": {"backend": "django", "timeout": 1}})

        store = container.key_value_store()

        assert type(store).__name__ == "DjangoKeyValueStore"

    def test_reset_descarta_estado(self, memoria):
        dispatch_intent(CreateTicket("W1", "u1", "general"))
        reset_container()

        stats = dispatch_intent(QueryStats("W1")).value

        assert stats["total"] == 0


class TestDispatchIntent:

    def test_fluxo_pelo_container(self, memoria):
        criado = dispatch_intent(CreateTicket("W1", "u1", "billing", "help"))
        stats = dispatch_intent(QueryStats("W1"))

        assert criado.ok
        assert criado.value["id"] == "0001"
        assert stats.value["total"] == 1

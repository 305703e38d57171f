"""
Testes para publishers, dispatchers de ações e tasks Celery.

As tasks são executadas de forma síncrona via `.apply()`; o
enfileiramento (`delay`/`apply_async`) é sempre mockado.
"""

import logging
from unittest.mock import Mock, patch

import pytest

from src.adapters.django_app.events import dispatchers, handlers, publishers
from src.adapters.django_app.events.dispatchers import (
    CeleryActionDispatcher,
    InMemoryActionDispatcher,
    LoggingActionDispatcher,
    get_action_dispatcher,
)
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    CompositeEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.core.tickets.actions import AgendarExclusaoConversaAction, ConcederAcessoAction
from src.core.tickets.events import TicketCriadoEvent, TicketFechadoEvent


def ticket_criado():
    return TicketCriadoEvent(
        aggregate_id="0001",
        workspace_id="W1",
        dono_id="u1",
        categoria="billing",
        conversa_ref="conv-1",
    )


def exclusao(delay=5):
    return AgendarExclusaoConversaAction(
        workspace_id="W1", ticket_id="0001", conversa_ref="conv-1", delay_seconds=delay
    )


# =============================================================================
# Publishers
# =============================================================================

class TestPublishers:

    def test_factory(self):
        assert isinstance(get_event_publisher("sync"), LoggingEventPublisher)
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)

    def test_logging_chama_handlers_locais(self):
        publisher = LoggingEventPublisher()
        recebidos = []
        publisher.register_handler("TicketCriadoEvent", recebidos.append)

        with patch.object(publishers, "logger") as log:
            publisher.publish(ticket_criado())

        assert len(recebidos) == 1
        nivel, mensagem = log.log.call_args.args
        assert nivel == logging.INFO
        assert mensagem.startswith("[EVENT] TicketCriadoEvent")

    def test_logging_isola_erro_de_handler(self):
        publisher = LoggingEventPublisher()
        publisher.register_handler("TicketCriadoEvent", Mock(side_effect=RuntimeError("x")))
        segundo = Mock()
        publisher.register_handler("TicketCriadoEvent", segundo)

        publisher.publish(ticket_criado())

        segundo.assert_called_once()

    def test_celery_enfileira_evento_serializado(self):
        with patch.object(handlers, "dispatch_domain_event") as task:
            CeleryEventPublisher(also_log=False).publish(ticket_criado())

        event_type, payload = task.delay.call_args.args
        assert event_type == "TicketCriadoEvent"
        assert payload["data"]["categoria"] == "billing"

    def test_celery_falha_no_broker_e_logada(self):
        with patch.object(handlers, "dispatch_domain_event") as task:
            task.delay.side_effect = ConnectionError("broker fora")
            CeleryEventPublisher().publish(ticket_criado())

        task.delay.assert_called_once()

    def test_in_memory_filtra_por_tipo(self):
        publisher = InMemoryEventPublisher()
        publisher.publish_batch([
            ticket_criado(),
            TicketFechadoEvent(aggregate_id="0001", workspace_id="W1", fechado_por="u1"),
        ])

        assert len(publisher.get_events_by_type("TicketFechadoEvent")) == 1
        publisher.clear()
        assert publisher.published_events == []

    def test_composite_continua_apos_erro(self):
        quebrado = Mock()
        quebrado.publish.side_effect = RuntimeError("fora")
        destino = InMemoryEventPublisher()

        CompositeEventPublisher([quebrado, destino]).publish(ticket_criado())

        assert len(destino.published_events) == 1


# =============================================================================
# Action Dispatchers
# =============================================================================

class TestActionDispatchers:

    def test_factory(self):
        assert isinstance(get_action_dispatcher("sync"), LoggingActionDispatcher)
        assert isinstance(get_action_dispatcher("celery"), CeleryActionDispatcher)

    def test_logging(self):
        with patch.object(dispatchers, "logger") as log:
            LoggingActionDispatcher().dispatch(exclusao())

        assert log.log.call_args.args[1].startswith("[ACTION] AgendarExclusaoConversaAction")

    def test_celery_exclusao_usa_countdown(self):
        with patch.object(handlers, "execute_platform_action") as task:
            CeleryActionDispatcher().dispatch(exclusao(delay=5))

        kwargs = task.apply_async.call_args.kwargs
        assert kwargs["countdown"] == 5
        assert kwargs["args"][0] == "AgendarExclusaoConversaAction"
        assert kwargs["args"][1]["data"]["delay_seconds"] == 5

    def test_celery_demais_acoes_sem_atraso(self):
        acao = ConcederAcessoAction(workspace_id="W1", ticket_id="0001", ator_id="u5")

        with patch.object(handlers, "execute_platform_action") as task:
            CeleryActionDispatcher().dispatch(acao)

        assert task.apply_async.call_args.kwargs["countdown"] == 0

    def test_in_memory(self):
        dispatcher = InMemoryActionDispatcher()
        dispatcher.dispatch(exclusao())

        assert len(dispatcher.get_actions_by_type("AgendarExclusaoConversaAction")) == 1
        dispatcher.clear()
        assert dispatcher.dispatched_actions == []


# =============================================================================
# Tasks
# =============================================================================

class TestDispatchDomainEvent:

    def test_roteia_para_handler(self):
        payload = ticket_criado().to_dict()

        with patch.object(handlers, "handle_ticket_criado") as task:
            handlers.dispatch_domain_event.apply(args=["TicketCriadoEvent", payload])

        task.delay.assert_called_once_with(payload)

    def test_evento_sem_handler(self):
        with patch.object(handlers, "handle_ticket_criado") as task:
            handlers.dispatch_domain_event.apply(args=["EventoInexistente", {}])

        task.delay.assert_not_called()

    def test_handler_registra_metrica(self):
        with patch.object(handlers, "record_metric") as task:
            handlers.handle_ticket_criado.apply(args=[ticket_criado().to_dict()])

        assert task.delay.call_args.kwargs["metric_name"] == "tickets_created"
        assert task.delay.call_args.kwargs["tags"]["categoria"] == "billing"


executor_chamadas = []


def executor_de_teste(action_type, payload):
    executor_chamadas.append((action_type, payload))


def executor_quebrado(action_type, payload):
    raise ConnectionError("plataforma fora")


class TestExecutePlatformAction:

    @pytest.fixture(autouse=True)
    def limpar(self):
        executor_chamadas.clear()
        yield
        executor_chamadas.clear()

    def test_sem_executor(self, settings):
        settings.PLATFORM_ACTION_EXECUTOR = None

        result = handlers.execute_platform_action.apply(
            args=["AgendarExclusaoConversaAction", exclusao().to_dict()]
        )

        assert result.get() is False

    def test_executor_configurado(self, settings):
        settings.PLATFORM_ACTION_EXECUTOR = f"{__name__}.executor_de_teste"

        result = handlers.execute_platform_action.apply(
            args=["AgendarExclusaoConversaAction", exclusao().to_dict()]
        )

        assert result.get() is True
        assert executor_chamadas[0][0] == "AgendarExclusaoConversaAction"
        assert executor_chamadas[0][1]["conversa_ref"] == "conv-1"

    def test_falha_esgotada_nao_propaga(self, settings):
        settings.PLATFORM_ACTION_EXECUTOR = f"{__name__}.executor_quebrado"

        with patch.object(handlers.execute_platform_action, "max_retries", 0):
            result = handlers.execute_platform_action.apply(
                args=["ConcederAcessoAction", exclusao().to_dict()]
            )

        assert result.get() is False

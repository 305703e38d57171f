"""
Testes para StoreUnitOfWork e InMemoryUnitOfWork.

Coverage:
- Commit publica eventos e despacha ações, nessa ordem
- Rollback descarta tudo
- Falha de entrega não propaga
"""

from unittest.mock import Mock

import pytest

from src.adapters.django_app.events.dispatchers import InMemoryActionDispatcher
from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.shared.unit_of_work import InMemoryUnitOfWork, StoreUnitOfWork
from src.core.tickets.actions import PublicarMensagemAction
from src.core.tickets.events import TicketAssumidoEvent


def evento():
    return TicketAssumidoEvent(aggregate_id="0001", workspace_id="W1", staff_id="staffA")


def acao():
    return PublicarMensagemAction(
        workspace_id="W1", ticket_id="0001", conversa_ref="conv-1", template="ticket.claimed"
    )


class TestStoreUnitOfWork:

    def test_commit_entrega(self):
        publisher = InMemoryEventPublisher()
        dispatcher = InMemoryActionDispatcher()

        with StoreUnitOfWork(publisher, dispatcher) as uow:
            uow.publish_event(evento())
            uow.request_action(acao())

        assert [e.event_type for e in publisher.published_events] == ["TicketAssumidoEvent"]
        assert [a.action_type for a in dispatcher.dispatched_actions] == ["PublicarMensagemAction"]
        assert uow.collect_events() == []

    def test_eventos_antes_das_acoes(self):
        ordem = []
        publisher = Mock()
        publisher.publish.side_effect = lambda e: ordem.append("evento")
        dispatcher = Mock()
        dispatcher.dispatch.side_effect = lambda a: ordem.append("acao")

        with StoreUnitOfWork(publisher, dispatcher) as uow:
            uow.request_action(acao())
            uow.publish_event(evento())

        assert ordem == ["evento", "acao"]

    def test_rollback_descarta(self):
        publisher = InMemoryEventPublisher()
        dispatcher = InMemoryActionDispatcher()

        with pytest.raises(RuntimeError):
            with StoreUnitOfWork(publisher, dispatcher) as uow:
                uow.publish_event(evento())
                uow.request_action(acao())
                raise RuntimeError("guarda falhou")

        assert publisher.published_events == []
        assert dispatcher.dispatched_actions == []

    def test_falha_de_entrega_nao_propaga(self):
        publisher = Mock()
        publisher.publish.side_effect = ConnectionError("broker fora")
        dispatcher = Mock()
        dispatcher.dispatch.side_effect = ConnectionError("broker fora")

        with StoreUnitOfWork(publisher, dispatcher) as uow:
            uow.publish_event(evento())
            uow.request_action(acao())

        publisher.publish.assert_called_once()
        dispatcher.dispatch.assert_called_once()

    def test_sem_destinos(self):
        with StoreUnitOfWork() as uow:
            uow.publish_event(evento())

        assert uow.collect_events() == []

    def test_reuso_comeca_vazio(self):
        dispatcher = InMemoryActionDispatcher()
        uow = StoreUnitOfWork(action_dispatcher=dispatcher)

        with pytest.raises(ValueError):
            with uow:
                uow.request_action(acao())
                raise ValueError()
        with uow:
            pass

        assert dispatcher.dispatched_actions == []


class TestInMemoryUnitOfWork:

    def test_registra_entregas(self):
        uow = InMemoryUnitOfWork()

        with uow:
            uow.publish_event(evento())
            uow.request_action(acao())

        assert uow.committed
        assert not uow.rolled_back
        assert len(uow.published_events) == 1
        assert len(uow.actions_of_type("PublicarMensagemAction")) == 1

    def test_reset(self):
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(evento())

        uow.reset()

        assert not uow.committed
        assert uow.published_events == []

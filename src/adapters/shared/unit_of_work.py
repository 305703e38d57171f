"""
Unit of Work - Fronteira de publicação do core.

A gravação do workspace acontece dentro de `WorkspaceRepository.mutate()`
(CAS no backend); o UoW cuida do que vem depois dela: eventos de
domínio e ações de plataforma só saem após a intent terminar sem erro.

Responsabilidades:
- Enfileirar eventos e ações durante a intent
- Publicar eventos e despachar ações no commit
- Descartar tudo em rollback (guarda falhou, storage indisponível)

Falhas de entrega são logadas e nunca desfazem o estado gravado:
o ticket continua no status já persistido.
"""

from typing import List, Optional
import logging

from src.core.shared.actions import PlatformAction
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import ActionDispatcher, EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class StoreUnitOfWork(UnitOfWork):
    """
    Unit of Work usado em produção.

    Example:
        with StoreUnitOfWork(publisher, dispatcher) as uow:
            ticket = repository.mutate(ws, mutacao)
            uow.publish_event(TicketAssumidoEvent(...))
            uow.request_action(PublicarMensagemAction(...))
        # eventos publicados, ações despachadas

    Example com rollback:
        with StoreUnitOfWork(publisher, dispatcher) as uow:
            repository.mutate(ws, mutacao)   # lança AlreadyClosedError
        # nada publicado
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        action_dispatcher: Optional[ActionDispatcher] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (logging, Celery, ...)
            action_dispatcher: Despachante de ações de plataforma
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._action_dispatcher = action_dispatcher

    def _begin_transaction(self) -> None:
        # cada intent começa com filas vazias
        self.clear_events()

    def commit(self) -> None:
        """
        Entrega o que foi enfileirado.

        Ordem de execução:
        1. Publicar eventos
        2. Despachar ações de plataforma
        3. Limpar estado interno
        """
        try:
            if self._events:
                self._publish_events()
            if self._actions:
                self._dispatch_actions()
        finally:
            self.clear_events()

    def rollback(self) -> None:
        if self._events or self._actions:
            logger.debug(
                f"Rollback: descartando {len(self._events)} eventos "
                f"e {len(self._actions)} ações"
            )
        self.clear_events()

    def _publish_events(self) -> None:
        for event in self._events:
            logger.info(
                f"Publicando evento: {event.event_type} "
                f"(ticket {event.aggregate_id}, workspace {event.workspace_id})"
            )
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Falha ao publicar evento {event.event_type}: {e}")

    def _dispatch_actions(self) -> None:
        for action in self._actions:
            logger.info(
                f"Despachando ação: {action.action_type} "
                f"(ticket {action.ticket_id}, workspace {action.workspace_id})"
            )
            if self._action_dispatcher:
                try:
                    self._action_dispatcher.dispatch(action)
                except Exception as e:
                    logger.warning(f"Falha ao despachar ação {action.action_type}: {e}")


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Guarda o que teria sido entregue para verificação.

    Example:
        uow = InMemoryUnitOfWork()
        service = AssumirTicketService(repository, policy, uow)
        service.execute(dto)

        assert uow.committed
        assert uow.published_events[0].event_type == "TicketAssumidoEvent"
    """

    def __init__(self):
        super().__init__()
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []
        self._dispatched_actions: List[PlatformAction] = []

    def _begin_transaction(self) -> None:
        self.clear_events()

    def commit(self) -> None:
        self._committed = True
        self._published_events.extend(self._events)
        self._dispatched_actions.extend(self._actions)
        self.clear_events()

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    @property
    def dispatched_actions(self) -> List[PlatformAction]:
        return self._dispatched_actions

    def actions_of_type(self, action_type: str) -> List[PlatformAction]:
        """Filtra ações despachadas por tipo."""
        return [a for a in self._dispatched_actions if a.action_type == action_type]

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self._dispatched_actions.clear()
        self.clear_events()

"""
Action Dispatchers - Entrega de ações de plataforma ao colaborador.

Implementações:
- LoggingActionDispatcher: Apenas loga (desenvolvimento)
- CeleryActionDispatcher: Enfileira `execute_platform_action` (produção)
- InMemoryActionDispatcher: Para testes

A exclusão agendada de conversa usa `countdown` do Celery, então o
atraso acontece no broker e não bloqueia a intent.
"""

from typing import List
import json
import logging

from src.core.shared.actions import PlatformAction
from src.core.shared.interfaces import ActionDispatcher
from src.core.tickets.actions import AgendarExclusaoConversaAction

logger = logging.getLogger(__name__)


class LoggingActionDispatcher(ActionDispatcher):
    """Dispatcher que apenas loga as ações pedidas."""

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level

    def dispatch(self, action: PlatformAction) -> None:
        payload = action.to_dict()
        logger.log(
            self._log_level,
            f"[ACTION] {action.action_type} | "
            f"workspace={action.workspace_id} | "
            f"ticket={action.ticket_id} | "
            f"data={json.dumps(payload['data'], default=str, ensure_ascii=False)}"
        )


class CeleryActionDispatcher(ActionDispatcher):
    """
    Dispatcher que enfileira ações na fila `platform`.

    Example:
        dispatcher = CeleryActionDispatcher()
        dispatcher.dispatch(AgendarExclusaoConversaAction(..., delay_seconds=5))
        # task executada ~5s depois pelo worker
    """

    def dispatch(self, action: PlatformAction) -> None:
        from src.adapters.django_app.events.handlers import execute_platform_action

        countdown = 0
        if isinstance(action, AgendarExclusaoConversaAction):
            countdown = max(action.delay_seconds, 0)

        logger.info(
            f"[ACTION->CELERY] {action.action_type} | "
            f"workspace={action.workspace_id} | ticket={action.ticket_id}"
            + (f" | countdown={countdown}s" if countdown else "")
        )
        execute_platform_action.apply_async(
            args=[action.action_type, action.to_dict()],
            countdown=countdown,
        )


class InMemoryActionDispatcher(ActionDispatcher):
    """Dispatcher em memória para testes."""

    def __init__(self):
        self._dispatched: List[PlatformAction] = []

    def dispatch(self, action: PlatformAction) -> None:
        self._dispatched.append(action)

    @property
    def dispatched_actions(self) -> List[PlatformAction]:
        return self._dispatched.copy()

    def get_actions_by_type(self, action_type: str) -> List[PlatformAction]:
        return [a for a in self._dispatched if a.action_type == action_type]

    def clear(self) -> None:
        self._dispatched.clear()


def get_action_dispatcher(mode: str = "sync") -> ActionDispatcher:
    """
    Factory para obter dispatcher apropriado.

    Args:
        mode: "celery" para enfileirar, qualquer outro valor loga
    """
    if mode == "celery":
        return CeleryActionDispatcher()
    return LoggingActionDispatcher()

"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- Driven Ports: UnitOfWork, EventPublisher, ActionDispatcher
  (o KeyValueStore fica em src.core.storage)
- Driving Ports: a união de Intents em src.core.intents

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from typing import List

from .actions import PlatformAction
from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Fronteira de publicação de uma intent.

    A escrita do workspace em si é atômica no repositório
    (compare-and-swap dentro da seção crítica). O UoW garante que
    os efeitos colaterais dessa escrita (eventos e ações de plataforma)
    só saiam do processo se a intent inteira terminou sem erro.

    Pattern: Context Manager
        with uow:
            ticket = repository.mutate(workspace_id, mutacao)
            uow.publish_event(TicketFechadoEvent(...))
            uow.request_action(AgendarExclusaoConversaAction(...))
        # Commit: eventos e ações entregues
        # Exceção: tudo descartado

    Responsabilidades:
    - Enfileirar eventos e ações durante a intent
    - Entregar após commit bem-sucedido
    - Descartar em rollback
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._actions: List[PlatformAction] = []

    def __enter__(self) -> "UnitOfWork":
        """
        Inicia contexto.

        Returns:
            Self para permitir uso como context manager
        """
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Finaliza contexto: commit se sucesso, rollback se exceção.

        Returns:
            False para propagar exceções
        """
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Prepara o UoW para uma nova intent."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Entrega eventos e ações enfileirados.

        Ordem de execução:
        1. Publicação de eventos
        2. Despacho de ações de plataforma
        3. Limpeza de estado interno
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Descarta eventos e ações enfileirados."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado
        """
        self._events.append(event)

    def request_action(self, action: PlatformAction) -> None:
        """
        Enfileira ação de plataforma para despacho após commit.

        Args:
            action: Pedido declarativo ao colaborador externo
        """
        self._actions.append(action)

    def collect_events(self) -> List[DomainEvent]:
        """Retorna eventos pendentes (para testing/debugging)."""
        return list(self._events)

    def collect_actions(self) -> List[PlatformAction]:
        """Retorna ações pendentes (para testing/debugging)."""
        return list(self._actions)

    def clear_events(self) -> None:
        """Limpa filas de eventos e ações."""
        self._events.clear()
        self._actions.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Adapters implementam para integrar com diferentes
    mecanismos (log síncrono, Celery, memória em testes).
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publica evento para consumidores.

        Args:
            event: Evento de domínio a ser publicado
        """
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        """
        Publica múltiplos eventos em batch.

        Args:
            events: Lista de eventos a serem publicados
        """
        raise NotImplementedError


class ActionDispatcher(ABC):
    """
    Interface para entrega de PlatformActions ao colaborador externo.

    O dispatcher nunca reporta falha ao core de forma síncrona:
    o resultado da chamada remota é logado pelo adapter.
    """

    @abstractmethod
    def dispatch(self, action: PlatformAction) -> None:
        """
        Entrega uma ação.

        Args:
            action: Pedido declarativo
        """
        raise NotImplementedError

    def dispatch_batch(self, actions: List[PlatformAction]) -> None:
        """Entrega múltiplas ações, na ordem em que foram registradas."""
        for action in actions:
            self.dispatch(action)

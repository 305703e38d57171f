"""
Event Publishers - Publicadores de Eventos de Domínio.

Responsável por entregar eventos de tickets aos handlers.
Implementações:
- LoggingEventPublisher: Apenas loga (desenvolvimento, modo "sync")
- CeleryEventPublisher: Enfileira via Celery (produção, modo "celery")
- InMemoryEventPublisher: Para testes
- CompositeEventPublisher: Vários destinos

Padrão Observer/Pub-Sub para desacoplamento.
"""

from typing import Callable, Dict, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):
    """
    Publisher que apenas loga eventos.

    Usado em desenvolvimento para visualizar eventos
    sem infraestrutura de mensageria. Handlers locais podem
    ser registrados para reagir de forma síncrona.
    """

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level
        self._handlers: Dict[str, List[Callable]] = {}

    def publish(self, event: DomainEvent) -> None:
        event_data = event.to_dict()

        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"workspace={event.workspace_id} | "
            f"ticket={event.aggregate_id} | "
            f"data={json.dumps(event_data['data'], default=str)}"
        )

        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    def register_handler(
        self,
        event_type: str,
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """Registra handler síncrono para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Erro em handler para {event.event_type}: {e}")


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para Celery.

    Falha de enfileiramento é logada e não quebra a intent:
    o estado do ticket já foi gravado.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        event_data = event.to_dict()

        if self._also_log:
            logger.info(
                f"[EVENT->CELERY] {event.event_type} | "
                f"workspace={event.workspace_id} | ticket={event.aggregate_id}"
            )

        try:
            from src.adapters.django_app.events.handlers import dispatch_domain_event
            dispatch_domain_event.delay(event.event_type, event_data)
        except Exception as e:
            logger.error(f"Falha ao publicar evento no Celery: {e}", exc_info=True)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class InMemoryEventPublisher(EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação.
    """

    def __init__(self):
        self._published_events: List[DomainEvent] = []
        self._handlers: Dict[str, List[Callable]] = {}

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Erro em handler de teste: {e}")

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        """Filtra eventos por tipo."""
        return [e for e in self._published_events if e.event_type == event_type]

    def register_handler(
        self,
        event_type: str,
        handler: Callable[[DomainEvent], None]
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)


class CompositeEventPublisher(EventPublisher):
    """
    Publisher que delega para múltiplos publishers.

    Erro em um destino não impede os demais.
    """

    def __init__(self, publishers: List[EventPublisher] = None):
        self._publishers = publishers or []

    def add_publisher(self, publisher: EventPublisher) -> None:
        self._publishers.append(publisher)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event)
            except Exception as e:
                logger.error(
                    f"Erro ao publicar em {publisher.__class__.__name__}: {e}"
                )

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish_batch(events)
            except Exception as e:
                logger.error(
                    f"Erro ao publicar batch em {publisher.__class__.__name__}: {e}"
                )


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        mode: "celery" para processamento assíncrono, qualquer outro valor loga

    Returns:
        Publisher configurado
    """
    if mode == "celery":
        return CeleryEventPublisher()
    return LoggingEventPublisher()

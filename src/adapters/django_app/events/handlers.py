"""
Event Handlers - Tasks Celery de eventos e ações de plataforma.

Handlers de eventos são executados de forma assíncrona quando
Domain Events são publicados no modo "celery". Eles só observam:
nenhum handler altera o estado de tickets.

`execute_platform_action` entrega ações declarativas ao colaborador
externo (criar conversa, conceder/revogar acesso, postar mensagem,
excluir conversa). O colaborador é resolvido por
`settings.PLATFORM_ACTION_EXECUTOR` (caminho pontuado de um callable
`executor(action_type, payload) -> Any`).

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # Processar evento
"""

import logging
from typing import Any, Dict

from celery import shared_task
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_criado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketCriadoEvent.

    Args:
        event_data: Evento serializado (DomainEvent.to_dict)
    """
    dados = event_data.get("data", {})
    logger.info(
        f"[HANDLER] TicketCriado: {event_data.get('aggregate_id')} | "
        f"workspace={event_data.get('workspace_id')} | "
        f"dono={dados.get('dono_id')} | categoria={dados.get('categoria')}"
    )
    record_metric.delay(
        metric_name="tickets_created",
        value=1,
        tags={
            "workspace": event_data.get("workspace_id"),
            "categoria": dados.get("categoria"),
        },
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_assumido(self, event_data: Dict[str, Any]) -> None:
    dados = event_data.get("data", {})
    logger.info(
        f"[HANDLER] TicketAssumido: {event_data.get('aggregate_id')} | "
        f"staff={dados.get('staff_id')}"
    )
    record_metric.delay(
        metric_name="tickets_claimed",
        value=1,
        tags={"workspace": event_data.get("workspace_id")},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_fechado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketFechadoEvent.

    O log no canal de logs e a exclusão da conversa chegam como
    ações de plataforma; aqui só registramos métricas.
    """
    dados = event_data.get("data", {})
    logger.info(
        f"[HANDLER] TicketFechado: {event_data.get('aggregate_id')} | "
        f"fechado_por={dados.get('fechado_por')} | motivo={dados.get('motivo')}"
    )
    record_metric.delay(
        metric_name="tickets_closed",
        value=1,
        tags={
            "workspace": event_data.get("workspace_id"),
            "assumido": "sim" if dados.get("assumido_por") else "nao",
        },
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_reaberto(self, event_data: Dict[str, Any]) -> None:
    dados = event_data.get("data", {})
    logger.info(
        f"[HANDLER] TicketReaberto: {event_data.get('aggregate_id')} | "
        f"reaberto_por={dados.get('reaberto_por')}"
    )
    record_metric.delay(
        metric_name="tickets_reopened",
        value=1,
        tags={"workspace": event_data.get("workspace_id")},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_participante_alterado(self, event_data: Dict[str, Any]) -> None:
    """Handler compartilhado por ParticipanteAdicionado/ParticipanteRemovido."""
    dados = event_data.get("data", {})
    logger.info(
        f"[HANDLER] {event_data.get('event_type')}: {event_data.get('aggregate_id')} | "
        f"participante={dados.get('participante_id')}"
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'TicketCriadoEvent')
        event_data: Dados do evento serializado
    """
    handlers = {
        "TicketCriadoEvent": handle_ticket_criado,
        "TicketAssumidoEvent": handle_ticket_assumido,
        "TicketFechadoEvent": handle_ticket_fechado,
        "TicketReabertoEvent": handle_ticket_reaberto,
        "ParticipanteAdicionadoEvent": handle_participante_alterado,
        "ParticipanteRemovidoEvent": handle_participante_alterado,
    }

    handler = handlers.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Platform Actions
# =============================================================================

def get_platform_executor():
    """
    Resolve o colaborador configurado.

    Returns:
        Callable ou None se PLATFORM_ACTION_EXECUTOR não está definido
    """
    caminho = getattr(settings, "PLATFORM_ACTION_EXECUTOR", None)
    if not caminho:
        return None
    return import_string(caminho)


@shared_task(bind=True, max_retries=3, default_retry_delay=10, acks_late=True)
def execute_platform_action(self, action_type: str, payload: Dict[str, Any]) -> bool:
    """
    Entrega uma ação de plataforma ao colaborador externo.

    Falhas remotas são retentadas e, esgotadas as tentativas,
    apenas logadas: o ticket permanece no estado já gravado.

    Args:
        action_type: Nome da ação (ex: 'AgendarExclusaoConversaAction')
        payload: PlatformAction.to_dict()

    Returns:
        True se o colaborador executou a ação
    """
    executor = get_platform_executor()
    if executor is None:
        logger.warning(
            f"[ACTION] {action_type} sem executor configurado "
            f"(ticket {payload.get('ticket_id')}); ignorada"
        )
        return False

    try:
        executor(action_type, payload)
    except Exception as e:
        logger.warning(
            f"[ACTION] {action_type} falhou "
            f"(ticket {payload.get('ticket_id')}, tentativa {self.request.retries + 1}): {e}"
        )
        if self.request.retries >= self.max_retries:
            logger.error(
                f"[ACTION] {action_type} abandonada após {self.max_retries} tentativas "
                f"(ticket {payload.get('ticket_id')}, workspace {payload.get('workspace_id')})"
            )
            return False
        raise self.retry(exc=e)

    logger.info(
        f"[ACTION] {action_type} executada "
        f"(ticket {payload.get('ticket_id')}, workspace {payload.get('workspace_id')})"
    )
    return True


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    """
    Registra métrica para monitoramento.

    Args:
        metric_name: Nome da métrica
        value: Valor
        tags: Tags para dimensões
    """
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")

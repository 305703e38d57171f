"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events de tickets (fila `events`)
- Entregar ações de plataforma ao colaborador (fila `platform`),
  incluindo a exclusão agendada de conversas via `countdown`

Arquitetura:
- Broker: RabbitMQ (mensagens entre o core e os workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    celery -A src.config.celery worker -l INFO -Q default,events,platform
"""

import os
from celery import Celery
from kombu import Queue, Exchange

# Definir módulo de settings do Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('guildtickets')

# Carregar configurações do Django (prefixo CELERY_)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    timezone='UTC',
    enable_utc=True,

    task_acks_late=True,  # ACK após execução
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_default_queue='default',
    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Definir filas
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('platform', Exchange('platform'), routing_key='platform.#'),
)

# Roteamento de tarefas para filas
app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.execute_platform_action': {'queue': 'platform'},
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

# Auto-descoberta das tasks
app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

"""
Configuração do Django App de armazenamento.

Registra o model KeyValueRecord usado pelo DjangoKeyValueStore.
"""

from django.apps import AppConfig


class TicketStorageConfig(AppConfig):
    """Configuração do app de armazenamento chave/valor."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.storage'
    label = 'ticket_storage'
    verbose_name = 'Armazenamento de Workspaces'

"""
Django Model do backend de documentos.

Uma linha por chave lógica ("workspace:<id>", "ticket:<ws>:<id>").
O model é um ADAPTER: não conhece workspaces nem tickets, apenas
guarda o documento JSON e o número de versão usado no
compare-and-swap.
"""

from django.db import models


class KeyValueRecord(models.Model):
    """
    Fields:
        key: Chave lógica (primary key)
        document: Documento JSON serializado
        version: Versão inteira, 1 na primeira escrita
        updated_at: Última escrita
    """

    key = models.CharField(
        max_length=255,
        primary_key=True,
        help_text="Chave lógica, ex: workspace:W1"
    )

    document = models.TextField(
        help_text="Documento JSON serializado"
    )

    version = models.PositiveIntegerField(
        default=1,
        help_text="Versão para compare-and-swap"
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Data da última escrita"
    )

    class Meta:
        db_table = 'kv_records'
        verbose_name = 'Registro Chave/Valor'
        verbose_name_plural = 'Registros Chave/Valor'
        ordering = ['key']

    def __str__(self):
        return f"{self.key} (v{self.version})"

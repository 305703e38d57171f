"""
Migration inicial do armazenamento chave/valor.

Cria a tabela:
- kv_records: documentos versionados por chave
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='KeyValueRecord',
            fields=[
                ('key', models.CharField(
                    max_length=255,
                    primary_key=True,
                    serialize=False,
                    help_text='Chave lógica, ex: workspace:W1'
                )),
                ('document', models.TextField(
                    help_text='Documento JSON serializado'
                )),
                ('version', models.PositiveIntegerField(
                    default=1,
                    help_text='Versão para compare-and-swap'
                )),
                ('updated_at', models.DateTimeField(
                    auto_now=True,
                    help_text='Data da última escrita'
                )),
            ],
            options={
                'verbose_name': 'Registro Chave/Valor',
                'verbose_name_plural': 'Registros Chave/Valor',
                'db_table': 'kv_records',
                'ordering': ['key'],
            },
        ),
    ]

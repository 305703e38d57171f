"""
Testes Unitários para TicketRegistry.

Coverage:
- Alocação de IDs zero-padded e nunca reutilizados
- Alocação concorrente
- Consultas (obter, listar, buscar por conversa)
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.core.shared.exceptions import EntityNotFoundError
from src.core.tickets.entities import TicketEntity, TicketStatus


def embutir(config, numero, dono_id="u1", conversa_ref=None):
    ticket = TicketEntity.criar(
        ticket_id=TicketEntity.formatar_id(numero),
        conversa_ref=conversa_ref or f"conv-{numero}",
        dono_id=dono_id,
        categoria="technical",
    )
    config.tickets[ticket.id] = ticket
    return ticket


class TestAlocacaoDeIds:

    def test_ids_sequenciais(self, registry, workspace_id):
        assert registry.allocate_id(workspace_id) == "0001"
        assert registry.allocate_id(workspace_id) == "0002"

    def test_contador_por_workspace(self, registry):
        registry.allocate_id("W1")

        assert registry.allocate_id("W2") == "0001"

    def test_contador_avanca_uma_vez_por_id(self, registry, repository, workspace_id):
        for _ in range(3):
            registry.allocate_id(workspace_id)

        assert repository.load(workspace_id).next_ticket_number == 4

    @pytest.mark.slow
    def test_alocacao_concorrente(self, registry, repository, workspace_id):
        with ThreadPoolExecutor(max_workers=8) as executor:
            ids = list(executor.map(lambda _: registry.allocate_id(workspace_id), range(25)))

        assert len(set(ids)) == 25
        assert sorted(ids) == [TicketEntity.formatar_id(n) for n in range(1, 26)]
        assert repository.load(workspace_id).next_ticket_number == 26


class TestConsultas:

    def test_obter(self, registry, repository, workspace_id):
        repository.mutate(workspace_id, lambda c: embutir(c, 1))

        assert registry.obter(workspace_id, "0001").categoria.value == "technical"

    def test_obter_inexistente(self, registry, workspace_id):
        with pytest.raises(EntityNotFoundError):
            registry.obter(workspace_id, "0001")

    def test_listar_filtros(self, registry, repository, workspace_id):
        def preparar(config):
            embutir(config, 1)
            embutir(config, 2, dono_id="u2")
            embutir(config, 3).fechar("u1")

        repository.mutate(workspace_id, preparar)

        assert {t.id for t in registry.listar(workspace_id)} == {"0001", "0002", "0003"}
        assert {t.id for t in registry.listar(workspace_id, dono_id="u1")} == {"0001", "0003"}
        assert [t.id for t in registry.listar(workspace_id, status=TicketStatus.FECHADO)] == ["0003"]

    def test_buscar_por_conversa(self, registry, repository, workspace_id):
        repository.mutate(workspace_id, lambda c: embutir(c, 1, conversa_ref="canal-9"))

        assert registry.buscar_por_conversa(workspace_id, "canal-9").id == "0001"

"""
Testes Unitários para StaffAuthorizationPolicy.
"""

import pytest

from src.core.shared.exceptions import PermissionDeniedError
from src.core.tickets.entities import TicketEntity


@pytest.fixture
def cargo_staff(repository, workspace_id):
    repository.mutate(workspace_id, lambda c: c.adicionar_cargo_staff("role-support"))
    return "role-support"


class TestIsStaff:

    def test_membro_explicito(self, policy, staff, workspace_id):
        assert policy.is_staff(workspace_id, "staffA")

    def test_por_cargo(self, policy, cargo_staff, workspace_id):
        assert policy.is_staff(workspace_id, "u9", {"role-outro", cargo_staff})

    def test_sem_cargo_nem_membro(self, policy, staff, cargo_staff, workspace_id):
        assert not policy.is_staff(workspace_id, "u1")
        assert not policy.is_staff(workspace_id, "u1", ["role-outro"])

    def test_cargo_unico_como_texto(self, policy, repository, workspace_id):
        repository.mutate(workspace_id, lambda c: c.adicionar_cargo_staff("r"))

        assert not policy.is_staff(workspace_id, "u1", "role-outro")
        assert policy.is_staff(workspace_id, "u1", "r")

    def test_staff_e_por_workspace(self, policy, staff):
        assert not policy.is_staff("W2", "staffA")

    def test_workspace_desconhecido_e_materializado(self, policy, repository):
        assert not policy.is_staff("W-novo", "u1")
        assert "W-novo" in repository.list_workspace_ids()


class TestExigencias:

    def test_exigir_staff_nega(self, policy, repository, workspace_id):
        config = repository.load(workspace_id)

        with pytest.raises(PermissionDeniedError) as exc_info:
            policy.exigir_staff(config, "u1", (), "assumir tickets")

        assert exc_info.value.to_dict()["actor_id"] == "u1"

    def test_dono_pode_sem_ser_staff(self, policy, repository, workspace_id):
        config = repository.load(workspace_id)
        ticket = TicketEntity.criar(
            ticket_id="0001", conversa_ref="conv-1", dono_id="u1", categoria="general"
        )

        policy.exigir_staff_ou_dono(config, ticket, "u1", (), "fechar")

        with pytest.raises(PermissionDeniedError):
            policy.exigir_staff_ou_dono(config, ticket, "u2", (), "fechar")

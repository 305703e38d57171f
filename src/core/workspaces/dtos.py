"""
Data Transfer Objects (DTOs) do Domínio de Workspaces.

- Input DTOs: dados de administração já decodificados pelo transporte
- Output DTOs: estado resultante, sem expor a entidade
"""

from dataclasses import dataclass, field
from typing import Any, List

from .entities import WorkspaceConfig


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class ConfigurarSettingInputDTO:
    """
    Attributes:
        workspace_id: Tenant
        chave: Nome da configuração (ex: "max_tickets" ou "maxTicketsPerUser")
        valor: Novo valor; None restaura o padrão
    """

    workspace_id: str
    chave: str
    valor: Any = None

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "chave": self.chave,
            "valor": self.valor,
        }


@dataclass(frozen=True)
class StaffMemberInputDTO:
    workspace_id: str
    ator_id: str

    def to_dict(self) -> dict:
        return {"workspace_id": self.workspace_id, "ator_id": self.ator_id}


@dataclass(frozen=True)
class StaffRoleInputDTO:
    workspace_id: str
    cargo_id: str

    def to_dict(self) -> dict:
        return {"workspace_id": self.workspace_id, "cargo_id": self.cargo_id}


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class SettingOutputDTO:
    """Configuração após a alteração."""

    workspace_id: str
    chave: str
    valor: Any

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "chave": self.chave,
            "valor": self.valor,
        }


@dataclass
class StaffOutputDTO:
    """Listas de staff do workspace."""

    workspace_id: str
    staff_members: List[str] = field(default_factory=list)
    staff_roles: List[str] = field(default_factory=list)

    @classmethod
    def from_entity(cls, config: WorkspaceConfig) -> "StaffOutputDTO":
        return cls(
            workspace_id=config.workspace_id,
            staff_members=list(config.staff_members),
            staff_roles=list(config.staff_roles),
        )

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "staff_members": list(self.staff_members),
            "staff_roles": list(self.staff_roles),
        }

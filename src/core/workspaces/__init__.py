"""
Domínio de Workspaces - Tenants isolados.

Este módulo contém:
- Entidades (WorkspaceConfig, WorkspaceSettings)
- WorkspaceRepository (seção crítica por workspace)
- StaffAuthorizationPolicy
- Use Cases de administração (configurações e staff)
"""

from .entities import WorkspaceConfig, WorkspaceSettings
from .repository import WorkspaceRepository
from .authorization import StaffAuthorizationPolicy
from .dtos import (
    ConfigurarSettingInputDTO,
    StaffMemberInputDTO,
    StaffRoleInputDTO,
    SettingOutputDTO,
    StaffOutputDTO,
)
from .use_cases import (
    ConfigurarSettingService,
    AdicionarStaffService,
    RemoverStaffService,
    AdicionarCargoStaffService,
    RemoverCargoStaffService,
    ListarStaffService,
)

__all__ = [
    # Entities
    "WorkspaceConfig",
    "WorkspaceSettings",
    # Persistence / Policy
    "WorkspaceRepository",
    "StaffAuthorizationPolicy",
    # DTOs
    "ConfigurarSettingInputDTO",
    "StaffMemberInputDTO",
    "StaffRoleInputDTO",
    "SettingOutputDTO",
    "StaffOutputDTO",
    # Use Cases
    "ConfigurarSettingService",
    "AdicionarStaffService",
    "RemoverStaffService",
    "AdicionarCargoStaffService",
    "RemoverCargoStaffService",
    "ListarStaffService",
]

"""
Use Cases de administração de Workspaces.

- ConfigurarSettingService: altera uma configuração
- AdicionarStaffService / RemoverStaffService: membros explícitos
- AdicionarCargoStaffService / RemoverCargoStaffService: cargos de staff
- ListarStaffService: leitura das listas de staff

A permissão de administrador é verificada pela plataforma antes
de a intent chegar aqui; estes use cases não a revalidam.
Todas as escritas passam por WorkspaceRepository.mutate().
"""

import logging

from .dtos import (
    ConfigurarSettingInputDTO,
    SettingOutputDTO,
    StaffMemberInputDTO,
    StaffOutputDTO,
    StaffRoleInputDTO,
)
from .entities import WorkspaceConfig
from .repository import WorkspaceRepository

logger = logging.getLogger(__name__)


class ConfigurarSettingService:
    """
    Use Case: Alterar configuração do workspace.

    Example:
        service = ConfigurarSettingService(repository)
        service.execute(ConfigurarSettingInputDTO("W1", "max_tickets", 5))
    """

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, input_dto: ConfigurarSettingInputDTO) -> SettingOutputDTO:
        """
        Raises:
            EntityNotFoundError: Chave desconhecida
            ValidationError: Valor inválido para a chave
        """
        def mutacao(config: WorkspaceConfig):
            return config.settings.aplicar(input_dto.chave, input_dto.valor)

        chave, valor = self.repository.mutate(input_dto.workspace_id, mutacao)
        logger.info(f"Workspace {input_dto.workspace_id}: {chave} = {valor!r}")
        return SettingOutputDTO(workspace_id=input_dto.workspace_id, chave=chave, valor=valor)


class AdicionarStaffService:
    """Use Case: Conceder status de staff a um ator."""

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, input_dto: StaffMemberInputDTO) -> StaffOutputDTO:
        """
        Raises:
            ValidationError: Se ator já é staff
        """
        def mutacao(config: WorkspaceConfig) -> StaffOutputDTO:
            config.adicionar_staff(input_dto.ator_id)
            return StaffOutputDTO.from_entity(config)

        output = self.repository.mutate(input_dto.workspace_id, mutacao)
        logger.info(f"Workspace {input_dto.workspace_id}: staff + {input_dto.ator_id}")
        return output


class RemoverStaffService:
    """Use Case: Revogar status de staff explícito."""

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, input_dto: StaffMemberInputDTO) -> StaffOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ator não é staff
        """
        def mutacao(config: WorkspaceConfig) -> StaffOutputDTO:
            config.remover_staff(input_dto.ator_id)
            return StaffOutputDTO.from_entity(config)

        output = self.repository.mutate(input_dto.workspace_id, mutacao)
        logger.info(f"Workspace {input_dto.workspace_id}: staff - {input_dto.ator_id}")
        return output


class AdicionarCargoStaffService:
    """Use Case: Marcar um cargo da plataforma como cargo de staff."""

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, input_dto: StaffRoleInputDTO) -> StaffOutputDTO:
        def mutacao(config: WorkspaceConfig) -> StaffOutputDTO:
            config.adicionar_cargo_staff(input_dto.cargo_id)
            return StaffOutputDTO.from_entity(config)

        output = self.repository.mutate(input_dto.workspace_id, mutacao)
        logger.info(f"Workspace {input_dto.workspace_id}: cargo de staff + {input_dto.cargo_id}")
        return output


class RemoverCargoStaffService:
    """Use Case: Desmarcar cargo de staff."""

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, input_dto: StaffRoleInputDTO) -> StaffOutputDTO:
        def mutacao(config: WorkspaceConfig) -> StaffOutputDTO:
            config.remover_cargo_staff(input_dto.cargo_id)
            return StaffOutputDTO.from_entity(config)

        output = self.repository.mutate(input_dto.workspace_id, mutacao)
        logger.info(f"Workspace {input_dto.workspace_id}: cargo de staff - {input_dto.cargo_id}")
        return output


class ListarStaffService:
    """Use Case: Listar staff (somente leitura)."""

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, workspace_id: str) -> StaffOutputDTO:
        return StaffOutputDTO.from_entity(self.repository.load(workspace_id))

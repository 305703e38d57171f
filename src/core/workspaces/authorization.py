"""
Política de autorização de staff.

Um ator é staff de um workspace se:
- seu ID está em staffMembers, OU
- algum dos cargos que ele possui está em staffRoles.

Os cargos do ator pertencem à plataforma externa: são sempre
informados pelo chamador e nunca consultados por este módulo.
"""

from typing import Iterable, Optional
import logging

from src.core.shared.exceptions import PermissionDeniedError
from src.core.tickets.entities import TicketEntity

from .entities import WorkspaceConfig
from .repository import WorkspaceRepository

logger = logging.getLogger(__name__)


class StaffAuthorizationPolicy:
    """
    Decide se um ator é staff.

    `is_staff()` carrega o workspace; os métodos `avaliar` e `exigir_*`
    trabalham sobre um config já carregado, para uso dentro da
    seção crítica de uma mutação.

    Example:
        policy = StaffAuthorizationPolicy(repository)
        policy.is_staff("W1", "u1", {"role-support"})
    """

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def is_staff(
        self,
        workspace_id: str,
        actor_id: str,
        actor_roles: Optional[Iterable[str]] = None,
    ) -> bool:
        """
        Verifica status de staff contra o workspace atual.

        Args:
            workspace_id: Tenant
            actor_id: Ator avaliado
            actor_roles: Cargos do ator na plataforma (pode ser vazio)

        Returns:
            True se membro explícito ou se possui cargo de staff
        """
        config = self.repository.load(workspace_id)
        return self.avaliar(config, actor_id, actor_roles)

    @staticmethod
    def avaliar(
        config: WorkspaceConfig,
        actor_id: str,
        actor_roles: Optional[Iterable[str]] = None,
    ) -> bool:
        if actor_id in config.staff_members:
            return True
        if isinstance(actor_roles, str):
            # um único cargo, não uma sequência de caracteres
            actor_roles = [actor_roles]
        return not set(actor_roles or ()).isdisjoint(config.staff_roles)

    def exigir_staff(
        self,
        config: WorkspaceConfig,
        actor_id: str,
        actor_roles: Optional[Iterable[str]],
        acao: str,
    ) -> None:
        """
        Raises:
            PermissionDeniedError: Se ator não é staff
        """
        if not self.avaliar(config, actor_id, actor_roles):
            logger.info(f"Ator {actor_id} sem permissão para {acao} em {config.workspace_id}")
            raise PermissionDeniedError(
                f"Apenas staff pode {acao}",
                actor_id=actor_id,
            )

    def exigir_staff_ou_dono(
        self,
        config: WorkspaceConfig,
        ticket: TicketEntity,
        actor_id: str,
        actor_roles: Optional[Iterable[str]],
        acao: str,
    ) -> None:
        """
        Raises:
            PermissionDeniedError: Se ator não é staff nem dono do ticket
        """
        if actor_id == ticket.dono_id:
            return
        self.exigir_staff(config, actor_id, actor_roles, acao)

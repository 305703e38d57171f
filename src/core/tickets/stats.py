"""
StatsAggregator - Contagens derivadas do WorkspaceConfig.

Leitura pura, sem cache: recalculada a cada consulta.
"""

from dataclasses import dataclass
import logging

from src.core.workspaces.entities import WorkspaceConfig
from src.core.workspaces.repository import WorkspaceRepository

from .entities import TicketStatus

logger = logging.getLogger(__name__)


@dataclass
class EstatisticasOutputDTO:
    """
    Contagens do painel do workspace.

    Attributes:
        total: Todos os tickets já criados
        open: Tickets aguardando staff (abertos ou reabertos)
        closed: Tickets fechados
        claimed: Tickets com assumido_por definido
        reopened: Subconjunto de `open` que já foi fechado antes
        staff_count: Membros de staff explícitos
        staff_role_count: Cargos de staff
    """

    workspace_id: str
    total: int = 0
    open: int = 0
    closed: int = 0
    claimed: int = 0
    reopened: int = 0
    staff_count: int = 0
    staff_role_count: int = 0

    def to_dict(self) -> dict:
        return {
            "workspaceId": self.workspace_id,
            "total": self.total,
            "open": self.open,
            "closed": self.closed,
            "claimed": self.claimed,
            "reopened": self.reopened,
            "staffCount": self.staff_count,
            "staffRoleCount": self.staff_role_count,
        }


class StatsAggregator:
    """Calcula estatísticas a partir de um workspace."""

    @staticmethod
    def calcular(config: WorkspaceConfig) -> EstatisticasOutputDTO:
        tickets = list(config.tickets.values())
        return EstatisticasOutputDTO(
            workspace_id=config.workspace_id,
            total=len(tickets),
            open=sum(1 for t in tickets if t.status.aguardando_staff),
            closed=sum(1 for t in tickets if t.status == TicketStatus.FECHADO),
            claimed=sum(1 for t in tickets if t.esta_assumido),
            reopened=sum(1 for t in tickets if t.status == TicketStatus.REABERTO),
            staff_count=len(config.staff_members),
            staff_role_count=len(config.staff_roles),
        )


class ObterEstatisticasService:
    """
    Use Case: Estatísticas do workspace (somente leitura).

    Example:
        service = ObterEstatisticasService(repository)
        stats = service.execute("W1")
        stats.to_dict()["open"]
    """

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    def execute(self, workspace_id: str) -> EstatisticasOutputDTO:
        estatisticas = StatsAggregator.calcular(self.repository.load(workspace_id))
        logger.debug(f"Estatísticas de {workspace_id}: {estatisticas.to_dict()}")
        return estatisticas

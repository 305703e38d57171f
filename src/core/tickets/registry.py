"""
TicketRegistry - Conjunto de tickets e contador de IDs de um workspace.

O contador `nextTicketNumber` só é escrito por `reservar_id()`,
sempre dentro da seção crítica do workspace. Por isso dois
`create` concorrentes nunca recebem o mesmo ID e o contador
avança exatamente uma vez por ticket criado.
"""

from typing import List, Optional
import logging

from src.core.workspaces.entities import WorkspaceConfig
from src.core.workspaces.repository import WorkspaceRepository

from .entities import TicketEntity, TicketStatus

logger = logging.getLogger(__name__)


class TicketRegistry:
    """
    Acesso aos tickets de um workspace.

    Example:
        registry = TicketRegistry(repository)
        registry.allocate_id("W1")          # "0001"
        registry.obter("W1", "0001")
    """

    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    @staticmethod
    def reservar_id(config: WorkspaceConfig) -> str:
        """
        Consome o próximo número do contador e retorna o ID formatado.

        Deve ser chamado dentro de uma mutação: a criação de ticket
        usa este método para gravar o ticket e o contador no mesmo save.
        """
        numero = config.next_ticket_number
        config.next_ticket_number = numero + 1
        return TicketEntity.formatar_id(numero)

    def allocate_id(self, workspace_id: str) -> str:
        """
        Reserva um ID isoladamente (o número nunca é reutilizado).

        Returns:
            ID zero-padded com 4 dígitos
        """
        ticket_id = self.repository.mutate(workspace_id, self.reservar_id)
        logger.debug(f"ID {ticket_id} reservado no workspace {workspace_id}")
        return ticket_id

    def obter(self, workspace_id: str, ticket_id: str) -> TicketEntity:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        return self.repository.get_ticket(workspace_id, ticket_id)

    def buscar_por_conversa(self, workspace_id: str, conversa_ref: str) -> TicketEntity:
        """
        Raises:
            EntityNotFoundError: Se nenhum ticket é hospedado na conversa
        """
        return self.repository.load(workspace_id).buscar_por_conversa(conversa_ref)

    def listar(
        self,
        workspace_id: str,
        dono_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
    ) -> List[TicketEntity]:
        """
        Lista tickets com filtros opcionais, mais recentes primeiro.

        Args:
            workspace_id: Tenant
            dono_id: Filtra por criador
            status: Filtra por status
        """
        tickets = self.repository.load(workspace_id).tickets.values()
        if dono_id is not None:
            tickets = [t for t in tickets if t.dono_id == dono_id]
        if status is not None:
            tickets = [t for t in tickets if t.status == status]
        return sorted(tickets, key=lambda t: (t.criado_em, t.id), reverse=True)

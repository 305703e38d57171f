"""
Platform Actions - Pedidos declarativos ao colaborador externo.

O core nunca fala com a plataforma de chat. Quando uma transição
exige um efeito remoto (criar conversa, conceder acesso, postar
mensagem, agendar exclusão), o use case registra uma PlatformAction
no UoW. Após o commit, o ActionDispatcher entrega a ação ao
colaborador, que a executa e reporta o resultado de forma assíncrona.

Falhas remotas são logadas e nunca desfazem o estado já persistido.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from .events import agora_utc


@dataclass
class PlatformAction(ABC):
    """
    Classe base para ações declarativas.

    Attributes:
        action_id: Identificador único (chave de idempotência para o colaborador)
        workspace_id: Tenant de origem
        ticket_id: Ticket que motivou a ação
        conversa_ref: Conversa remota alvo (quando aplicável)
        requested_at: Momento do pedido
    """

    action_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    workspace_id: str = ""
    ticket_id: str = ""
    conversa_ref: Optional[str] = None
    requested_at: datetime = field(default_factory=agora_utc)

    def __post_init__(self):
        if not self.workspace_id:
            raise ValueError("workspace_id é obrigatório")

    @property
    def action_type(self) -> str:
        """Nome da classe da ação (chave de roteamento do executor)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Serializa ação para o payload da task Celery."""
        base_fields = {"action_id", "workspace_id", "ticket_id", "conversa_ref", "requested_at"}
        return {
            "action_id": self.action_id,
            "action_type": self.action_type,
            "workspace_id": self.workspace_id,
            "ticket_id": self.ticket_id,
            "conversa_ref": self.conversa_ref,
            "requested_at": self.requested_at.isoformat(),
            "data": {
                key: value
                for key, value in self.__dict__.items()
                if key not in base_fields and not key.startswith("_")
            },
        }

    def __repr__(self) -> str:
        return (
            f"{self.action_type}("
            f"workspace={self.workspace_id}, "
            f"ticket={self.ticket_id}, "
            f"conversa={self.conversa_ref}"
            f")"
        )

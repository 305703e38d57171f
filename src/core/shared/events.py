"""
Domain Events - Fatos ocorridos no ciclo de vida dos tickets.

Este módulo define a infraestrutura base para Domain Events,
permitindo que efeitos colaterais (notificações, auditoria, logs)
sejam tratados fora da seção crítica do workspace.

Características:
- Auto-geração de ID e timestamp
- Serializáveis em JSON (transporte via Celery)
- Rastreáveis via aggregate_id + workspace_id

Pattern:
    - Eventos são registrados no UoW após a mutação do workspace
    - Publicados apenas depois do commit
    - Descartados em rollback
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
import uuid


def agora_utc() -> datetime:
    """Timestamp timezone-aware usado por entidades e eventos."""
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """
    Classe base abstrata para Domain Events.

    Um Domain Event representa algo significativo que aconteceu
    em um workspace e que pode interessar a outras partes do sistema.

    Características:
    - Nomeados no passado (TicketCriado, não CriarTicket)
    - Representam fatos já persistidos
    - Contêm apenas dados JSON-serializáveis

    Attributes:
        event_id: Identificador único do evento
        aggregate_id: ID do agregado que gerou o evento (ID do ticket)
        workspace_id: Tenant ao qual o agregado pertence
        occurred_at: Momento em que o evento ocorreu
        version: Versão do schema do evento (para evolução)

    Example:
        @dataclass
        class TicketCriadoEvent(DomainEvent):
            dono_id: str = ""

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    workspace_id: str = ""
    occurred_at: datetime = field(default_factory=agora_utc)
    version: int = 1

    def __post_init__(self):
        """Validação após inicialização."""
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")
        if not self.workspace_id:
            raise ValueError("workspace_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """
        Retorna o tipo do agregado que gerou este evento.

        Returns:
            Nome do tipo do agregado (ex: "Ticket")
        """
        ...

    @property
    def event_type(self) -> str:
        """Nome da classe do evento (chave de roteamento dos handlers)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Útil para:
        - Envio via Celery (serializer json)
        - Logging estruturado

        Returns:
            Dicionário com dados do evento
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "workspace_id": self.workspace_id,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """
        Retorna dados específicos do evento.

        Por padrão, todos os campos que não pertencem à classe base.
        """
        base_fields = {"event_id", "aggregate_id", "workspace_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        """
        Reconstrói evento a partir de dicionário.

        Factory method para deserialização no worker.

        Args:
            data: Dicionário produzido por to_dict()

        Returns:
            Instância do evento reconstruída
        """
        return cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            aggregate_id=data["aggregate_id"],
            workspace_id=data["workspace_id"],
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
            version=data.get("version", 1),
            **data.get("data", {}),
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"workspace={self.workspace_id}, "
            f"aggregate_id={self.aggregate_id}"
            f")"
        )

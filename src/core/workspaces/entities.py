"""
Entidades do Domínio de Workspaces (tenants).

Entidades:
- WorkspaceSettings: Configurações ajustáveis pelo administrador
- WorkspaceConfig: Documento único por tenant (tickets, staff, contador)

O documento persistido usa chaves camelCase e é a fonte de verdade
para tudo que pertence ao workspace. Tickets vivem embutidos em
`tickets`; a cópia em `ticket:<ws>:<id>` é apenas desnormalização.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from src.core.shared.events import agora_utc
from src.core.shared.exceptions import EntityNotFoundError, ValidationError
from src.core.tickets.entities import TicketEntity


def _como_inteiro_positivo(campo: str, valor: Any) -> int:
    if isinstance(valor, bool):
        raise ValidationError(f"{campo} deve ser um inteiro", field=campo)
    if isinstance(valor, str) and valor.strip().lstrip("-").isdigit():
        valor = int(valor.strip())
    if not isinstance(valor, int):
        raise ValidationError(f"{campo} deve ser um inteiro", field=campo)
    if valor < 1:
        raise ValidationError(f"{campo} deve ser maior ou igual a 1", field=campo)
    return valor


def _como_texto(campo: str, valor: Any) -> str:
    if not isinstance(valor, str):
        raise ValidationError(f"{campo} deve ser um texto", field=campo)
    texto = valor.strip()
    if not texto:
        raise ValidationError(f"{campo} não pode ser vazio", field=campo)
    if len(texto) > WorkspaceSettings.TEXTO_MAX_LENGTH:
        raise ValidationError(
            f"{campo} deve ter no máximo {WorkspaceSettings.TEXTO_MAX_LENGTH} caracteres",
            field=campo,
        )
    return texto


def _como_booleano(campo: str, valor: Any) -> bool:
    if isinstance(valor, bool):
        return valor
    if isinstance(valor, str) and valor.strip().lower() in ("true", "false"):
        return valor.strip().lower() == "true"
    raise ValidationError(f"{campo} deve ser true ou false", field=campo)


@dataclass
class WorkspaceSettings:
    """
    Configurações de um workspace.

    Attributes:
        max_tickets_per_user: Cota de tickets não fechados por dono (>= 1)
        ticket_category_name: Agrupador remoto onde as conversas são criadas
        logs_channel_name: Canal que recebe o log de fechamentos
        dashboard_channel_name: Canal do painel de estatísticas
        ticket_prefix: Prefixo do nome da conversa
        staff_role_name: Nome do cargo de staff criado automaticamente
        auto_create_staff_role: Se o colaborador deve criar esse cargo
    """

    max_tickets_per_user: int = 3
    ticket_category_name: str = "🎫・Tickets"
    logs_channel_name: str = "ticket-logs"
    dashboard_channel_name: str = "ticket-dashboard"
    ticket_prefix: str = "ticket-"
    staff_role_name: str = "Support Staff"
    auto_create_staff_role: bool = False

    TEXTO_MAX_LENGTH: ClassVar[int] = 100

    # chave do documento -> (atributo, conversor)
    CAMPOS: ClassVar[Dict[str, Tuple[str, Callable[[str, Any], Any]]]] = {
        "maxTicketsPerUser": ("max_tickets_per_user", _como_inteiro_positivo),
        "ticketCategoryName": ("ticket_category_name", _como_texto),
        "logsChannelName": ("logs_channel_name", _como_texto),
        "dashboardChannelName": ("dashboard_channel_name", _como_texto),
        "ticketPrefix": ("ticket_prefix", _como_texto),
        "staffRoleName": ("staff_role_name", _como_texto),
        "autoCreateStaffRole": ("auto_create_staff_role", _como_booleano),
    }

    # nomes usados pelo comando de configuração
    ALIASES: ClassVar[Dict[str, str]] = {
        "max_tickets": "maxTicketsPerUser",
        "category_name": "ticketCategoryName",
        "logs_channel": "logsChannelName",
        "ticket_prefix": "ticketPrefix",
        "staff_role_name": "staffRoleName",
        "auto_create_staff_role": "autoCreateStaffRole",
    }

    @classmethod
    def resolver_chave(cls, chave: str) -> str:
        """
        Normaliza o nome de uma configuração para a chave do documento.

        Raises:
            EntityNotFoundError: Se a chave não existe
        """
        if chave in cls.CAMPOS:
            return chave
        if chave in cls.ALIASES:
            return cls.ALIASES[chave]
        raise EntityNotFoundError(
            f"Configuração desconhecida: {chave}",
            entity_type="Setting",
            entity_id=chave,
        )

    def aplicar(self, chave: str, valor: Any) -> Tuple[str, Any]:
        """
        Valida e aplica um valor.

        Um valor None restaura o padrão da configuração.

        Args:
            chave: Nome da configuração (alias ou chave do documento)
            valor: Novo valor

        Returns:
            Tupla (chave do documento, valor efetivamente gravado)

        Raises:
            EntityNotFoundError: Chave desconhecida
            ValidationError: Tipo errado, fora da faixa ou vazio
        """
        chave_doc = self.resolver_chave(chave)
        atributo, conversor = self.CAMPOS[chave_doc]

        if valor is None:
            novo = getattr(WorkspaceSettings(), atributo)
        else:
            novo = conversor(chave_doc, valor)

        setattr(self, atributo, novo)
        return chave_doc, novo

    def to_document(self) -> Dict[str, Any]:
        return {
            chave: getattr(self, atributo)
            for chave, (atributo, _) in self.CAMPOS.items()
        }

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "WorkspaceSettings":
        settings = cls()
        for chave, (atributo, _) in cls.CAMPOS.items():
            if doc and chave in doc:
                setattr(settings, atributo, doc[chave])
        return settings


@dataclass
class WorkspaceConfig:
    """
    Entidade de Domínio: configuração completa de um tenant.

    Criada preguiçosamente na primeira referência a um workspace
    desconhecido e nunca excluída.

    Invariantes:
    - next_ticket_number > número de qualquer ID já emitido
    - staff_members e staff_roles não contêm duplicatas

    Attributes:
        workspace_id: Identificador do tenant
        tickets: ID do ticket -> TicketEntity
        staff_members: Atores com status de staff explícito
        staff_roles: Cargos cujos membros são staff
        next_ticket_number: Próximo número de ticket (começa em 1)
        settings: WorkspaceSettings
        created_at: Momento da materialização
    """

    workspace_id: str
    tickets: Dict[str, TicketEntity] = field(default_factory=dict)
    staff_members: List[str] = field(default_factory=list)
    staff_roles: List[str] = field(default_factory=list)
    next_ticket_number: int = 1
    settings: WorkspaceSettings = field(default_factory=WorkspaceSettings)
    created_at: datetime = field(default_factory=agora_utc)

    @classmethod
    def padrao(cls, workspace_id: str) -> "WorkspaceConfig":
        """Documento padrão para um workspace recém-referenciado."""
        if not workspace_id:
            raise ValidationError("workspace_id é obrigatório", field="workspace_id")
        return cls(workspace_id=workspace_id)

    # =========================================================================
    # Tickets
    # =========================================================================

    def obter_ticket(self, ticket_id: str) -> TicketEntity:
        """
        Busca ticket embutido.

        Raises:
            EntityNotFoundError: Se ticket não existe neste workspace
        """
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise EntityNotFoundError(
                f"Ticket {ticket_id} não encontrado no workspace {self.workspace_id}",
                entity_type="Ticket",
                entity_id=ticket_id,
            )
        return ticket

    def buscar_por_conversa(self, conversa_ref: str) -> TicketEntity:
        """
        Busca ticket pela conversa que o hospeda.

        Raises:
            EntityNotFoundError: Se nenhuma conversa corresponde
        """
        for ticket in self.tickets.values():
            if ticket.conversa_ref == conversa_ref:
                return ticket
        raise EntityNotFoundError(
            f"Nenhum ticket hospedado na conversa {conversa_ref}",
            entity_type="Ticket",
            entity_id=conversa_ref,
        )

    def tickets_ativos_de(self, dono_id: str) -> List[TicketEntity]:
        """Tickets não fechados de um dono (base da cota)."""
        return [
            t for t in self.tickets.values()
            if t.dono_id == dono_id and t.esta_ativo
        ]

    # =========================================================================
    # Staff
    # =========================================================================

    def adicionar_staff(self, ator_id: str) -> None:
        """
        Raises:
            ValidationError: Se ator já é staff
        """
        _exigir_id("ator_id", ator_id)
        if ator_id in self.staff_members:
            raise ValidationError(f"{ator_id} já é membro da staff", field="ator_id")
        self.staff_members.append(ator_id)

    def remover_staff(self, ator_id: str) -> None:
        """
        Raises:
            EntityNotFoundError: Se ator não é staff
        """
        if ator_id not in self.staff_members:
            raise EntityNotFoundError(
                f"{ator_id} não é membro da staff",
                entity_type="StaffMember",
                entity_id=ator_id,
            )
        self.staff_members.remove(ator_id)

    def adicionar_cargo_staff(self, cargo_id: str) -> None:
        """
        Raises:
            ValidationError: Se cargo já é de staff
        """
        _exigir_id("cargo_id", cargo_id)
        if cargo_id in self.staff_roles:
            raise ValidationError(f"Cargo {cargo_id} já é de staff", field="cargo_id")
        self.staff_roles.append(cargo_id)

    def remover_cargo_staff(self, cargo_id: str) -> None:
        """
        Raises:
            EntityNotFoundError: Se cargo não é de staff
        """
        if cargo_id not in self.staff_roles:
            raise EntityNotFoundError(
                f"Cargo {cargo_id} não é de staff",
                entity_type="StaffRole",
                entity_id=cargo_id,
            )
        self.staff_roles.remove(cargo_id)

    # =========================================================================
    # Documento JSON
    # =========================================================================

    def to_document(self) -> Dict[str, Any]:
        return {
            "workspaceId": self.workspace_id,
            "tickets": {tid: t.to_document() for tid, t in self.tickets.items()},
            "staffMembers": list(self.staff_members),
            "staffRoles": list(self.staff_roles),
            "nextTicketNumber": self.next_ticket_number,
            "settings": self.settings.to_document(),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "WorkspaceConfig":
        created_at = doc.get("createdAt")
        return cls(
            workspace_id=doc["workspaceId"],
            tickets={
                tid: TicketEntity.from_document(t)
                for tid, t in (doc.get("tickets") or {}).items()
            },
            staff_members=list(doc.get("staffMembers") or []),
            staff_roles=list(doc.get("staffRoles") or []),
            next_ticket_number=int(doc.get("nextTicketNumber", 1)),
            settings=WorkspaceSettings.from_document(doc.get("settings")),
            created_at=datetime.fromisoformat(created_at) if created_at else agora_utc(),
        )


def _exigir_id(campo: str, valor: str) -> None:
    if not valor or not str(valor).strip():
        raise ValidationError(f"{campo} é obrigatório", field=campo)



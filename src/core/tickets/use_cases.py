"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso do ciclo de vida, que orquestram
entidades, a seção crítica do workspace, eventos e ações de plataforma.

Use Cases implementados:
- CriarTicketService: Cria ticket (cota + reserva de ID no mesmo save)
- AssumirTicketService: Staff assume ticket
- FecharTicketService: Staff ou dono fecha ticket
- ReabrirTicketService: Staff reabre ticket fechado
- AdicionarParticipanteService / RemoverParticipanteService
- ListarMeusTicketsService: Tickets de um dono
- BuscarTicketPorConversaService: Ticket hospedado em uma conversa
- ObterTranscriptService: Registro do ticket para transcript

Fluxo das escritas:
    with uow:
        resultado = repository.mutate(workspace_id, mutacao)   # guardas + CAS
        uow.publish_event(...)                                 # após a gravação
        uow.request_action(...)
    # commit: eventos e ações entregues

A mutação pode ser reexecutada em conflito de versão, então ela
nunca registra eventos/ações; isso acontece só depois que o
repositório confirmou a gravação.
"""

from typing import List, Optional, Tuple
import logging
import uuid

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import QuotaExceededError
from src.core.workspaces.authorization import StaffAuthorizationPolicy
from src.core.workspaces.entities import WorkspaceConfig
from src.core.workspaces.repository import WorkspaceRepository

from .actions import (
    AgendarExclusaoConversaAction,
    ConcederAcessoAction,
    CriarConversaAction,
    PublicarMensagemAction,
    RevogarAcessoAction,
    TEMPLATE_ASSUMIDO,
    TEMPLATE_BOAS_VINDAS,
    TEMPLATE_FECHADO,
    TEMPLATE_LOG_FECHAMENTO,
    TEMPLATE_PARTICIPANTE_ADICIONADO,
    TEMPLATE_PARTICIPANTE_REMOVIDO,
    TEMPLATE_REABERTO,
)
from .dtos import (
    AssumirTicketInputDTO,
    CriarTicketInputDTO,
    FecharTicketInputDTO,
    ListarMeusTicketsQueryDTO,
    ParticipanteInputDTO,
    ReabrirTicketInputDTO,
    TicketListItemDTO,
    TicketOutputDTO,
    TranscriptOutputDTO,
    TranscriptQueryDTO,
)
from .entities import TicketEntity
from .events import (
    ParticipanteAdicionadoEvent,
    ParticipanteRemovidoEvent,
    TicketAssumidoEvent,
    TicketCriadoEvent,
    TicketFechadoEvent,
    TicketReabertoEvent,
)
from .registry import TicketRegistry

logger = logging.getLogger(__name__)


class CriarTicketService:
    """
    Use Case: Criar um novo ticket.

    Fluxo:
    1. Escolher a referência da conversa (fora da mutação, estável entre retries)
    2. Na seção crítica: verificar cota, reservar ID, criar e embutir o ticket
    3. Disparar TicketCriado + pedir criação da conversa e boas-vindas

    Example:
        service = CriarTicketService(repository, registry, uow)
        output = service.execute(
            CriarTicketInputDTO(workspace_id="W1", dono_id="u1",
                                categoria="billing", motivo="help")
        )
        output.id  # "0001"
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        registry: TicketRegistry,
        uow: UnitOfWork,
    ):
        """
        Inicializa service com dependências injetadas.

        Args:
            repository: Seção crítica dos workspaces
            registry: Dono do contador de IDs
            uow: Fronteira de publicação de eventos/ações
        """
        self.repository = repository
        self.registry = registry
        self.uow = uow

    def execute(self, input_dto: CriarTicketInputDTO) -> TicketOutputDTO:
        """
        Executa criação do ticket.

        Raises:
            QuotaExceededError: Dono já tem maxTicketsPerUser tickets ativos
            ValidationError: Categoria ou motivo inválidos
        """
        conversa_ref = input_dto.conversa_ref or f"conv-{uuid.uuid4().hex}"

        def mutacao(config: WorkspaceConfig) -> Tuple[TicketEntity, WorkspaceConfig]:
            limite = config.settings.max_tickets_per_user
            ativos = config.tickets_ativos_de(input_dto.dono_id)
            if len(ativos) >= limite:
                raise QuotaExceededError(
                    f"Usuário {input_dto.dono_id} já possui {len(ativos)} "
                    f"tickets ativos (limite {limite})",
                    limite=limite,
                )

            # valida antes de consumir o contador
            ticket = TicketEntity.criar(
                ticket_id="pendente",
                conversa_ref=conversa_ref,
                dono_id=input_dto.dono_id,
                categoria=input_dto.categoria,
                motivo=input_dto.motivo,
            )
            ticket.id = self.registry.reservar_id(config)
            config.tickets[ticket.id] = ticket
            return ticket, config

        with self.uow:
            ticket, config = self.repository.mutate(input_dto.workspace_id, mutacao)

            self.uow.publish_event(
                TicketCriadoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    dono_id=ticket.dono_id,
                    categoria=ticket.categoria.value,
                    conversa_ref=ticket.conversa_ref,
                )
            )

            participantes = [ticket.dono_id] + [
                s for s in config.staff_members if s != ticket.dono_id
            ]
            self.uow.request_action(
                CriarConversaAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    nome=f"{config.settings.ticket_prefix}{ticket.id}",
                    agrupador=config.settings.ticket_category_name,
                    participantes=participantes,
                    cargos=list(config.staff_roles),
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_BOAS_VINDAS,
                    contexto={
                        "ticket_id": ticket.id,
                        "dono_id": ticket.dono_id,
                        "categoria": ticket.categoria.value,
                        "motivo": ticket.motivo,
                    },
                )
            )

        logger.info(
            f"Ticket {ticket.id} criado em {input_dto.workspace_id} por {ticket.dono_id}"
        )
        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class AssumirTicketService:
    """
    Use Case: Staff assume o ticket.

    Fluxo:
    1. Na seção crítica: localizar ticket, exigir staff, assumir
    2. Disparar TicketAssumido + mensagem na conversa
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        policy: StaffAuthorizationPolicy,
        uow: UnitOfWork,
    ):
        self.repository = repository
        self.policy = policy
        self.uow = uow

    def execute(self, input_dto: AssumirTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não é staff
            AlreadyClaimedError: Se ticket já assumido
            InvalidStateError: Se ticket fechado
        """
        def mutacao(config: WorkspaceConfig) -> TicketEntity:
            ticket = config.obter_ticket(input_dto.ticket_id)
            self.policy.exigir_staff(
                config, input_dto.staff_id, input_dto.ator_cargos, "assumir tickets"
            )
            ticket.assumir(input_dto.staff_id)
            return ticket

        with self.uow:
            ticket = self.repository.mutate(input_dto.workspace_id, mutacao)

            self.uow.publish_event(
                TicketAssumidoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    staff_id=input_dto.staff_id,
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_ASSUMIDO,
                    contexto={"ticket_id": ticket.id, "staff_id": input_dto.staff_id},
                )
            )

        logger.info(f"Ticket {ticket.id} assumido por {input_dto.staff_id}")
        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class FecharTicketService:
    """
    Use Case: Fechar ticket.

    Staff ou o próprio dono podem fechar. Após a gravação:
    - mensagem de fechamento na conversa
    - log no canal de logs do workspace
    - exclusão da conversa agendada após `delete_delay_seconds`

    A exclusão é um pedido ao colaborador; o ticket permanece
    fechado mesmo que a conversa nunca seja excluída.
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        policy: StaffAuthorizationPolicy,
        uow: UnitOfWork,
        delete_delay_seconds: int = 5,
    ):
        self.repository = repository
        self.policy = policy
        self.uow = uow
        self.delete_delay_seconds = delete_delay_seconds

    def execute(self, input_dto: FecharTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não é staff nem dono
            AlreadyClosedError: Se ticket já fechado
        """
        def mutacao(config: WorkspaceConfig) -> Tuple[TicketEntity, str]:
            ticket = config.obter_ticket(input_dto.ticket_id)
            self.policy.exigir_staff_ou_dono(
                config, ticket, input_dto.fechado_por, input_dto.ator_cargos,
                "fechar tickets de outros usuários",
            )
            ticket.fechar(input_dto.fechado_por, input_dto.motivo)
            return ticket, config.settings.logs_channel_name

        with self.uow:
            ticket, canal_logs = self.repository.mutate(input_dto.workspace_id, mutacao)

            self.uow.publish_event(
                TicketFechadoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    fechado_por=ticket.fechado_por,
                    motivo=ticket.motivo_fechamento,
                    dono_id=ticket.dono_id,
                    assumido_por=ticket.assumido_por,
                )
            )

            contexto = {
                "ticket_id": ticket.id,
                "dono_id": ticket.dono_id,
                "fechado_por": ticket.fechado_por,
                "motivo": ticket.motivo_fechamento,
                "assumido_por": ticket.assumido_por,
                "criado_em": ticket.criado_em.isoformat(),
                "fechado_em": ticket.fechado_em.isoformat(),
            }
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_FECHADO,
                    contexto=contexto,
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    template=TEMPLATE_LOG_FECHAMENTO,
                    contexto=contexto,
                    canal_nome=canal_logs,
                )
            )
            self.uow.request_action(
                AgendarExclusaoConversaAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    delay_seconds=self.delete_delay_seconds,
                )
            )

        logger.info(f"Ticket {ticket.id} fechado por {input_dto.fechado_por}")
        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class ReabrirTicketService:
    """
    Use Case: Reabrir ticket fechado (somente staff).

    O ticket mantém o mesmo ID e a mesma conversa; reaberto é
    apenas um rótulo de status sobre o mesmo ticket lógico.
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        policy: StaffAuthorizationPolicy,
        uow: UnitOfWork,
    ):
        self.repository = repository
        self.policy = policy
        self.uow = uow

    def execute(self, input_dto: ReabrirTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não é staff
            InvalidStateError: Se ticket não está fechado
        """
        def mutacao(config: WorkspaceConfig) -> TicketEntity:
            ticket = config.obter_ticket(input_dto.ticket_id)
            self.policy.exigir_staff(
                config, input_dto.ator_id, input_dto.ator_cargos, "reabrir tickets"
            )
            ticket.reabrir()
            return ticket

        with self.uow:
            ticket = self.repository.mutate(input_dto.workspace_id, mutacao)

            self.uow.publish_event(
                TicketReabertoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    reaberto_por=input_dto.ator_id,
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_REABERTO,
                    contexto={"ticket_id": ticket.id, "reaberto_por": input_dto.ator_id},
                )
            )

        logger.info(f"Ticket {ticket.id} reaberto por {input_dto.ator_id}")
        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class AdicionarParticipanteService:
    """
    Use Case: Conceder acesso de um ator à conversa do ticket.

    Não altera o status nem o documento do workspace: apenas
    valida contra o estado atual e pede a alteração da lista de acesso.
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        policy: StaffAuthorizationPolicy,
        uow: UnitOfWork,
    ):
        self.repository = repository
        self.policy = policy
        self.uow = uow

    def execute(self, input_dto: ParticipanteInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não é staff
        """
        with self.uow:
            config = self.repository.load(input_dto.workspace_id)
            ticket = config.obter_ticket(input_dto.ticket_id)
            self.policy.exigir_staff(
                config, input_dto.ator_id, input_dto.ator_cargos, "adicionar participantes"
            )

            self.uow.publish_event(
                ParticipanteAdicionadoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    participante_id=input_dto.alvo_id,
                    adicionado_por=input_dto.ator_id,
                )
            )
            self.uow.request_action(
                ConcederAcessoAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    ator_id=input_dto.alvo_id,
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_PARTICIPANTE_ADICIONADO,
                    contexto={"participante_id": input_dto.alvo_id},
                )
            )

        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class RemoverParticipanteService:
    """
    Use Case: Revogar acesso de um ator à conversa do ticket.

    O criador do ticket nunca pode ser removido.
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        policy: StaffAuthorizationPolicy,
        uow: UnitOfWork,
    ):
        self.repository = repository
        self.policy = policy
        self.uow = uow

    def execute(self, input_dto: ParticipanteInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não é staff
            CannotRemoveOwnerError: Se alvo é o criador
        """
        with self.uow:
            config = self.repository.load(input_dto.workspace_id)
            ticket = config.obter_ticket(input_dto.ticket_id)
            self.policy.exigir_staff(
                config, input_dto.ator_id, input_dto.ator_cargos, "remover participantes"
            )
            ticket.validar_remocao_participante(input_dto.alvo_id)

            self.uow.publish_event(
                ParticipanteRemovidoEvent(
                    aggregate_id=ticket.id,
                    workspace_id=input_dto.workspace_id,
                    participante_id=input_dto.alvo_id,
                    removido_por=input_dto.ator_id,
                )
            )
            self.uow.request_action(
                RevogarAcessoAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    ator_id=input_dto.alvo_id,
                )
            )
            self.uow.request_action(
                PublicarMensagemAction(
                    workspace_id=input_dto.workspace_id,
                    ticket_id=ticket.id,
                    conversa_ref=ticket.conversa_ref,
                    template=TEMPLATE_PARTICIPANTE_REMOVIDO,
                    contexto={"participante_id": input_dto.alvo_id},
                )
            )

        return TicketOutputDTO.from_entity(ticket, input_dto.workspace_id)


class ListarMeusTicketsService:
    """
    Use Case: Listar tickets de um dono (mais recentes primeiro).

    Sem UoW - leitura.
    """

    def __init__(self, registry: TicketRegistry):
        self.registry = registry

    def execute(self, query: ListarMeusTicketsQueryDTO) -> List[TicketListItemDTO]:
        tickets = self.registry.listar(query.workspace_id, dono_id=query.dono_id)
        return [TicketListItemDTO.from_entity(t) for t in tickets[: max(query.limite, 0)]]


class BuscarTicketPorConversaService:
    """Use Case: Identificar o ticket a partir da conversa onde o comando foi emitido."""

    def __init__(self, registry: TicketRegistry):
        self.registry = registry

    def execute(self, workspace_id: str, conversa_ref: str) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se a conversa não hospeda ticket
        """
        ticket = self.registry.buscar_por_conversa(workspace_id, conversa_ref)
        return TicketOutputDTO.from_entity(ticket, workspace_id)


class ObterTranscriptService:
    """
    Use Case: Dados para transcript (somente staff).

    A verificação de staff usa o workspace atual; o registro do
    ticket vem da leitura pontual (cópia desnormalizada).
    """

    def __init__(self, registry: TicketRegistry, policy: StaffAuthorizationPolicy):
        self.registry = registry
        self.policy = policy

    def execute(self, query: TranscriptQueryDTO) -> TranscriptOutputDTO:
        """
        Raises:
            PermissionDeniedError: Se ator não é staff
            EntityNotFoundError: Se ticket não existe
        """
        config = self.registry.repository.load(query.workspace_id)
        self.policy.exigir_staff(config, query.ator_id, query.ator_cargos, "gerar transcripts")
        ticket = self.registry.obter(query.workspace_id, query.ticket_id)
        return TranscriptOutputDTO(ticket=TicketOutputDTO.from_entity(ticket, query.workspace_id))

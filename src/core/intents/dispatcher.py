"""
IntentDispatcher - Fronteira única entre o transporte e o core.

Mapeia cada variante de `Intent` para exatamente um use case e
converte erros de domínio em `IntentResult` tipados. Nenhuma falha de
guarda escapa como exceção para o chamador.

Example:
    dispatcher = get_container().intent_dispatcher()
    result = dispatcher.dispatch(
        CreateTicket(workspace_id="W1", actor_id="u1", category="billing")
    )
    if not result.ok:
        render_error(result.error_code)
"""

from typing import Any, Callable, Dict, get_args
import logging

from src.core.shared.exceptions import DomainException
from src.core.tickets.dtos import (
    AssumirTicketInputDTO,
    CriarTicketInputDTO,
    FecharTicketInputDTO,
    ListarMeusTicketsQueryDTO,
    ParticipanteInputDTO,
    ReabrirTicketInputDTO,
    TranscriptQueryDTO,
)
from src.core.workspaces.dtos import (
    ConfigurarSettingInputDTO,
    StaffMemberInputDTO,
    StaffRoleInputDTO,
)

from .intents import (
    AddParticipant,
    AddStaff,
    AddStaffRole,
    ClaimTicket,
    CloseTicket,
    ConfigureSetting,
    CreateTicket,
    Intent,
    IntentResult,
    ListMyTickets,
    ListStaff,
    LookupTicket,
    QueryStats,
    QueryTranscript,
    RemoveParticipant,
    RemoveStaff,
    RemoveStaffRole,
    ReopenTicket,
)

logger = logging.getLogger(__name__)


class IntentDispatcher:
    """
    Despacha intents para os use cases.

    Todas as dependências são injetadas pelo Container. A tabela de
    handlers é verificada na construção: uma variante de `Intent` sem
    handler é erro de programação (TypeError), nunca um resultado.
    """

    def __init__(
        self,
        criar_ticket,
        assumir_ticket,
        fechar_ticket,
        reabrir_ticket,
        adicionar_participante,
        remover_participante,
        configurar_setting,
        adicionar_staff,
        remover_staff,
        adicionar_cargo_staff,
        remover_cargo_staff,
        obter_estatisticas,
        listar_meus_tickets,
        listar_staff,
        obter_transcript,
        buscar_por_conversa,
    ):
        self.criar_ticket = criar_ticket
        self.assumir_ticket = assumir_ticket
        self.fechar_ticket = fechar_ticket
        self.reabrir_ticket = reabrir_ticket
        self.adicionar_participante = adicionar_participante
        self.remover_participante = remover_participante
        self.configurar_setting = configurar_setting
        self.adicionar_staff = adicionar_staff
        self.remover_staff = remover_staff
        self.adicionar_cargo_staff = adicionar_cargo_staff
        self.remover_cargo_staff = remover_cargo_staff
        self.obter_estatisticas = obter_estatisticas
        self.listar_meus_tickets = listar_meus_tickets
        self.listar_staff = listar_staff
        self.obter_transcript = obter_transcript
        self.buscar_por_conversa = buscar_por_conversa

        self._handlers: Dict[type, Callable[[Any], Any]] = {
            CreateTicket: self._create_ticket,
            ClaimTicket: self._claim_ticket,
            CloseTicket: self._close_ticket,
            ReopenTicket: self._reopen_ticket,
            AddParticipant: self._add_participant,
            RemoveParticipant: self._remove_participant,
            ConfigureSetting: self._configure_setting,
            AddStaff: self._add_staff,
            RemoveStaff: self._remove_staff,
            AddStaffRole: self._add_staff_role,
            RemoveStaffRole: self._remove_staff_role,
            QueryStats: self._query_stats,
            ListMyTickets: self._list_my_tickets,
            ListStaff: self._list_staff,
            QueryTranscript: self._query_transcript,
            LookupTicket: self._lookup_ticket,
        }

        sem_handler = set(get_args(Intent)) - set(self._handlers)
        if sem_handler:
            nomes = sorted(t.__name__ for t in sem_handler)
            raise TypeError(f"Intents sem handler: {nomes}")

    def dispatch(self, intent: Intent) -> IntentResult:
        """
        Executa uma intent.

        Returns:
            IntentResult com o payload do use case ou o erro de domínio

        Raises:
            TypeError: Se o objeto não é uma variante de Intent
        """
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Intent desconhecida: {type(intent).__name__}")

        try:
            valor = handler(intent)
        except DomainException as e:
            logger.warning(f"{type(intent).__name__} rejeitada: {e}")
            return IntentResult.falha(e.to_dict())

        return IntentResult.sucesso(valor)

    # =========================================================================
    # Ciclo de vida
    # =========================================================================

    def _create_ticket(self, intent: CreateTicket) -> dict:
        return self.criar_ticket.execute(
            CriarTicketInputDTO(
                workspace_id=intent.workspace_id,
                dono_id=intent.actor_id,
                categoria=intent.category,
                motivo=intent.reason,
                conversa_ref=intent.conversation_ref,
            )
        ).to_dict()

    def _claim_ticket(self, intent: ClaimTicket) -> dict:
        return self.assumir_ticket.execute(
            AssumirTicketInputDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                staff_id=intent.actor_id,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    def _close_ticket(self, intent: CloseTicket) -> dict:
        return self.fechar_ticket.execute(
            FecharTicketInputDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                fechado_por=intent.actor_id,
                motivo=intent.reason,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    def _reopen_ticket(self, intent: ReopenTicket) -> dict:
        return self.reabrir_ticket.execute(
            ReabrirTicketInputDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                ator_id=intent.actor_id,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    def _add_participant(self, intent: AddParticipant) -> dict:
        return self.adicionar_participante.execute(
            ParticipanteInputDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                ator_id=intent.actor_id,
                alvo_id=intent.target_id,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    def _remove_participant(self, intent: RemoveParticipant) -> dict:
        return self.remover_participante.execute(
            ParticipanteInputDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                ator_id=intent.actor_id,
                alvo_id=intent.target_id,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    # =========================================================================
    # Administração
    # =========================================================================

    def _configure_setting(self, intent: ConfigureSetting) -> dict:
        return self.configurar_setting.execute(
            ConfigurarSettingInputDTO(
                workspace_id=intent.workspace_id,
                chave=intent.key,
                valor=intent.value,
            )
        ).to_dict()

    def _add_staff(self, intent: AddStaff) -> dict:
        return self.adicionar_staff.execute(
            StaffMemberInputDTO(workspace_id=intent.workspace_id, ator_id=intent.target_id)
        ).to_dict()

    def _remove_staff(self, intent: RemoveStaff) -> dict:
        return self.remover_staff.execute(
            StaffMemberInputDTO(workspace_id=intent.workspace_id, ator_id=intent.target_id)
        ).to_dict()

    def _add_staff_role(self, intent: AddStaffRole) -> dict:
        return self.adicionar_cargo_staff.execute(
            StaffRoleInputDTO(workspace_id=intent.workspace_id, cargo_id=intent.role_id)
        ).to_dict()

    def _remove_staff_role(self, intent: RemoveStaffRole) -> dict:
        return self.remover_cargo_staff.execute(
            StaffRoleInputDTO(workspace_id=intent.workspace_id, cargo_id=intent.role_id)
        ).to_dict()

    # =========================================================================
    # Consultas
    # =========================================================================

    def _query_stats(self, intent: QueryStats) -> dict:
        return self.obter_estatisticas.execute(intent.workspace_id).to_dict()

    def _list_my_tickets(self, intent: ListMyTickets) -> list:
        itens = self.listar_meus_tickets.execute(
            ListarMeusTicketsQueryDTO(
                workspace_id=intent.workspace_id,
                dono_id=intent.actor_id,
                limite=intent.limit,
            )
        )
        return [item.to_dict() for item in itens]

    def _list_staff(self, intent: ListStaff) -> dict:
        return self.listar_staff.execute(intent.workspace_id).to_dict()

    def _query_transcript(self, intent: QueryTranscript) -> dict:
        return self.obter_transcript.execute(
            TranscriptQueryDTO(
                workspace_id=intent.workspace_id,
                ticket_id=intent.ticket_id,
                ator_id=intent.actor_id,
                ator_cargos=tuple(intent.actor_roles),
            )
        ).to_dict()

    def _lookup_ticket(self, intent: LookupTicket) -> dict:
        return self.buscar_por_conversa.execute(
            intent.workspace_id, intent.conversation_ref
        ).to_dict()

"""
Testes Unitários para Use Cases do Domínio de Tickets.

Estratégia de Teste:
- Store em memória + WorkspaceRepository reais (sem mocks de persistência)
- InMemoryUnitOfWork para verificar eventos e ações entregues
- Cenários de sucesso, de guarda e de concorrência

Coverage:
- CriarTicketService (cota, IDs, conversa)
- AssumirTicketService
- FecharTicketService
- ReabrirTicketService
- Adicionar/RemoverParticipanteService
- ListarMeusTicketsService, BuscarTicketPorConversaService, ObterTranscriptService
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.adapters.shared.unit_of_work import InMemoryUnitOfWork
from src.core.shared.exceptions import (
    AlreadyClaimedError,
    AlreadyClosedError,
    CannotRemoveOwnerError,
    EntityNotFoundError,
    InvalidStateError,
    PermissionDeniedError,
    QuotaExceededError,
    ValidationError,
)
from src.core.tickets.actions import (
    TEMPLATE_BOAS_VINDAS,
    TEMPLATE_FECHADO,
    TEMPLATE_LOG_FECHAMENTO,
)
from src.core.tickets.dtos import (
    AssumirTicketInputDTO,
    CriarTicketInputDTO,
    FecharTicketInputDTO,
    ListarMeusTicketsQueryDTO,
    ParticipanteInputDTO,
    ReabrirTicketInputDTO,
    TranscriptQueryDTO,
)
from src.core.tickets.use_cases import (
    AdicionarParticipanteService,
    AssumirTicketService,
    BuscarTicketPorConversaService,
    CriarTicketService,
    FecharTicketService,
    ListarMeusTicketsService,
    ObterTranscriptService,
    ReabrirTicketService,
    RemoverParticipanteService,
)


@pytest.fixture
def criar(repository, registry, uow, workspace_id):
    """Atalho: cria ticket para um dono e retorna o output."""
    service = CriarTicketService(repository, registry, uow)

    def _criar(dono_id="u1", categoria="billing", motivo="help", conversa_ref=None):
        return service.execute(
            CriarTicketInputDTO(
                workspace_id=workspace_id,
                dono_id=dono_id,
                categoria=categoria,
                motivo=motivo,
                conversa_ref=conversa_ref,
            )
        )

    return _criar


@pytest.fixture
def assumir_service(repository, policy, uow):
    return AssumirTicketService(repository, policy, uow)


@pytest.fixture
def fechar_service(repository, policy, uow):
    return FecharTicketService(repository, policy, uow, delete_delay_seconds=5)


@pytest.fixture
def reabrir_service(repository, policy, uow):
    return ReabrirTicketService(repository, policy, uow)


# =============================================================================
# CRIAR
# =============================================================================

class TestCriarTicketService:

    def test_cria_primeiro_ticket(self, criar, repository, uow, workspace_id):
        output = criar()

        assert output.id == "0001"
        assert output.status == "open"
        assert output.categoria == "billing"
        assert output.conversa_ref.startswith("conv-")
        assert repository.load(workspace_id).next_ticket_number == 2
        assert uow.committed

    def test_ids_sequenciais(self, criar):
        assert [criar(dono_id=f"u{i}").id for i in range(3)] == ["0001", "0002", "0003"]

    def test_conversa_informada_e_mantida(self, criar):
        assert criar(conversa_ref="canal-42").conversa_ref == "canal-42"

    def test_evento_e_acoes(self, criar, uow, staff):
        output = criar()

        assert [e.event_type for e in uow.published_events] == ["TicketCriadoEvent"]
        criar_conversa = uow.actions_of_type("CriarConversaAction")[0]
        assert criar_conversa.nome == "ticket-0001"
        assert criar_conversa.agrupador == "🎫・Tickets"
        assert criar_conversa.participantes == ["u1", "staffA", "staffB"]
        assert criar_conversa.conversa_ref == output.conversa_ref
        mensagem = uow.actions_of_type("PublicarMensagemAction")[0]
        assert mensagem.template == TEMPLATE_BOAS_VINDAS
        assert mensagem.contexto["motivo"] == "help"

    def test_prefixo_configurado(self, criar, repository, uow, workspace_id):
        repository.mutate(workspace_id, lambda c: c.settings.aplicar("ticket_prefix", "suporte-"))

        criar()

        assert uow.actions_of_type("CriarConversaAction")[0].nome == "suporte-0001"

    def test_cota_excedida(self, criar, repository, uow, workspace_id):
        for _ in range(3):
            criar()
        uow.reset()

        with pytest.raises(QuotaExceededError) as exc_info:
            criar()

        assert exc_info.value.to_dict()["limit"] == 3
        assert uow.rolled_back
        assert uow.published_events == []
        assert uow.dispatched_actions == []
        assert repository.load(workspace_id).next_ticket_number == 4

    def test_fechado_libera_cota(self, criar, fechar_service, workspace_id):
        for _ in range(3):
            criar()
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1"))

        assert criar().id == "0004"

    def test_cota_por_dono(self, criar):
        for _ in range(3):
            criar(dono_id="u1")

        assert criar(dono_id="u2").id == "0004"

    def test_categoria_invalida_nao_consome_id(self, criar, repository, workspace_id):
        with pytest.raises(ValidationError):
            criar(categoria="sales")

        assert repository.load(workspace_id).next_ticket_number == 1
        assert criar().id == "0001"

    @pytest.mark.slow
    def test_criacoes_concorrentes_respeitam_cota(self, repository, registry, workspace_id):
        """Quatro creates simultâneos com cota 3: exatamente um falha."""
        def tentar(_):
            service = CriarTicketService(repository, registry, InMemoryUnitOfWork())
            try:
                return service.execute(CriarTicketInputDTO(workspace_id, "u1", "general")).id
            except QuotaExceededError:
                return None

        with ThreadPoolExecutor(max_workers=4) as executor:
            resultados = list(executor.map(tentar, range(4)))

        ids = sorted(r for r in resultados if r)
        assert ids == ["0001", "0002", "0003"]
        assert resultados.count(None) == 1

    @pytest.mark.slow
    def test_criacoes_concorrentes_ids_unicos(self, repository, registry, workspace_id):
        def criar_para(i):
            service = CriarTicketService(repository, registry, InMemoryUnitOfWork())
            return service.execute(CriarTicketInputDTO(workspace_id, f"u{i}", "general")).id

        with ThreadPoolExecutor(max_workers=8) as executor:
            ids = list(executor.map(criar_para, range(16)))

        assert len(set(ids)) == 16
        assert repository.load(workspace_id).next_ticket_number == 17


# =============================================================================
# ASSUMIR
# =============================================================================

class TestAssumirTicketService:

    def test_staff_assume(self, criar, assumir_service, uow, staff, workspace_id):
        criar()
        uow.reset()

        output = assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0001", "staffA"))

        assert output.status == "claimed"
        assert output.assumido_por == "staffA"
        assert [e.event_type for e in uow.published_events] == ["TicketAssumidoEvent"]

    def test_staff_por_cargo(self, criar, assumir_service, repository, workspace_id):
        repository.mutate(workspace_id, lambda c: c.adicionar_cargo_staff("role-support"))
        criar()

        output = assumir_service.execute(
            AssumirTicketInputDTO(workspace_id, "0001", "u7", ator_cargos=("role-support",))
        )

        assert output.assumido_por == "u7"

    def test_nao_staff_negado(self, criar, assumir_service, repository, workspace_id):
        criar()

        with pytest.raises(PermissionDeniedError):
            assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0001", "u1"))

        assert repository.load(workspace_id).tickets["0001"].assumido_por is None

    def test_segundo_claim(self, criar, assumir_service, uow, staff, workspace_id):
        criar()
        assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0001", "staffA"))
        uow.reset()

        with pytest.raises(AlreadyClaimedError):
            assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0001", "staffB"))

        assert uow.published_events == []

    def test_ticket_inexistente(self, assumir_service, staff, workspace_id):
        with pytest.raises(EntityNotFoundError):
            assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0042", "staffA"))

    def test_ticket_de_outro_workspace(self, criar, assumir_service, repository):
        criar()
        repository.mutate("W2", lambda c: c.adicionar_staff("staffA"))

        with pytest.raises(EntityNotFoundError):
            assumir_service.execute(AssumirTicketInputDTO("W2", "0001", "staffA"))

    @pytest.mark.slow
    def test_claims_concorrentes_apenas_um_vence(self, criar, repository, policy, staff, workspace_id):
        criar()

        def tentar(staff_id):
            service = AssumirTicketService(repository, policy, InMemoryUnitOfWork())
            try:
                service.execute(AssumirTicketInputDTO(workspace_id, "0001", staff_id))
                return True
            except AlreadyClaimedError:
                return False

        with ThreadPoolExecutor(max_workers=2) as executor:
            resultados = list(executor.map(tentar, ["staffA", "staffB"]))

        assert sorted(resultados) == [False, True]


# =============================================================================
# FECHAR
# =============================================================================

class TestFecharTicketService:

    def test_dono_fecha(self, criar, fechar_service, uow, workspace_id):
        criar()
        uow.reset()

        output = fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1", "resolved"))

        assert output.status == "closed"
        assert output.fechado_por == "u1"
        assert output.motivo_fechamento == "resolved"
        assert [e.event_type for e in uow.published_events] == ["TicketFechadoEvent"]

    def test_acoes_de_fechamento(self, criar, fechar_service, uow, workspace_id):
        ticket = criar()
        uow.reset()

        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1"))

        mensagens = uow.actions_of_type("PublicarMensagemAction")
        assert [m.template for m in mensagens] == [TEMPLATE_FECHADO, TEMPLATE_LOG_FECHAMENTO]
        assert mensagens[0].conversa_ref == ticket.conversa_ref
        assert mensagens[1].canal_nome == "ticket-logs"
        assert mensagens[1].conversa_ref is None
        exclusao = uow.actions_of_type("AgendarExclusaoConversaAction")[0]
        assert exclusao.delay_seconds == 5
        assert exclusao.conversa_ref == ticket.conversa_ref

    def test_staff_fecha_ticket_alheio(self, criar, fechar_service, staff, workspace_id):
        criar()

        output = fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "staffB"))

        assert output.fechado_por == "staffB"

    def test_terceiro_negado(self, criar, fechar_service, workspace_id):
        criar()

        with pytest.raises(PermissionDeniedError):
            fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u2"))

    def test_fechar_duas_vezes(self, criar, fechar_service, repository, uow, workspace_id):
        criar()
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1", "primeiro"))
        uow.reset()

        with pytest.raises(AlreadyClosedError):
            fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1", "segundo"))

        assert repository.load(workspace_id).tickets["0001"].motivo_fechamento == "primeiro"
        assert uow.dispatched_actions == []


# =============================================================================
# REABRIR
# =============================================================================

class TestReabrirTicketService:

    def test_reabrir(self, criar, assumir_service, fechar_service, reabrir_service, uow, staff, workspace_id):
        ticket = criar()
        assumir_service.execute(AssumirTicketInputDTO(workspace_id, "0001", "staffA"))
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "staffA"))
        uow.reset()

        output = reabrir_service.execute(ReabrirTicketInputDTO(workspace_id, "0001", "staffB"))

        assert output.id == "0001"
        assert output.conversa_ref == ticket.conversa_ref
        assert output.status == "reopened"
        assert output.assumido_por is None
        assert output.fechado_em is None
        assert [e.event_type for e in uow.published_events] == ["TicketReabertoEvent"]

    def test_reabrir_ticket_aberto(self, criar, reabrir_service, staff, workspace_id):
        criar()

        with pytest.raises(InvalidStateError):
            reabrir_service.execute(ReabrirTicketInputDTO(workspace_id, "0001", "staffA"))

    def test_dono_nao_reabre(self, criar, fechar_service, reabrir_service, workspace_id):
        criar()
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1"))

        with pytest.raises(PermissionDeniedError):
            reabrir_service.execute(ReabrirTicketInputDTO(workspace_id, "0001", "u1"))

    def test_reaberto_conta_na_cota(self, criar, fechar_service, reabrir_service, staff, workspace_id):
        for _ in range(3):
            criar()
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0001", "u1"))
        criar()
        fechar_service.execute(FecharTicketInputDTO(workspace_id, "0002", "u1"))

        reabrir_service.execute(ReabrirTicketInputDTO(workspace_id, "0001", "staffA"))

        with pytest.raises(QuotaExceededError):
            criar()


# =============================================================================
# PARTICIPANTES
# =============================================================================

class TestParticipantes:

    def test_adicionar(self, criar, repository, policy, uow, staff, workspace_id):
        ticket = criar()
        uow.reset()

        AdicionarParticipanteService(repository, policy, uow).execute(
            ParticipanteInputDTO(workspace_id, "0001", "staffA", "u5")
        )

        acesso = uow.actions_of_type("ConcederAcessoAction")[0]
        assert acesso.ator_id == "u5"
        assert acesso.conversa_ref == ticket.conversa_ref
        assert [e.event_type for e in uow.published_events] == ["ParticipanteAdicionadoEvent"]

    def test_remover(self, criar, repository, policy, uow, staff, workspace_id):
        criar()
        uow.reset()

        RemoverParticipanteService(repository, policy, uow).execute(
            ParticipanteInputDTO(workspace_id, "0001", "staffA", "u5")
        )

        assert uow.actions_of_type("RevogarAcessoAction")[0].ator_id == "u5"

    def test_remover_dono(self, criar, repository, policy, uow, staff, workspace_id):
        criar()
        uow.reset()

        with pytest.raises(CannotRemoveOwnerError):
            RemoverParticipanteService(repository, policy, uow).execute(
                ParticipanteInputDTO(workspace_id, "0001", "staffA", "u1")
            )

        assert uow.dispatched_actions == []

    def test_nao_staff_negado(self, criar, repository, policy, uow, workspace_id):
        criar()

        with pytest.raises(PermissionDeniedError):
            AdicionarParticipanteService(repository, policy, uow).execute(
                ParticipanteInputDTO(workspace_id, "0001", "u1", "u5")
            )


# =============================================================================
# CONSULTAS
# =============================================================================

class TestConsultas:

    def test_listar_meus_tickets(self, criar, registry, workspace_id):
        criar()
        criar(dono_id="u2")
        criar()

        itens = ListarMeusTicketsService(registry).execute(
            ListarMeusTicketsQueryDTO(workspace_id, "u1")
        )

        assert {i.id for i in itens} == {"0001", "0003"}

    def test_listar_respeita_limite(self, criar, registry, repository, workspace_id):
        repository.mutate(workspace_id, lambda c: c.settings.aplicar("max_tickets", 10))
        for _ in range(7):
            criar()

        itens = ListarMeusTicketsService(registry).execute(
            ListarMeusTicketsQueryDTO(workspace_id, "u1", limite=5)
        )

        assert len(itens) == 5

    def test_listar_vazio(self, registry, workspace_id):
        assert ListarMeusTicketsService(registry).execute(
            ListarMeusTicketsQueryDTO(workspace_id, "u1")
        ) == []

    def test_buscar_por_conversa(self, criar, registry, workspace_id):
        criar(conversa_ref="canal-7")

        output = BuscarTicketPorConversaService(registry).execute(workspace_id, "canal-7")

        assert output.id == "0001"

    def test_buscar_conversa_sem_ticket(self, registry, workspace_id):
        with pytest.raises(EntityNotFoundError):
            BuscarTicketPorConversaService(registry).execute(workspace_id, "canal-geral")

    def test_transcript_staff(self, criar, registry, policy, staff, workspace_id):
        criar()

        output = ObterTranscriptService(registry, policy).execute(
            TranscriptQueryDTO(workspace_id, "0001", "staffA")
        )

        assert output.to_dict()["ticket"]["id"] == "0001"

    def test_transcript_nao_staff(self, criar, registry, policy, workspace_id):
        criar()

        with pytest.raises(PermissionDeniedError):
            ObterTranscriptService(registry, policy).execute(
                TranscriptQueryDTO(workspace_id, "0001", "u1")
            )

"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância por processo (store, repository, registry, policy)
- Factory: Nova instância por chamada (UoW, services, dispatcher)
- Selector: Backend de armazenamento escolhido por configuração

O WorkspaceRepository precisa ser único por processo: é ele que
guarda os locks por workspace. O UoW não é compartilhado entre
threads, então cada intent deve obter seu próprio dispatcher
(`get_container().intent_dispatcher()` ou `dispatch_intent()`).
"""

from typing import Optional

from dependency_injector import containers, providers


def _settings_dict() -> dict:
    """Lê a configuração do Django settings."""
    from django.conf import settings

    return {
        "storage": {
            "backend": getattr(settings, "TICKET_STORAGE_BACKEND", "memory"),
            "redis_url": getattr(settings, "REDIS_URL", None) or "redis://localhost:6379/0",
            "timeout": getattr(settings, "STORAGE_TIMEOUT_SECONDS", 5),
            "retry_backoff": getattr(settings, "STORAGE_RETRY_BACKOFF_SECONDS", 0.2),
            "conflict_retries": getattr(settings, "WORKSPACE_CONFLICT_RETRIES", 5),
        },
        "tickets": {
            "delete_delay": getattr(settings, "CONVERSATION_DELETE_DELAY_SECONDS", 5),
        },
        "events": {
            "mode": getattr(settings, "EVENT_PUBLISHER_MODE", "sync"),
        },
    }


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Valores do Django settings
    - Infrastructure: Store, publisher, dispatcher de ações
    - Repositories: WorkspaceRepository, TicketRegistry, policy
    - Unit of Work: Fronteira de publicação
    - Services: Use Cases
    - Intents: IntentDispatcher

    Example:
        container = Container()
        container.config.from_dict({"storage": {"backend": "memory"}})

        dispatcher = container.intent_dispatcher()
        result = dispatcher.dispatch(QueryStats(workspace_id="W1"))
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    key_value_store = providers.Selector(
        config.storage.backend,
        memory=providers.Singleton(
            lambda timeout: __import__(
                'src.core.storage.memory',
                fromlist=['InMemoryKeyValueStore']
            ).InMemoryKeyValueStore(timeout=timeout),
            timeout=config.storage.timeout,
        ),
        django=providers.Singleton(
            lambda: __import__(
                'src.adapters.django_app.storage.store',
                fromlist=['DjangoKeyValueStore']
            ).DjangoKeyValueStore()
        ),
        redis=providers.Singleton(
            lambda url, timeout: __import__(
                'src.adapters.redis_store.store',
                fromlist=['RedisKeyValueStore']
            ).RedisKeyValueStore.from_url(url, timeout=timeout),
            url=config.storage.redis_url,
            timeout=config.storage.timeout,
        ),
    )

    event_publisher = providers.Singleton(
        lambda mode: __import__(
            'src.adapters.django_app.events.publishers',
            fromlist=['get_event_publisher']
        ).get_event_publisher(mode or "sync"),
        mode=config.events.mode,
    )

    action_dispatcher = providers.Singleton(
        lambda mode: __import__(
            'src.adapters.django_app.events.dispatchers',
            fromlist=['get_action_dispatcher']
        ).get_action_dispatcher(mode or "sync"),
        mode=config.events.mode,
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por processo)
    # =========================================================================

    workspace_repository = providers.Singleton(
        lambda store, timeout, backoff, retries: __import__(
            'src.core.workspaces.repository',
            fromlist=['WorkspaceRepository']
        ).WorkspaceRepository(
            store,
            lock_timeout=timeout,
            retry_backoff=backoff,
            max_conflict_retries=retries,
        ),
        store=key_value_store,
        timeout=config.storage.timeout,
        backoff=config.storage.retry_backoff,
        retries=config.storage.conflict_retries,
    )

    ticket_registry = providers.Singleton(
        lambda repository: __import__(
            'src.core.tickets.registry',
            fromlist=['TicketRegistry']
        ).TicketRegistry(repository),
        repository=workspace_repository,
    )

    staff_policy = providers.Singleton(
        lambda repository: __import__(
            'src.core.workspaces.authorization',
            fromlist=['StaffAuthorizationPolicy']
        ).StaffAuthorizationPolicy(repository),
        repository=workspace_repository,
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        lambda event_publisher, action_dispatcher: __import__(
            'src.adapters.shared.unit_of_work',
            fromlist=['StoreUnitOfWork']
        ).StoreUnitOfWork(
            event_publisher=event_publisher,
            action_dispatcher=action_dispatcher,
        ),
        event_publisher=event_publisher,
        action_dispatcher=action_dispatcher,
    )

    # =========================================================================
    # Services / Use Cases - Tickets
    # =========================================================================

    criar_ticket_service = providers.Factory(
        lambda repository, registry, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['CriarTicketService']
        ).CriarTicketService(repository, registry, uow),
        repository=workspace_repository,
        registry=ticket_registry,
        uow=unit_of_work,
    )

    assumir_ticket_service = providers.Factory(
        lambda repository, policy, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['AssumirTicketService']
        ).AssumirTicketService(repository, policy, uow),
        repository=workspace_repository,
        policy=staff_policy,
        uow=unit_of_work,
    )

    fechar_ticket_service = providers.Factory(
        lambda repository, policy, uow, delay: __import__(
            'src.core.tickets.use_cases',
            fromlist=['FecharTicketService']
        ).FecharTicketService(repository, policy, uow, delete_delay_seconds=delay),
        repository=workspace_repository,
        policy=staff_policy,
        uow=unit_of_work,
        delay=config.tickets.delete_delay,
    )

    reabrir_ticket_service = providers.Factory(
        lambda repository, policy, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['ReabrirTicketService']
        ).ReabrirTicketService(repository, policy, uow),
        repository=workspace_repository,
        policy=staff_policy,
        uow=unit_of_work,
    )

    adicionar_participante_service = providers.Factory(
        lambda repository, policy, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['AdicionarParticipanteService']
        ).AdicionarParticipanteService(repository, policy, uow),
        repository=workspace_repository,
        policy=staff_policy,
        uow=unit_of_work,
    )

    remover_participante_service = providers.Factory(
        lambda repository, policy, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['RemoverParticipanteService']
        ).RemoverParticipanteService(repository, policy, uow),
        repository=workspace_repository,
        policy=staff_policy,
        uow=unit_of_work,
    )

    # Leituras (sem UoW)
    listar_meus_tickets_service = providers.Factory(
        lambda registry: __import__(
            'src.core.tickets.use_cases',
            fromlist=['ListarMeusTicketsService']
        ).ListarMeusTicketsService(registry),
        registry=ticket_registry,
    )

    buscar_por_conversa_service = providers.Factory(
        lambda registry: __import__(
            'src.core.tickets.use_cases',
            fromlist=['BuscarTicketPorConversaService']
        ).BuscarTicketPorConversaService(registry),
        registry=ticket_registry,
    )

    obter_transcript_service = providers.Factory(
        lambda registry, policy: __import__(
            'src.core.tickets.use_cases',
            fromlist=['ObterTranscriptService']
        ).ObterTranscriptService(registry, policy),
        registry=ticket_registry,
        policy=staff_policy,
    )

    obter_estatisticas_service = providers.Factory(
        lambda repository: __import__(
            'src.core.tickets.stats',
            fromlist=['ObterEstatisticasService']
        ).ObterEstatisticasService(repository),
        repository=workspace_repository,
    )

    # =========================================================================
    # Services / Use Cases - Workspaces
    # =========================================================================

    configurar_setting_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['ConfigurarSettingService']
        ).ConfigurarSettingService(repository),
        repository=workspace_repository,
    )

    adicionar_staff_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['AdicionarStaffService']
        ).AdicionarStaffService(repository),
        repository=workspace_repository,
    )

    remover_staff_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['RemoverStaffService']
        ).RemoverStaffService(repository),
        repository=workspace_repository,
    )

    adicionar_cargo_staff_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['AdicionarCargoStaffService']
        ).AdicionarCargoStaffService(repository),
        repository=workspace_repository,
    )

    remover_cargo_staff_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['RemoverCargoStaffService']
        ).RemoverCargoStaffService(repository),
        repository=workspace_repository,
    )

    listar_staff_service = providers.Factory(
        lambda repository: __import__(
            'src.core.workspaces.use_cases',
            fromlist=['ListarStaffService']
        ).ListarStaffService(repository),
        repository=workspace_repository,
    )

    # =========================================================================
    # Intents (Factory - um dispatcher por intent/thread)
    # =========================================================================

    intent_dispatcher = providers.Factory(
        lambda **services: __import__(
            'src.core.intents.dispatcher',
            fromlist=['IntentDispatcher']
        ).IntentDispatcher(**services),
        criar_ticket=criar_ticket_service,
        assumir_ticket=assumir_ticket_service,
        fechar_ticket=fechar_ticket_service,
        reabrir_ticket=reabrir_ticket_service,
        adicionar_participante=adicionar_participante_service,
        remover_participante=remover_participante_service,
        configurar_setting=configurar_setting_service,
        adicionar_staff=adicionar_staff_service,
        remover_staff=remover_staff_service,
        adicionar_cargo_staff=adicionar_cargo_staff_service,
        remover_cargo_staff=remover_cargo_staff_service,
        obter_estatisticas=obter_estatisticas_service,
        listar_meus_tickets=listar_meus_tickets_service,
        listar_staff=listar_staff_service,
        obter_transcript=obter_transcript_service,
        buscar_por_conversa=buscar_por_conversa_service,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), configurado a partir
    do Django settings.

    Returns:
        Container configurado
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(_settings_dict())

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Descarta o store em memória e os locks por workspace.
    """
    global _container
    _container = None


def dispatch_intent(intent):
    """
    Atalho para o transporte: despacha uma intent com um dispatcher novo.

    Returns:
        IntentResult
    """
    return get_container().intent_dispatcher().dispatch(intent)

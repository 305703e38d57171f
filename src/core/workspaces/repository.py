"""
WorkspaceRepository - Carrega, materializa e grava WorkspaceConfig.

Toda escrita em um workspace passa por `mutate()`, a seção crítica
única por tenant:

    lock do workspace (no processo)
      └── leitura versionada
            └── mutação sobre a cópia fresca
                  └── compare-and-swap no store
                        └── conflito? recarrega e repete

O lock serializa intents concorrentes do mesmo processo; o
compare-and-swap protege contra outros processos escrevendo no
mesmo backend. Guardas de transição rodam sempre contra o
documento recém-lido, nunca contra uma cópia antiga.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Set, Tuple, TypeVar
import logging
import threading
import time

from src.core.shared.exceptions import (
    ConcurrencyError,
    DomainException,
    StorageUnavailableError,
)
from src.core.storage.keys import (
    WORKSPACE_PREFIX,
    ticket_key,
    workspace_id_from_key,
    workspace_key,
)
from src.core.storage.ports import KeyValueStore, VERSAO_AUSENTE
from src.core.tickets.entities import TicketEntity

from .entities import WorkspaceConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkspaceRepository:
    """
    Repositório de WorkspaceConfig sobre um KeyValueStore injetado.

    Attributes:
        store: Backend chave/valor (uma instância por processo)
        lock_timeout: Segundos máximos aguardando o lock do workspace
        retry_backoff: Espera antes da única retentativa em StorageUnavailable
        max_conflict_retries: Tentativas de compare-and-swap antes de ConcurrencyError

    Example:
        repo = WorkspaceRepository(InMemoryKeyValueStore())

        def adicionar(config):
            config.adicionar_staff("staffA")

        repo.mutate("W1", adicionar)
    """

    def __init__(
        self,
        store: KeyValueStore,
        lock_timeout: float = 5.0,
        retry_backoff: float = 0.2,
        max_conflict_retries: int = 5,
    ):
        self.store = store
        self.lock_timeout = lock_timeout
        self.retry_backoff = retry_backoff
        self.max_conflict_retries = max(1, max_conflict_retries)
        # um lock por workspace já visto; cresce com o número de tenants
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        # cópias cuja última escrita falhou, regravadas no próximo mutate
        self._copias_pendentes: Set[Tuple[str, str]] = set()

    # =========================================================================
    # Leitura
    # =========================================================================

    def load(self, workspace_id: str) -> WorkspaceConfig:
        """
        Retorna o workspace, materializando o documento padrão se ausente.

        A materialização usa compare-and-swap com versão 0, então duas
        primeiras referências concorrentes criam o documento uma vez só.

        Raises:
            StorageUnavailableError: Backend indisponível após a retentativa
        """
        config, _ = self._load_versioned(workspace_id)
        return config

    def _load_versioned(self, workspace_id: str) -> Tuple[WorkspaceConfig, int]:
        key = workspace_key(workspace_id)
        doc, version = self._com_retry(key, lambda: self.store.get_versioned(key))
        if doc is not None:
            return WorkspaceConfig.from_document(doc), version

        config = WorkspaceConfig.padrao(workspace_id)
        criado = self._com_retry(
            key,
            lambda: self.store.set_if_version(key, config.to_document(), VERSAO_AUSENTE),
        )
        if criado:
            logger.info(f"Workspace {workspace_id} materializado com configuração padrão")
            return config, VERSAO_AUSENTE + 1

        # outro processo materializou entre a leitura e a escrita
        doc, version = self._com_retry(key, lambda: self.store.get_versioned(key))
        if doc is None:
            raise ConcurrencyError(f"Workspace {workspace_id} sumiu durante a materialização")
        return WorkspaceConfig.from_document(doc), version

    def get_ticket(self, workspace_id: str, ticket_id: str) -> TicketEntity:
        """
        Leitura pontual de ticket.

        O documento do workspace é a fonte de verdade. A cópia
        desnormalizada é conferida contra ele e regravada quando
        estiver ausente ou desatualizada.

        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        ticket = self.load(workspace_id).obter_ticket(ticket_id)

        key = ticket_key(workspace_id, ticket_id)
        copia = self._com_retry(key, lambda: self.store.get(key))
        if copia == ticket.to_document():
            return ticket

        logger.warning(f"Cópia desnormalizada {key} divergente; reparando")
        with self._workspace_lock(workspace_id):
            # relê sob o lock para não sobrescrever uma mutação mais nova
            ticket = self.load(workspace_id).obter_ticket(ticket_id)
            self._sincronizar_tickets(
                workspace_id, {ticket_id: ticket.to_document()}, [ticket_id]
            )
        return ticket

    def list_workspace_ids(self) -> List[str]:
        """Lista todos os workspaces já materializados."""
        pattern = f"{WORKSPACE_PREFIX}:*"
        keys = self._com_retry(pattern, lambda: self.store.scan(pattern))
        return [workspace_id_from_key(k) for k in keys]

    # =========================================================================
    # Escrita
    # =========================================================================

    def save(self, workspace_id: str, config: WorkspaceConfig) -> None:
        """
        Sobrescreve o documento inteiro (last writer wins).

        Não verifica versão: usar apenas para importação ou reparo
        administrativo. Fluxos de negócio usam `mutate()`.
        """
        key = workspace_key(workspace_id)
        doc = config.to_document()
        with self._workspace_lock(workspace_id):
            self._com_retry(key, lambda: self.store.set(key, doc))
            self._sincronizar_tickets(workspace_id, doc["tickets"], doc["tickets"].keys())
        logger.info(f"Workspace {workspace_id} sobrescrito")

    def mutate(self, workspace_id: str, mutacao: Callable[[WorkspaceConfig], T]) -> T:
        """
        Executa uma mutação dentro da seção crítica do workspace.

        A função recebe uma cópia recém-carregada e pode ser executada
        mais de uma vez em caso de conflito, portanto não deve ter
        efeitos colaterais fora do próprio config.

        Args:
            workspace_id: Tenant alvo
            mutacao: Função que altera o config e retorna um resultado

        Returns:
            O resultado da execução que foi efetivamente gravada

        Raises:
            DomainException: Qualquer erro de domínio da mutação (nada é gravado)
            ConcurrencyError: Conflitos persistentes após todas as tentativas
            StorageUnavailableError: Backend indisponível após a retentativa
        """
        key = workspace_key(workspace_id)

        with self._workspace_lock(workspace_id):
            for tentativa in range(1, self.max_conflict_retries + 1):
                config, versao = self._load_versioned(workspace_id)
                antes = {tid: t.to_document() for tid, t in config.tickets.items()}

                resultado = mutacao(config)

                doc = config.to_document()
                if self._gravar_workspace(key, doc, versao):
                    alterados = [
                        tid for tid, tdoc in doc["tickets"].items()
                        if antes.get(tid) != tdoc
                        or (workspace_id, tid) in self._copias_pendentes
                    ]
                    self._sincronizar_tickets(workspace_id, doc["tickets"], alterados)
                    logger.debug(f"Workspace {workspace_id} gravado (v{versao + 1})")
                    return resultado

                logger.warning(
                    f"Conflito de versão em {key} "
                    f"(tentativa {tentativa}/{self.max_conflict_retries}); recarregando"
                )

        raise ConcurrencyError(
            f"Workspace {workspace_id} sofreu {self.max_conflict_retries} "
            f"conflitos seguidos de escrita"
        )

    # =========================================================================
    # Internos
    # =========================================================================

    @contextmanager
    def _workspace_lock(self, workspace_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(workspace_id, threading.Lock())

        logger.debug(f"Aguardando lock do workspace {workspace_id}")
        if not lock.acquire(timeout=self.lock_timeout):
            raise StorageUnavailableError(
                f"Timeout de {self.lock_timeout}s aguardando o workspace {workspace_id}",
                key=workspace_key(workspace_id),
            )
        try:
            yield
        finally:
            lock.release()

    def _com_retry(self, key: str, operacao: Callable[[], Any]) -> Any:
        """Executa operação no store com uma retentativa após backoff."""
        try:
            return operacao()
        except StorageUnavailableError as e:
            logger.warning(
                f"Store indisponível para {key}: {e.message}; "
                f"nova tentativa em {self.retry_backoff}s"
            )
            time.sleep(self.retry_backoff)

        try:
            return operacao()
        except StorageUnavailableError as e:
            logger.error(f"Store indisponível para {key} após retentativa: {e.message}")
            raise

    def _sincronizar_tickets(
        self,
        workspace_id: str,
        tickets_doc: Dict[str, Dict[str, Any]],
        ticket_ids: Iterable[str],
    ) -> None:
        """
        Atualiza cópias desnormalizadas.

        Falhas não desfazem a escrita do workspace: a cópia fica
        marcada como pendente e é regravada na próxima mutação do
        workspace ou na próxima leitura por `get_ticket()`.
        """
        for ticket_id in ticket_ids:
            key = ticket_key(workspace_id, ticket_id)
            ticket_doc = tickets_doc[ticket_id]
            try:
                self._com_retry(key, lambda: self.store.set(key, ticket_doc))
            except DomainException as e:
                logger.error(f"Falha ao gravar cópia desnormalizada {key}: {e}")
                self._copias_pendentes.add((workspace_id, ticket_id))
            else:
                self._copias_pendentes.discard((workspace_id, ticket_id))

    def _gravar_workspace(self, key: str, doc: Dict[str, Any], versao: int) -> bool:
        """
        Compare-and-swap do documento do workspace.

        Uma falha do store não significa que a escrita não ocorreu
        (ex: timeout do EXEC no Redis depois de aplicado). Antes de
        repetir, relê a chave: versão seguinte com o mesmo documento
        é escrita confirmada.

        Returns:
            False se outra escrita venceu o compare-and-swap
        """
        try:
            return self.store.set_if_version(key, doc, versao)
        except StorageUnavailableError as e:
            logger.warning(
                f"Escrita de {key} com resultado incerto: {e.message}; "
                f"conferindo em {self.retry_backoff}s"
            )
            time.sleep(self.retry_backoff)

        atual, versao_atual = self._com_retry(key, lambda: self.store.get_versioned(key))
        if versao_atual == versao + 1 and atual == doc:
            logger.info(f"Escrita de {key} confirmada após falha do store")
            return True
        if versao_atual != versao:
            return False

        try:
            return self.store.set_if_version(key, doc, versao)
        except StorageUnavailableError as e:
            logger.error(f"Store indisponível para {key} após retentativa: {e.message}")
            raise

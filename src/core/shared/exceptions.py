"""
Exceções de Domínio do Gerenciador de Tickets Multi-Tenant.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (valor de entrada ou configuração inválida)
    ├── EntityNotFoundError (ticket/workspace/configuração inexistente)
    ├── PermissionDeniedError (não-staff tentando intent restrita)
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   ├── InvalidStateError (guarda de transição falhou)
    │   ├── AlreadyClosedError
    │   ├── AlreadyClaimedError
    │   ├── QuotaExceededError
    │   └── CannotRemoveOwnerError
    ├── StorageUnavailableError (backend indisponível ou timeout)
    └── ConcurrencyError (conflito de versão persistente)
"""

from typing import Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica
    (o IntentDispatcher faz exatamente isso na fronteira do core).

    Example:
        try:
            ticket.fechar("staff-1", "resolvido")
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para a camada de transporte)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando um valor de configuração ou de intent não atende
    aos requisitos mínimos (tipo, faixa, tamanho).

    Example:
        if valor < 1:
            raise ValidationError("maxTicketsPerUser deve ser >= 1", field="maxTicketsPerUser")
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada.

    Lançada quando uma busca por ID não retorna resultado
    (ticket, membro de staff, cargo ou chave de configuração).

    Example:
        ticket = workspace.tickets.get(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Ticket {ticket_id} não encontrado")
    """

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class PermissionDeniedError(DomainException):
    """
    Ator sem permissão para a operação solicitada.

    Lançada quando um não-staff tenta executar uma intent restrita
    (assumir, reabrir, gerenciar participantes, transcript) ou quando
    alguém que não é staff nem dono tenta fechar um ticket.
    """

    def __init__(self, message: str, actor_id: Optional[str] = None):
        self.actor_id = actor_id
        super().__init__(message, "PERMISSION_DENIED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.actor_id:
            result["actor_id"] = self.actor_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio. As subclasses abaixo dão nome
    às guardas da máquina de estados.
    """

    def __init__(self, message: str, rule: Optional[str] = None, code: Optional[str] = None):
        self.rule = rule
        super().__init__(message, code or "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidStateError(BusinessRuleViolationError):
    """Transição não permitida a partir do status atual do ticket."""

    def __init__(self, message: str, rule: Optional[str] = None):
        super().__init__(message, rule=rule, code="INVALID_STATE")


class AlreadyClosedError(BusinessRuleViolationError):
    """Ticket já está fechado; fechamentos repetidos são rejeitados."""

    def __init__(self, message: str):
        super().__init__(message, rule="ticket_ja_fechado", code="ALREADY_CLOSED")


class AlreadyClaimedError(BusinessRuleViolationError):
    """Ticket já foi assumido por um membro da staff."""

    def __init__(self, message: str, claimed_by: Optional[str] = None):
        self.claimed_by = claimed_by
        super().__init__(message, rule="ticket_ja_assumido", code="ALREADY_CLAIMED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.claimed_by:
            result["claimed_by"] = self.claimed_by
        return result


class QuotaExceededError(BusinessRuleViolationError):
    """
    Limite de tickets ativos por usuário atingido.

    Attributes:
        limite: Valor de maxTicketsPerUser no momento da verificação
    """

    def __init__(self, message: str, limite: int):
        self.limite = limite
        super().__init__(message, rule="limite_tickets_por_usuario", code="QUOTA_EXCEEDED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["limit"] = self.limite
        return result


class CannotRemoveOwnerError(BusinessRuleViolationError):
    """O criador do ticket nunca pode ser removido da conversa."""

    def __init__(self, message: str):
        super().__init__(message, rule="dono_nao_removivel", code="CANNOT_REMOVE_OWNER")


class StorageUnavailableError(DomainException):
    """
    Backend de persistência indisponível.

    Lançada pelos adapters de armazenamento quando a operação
    excede o timeout configurado ou o backend falha. O repositório
    tenta novamente uma vez antes de propagar.
    """

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message, "STORAGE_UNAVAILABLE")


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando uma mutação de workspace continua colidindo
    com escritas concorrentes mesmo após todas as retentativas.

    Example:
        if not store.set_if_version(key, doc, versao_lida):
            raise ConcurrencyError("Workspace foi modificado por outro processo")
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")

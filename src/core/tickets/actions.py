"""
Platform Actions do Domínio de Tickets.

Pedidos declarativos que o ciclo de vida entrega ao colaborador
externo. Nenhum deles carrega texto renderizado: mensagens são
identificadas por uma chave de template + contexto, e a camada de
transporte decide como exibi-las.

Ações:
- CriarConversaAction: criar a conversa que hospeda o ticket
- ConcederAcessoAction / RevogarAcessoAction: lista de acesso
- PublicarMensagemAction: postar mensagem em conversa ou canal
- AgendarExclusaoConversaAction: excluir a conversa após um atraso

A conversa remota tem ciclo de vida próprio: agendar a exclusão
não implica que ela aconteça nem que seja atômica com o fechamento.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.shared.actions import PlatformAction


# Chaves de template entendidas pelo colaborador
TEMPLATE_BOAS_VINDAS = "ticket.welcome"
TEMPLATE_ASSUMIDO = "ticket.claimed"
TEMPLATE_FECHADO = "ticket.closed"
TEMPLATE_REABERTO = "ticket.reopened"
TEMPLATE_LOG_FECHAMENTO = "ticket.log.closed"
TEMPLATE_PARTICIPANTE_ADICIONADO = "ticket.participant.added"
TEMPLATE_PARTICIPANTE_REMOVIDO = "ticket.participant.removed"


@dataclass
class CriarConversaAction(PlatformAction):
    """
    Criar a conversa hospedeira com a lista de acesso inicial.

    conversa_ref é a chave de idempotência: o colaborador deve
    reutilizar a conversa se receber o mesmo pedido duas vezes.

    Attributes:
        nome: Nome da conversa (prefixo do workspace + ID do ticket)
        agrupador: Nome da categoria/agrupador remoto
        participantes: Atores com acesso (dono + staff explícita)
        cargos: Cargos de staff com acesso
    """

    nome: str = ""
    agrupador: str = ""
    participantes: List[str] = field(default_factory=list)
    cargos: List[str] = field(default_factory=list)


@dataclass
class ConcederAcessoAction(PlatformAction):
    """Conceder acesso de um ator à conversa."""

    ator_id: str = ""


@dataclass
class RevogarAcessoAction(PlatformAction):
    """Revogar o acesso de um ator à conversa."""

    ator_id: str = ""


@dataclass
class PublicarMensagemAction(PlatformAction):
    """
    Postar uma mensagem.

    O destino é a conversa do ticket (conversa_ref) ou, quando
    canal_nome é informado, um canal nomeado do workspace
    (ex: o canal de logs).

    Attributes:
        template: Chave do template de mensagem
        contexto: Dados para o template
        canal_nome: Canal nomeado alternativo
    """

    template: str = ""
    contexto: Dict[str, Any] = field(default_factory=dict)
    canal_nome: Optional[str] = None


@dataclass
class AgendarExclusaoConversaAction(PlatformAction):
    """Excluir a conversa após delay_seconds."""

    delay_seconds: int = 0

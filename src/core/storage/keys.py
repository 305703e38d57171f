"""
Esquema lógico de chaves (independente de backend).

    workspace:<workspaceId>            -> documento WorkspaceConfig
    ticket:<workspaceId>:<ticketId>    -> cópia desnormalizada do Ticket
"""

WORKSPACE_PREFIX = "workspace"
TICKET_PREFIX = "ticket"


def workspace_key(workspace_id: str) -> str:
    return f"{WORKSPACE_PREFIX}:{workspace_id}"


def ticket_key(workspace_id: str, ticket_id: str) -> str:
    return f"{TICKET_PREFIX}:{workspace_id}:{ticket_id}"


def ticket_pattern(workspace_id: str) -> str:
    """Padrão de scan para todos os tickets desnormalizados de um workspace."""
    return f"{TICKET_PREFIX}:{workspace_id}:*"


def workspace_id_from_key(key: str) -> str:
    # "workspace:" tem tamanho fixo; IDs podem conter ":"
    return key[len(WORKSPACE_PREFIX) + 1:]

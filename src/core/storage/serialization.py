"""
Serialização JSON compartilhada pelos backends de armazenamento.
"""

import json
from typing import Any

from src.core.shared.exceptions import ValidationError


def dumps_document(key: str, value: Any) -> str:
    """
    Serializa documento garantindo que é JSON puro.

    Raises:
        ValidationError: Se o valor contém tipos não serializáveis
    """
    try:
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Valor da chave {key} não é serializável em JSON: {e}",
            field="value",
        ) from e


def loads_document(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)

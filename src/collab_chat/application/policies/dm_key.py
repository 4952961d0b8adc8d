"""Order-independent key for a direct conversation between two users."""
from __future__ import annotations

from uuid import UUID

from collab_chat.application.exceptions import InvalidArgumentError

SEPARATOR = "_"


def derive_conversation_key(user_a: UUID | str | None, user_b: UUID | str | None) -> str:
    a = str(user_a).strip() if user_a is not None else ""
    b = str(user_b).strip() if user_b is not None else ""
    if not a or not b:
        raise InvalidArgumentError("Both participants are required")
    if a == b:
        raise InvalidArgumentError("cannot message self")
    low, high = sorted((a, b))
    return f"{low}{SEPARATOR}{high}"

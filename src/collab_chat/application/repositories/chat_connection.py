from __future__ import annotations

from typing import Protocol
from uuid import UUID

from collab_chat.domain.entities.chat_connection import ChatConnection


class ChatConnectionReader(Protocol):
    async def list_for_user(
        self, user_id: UUID, *, offset: int = 0, limit: int = 20
    ) -> list[ChatConnection]: ...

    async def count_for_user(self, user_id: UUID) -> int: ...


class ChatConnectionWriter(Protocol):
    async def ensure_active(self, creator_id: UUID, brand_id: UUID) -> None:
        """Insert an active row for the pair unless one already exists."""
        ...

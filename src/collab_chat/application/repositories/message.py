from __future__ import annotations

from typing import Protocol
from uuid import UUID

from collab_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_latest(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        """Newest first, ties broken by insertion order."""
        ...

    async def count(self, conversation_id: UUID) -> int: ...

    async def get_by_client_id(
        self,
        conversation_id: UUID,
        client_id: str,
    ) -> Message | None: ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_id → return existing."""
        ...

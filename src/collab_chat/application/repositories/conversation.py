from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from collab_chat.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_dm_key(self, dm_key: str) -> Conversation | None: ...

    async def list_for_user(
        self, user_id: UUID, *, offset: int = 0, limit: int = 20
    ) -> list[Conversation]:
        """Most recently active first, never-messaged conversations last."""
        ...

    async def count_for_user(self, user_id: UUID) -> int: ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation:
        """Insert. Raise ConflictError if the dm_key is already taken."""
        ...

    async def record_last_message(
        self, conversation_id: UUID, message_id: UUID, ts: datetime
    ) -> None: ...

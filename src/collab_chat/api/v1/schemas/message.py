from __future__ import annotations

from datetime import datetime
from uuid import UUID

from collab_chat.api.v1.schemas.common import CamelModel
from collab_chat.domain.entities.message import Message


class MessageResponse(CamelModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    text: str
    at: int
    created_at: datetime
    client_id: str | None

    @classmethod
    def from_entity(cls, msg: Message) -> MessageResponse:
        return cls(
            id=msg.id,
            conversation_id=msg.conversation_id,
            sender_id=msg.sender_id,
            text=msg.text,
            at=int(msg.created_at.timestamp() * 1000),
            created_at=msg.created_at,
            client_id=msg.client_id,
        )

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from collab_chat.api.v1.schemas.common import CamelModel
from collab_chat.domain.entities.conversation import Conversation


class ConversationResponse(CamelModel):
    id: UUID
    type: str
    participants: list[UUID]
    other_user_id: UUID | None
    last_message_at: datetime | None
    last_message_id: UUID | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def for_viewer(cls, conv: Conversation, viewer_id: UUID) -> ConversationResponse:
        return cls(
            id=conv.id,
            type=conv.type,
            participants=list(conv.participants),
            other_user_id=conv.other_participant(viewer_id),
            last_message_at=conv.last_message_at,
            last_message_id=conv.last_message_id,
            created_at=conv.created_at,
            updated_at=conv.updated_at,
        )

from __future__ import annotations

from collab_chat.domain.entities.chat_connection import ChatConnection
from collab_chat.infrastructure.db.models.chat_connection import ChatConnectionModel


def model_to_entity(model: ChatConnectionModel) -> ChatConnection:
    return ChatConnection(
        id=model.id,
        creator_id=model.creator_id,
        brand_id=model.brand_id,
        status=model.status,
        is_deleted=model.is_deleted,
        created_at=model.created_at,
    )

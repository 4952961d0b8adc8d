from __future__ import annotations

from typing import Any

from collab_chat.domain.entities.message import Message
from collab_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        text=model.text,
        client_id=model.client_id,
        created_at=model.created_at,
    )


def entity_to_values(entity: Message) -> dict[str, Any]:
    """Column values for a Core insert; ``seq`` is left to the identity column."""
    return {
        "id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "text": entity.text,
        "client_id": entity.client_id,
        "created_at": entity.created_at,
    }

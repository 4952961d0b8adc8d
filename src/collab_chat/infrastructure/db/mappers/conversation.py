from __future__ import annotations

from collab_chat.domain.entities.conversation import Conversation
from collab_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        type=model.type,
        participants=tuple(model.participants),
        dm_key=model.dm_key,
        last_message_at=model.last_message_at,
        last_message_id=model.last_message_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        type=entity.type,
        participants=list(entity.participants),
        dm_key=entity.dm_key,
        last_message_at=entity.last_message_at,
        last_message_id=entity.last_message_id,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )

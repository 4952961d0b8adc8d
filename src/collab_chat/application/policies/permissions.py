from __future__ import annotations

from uuid import UUID

from collab_chat.application.exceptions import ForbiddenError, NotFoundError
from collab_chat.domain.entities.conversation import Conversation


def assert_conversation_access(
    user_id: UUID,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or the user is not one of its participants.

    Any pair that already shares a conversation may keep messaging; the
    chat-connection status is not consulted here.
    """
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if not conversation.has_participant(user_id):
        raise ForbiddenError("Not a participant of this conversation")
    return conversation

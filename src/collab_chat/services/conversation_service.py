from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from collab_chat.application.dto.pagination import Page, PageParams
from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import ConflictError, NotFoundError, ServerError
from collab_chat.application.policies.dm_key import derive_conversation_key
from collab_chat.application.uow import UnitOfWork
from collab_chat.domain.entities.conversation import Conversation
from collab_chat.domain.value_objects.enums import ConversationType

logger = logging.getLogger(__name__)


async def find_or_create_direct_conversation(
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    uow: UnitOfWork,
) -> tuple[Conversation, bool]:
    """Return the DM between two users, creating it on first contact.

    Returns (conversation, created). Concurrent callers racing on the same pair
    all get the same row: the loser of the insert race sees a ConflictError on
    the unique dm_key and re-reads the winner's conversation.
    """
    dm_key = derive_conversation_key(user_a, user_b)

    existing = await uow.conversations.get_by_dm_key(dm_key)
    if existing is not None:
        return existing, False

    now = datetime.now(timezone.utc)
    conversation = Conversation(
        id=uuid.uuid4(),
        type=ConversationType.DM,
        participants=(user_a, user_b),
        dm_key=dm_key,
        last_message_at=None,
        last_message_id=None,
        created_at=now,
        updated_at=now,
    )
    try:
        conversation = await uow.conversations_w.create(conversation)
    except ConflictError:
        logger.debug("Lost create race for %s, re-reading", dm_key)
        existing = await uow.conversations.get_by_dm_key(dm_key)
        if existing is None:
            raise ServerError(f"Conversation {dm_key} vanished after conflict")
        return existing, False

    await uow.commit()
    logger.info("Created conversation %s for %s", conversation.id, dm_key)
    return conversation, True


async def record_last_message(
    conversation_id: uuid.UUID,
    message_id: uuid.UUID,
    at: datetime,
    uow: UnitOfWork,
) -> None:
    """Advance the denormalized last-message pointer.

    Best effort: the message log is authoritative, a failure here is logged
    and rolled back without failing the append.
    """
    try:
        await uow.conversations_w.record_last_message(conversation_id, message_id, at)
        await uow.commit()
    except Exception:
        logger.warning(
            "Failed to record last message %s on conversation %s",
            message_id, conversation_id, exc_info=True,
        )
        await uow.rollback()


async def get_participants(
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> tuple[uuid.UUID, ...]:
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    return conversation.participants


async def list_user_conversations(
    principal: Principal,
    params: PageParams,
    uow: UnitOfWork,
) -> Page[Conversation]:
    items = await uow.conversations.list_for_user(
        principal.user_id, offset=params.offset, limit=params.limit,
    )
    total = await uow.conversations.count_for_user(principal.user_id)
    return Page(items=items, total=total, params=params)

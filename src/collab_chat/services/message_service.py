from __future__ import annotations

import uuid

from collab_chat.application.dto.pagination import Page, PageParams
from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import InvalidArgumentError
from collab_chat.application.policies.permissions import assert_conversation_access
from collab_chat.application.ports.clock import Clock, system_clock
from collab_chat.application.uow import UnitOfWork
from collab_chat.config import settings
from collab_chat.domain.entities.message import Message
from collab_chat.services import conversation_service


async def append_message(
    conversation_id: uuid.UUID,
    sender_id: uuid.UUID,
    text: str | None,
    client_id: str | None,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> tuple[Message, bool]:
    """Persist a message idempotently.

    Returns (message, created). If a message with the same client_id already
    exists in the conversation it is returned unchanged with created=False,
    both when found up front and when a concurrent insert wins the race.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(sender_id, conversation)

    text = (text or "").strip()
    if not text:
        raise InvalidArgumentError("Message text is empty")
    if len(text) > settings.MESSAGE_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Message text exceeds {settings.MESSAGE_MAX_LENGTH} characters"
        )

    client_id = client_id or None
    if client_id is not None:
        existing = await uow.messages.get_by_client_id(conversation_id, client_id)
        if existing is not None:
            return existing, False

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        text=text,
        client_id=client_id,
        created_at=clock.now(),
    )
    msg, created = await uow.messages_w.create_if_not_exists(msg)
    if not created:
        return msg, False

    await uow.commit()
    await conversation_service.record_last_message(
        conversation_id, msg.id, msg.created_at, uow,
    )
    return msg, True


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    params: PageParams,
    uow: UnitOfWork,
) -> Page[Message]:
    """Page 1 holds the newest messages; items inside a page run oldest to newest."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(principal.user_id, conversation)
    latest = await uow.messages.list_latest(
        conversation_id, offset=params.offset, limit=params.limit,
    )
    total = await uow.messages.count(conversation_id)
    return Page(items=list(reversed(latest)), total=total, params=params)

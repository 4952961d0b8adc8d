from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from collab_chat.application.dto.pagination import PageParams
from collab_chat.application.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from collab_chat.config import settings
from collab_chat.services import message_service
from tests.conftest import (
    BUSINESS_ID,
    CREATOR_ID,
    OUTSIDER_ID,
    FakeUoW,
    FixedClock,
    make_conversation,
    make_message,
)


@pytest.fixture
def uow_with_conversation():
    uow = FakeUoW()
    conv = make_conversation()
    uow.conversations._store[conv.id] = conv
    return uow, conv


@pytest.mark.asyncio
async def test_append_creates_message(uow_with_conversation):
    uow, conv = uow_with_conversation

    msg, created = await message_service.append_message(
        conv.id, CREATOR_ID, "  hello  ", "c-1", uow,
    )

    assert created is True
    assert msg.text == "hello"
    assert msg.client_id == "c-1"
    assert msg.sender_id == CREATOR_ID
    assert uow._committed is True


@pytest.mark.asyncio
async def test_append_updates_last_message_pointer(uow_with_conversation):
    uow, conv = uow_with_conversation
    at = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    msg, _ = await message_service.append_message(
        conv.id, CREATOR_ID, "hello", None, uow, clock=FixedClock(at),
    )

    stored = uow.conversations._store[conv.id]
    assert stored.last_message_id == msg.id
    assert stored.last_message_at == at


@pytest.mark.asyncio
async def test_append_idempotent_on_client_id(uow_with_conversation):
    uow, conv = uow_with_conversation

    msg1, created1 = await message_service.append_message(
        conv.id, CREATOR_ID, "hello", "c-1", uow,
    )
    commits = uow.commits

    msg2, created2 = await message_service.append_message(
        conv.id, CREATOR_ID, "edited text is ignored", "c-1", uow,
    )

    assert created1 is True
    assert created2 is False
    assert msg2.id == msg1.id
    assert msg2.text == "hello"
    assert uow.commits == commits
    assert len(uow.messages._messages) == 1


@pytest.mark.asyncio
async def test_concurrent_appends_with_same_client_id(uow_with_conversation):
    uow, conv = uow_with_conversation

    results = await asyncio.gather(*[
        message_service.append_message(conv.id, CREATOR_ID, "hello", "c-race", uow)
        for _ in range(5)
    ])

    assert len({msg.id for msg, _ in results}) == 1
    assert sum(created for _, created in results) == 1
    assert len(uow.messages._messages) == 1


@pytest.mark.asyncio
async def test_messages_without_client_id_are_never_deduplicated(uow_with_conversation):
    uow, conv = uow_with_conversation

    await message_service.append_message(conv.id, CREATOR_ID, "hello", None, uow)
    await message_service.append_message(conv.id, CREATOR_ID, "hello", "", uow)

    assert len(uow.messages._messages) == 2


@pytest.mark.asyncio
async def test_same_client_id_in_other_conversation_is_independent(uow_with_conversation):
    uow, conv = uow_with_conversation
    other = make_conversation(CREATOR_ID, OUTSIDER_ID)
    uow.conversations._store[other.id] = other

    _, created1 = await message_service.append_message(conv.id, CREATOR_ID, "a", "c-1", uow)
    _, created2 = await message_service.append_message(other.id, CREATOR_ID, "b", "c-1", uow)

    assert created1 is True
    assert created2 is True


@pytest.mark.asyncio
async def test_append_forbidden_for_non_participant(uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.append_message(conv.id, OUTSIDER_ID, "hi", "c-1", uow)

    assert uow.messages._messages == []
    assert uow.messages_w.insert_attempts == 0


@pytest.mark.asyncio
async def test_append_to_unknown_conversation():
    with pytest.raises(NotFoundError):
        await message_service.append_message(
            make_conversation().id, CREATOR_ID, "hi", None, FakeUoW(),
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   \n\t"])
async def test_append_rejects_blank_text(uow_with_conversation, text):
    uow, conv = uow_with_conversation

    with pytest.raises(InvalidArgumentError):
        await message_service.append_message(conv.id, CREATOR_ID, text, None, uow)
    assert uow.messages._messages == []


@pytest.mark.asyncio
async def test_append_rejects_oversized_text(uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(InvalidArgumentError):
        await message_service.append_message(
            conv.id, CREATOR_ID, "x" * (settings.MESSAGE_MAX_LENGTH + 1), None, uow,
        )


@pytest.mark.asyncio
async def test_list_messages_pages_newest_first_each_page_oldest_first(
    uow_with_conversation, creator_principal,
):
    uow, conv = uow_with_conversation
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for i in range(5):
        uow.messages._messages.append(
            make_message(conv.id, text=f"m{i}", created_at=start + timedelta(seconds=i))
        )

    first = await message_service.list_messages(
        conv.id, creator_principal, PageParams(page=1, limit=2), uow,
    )
    second = await message_service.list_messages(
        conv.id, creator_principal, PageParams(page=2, limit=2), uow,
    )

    assert [m.text for m in first.items] == ["m3", "m4"]
    assert [m.text for m in second.items] == ["m1", "m2"]
    assert first.total == 5


@pytest.mark.asyncio
async def test_list_messages_ties_keep_insertion_order(uow_with_conversation, creator_principal):
    uow, conv = uow_with_conversation
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    clock = FixedClock(at)
    for text in ("first", "second", "third"):
        await message_service.append_message(conv.id, BUSINESS_ID, text, None, uow, clock=clock)

    page = await message_service.list_messages(
        conv.id, creator_principal, PageParams(page=1, limit=10), uow,
    )

    assert [m.text for m in page.items] == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_list_messages_forbidden_for_outsider(uow_with_conversation):
    from collab_chat.application.dto.principal import Principal

    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.list_messages(
            conv.id, Principal(user_id=OUTSIDER_ID), PageParams(), uow,
        )

"""Shared test fixtures and in-memory fakes.

Every fake repository awaits ``asyncio.sleep(0)`` before touching its store
so that ``asyncio.gather`` interleaves concurrent callers the way a real
database round-trip would.
"""
from __future__ import annotations

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import jwt
import pytest

from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import ConflictError
from collab_chat.application.policies.dm_key import derive_conversation_key
from collab_chat.config import settings
from collab_chat.domain.entities.chat_connection import ChatConnection
from collab_chat.domain.entities.conversation import Conversation
from collab_chat.domain.entities.message import Message
from collab_chat.domain.value_objects.enums import ChatConnectionStatus, ConversationType

CREATOR_ID = UUID("11111111-1111-4111-8111-111111111111")
BUSINESS_ID = UUID("22222222-2222-4222-8222-222222222222")
OUTSIDER_ID = UUID("33333333-3333-4333-8333-333333333333")


@pytest.fixture
def creator_principal() -> Principal:
    return Principal(user_id=CREATOR_ID, roles=["creator"])


@pytest.fixture
def business_principal() -> Principal:
    return Principal(user_id=BUSINESS_ID, roles=["business"])


def make_token(user_id: UUID | str, *, claim: str = "sub", secret: str | None = None, **extra: Any) -> str:
    payload = {claim: str(user_id), "exp": datetime.now(timezone.utc) + timedelta(hours=1), **extra}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm="HS256")


def make_conversation(
    user_a: UUID = CREATOR_ID,
    user_b: UUID = BUSINESS_ID,
    *,
    conversation_id: UUID | None = None,
    last_message_at: datetime | None = None,
) -> Conversation:
    now = datetime.now(timezone.utc)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        type=ConversationType.DM,
        participants=(user_a, user_b),
        dm_key=derive_conversation_key(user_a, user_b),
        last_message_at=last_message_at,
        last_message_id=None,
        created_at=now,
        updated_at=now,
    )


def make_message(
    conversation_id: UUID,
    *,
    sender_id: UUID = CREATOR_ID,
    text: str = "hello",
    client_id: str | None = None,
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        text=text,
        client_id=client_id,
        created_at=created_at or datetime.now(timezone.utc),
    )


class FixedClock:
    def __init__(self, at: datetime) -> None:
        self.at = at

    def now(self) -> datetime:
        return self.at

@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        await asyncio.sleep(0)
        return self._store.get(conversation_id)

    async def get_by_dm_key(self, dm_key: str) -> Conversation | None:
        await asyncio.sleep(0)
        for c in self._store.values():
            if c.dm_key == dm_key:
                return c
        return None

    def _for_user(self, user_id: UUID) -> list[Conversation]:
        convs = [c for c in self._store.values() if user_id in c.participants]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            convs,
            key=lambda c: (c.last_message_at is not None, c.last_message_at or epoch, c.created_at),
            reverse=True,
        )

    async def list_for_user(self, user_id: UUID, *, offset: int = 0, limit: int = 20) -> list[Conversation]:
        return self._for_user(user_id)[offset:offset + limit]

    async def count_for_user(self, user_id: UUID) -> int:
        return len(self._for_user(user_id))


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    fail_record_last: bool = False

    async def create(self, conversation: Conversation) -> Conversation:
        await asyncio.sleep(0)
        if any(c.dm_key == conversation.dm_key for c in self._reader._store.values()):
            raise ConflictError(f"Conversation {conversation.dm_key} already exists")
        self._reader._store[conversation.id] = conversation
        return conversation

    async def record_last_message(self, conversation_id: UUID, message_id: UUID, ts: datetime) -> None:
        if self.fail_record_last:
            raise RuntimeError("pointer update failed")
        conv = self._reader._store[conversation_id]
        if conv.last_message_at is None or conv.last_message_at <= ts:
            self._reader._store[conversation_id] = replace(
                conv, last_message_at=ts, last_message_id=message_id,
            )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    def _in(self, conversation_id: UUID) -> list[Message]:
        # stable sort keeps insertion order for equal timestamps
        ordered = sorted(
            (m for m in self._messages if m.conversation_id == conversation_id),
            key=lambda m: m.created_at,
        )
        return list(reversed(ordered))

    async def list_latest(self, conversation_id: UUID, *, offset: int = 0, limit: int = 50) -> list[Message]:
        return self._in(conversation_id)[offset:offset + limit]

    async def count(self, conversation_id: UUID) -> int:
        return len(self._in(conversation_id))

    async def get_by_client_id(self, conversation_id: UUID, client_id: str) -> Message | None:
        await asyncio.sleep(0)
        for m in self._messages:
            if m.conversation_id == conversation_id and m.client_id == client_id:
                return m
        return None


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    insert_attempts: int = 0

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        self.insert_attempts += 1
        await asyncio.sleep(0)
        if message.client_id is not None:
            for m in self._reader._messages:
                if m.conversation_id == message.conversation_id and m.client_id == message.client_id:
                    return m, False
        self._reader._messages.append(message)
        return message, True


@dataclass
class FakeChatConnections:
    _rows: list[ChatConnection] = field(default_factory=list)

    def _for_user(self, user_id: UUID) -> list[ChatConnection]:
        rows = [
            r for r in self._rows
            if not r.is_deleted and user_id in (r.creator_id, r.brand_id)
        ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def list_for_user(self, user_id: UUID, *, offset: int = 0, limit: int = 20) -> list[ChatConnection]:
        return self._for_user(user_id)[offset:offset + limit]

    async def count_for_user(self, user_id: UUID) -> int:
        return len(self._for_user(user_id))

    async def ensure_active(self, creator_id: UUID, brand_id: UUID) -> None:
        if any(r.creator_id == creator_id and r.brand_id == brand_id for r in self._rows):
            return
        self._rows.append(
            ChatConnection(
                id=uuid.uuid4(),
                creator_id=creator_id,
                brand_id=brand_id,
                status=ChatConnectionStatus.ACTIVE,
                is_deleted=False,
                created_at=datetime.now(timezone.utc),
            )
        )


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    chat_connections: FakeChatConnections = field(default_factory=FakeChatConnections)
    chat_connections_w: FakeChatConnections | None = None
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.chat_connections_w is None:
            self.chat_connections_w = self.chat_connections

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


def uow_factory_for(uow: FakeUoW):
    """Socket events open a unit of work per event; tests hand them a shared one."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return factory


class FakeWebSocket:
    """Accepts and records outbound frames; ``broken`` simulates a dead peer."""

    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.broken = broken
        self.sent: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(raw))

    def frames(self, event_type: str) -> list[dict[str, Any]]:
        return [f for f in self.sent if f["type"] == event_type]

"""WebSocket message envelope models and event payload variants."""
from __future__ import annotations

from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ClientEvent(StrEnum):
    PING = "ping"
    DM_OPEN = "dm:open"
    CHAT_JOIN = "chat:join"
    CHAT_LEAVE = "chat:leave"
    CHAT_SEND = "chat:send"


class ServerEvent(StrEnum):
    PONG = "pong"
    ACK = "ack"
    ERROR = "error"
    CHAT_NEW = "chat:new"


def user_room(user_id: UUID) -> str:
    return f"user:{user_id}"


def conversation_room(conversation_id: UUID) -> str:
    return f"conv:{conversation_id}"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str
    ack_id: str | int | None = None
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    ack_id: str | int | None = None
    data: dict[str, Any] = {}

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class _EventRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class DmOpenRequest(_EventRequest):
    other_user_id: UUID


class ChatJoinRequest(_EventRequest):
    conversation_id: UUID


class ChatLeaveRequest(_EventRequest):
    conversation_id: UUID


class ChatSendRequest(_EventRequest):
    conversation_id: UUID
    text: str | None = None
    client_id: str | None = Field(default=None, max_length=200)

"""Handlers for the events a client sends over its chat socket.

Each handler returns the acknowledgement body. ``dispatch`` is the only
entry point used by the transport: it validates the payload, runs the
handler inside a fresh unit of work, and converts every failure into
``{"ok": False, "error": <code>}`` so nothing escapes into the read loop.
"""
from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Awaitable, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from collab_chat.application.dto.message import message_payload
from collab_chat.application.exceptions import (
    AppError,
    ForbiddenError,
    InvalidArgumentError,
    ServerError,
    UnauthorizedError,
)
from collab_chat.application.uow import UnitOfWork
from collab_chat.infrastructure.ws.manager import Connection, SessionManager
from collab_chat.infrastructure.ws.protocol import (
    ChatJoinRequest,
    ChatLeaveRequest,
    ChatSendRequest,
    ClientEvent,
    DmOpenRequest,
    ServerEvent,
    conversation_room,
)
from collab_chat.services import conversation_service, message_service

logger = logging.getLogger(__name__)

AckResult = dict[str, Any]
UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


def _require_identity(conn: Connection) -> None:
    if conn.user_id is None:
        raise UnauthorizedError("Connection is not authenticated")


async def open_dm(
    conn: Connection,
    req: DmOpenRequest,
    uow: UnitOfWork,
    sessions: SessionManager,
) -> AckResult:
    _require_identity(conn)
    if req.other_user_id == conn.user_id:
        raise InvalidArgumentError("cannot message self")

    conv, _created = await conversation_service.find_or_create_direct_conversation(
        conn.user_id, req.other_user_id, uow,
    )
    sessions.join(conn, conversation_room(conv.id))
    return {"ok": True, "conversationId": str(conv.id)}


async def join_conversation(
    conn: Connection,
    req: ChatJoinRequest,
    uow: UnitOfWork,
    sessions: SessionManager,
) -> AckResult:
    _require_identity(conn)
    participants = await conversation_service.get_participants(req.conversation_id, uow)
    if conn.user_id not in participants:
        raise ForbiddenError("Not a participant of this conversation")
    sessions.join(conn, conversation_room(req.conversation_id))
    return {"ok": True}


async def leave_conversation(
    conn: Connection,
    req: ChatLeaveRequest,
    uow: UnitOfWork,
    sessions: SessionManager,
) -> AckResult:
    sessions.leave(conn, conversation_room(req.conversation_id))
    return {"ok": True}


async def send_message(
    conn: Connection,
    req: ChatSendRequest,
    uow: UnitOfWork,
    sessions: SessionManager,
) -> AckResult:
    """Persist, broadcast to the conversation room, and ack the sender.

    Membership is re-checked on every send, joined or not. A replayed
    client_id acks the stored message without broadcasting it again.
    """
    _require_identity(conn)
    text = (req.text or "").strip()
    if not text:
        raise InvalidArgumentError("Message text is empty")

    msg, created = await message_service.append_message(
        req.conversation_id, conn.user_id, text, req.client_id, uow,
    )
    payload = message_payload(msg)
    if created:
        await sessions.broadcast(
            conversation_room(msg.conversation_id), ServerEvent.CHAT_NEW, payload,
        )
    return {"ok": True, **payload}


Handler = Callable[[Connection, Any, UnitOfWork, SessionManager], Awaitable[AckResult]]

_HANDLERS: dict[str, tuple[type[BaseModel], Handler]] = {
    ClientEvent.DM_OPEN: (DmOpenRequest, open_dm),
    ClientEvent.CHAT_JOIN: (ChatJoinRequest, join_conversation),
    ClientEvent.CHAT_LEAVE: (ChatLeaveRequest, leave_conversation),
    ClientEvent.CHAT_SEND: (ChatSendRequest, send_message),
}


def handles(event_type: str) -> bool:
    return event_type in _HANDLERS


def _failure(exc: AppError) -> AckResult:
    result: AckResult = {"ok": False, "error": exc.code}
    if exc.detail:
        result["detail"] = exc.detail
    return result


async def dispatch(
    event_type: str,
    data: dict[str, Any],
    conn: Connection,
    uow_factory: UoWFactory,
    sessions: SessionManager,
) -> AckResult:
    request_model, handler = _HANDLERS[event_type]
    try:
        _require_identity(conn)
        try:
            request = request_model.model_validate(data)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or "payload"
            raise InvalidArgumentError(f"{field}: {first['msg']}") from exc

        async with uow_factory() as uow:
            return await handler(conn, request, uow, sessions)
    except AppError as exc:
        logger.debug("%s rejected for %r: %s %s", event_type, conn, exc.code, exc.detail)
        return _failure(exc)
    except Exception:
        logger.exception("%s failed for %r", event_type, conn)
        return _failure(ServerError())

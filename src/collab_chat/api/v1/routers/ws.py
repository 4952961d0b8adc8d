from __future__ import annotations

import asyncio
import logging
import time
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from collab_chat.api.deps import SessionsDep, UoWFactoryDep, VerifierDep
from collab_chat.api.middleware.correlation_id import correlation_id_ctx
from collab_chat.application.exceptions import UnauthorizedError
from collab_chat.config import settings
from collab_chat.infrastructure.auth.handshake import authenticate_handshake
from collab_chat.infrastructure.ws.manager import Connection, SessionManager
from collab_chat.infrastructure.ws.protocol import (
    ClientEvent,
    ServerEvent,
    WsInbound,
    WsOutbound,
)
from collab_chat.services import gateway_service
from collab_chat.services.gateway_service import UoWFactory

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    verifier: VerifierDep,
    uow_factory: UoWFactoryDep,
    sessions: SessionsDep,
) -> None:
    try:
        principal = await authenticate_handshake(websocket, verifier)
    except UnauthorizedError as exc:
        logger.debug("WS auth failed: %s", exc.detail)
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    conn = await sessions.connect(websocket, principal)

    heartbeat_task = asyncio.create_task(
        _heartbeat(conn), name=f"ws-heartbeat-{conn.id}",
    )
    try:
        await _read_loop(websocket, conn, uow_factory, sessions)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %r", conn)
    finally:
        heartbeat_task.cancel()
        sessions.disconnect(conn)


async def _heartbeat(conn: Connection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await conn.send(WsOutbound(type=ServerEvent.PONG))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped for %r", conn, exc_info=True)


async def _read_loop(
    ws: WebSocket,
    conn: Connection,
    uow_factory: UoWFactory,
    sessions: SessionManager,
) -> None:
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return
        raw = message.get("text")
        if raw is None:
            # binary frames carry nothing we can decode
            await conn.send(WsOutbound(type=ServerEvent.ERROR, data={"code": "invalid_payload"}))
            continue
        token = correlation_id_ctx.set(uuid.uuid4().hex)
        try:
            await _handle_frame(raw, conn, uow_factory, sessions)
        finally:
            correlation_id_ctx.reset(token)


async def _handle_frame(
    raw: str,
    conn: Connection,
    uow_factory: UoWFactory,
    sessions: SessionManager,
) -> None:
    try:
        msg = WsInbound.model_validate_json(raw)
    except ValidationError:
        await conn.send(WsOutbound(type=ServerEvent.ERROR, data={"code": "invalid_payload"}))
        return

    if msg.type == ClientEvent.PING:
        await conn.send(
            WsOutbound(
                type=ServerEvent.PONG,
                data={"ok": True, "received": msg.data, "at": int(time.time() * 1000)},
            )
        )
    elif gateway_service.handles(msg.type):
        result = await gateway_service.dispatch(msg.type, msg.data, conn, uow_factory, sessions)
        await conn.send(WsOutbound(type=ServerEvent.ACK, ack_id=msg.ack_id, data=result))
    else:
        await conn.send(
            WsOutbound(
                type=ServerEvent.ERROR,
                ack_id=msg.ack_id,
                data={"code": "unknown_type", "type": msg.type},
            )
        )

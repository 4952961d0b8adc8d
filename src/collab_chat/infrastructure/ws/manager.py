"""In-process registry of live connections and the rooms they belong to."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable

from fastapi import WebSocket

from collab_chat.application.dto.principal import Principal
from collab_chat.infrastructure.ws.protocol import WsOutbound, user_room

logger = logging.getLogger(__name__)


class Connection:
    """One accepted socket bound to the user it authenticated as."""

    __slots__ = ("id", "user_id", "_ws")

    def __init__(self, ws: WebSocket, user_id: uuid.UUID) -> None:
        self.id = uuid.uuid4().hex
        self.user_id = user_id
        self._ws = ws

    async def send(self, message: WsOutbound) -> None:
        await self._ws.send_text(message.to_json())

    async def send_text(self, raw: str) -> None:
        await self._ws.send_text(raw)

    def __repr__(self) -> str:
        return f"Connection(id={self.id}, user_id={self.user_id})"


class SessionManager:
    """Tracks connections per room.

    Every connection sits in its ``user:<id>`` room from connect to disconnect
    and in any ``conv:<id>`` rooms it joined. Nothing survives a disconnect.
    Mutations never await, so the maps stay consistent on a single event loop.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[Connection]] = {}
        self._memberships: dict[Connection, set[str]] = {}

    async def connect(self, ws: WebSocket, principal: Principal) -> Connection:
        await ws.accept()
        conn = Connection(ws, principal.user_id)
        self._memberships[conn] = set()
        self.join(conn, user_room(principal.user_id))
        logger.debug("WS connected: %r (total=%d)", conn, len(self._memberships))
        return conn

    def disconnect(self, conn: Connection) -> None:
        rooms = self._memberships.pop(conn, set())
        for room in rooms:
            self._discard(room, conn)
        logger.debug("WS disconnected: %r", conn)

    def join(self, conn: Connection, room: str) -> None:
        memberships = self._memberships.get(conn)
        if memberships is None:
            # handler finished after the socket went away
            return
        memberships.add(room)
        self._rooms.setdefault(room, set()).add(conn)

    def leave(self, conn: Connection, room: str) -> None:
        memberships = self._memberships.get(conn)
        if memberships is not None:
            memberships.discard(room)
        self._discard(room, conn)

    def rooms_of(self, conn: Connection) -> frozenset[str]:
        return frozenset(self._memberships.get(conn, ()))

    def connections_in(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    @property
    def connection_count(self) -> int:
        return len(self._memberships)

    async def broadcast(
        self,
        room: str,
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        return await self.broadcast_to_rooms([room], event_type, data)

    async def broadcast_to_rooms(
        self,
        rooms: Iterable[str],
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        """Send once to every connection in any of the rooms. Returns deliveries."""
        targets: set[Connection] = set()
        for room in rooms:
            targets.update(self._rooms.get(room, ()))
        if not targets:
            return 0

        raw = WsOutbound(type=event_type, data=data).to_json()
        delivered = 0
        dead: list[Connection] = []
        for conn in targets:
            try:
                await conn.send_text(raw)
                delivered += 1
            except Exception:
                logger.debug("Dropping dead connection %r", conn, exc_info=True)
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn)
        return delivered

    def _discard(self, room: str, conn: Connection) -> None:
        conns = self._rooms.get(room)
        if conns:
            conns.discard(conn)
            if not conns:
                del self._rooms[room]

from __future__ import annotations

from typing import Any, Iterable, Protocol


class Broadcaster(Protocol):
    async def broadcast(self, room: str, event_type: str, data: dict[str, Any]) -> int:
        """Deliver to every live connection in the room. Returns the number reached."""
        ...

    async def broadcast_to_rooms(
        self, rooms: Iterable[str], event_type: str, data: dict[str, Any]
    ) -> int:
        """Like broadcast, but a connection present in several rooms gets one copy."""
        ...

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock used for message timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()

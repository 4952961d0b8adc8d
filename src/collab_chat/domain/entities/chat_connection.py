from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ChatConnection:
    """Permission row: a creator and a brand who closed a deal may chat."""

    id: UUID
    creator_id: UUID
    brand_id: UUID
    status: str
    is_deleted: bool
    created_at: datetime

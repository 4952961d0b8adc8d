from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    type: str
    participants: tuple[UUID, ...]
    dm_key: str
    last_message_at: datetime | None
    last_message_id: UUID | None
    created_at: datetime
    updated_at: datetime

    def has_participant(self, user_id: UUID) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: UUID) -> UUID | None:
        for p in self.participants:
            if p != user_id:
                return p
        return None

from __future__ import annotations

from enum import StrEnum


class ConversationType(StrEnum):
    DM = "dm"


class ChatConnectionStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from collab_chat.domain.entities.conversation import Conversation
from collab_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class DealAnnouncement:
    conversation: Conversation
    message: Message
    created: bool


@dataclass(frozen=True, slots=True)
class AcceptedApplication:
    application_id: str
    creator_id: UUID
    business_id: UUID
    title: str
    description: str
    campaign_title: str | None = None


@dataclass(frozen=True, slots=True)
class AcceptedInvite:
    invite_id: str
    creator_id: UUID
    business_id: UUID
    campaign_title: str | None = None

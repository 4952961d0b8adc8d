from __future__ import annotations

from uuid import UUID

from pydantic import Field

from collab_chat.api.v1.schemas.common import CamelModel

# the idempotency token "application-accepted:<id>" must fit messages.client_id (200)
DEAL_ID_MAX_LENGTH = 179


class ApplicationAcceptedRequest(CamelModel):
    application_id: str = Field(min_length=1, max_length=DEAL_ID_MAX_LENGTH)
    creator_id: UUID
    business_id: UUID
    campaign_title: str | None = None
    title: str
    description: str


class InviteAcceptedRequest(CamelModel):
    invite_id: str = Field(min_length=1, max_length=DEAL_ID_MAX_LENGTH)
    creator_id: UUID
    business_id: UUID
    campaign_title: str | None = None


class DealAnnouncementResponse(CamelModel):
    conversation_id: UUID
    message_id: UUID
    created: bool

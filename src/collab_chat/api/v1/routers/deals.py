"""Internal hooks called by the application-accept and invite-accept flows."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from collab_chat.api.deps import SessionsDep, UoWDep, require_internal_key
from collab_chat.api.v1.schemas.deal import (
    ApplicationAcceptedRequest,
    DealAnnouncementResponse,
    InviteAcceptedRequest,
)
from collab_chat.application.dto.deal import (
    AcceptedApplication,
    AcceptedInvite,
    DealAnnouncement,
)
from collab_chat.services import deal_service

router = APIRouter(
    prefix="/api/v1/chat/internal/deals",
    tags=["internal"],
    dependencies=[Depends(require_internal_key)],
)


def _to_response(result: DealAnnouncement) -> DealAnnouncementResponse:
    return DealAnnouncementResponse(
        conversation_id=result.conversation.id,
        message_id=result.message.id,
        created=result.created,
    )


@router.post("/application-accepted", response_model=DealAnnouncementResponse)
async def application_accepted(
    body: ApplicationAcceptedRequest,
    uow: UoWDep,
    sessions: SessionsDep,
) -> DealAnnouncementResponse:
    result = await deal_service.announce_application_accepted(
        AcceptedApplication(
            application_id=body.application_id,
            creator_id=body.creator_id,
            business_id=body.business_id,
            title=body.title,
            description=body.description,
            campaign_title=body.campaign_title,
        ),
        uow,
        sessions,
    )
    return _to_response(result)


@router.post("/invite-accepted", response_model=DealAnnouncementResponse)
async def invite_accepted(
    body: InviteAcceptedRequest,
    uow: UoWDep,
    sessions: SessionsDep,
) -> DealAnnouncementResponse:
    result = await deal_service.announce_invite_accepted(
        AcceptedInvite(
            invite_id=body.invite_id,
            creator_id=body.creator_id,
            business_id=body.business_id,
            campaign_title=body.campaign_title,
        ),
        uow,
        sessions,
    )
    return _to_response(result)

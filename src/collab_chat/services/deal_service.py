"""Chat side effects of an accepted deal (application or invite)."""
from __future__ import annotations

import logging
import uuid

from collab_chat.application.dto.deal import (
    AcceptedApplication,
    AcceptedInvite,
    DealAnnouncement,
)
from collab_chat.application.dto.message import message_payload
from collab_chat.application.exceptions import ServerError
from collab_chat.application.ports.broadcast import Broadcaster
from collab_chat.application.uow import UnitOfWork
from collab_chat.infrastructure.ws.protocol import ServerEvent, conversation_room, user_room
from collab_chat.services import chat_connection_service, conversation_service, message_service

logger = logging.getLogger(__name__)

DEFAULT_CAMPAIGN_TITLE = "Campaign"


async def announce_deal_accepted(
    creator_id: uuid.UUID,
    business_id: uuid.UUID,
    system_text: str,
    idempotency_token: str,
    uow: UnitOfWork,
    broadcaster: Broadcaster,
) -> DealAnnouncement:
    """Make sure the pair can chat and post exactly one system message.

    The business is the sender. Replaying the same token returns the stored
    message and broadcasts nothing. Any failure is raised as ServerError;
    the accepted deal itself is not rolled back.
    """
    try:
        await chat_connection_service.ensure_chat_connection(creator_id, business_id, uow)
        conv, _ = await conversation_service.find_or_create_direct_conversation(
            creator_id, business_id, uow,
        )
        msg, created = await message_service.append_message(
            conv.id, business_id, system_text, idempotency_token, uow,
        )
    except Exception as exc:
        logger.exception("Deal announcement %s failed", idempotency_token)
        raise ServerError(f"Deal announcement {idempotency_token} failed") from exc

    if created:
        delivered = await broadcaster.broadcast_to_rooms(
            [user_room(creator_id), user_room(business_id), conversation_room(conv.id)],
            ServerEvent.CHAT_NEW,
            message_payload(msg),
        )
        logger.info(
            "Announced %s in conversation %s (%d live connections)",
            idempotency_token, conv.id, delivered,
        )
    else:
        logger.info("Deal %s already announced as message %s", idempotency_token, msg.id)

    return DealAnnouncement(conversation=conv, message=msg, created=created)


def application_accepted_text(app: AcceptedApplication) -> str:
    return (
        "✅ Application Accepted\n"
        f"Campaign: {app.campaign_title or DEFAULT_CAMPAIGN_TITLE}\n\n"
        f"Title: {app.title}\n"
        f"Description:\n{app.description}"
    )


def invite_accepted_text(invite: AcceptedInvite) -> str:
    return (
        "✅ Invite Accepted\n"
        f"Campaign: {invite.campaign_title or DEFAULT_CAMPAIGN_TITLE}"
    )


async def announce_application_accepted(
    app: AcceptedApplication,
    uow: UnitOfWork,
    broadcaster: Broadcaster,
) -> DealAnnouncement:
    return await announce_deal_accepted(
        app.creator_id,
        app.business_id,
        application_accepted_text(app),
        f"application-accepted:{app.application_id}",
        uow,
        broadcaster,
    )


async def announce_invite_accepted(
    invite: AcceptedInvite,
    uow: UnitOfWork,
    broadcaster: Broadcaster,
) -> DealAnnouncement:
    return await announce_deal_accepted(
        invite.creator_id,
        invite.business_id,
        invite_accepted_text(invite),
        f"invite-accepted:{invite.invite_id}",
        uow,
        broadcaster,
    )

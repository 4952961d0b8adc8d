from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from collab_chat.api.deps import CurrentPrincipal, PageDep, UoWDep
from collab_chat.api.v1.schemas.common import PaginatedResponse
from collab_chat.api.v1.schemas.message import MessageResponse
from collab_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat/messages", tags=["messages"])


@router.get("/{conversation_id}", response_model=PaginatedResponse[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    params: PageDep,
) -> PaginatedResponse[MessageResponse]:
    page = await message_service.list_messages(conversation_id, principal, params, uow)
    return PaginatedResponse[MessageResponse](
        page=params.page,
        limit=params.limit,
        total=page.total,
        items=[MessageResponse.from_entity(m) for m in page.items],
    )

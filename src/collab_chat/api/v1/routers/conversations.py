from __future__ import annotations

from fastapi import APIRouter

from collab_chat.api.deps import CurrentPrincipal, PageDep, UoWDep
from collab_chat.api.v1.schemas.common import PaginatedResponse
from collab_chat.api.v1.schemas.conversation import ConversationResponse
from collab_chat.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=PaginatedResponse[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    params: PageDep,
) -> PaginatedResponse[ConversationResponse]:
    page = await conversation_service.list_user_conversations(principal, params, uow)
    return PaginatedResponse[ConversationResponse](
        page=params.page,
        limit=params.limit,
        total=page.total,
        items=[ConversationResponse.for_viewer(c, principal.user_id) for c in page.items],
    )

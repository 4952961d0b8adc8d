from __future__ import annotations

from fastapi import APIRouter

from collab_chat.api.deps import CurrentPrincipal, PageDep, UoWDep
from collab_chat.api.v1.schemas.common import PaginatedResponse
from collab_chat.api.v1.schemas.connection import ChatConnectionResponse
from collab_chat.services import chat_connection_service

router = APIRouter(prefix="/api/v1/chat/connections", tags=["connections"])


@router.get("", response_model=PaginatedResponse[ChatConnectionResponse])
async def list_connections(
    principal: CurrentPrincipal,
    uow: UoWDep,
    params: PageDep,
) -> PaginatedResponse[ChatConnectionResponse]:
    page = await chat_connection_service.list_connections(principal, params, uow)
    return PaginatedResponse[ChatConnectionResponse](
        page=params.page,
        limit=params.limit,
        total=page.total,
        items=[ChatConnectionResponse.model_validate(c) for c in page.items],
    )

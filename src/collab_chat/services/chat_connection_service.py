from __future__ import annotations

import uuid

from collab_chat.application.dto.pagination import Page, PageParams
from collab_chat.application.dto.principal import Principal
from collab_chat.application.uow import UnitOfWork
from collab_chat.domain.entities.chat_connection import ChatConnection


async def ensure_chat_connection(
    creator_id: uuid.UUID,
    brand_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    await uow.chat_connections_w.ensure_active(creator_id, brand_id)
    await uow.commit()


async def list_connections(
    principal: Principal,
    params: PageParams,
    uow: UnitOfWork,
) -> Page[ChatConnection]:
    items = await uow.chat_connections.list_for_user(
        principal.user_id, offset=params.offset, limit=params.limit,
    )
    total = await uow.chat_connections.count_for_user(principal.user_id)
    return Page(items=items, total=total, params=params)

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from collab_chat.domain.entities.chat_connection import ChatConnection
from collab_chat.domain.value_objects.enums import ChatConnectionStatus
from collab_chat.infrastructure.db.mappers import chat_connection as mapper
from collab_chat.infrastructure.db.models.chat_connection import ChatConnectionModel


def _involving(user_id: UUID):
    return (
        or_(
            ChatConnectionModel.creator_id == user_id,
            ChatConnectionModel.brand_id == user_id,
        ),
        ChatConnectionModel.is_deleted.is_(False),
    )


class ChatConnectionReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> list[ChatConnection]:
        stmt = (
            select(ChatConnectionModel)
            .where(*_involving(user_id))
            .order_by(ChatConnectionModel.created_at.desc(), ChatConnectionModel.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_for_user(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(ChatConnectionModel).where(*_involving(user_id))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class ChatConnectionWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def ensure_active(self, creator_id: UUID, brand_id: UUID) -> None:
        stmt = (
            pg_insert(ChatConnectionModel)
            .values(
                creator_id=creator_id,
                brand_id=brand_id,
                status=ChatConnectionStatus.ACTIVE.value,
            )
            .on_conflict_do_nothing(constraint="uq_chat_connection_pair")
        )
        await self._session.execute(stmt)

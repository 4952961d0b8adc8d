from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collab_chat.application.exceptions import ConflictError
from collab_chat.domain.entities.conversation import Conversation
from collab_chat.infrastructure.db.mappers import conversation as mapper
from collab_chat.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_dm_key(self, dm_key: str) -> Conversation | None:
        stmt = select(ConversationModel).where(ConversationModel.dm_key == dm_key)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.participants.any(user_id))
            .order_by(
                ConversationModel.last_message_at.desc().nullslast(),
                ConversationModel.created_at.desc(),
                ConversationModel.id,
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_for_user(self, user_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(ConversationModel)
            .where(ConversationModel.participants.any(user_id))
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        try:
            # savepoint: a dm_key collision must not poison the outer transaction
            async with self._session.begin_nested():
                self._session.add(model)
                await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(f"Conversation {conversation.dm_key} already exists") from exc
        return mapper.model_to_entity(model)

    async def record_last_message(
        self,
        conversation_id: UUID,
        message_id: UUID,
        ts: datetime,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(
                ConversationModel.id == conversation_id,
                or_(
                    ConversationModel.last_message_at.is_(None),
                    ConversationModel.last_message_at <= ts,
                ),
            )
            .values(last_message_at=ts, last_message_id=message_id)
        )
        await self._session.execute(stmt)

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from collab_chat.domain.entities.message import Message
from collab_chat.infrastructure.db.mappers import message as mapper
from collab_chat.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_latest(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.seq.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count(self, conversation_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def get_by_client_id(
        self,
        conversation_id: UUID,
        client_id: str,
    ) -> Message | None:
        stmt = select(MessageModel).where(
            MessageModel.conversation_id == conversation_id,
            MessageModel.client_id == client_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._reader = MessageReaderRepo(session)

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message idempotently. Returns (message, created_flag).

        A NULL client_id never conflicts, so messages without a token always insert.
        """
        stmt = (
            pg_insert(MessageModel)
            .values(**mapper.entity_to_values(message))
            .on_conflict_do_nothing(constraint="uq_message_client_id")
            .returning(MessageModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Lost the race to a concurrent insert with the same token
        assert message.client_id is not None
        existing = await self._reader.get_by_client_id(
            message.conversation_id,
            message.client_id,
        )
        assert existing is not None
        return existing, False

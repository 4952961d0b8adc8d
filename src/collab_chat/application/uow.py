from __future__ import annotations

from typing import Protocol

from collab_chat.application.repositories.chat_connection import (
    ChatConnectionReader,
    ChatConnectionWriter,
)
from collab_chat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from collab_chat.application.repositories.message import MessageReader, MessageWriter


class UnitOfWork(Protocol):
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter
    chat_connections: ChatConnectionReader
    chat_connections_w: ChatConnectionWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...

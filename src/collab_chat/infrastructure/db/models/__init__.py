"""Import all models so Base.metadata sees every table."""
from collab_chat.infrastructure.db.models.chat_connection import ChatConnectionModel
from collab_chat.infrastructure.db.models.conversation import ConversationModel
from collab_chat.infrastructure.db.models.message import MessageModel

__all__ = [
    "ChatConnectionModel",
    "ConversationModel",
    "MessageModel",
]

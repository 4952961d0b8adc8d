from __future__ import annotations

from typing import Any

from collab_chat.domain.entities.message import Message


def message_payload(msg: Message) -> dict[str, Any]:
    """Wire shape shared by the send acknowledgement and the chat:new broadcast."""
    return {
        "id": str(msg.id),
        "conversationId": str(msg.conversation_id),
        "senderId": str(msg.sender_id),
        "text": msg.text,
        "at": int(msg.created_at.timestamp() * 1000),
        "createdAt": msg.created_at.isoformat(),
        "clientId": msg.client_id,
    }

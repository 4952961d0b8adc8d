from __future__ import annotations

from datetime import datetime
from uuid import UUID

from collab_chat.api.v1.schemas.common import CamelModel


class ChatConnectionResponse(CamelModel):
    id: UUID
    creator_id: UUID
    brand_id: UUID
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}

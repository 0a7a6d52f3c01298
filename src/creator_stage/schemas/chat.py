"""Direct message schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from creator_stage.schemas.user import UserSummary


class MessageCreate(BaseModel):
    """Schema for sending a message."""

    text: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: str
    text: str
    sender_id: str
    conversation_id: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    """A conversation from one participant's point of view."""

    id: str
    created_at: datetime
    updated_at: datetime
    other_participant: UserSummary | None = None
    last_message: MessageResponse | None = None

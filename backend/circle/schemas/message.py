"""Message Schemas — direct messages and derived conversation entries."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from circle.schemas.user import UserSummary


class MessageCreate(BaseModel):
    receiver_id: UUID
    content: str = Field(min_length=1, max_length=5000)


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    is_read: bool
    sent_at: datetime


class ConversationOut(BaseModel):
    """One conversation partner as seen by the requesting user."""
    partner: UserSummary
    last_message_at: datetime
    unread_count: int = 0

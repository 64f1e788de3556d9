"""Comment Schemas — flat reply-tree nodes keyed by parent_id."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from circle.schemas.user import UserSummary


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    parent_id: UUID | None = None


class CommentEdit(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentOut(BaseModel):
    id: UUID
    post_id: UUID
    parent_id: UUID | None = None
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    author: UserSummary | None = None

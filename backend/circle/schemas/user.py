"""User Schemas — summaries embedded in other DTOs and the profile view."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Minimal author/member view."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    profile_picture: str | None = None
    last_login: datetime | None = None


class UserProfile(UserSummary):
    """Public profile — summary plus biography, tier and activity counts."""
    biography: str | None = None
    tier: str | None = None
    created_at: datetime
    post_count: int = 0
    group_count: int = 0

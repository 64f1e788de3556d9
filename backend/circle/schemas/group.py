"""Group Schemas — drafts accepted from forms and views returned to callers.

Invariants:
    - GroupDraft/GroupPatch accept blank strings: blank-name rejection is a
      GroupManager rule (returns no id), not a 422
    - GroupSummary.members holds at most MEMBER_PREVIEW_LIMIT entries
    - GroupDetail.members holds every member, most recent join first

Design Decisions:
    - GroupRef is the denormalized parent summary embedded in PostDetail
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from circle.schemas.user import UserSummary


class GroupDraft(BaseModel):
    """Fields for a new group."""
    name: str = Field("", max_length=100)
    description: str | None = Field(None, max_length=2000)


class GroupPatch(BaseModel):
    """Partial update — only non-blank fields are applied."""
    name: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)


class GroupRef(BaseModel):
    """Minimal group view."""
    id: UUID
    name: str
    picture: str | None = None


class GroupSummary(BaseModel):
    """Listing entry with member previews."""
    id: UUID
    name: str
    description: str | None = None
    picture: str | None = None
    creator_id: UUID
    created_at: datetime
    creator: UserSummary | None = None
    members: list[UserSummary] = Field(default_factory=list)


class GroupDetail(GroupSummary):
    """Full group view for one requester."""
    members_count: int = 0
    is_member: bool = False

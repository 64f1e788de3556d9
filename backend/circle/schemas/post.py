"""Post Schemas — feed entries, detail view, image DTOs and mutation outcomes.

Invariants:
    - PostSummary.images holds at most IMAGE_PREVIEW_LIMIT entries; image_count is the total
    - ContentUpdate.content is stripped and must be non-empty
    - ImageRemovalResponse.deleted and .not_deleted are disjoint

Design Decisions:
    - PostDetail.group is None for public-feed posts instead of an all-null object
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from circle.schemas.group import GroupRef
from circle.schemas.user import UserSummary


class ImageOut(BaseModel):
    """Image as exposed to callers (public_id stays internal)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str


class PostDraft(BaseModel):
    """Fields for a new post."""
    content: str = Field("", max_length=10_000)


class ContentUpdate(BaseModel):
    """Body of PATCH /posts/{id}/content."""
    content: str = Field(min_length=1, max_length=10_000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty or whitespace")
        return v


class PostSummary(BaseModel):
    """Feed entry."""
    id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    creator: UserSummary | None = None
    images: list[ImageOut] = Field(default_factory=list)
    comment_count: int = 0
    image_count: int = 0


class PostDetail(PostSummary):
    """Single post with every image and its parent group."""
    group: GroupRef | None = None


class ContentUpdateResponse(BaseModel):
    content: str


class ImageRemovalResponse(BaseModel):
    deleted: list[UUID] = Field(default_factory=list)
    not_deleted: list[UUID] = Field(default_factory=list)


class UpdatedPostResponse(BaseModel):
    new_content: str | None = None
    added_images: list[ImageOut] = Field(default_factory=list)
    removed_images: list[UUID] = Field(default_factory=list)
    not_removed_images: list[UUID] = Field(default_factory=list)

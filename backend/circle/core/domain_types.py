"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, GroupId, PostId, ImageId, CommentId, MessageId wrap UUIDs
    - Preview caps are module constants, never literals at call sites

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
GroupId = NewType("GroupId", UUID)
PostId = NewType("PostId", UUID)
ImageId = NewType("ImageId", UUID)
CommentId = NewType("CommentId", UUID)
MessageId = NewType("MessageId", UUID)


# ─── Listing Limits ──────────────────────────────────────────────

MEMBER_PREVIEW_LIMIT = 5    # members shown per group in GetGroups
IMAGE_PREVIEW_LIMIT = 5     # images shown per post in feeds


def is_blank(value: str | None) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()

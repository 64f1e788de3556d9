"""UserGroup ORM — membership join record between a user and a group.

Invariants:
    - (user_id, group_id) is unique: a user joins a group at most once
    - No cascade on either FK: GroupManager removes rows explicitly before the group

Design Decisions:
    - joined_at orders member lists (most recent first)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from circle.db.base import Base


class UserGroup(Base):
    """Membership row."""
    __tablename__ = "users_groups"
    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_users_groups_user_group"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    group_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("groups.id"), nullable=False, index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

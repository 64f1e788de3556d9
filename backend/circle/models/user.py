"""User ORM — identity record referenced by every authored entity.

Invariants:
    - id is UUID primary key; username is unique
    - Credentials live with the identity provider, never in this table
    - No collection relationships: posts, comments, images, messages and groups
      are store queries keyed by user_id

Design Decisions:
    - tier_id nullable: users exist before any tier is assigned
    - last_login stored here because feeds show it in member summaries
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from circle.db.base import Base


class User(Base):
    """User entity — profile data shown in summaries."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True,
    )
    profile_picture: Mapped[str | None] = mapped_column(
        String(500), nullable=True,
    )
    biography: Mapped[str | None] = mapped_column(Text, nullable=True)
    tier_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tiers.id"), nullable=True,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

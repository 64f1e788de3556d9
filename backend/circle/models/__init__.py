"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Models carry foreign keys only; no relationship() collections

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from circle.models.tier import Tier  # noqa: F401
from circle.models.user import User  # noqa: F401
from circle.models.group import Group  # noqa: F401
from circle.models.user_group import UserGroup  # noqa: F401
from circle.models.post import Post  # noqa: F401
from circle.models.image import Image  # noqa: F401
from circle.models.comment import Comment  # noqa: F401
from circle.models.message import Message  # noqa: F401

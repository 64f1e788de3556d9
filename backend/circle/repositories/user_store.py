"""User Store — lookups by id/username and summary projection."""

from typing import Iterable
from uuid import UUID

from sqlalchemy import select

from circle.models.tier import Tier
from circle.models.user import User
from circle.repositories.base import BaseStore
from circle.schemas.user import UserSummary


class UserStore(BaseStore):

    async def find(self, user_id: UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def find_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()

    async def summary(self, user_id: UUID) -> UserSummary | None:
        user = await self.find(user_id)
        return UserSummary.model_validate(user) if user else None

    async def summaries(self, user_ids: Iterable[UUID]) -> dict[UUID, UserSummary]:
        """Summaries keyed by id; unknown ids are simply absent."""
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {
            u.id: UserSummary.model_validate(u) for u in result.scalars().all()
        }

    async def tier_name(self, tier_id: UUID | None) -> str | None:
        if tier_id is None:
            return None
        tier = await self.db.get(Tier, tier_id)
        return tier.name if tier else None

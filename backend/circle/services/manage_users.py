"""User Manager — read-only profile and membership views."""

from sqlalchemy.ext.asyncio import AsyncSession

from circle.core.domain_types import UserId
from circle.models.user import User
from circle.repositories.group_store import GroupStore
from circle.repositories.post_store import PostStore
from circle.repositories.user_store import UserStore
from circle.schemas.group import GroupRef
from circle.schemas.user import UserProfile


class UserManager:

    def __init__(self, db: AsyncSession):
        self.users = UserStore(db)
        self.groups = GroupStore(db)
        self.posts = PostStore(db)

    async def get_profile(self, username: str) -> UserProfile | None:
        user = await self.users.find_by_username(username)
        return await self._profile(user) if user else None

    async def get_own_profile(self, user_id: UserId) -> UserProfile | None:
        user = await self.users.find(user_id)
        return await self._profile(user) if user else None

    async def _profile(self, user: User) -> UserProfile:
        return UserProfile(
            id=user.id,
            username=user.username,
            profile_picture=user.profile_picture,
            last_login=user.last_login,
            biography=user.biography,
            tier=await self.users.tier_name(user.tier_id),
            created_at=user.created_at,
            post_count=await self.posts.count_by_user(user.id),
            group_count=await self.groups.count_groups_of_user(user.id),
        )

    async def get_user_groups(self, user_id: UserId) -> list[GroupRef]:
        groups = await self.groups.groups_of_user(user_id)
        return [GroupRef(id=g.id, name=g.name, picture=g.picture) for g in groups]

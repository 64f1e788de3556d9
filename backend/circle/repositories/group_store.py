"""Group Store — groups, memberships and member lookups.

Invariants:
    - find_members orders by joined_at descending (most recent member first)
    - member_previews returns at most per_group users per group, one query total
    - Delete methods return affected row counts
"""

from collections import defaultdict
from typing import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select

from circle.models.group import Group
from circle.models.user import User
from circle.models.user_group import UserGroup
from circle.repositories.base import BaseStore


class GroupStore(BaseStore):

    async def find(self, group_id: UUID) -> Group | None:
        return await self.db.get(Group, group_id)

    async def exists(self, group_id: UUID) -> bool:
        result = await self.db.execute(
            select(Group.id).where(Group.id == group_id),
        )
        return result.first() is not None

    def add(self, group: Group) -> Group:
        self.db.add(group)
        return group

    async def list_page(self, offset: int, limit: int) -> list[Group]:
        result = await self.db.execute(
            select(Group)
            .order_by(Group.created_at.desc(), Group.id)
            .offset(offset)
            .limit(limit),
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        return await self.db.scalar(select(func.count()).select_from(Group)) or 0

    async def delete(self, group_id: UUID) -> int:
        result = await self.db.execute(delete(Group).where(Group.id == group_id))
        return result.rowcount

    # --- Membership -----------------------------------------------------------

    async def is_member(self, user_id: UUID, group_id: UUID) -> bool:
        return await self.find_membership(user_id, group_id) is not None

    async def find_membership(
        self, user_id: UUID, group_id: UUID,
    ) -> UserGroup | None:
        result = await self.db.execute(
            select(UserGroup).where(
                UserGroup.user_id == user_id, UserGroup.group_id == group_id,
            ),
        )
        return result.scalar_one_or_none()

    def add_membership(self, user_id: UUID, group_id: UUID) -> UserGroup:
        membership = UserGroup(user_id=user_id, group_id=group_id)
        self.db.add(membership)
        return membership

    async def remove_membership(self, membership: UserGroup) -> None:
        await self.db.delete(membership)

    async def find_members(self, group_id: UUID) -> list[User]:
        result = await self.db.execute(
            select(User)
            .join(UserGroup, UserGroup.user_id == User.id)
            .where(UserGroup.group_id == group_id)
            .order_by(UserGroup.joined_at.desc()),
        )
        return list(result.scalars().all())

    async def count_members(self, group_id: UUID) -> int:
        return await self.db.scalar(
            select(func.count())
            .select_from(UserGroup)
            .where(UserGroup.group_id == group_id),
        ) or 0

    async def member_previews(
        self, group_ids: Iterable[UUID], per_group: int,
    ) -> dict[UUID, list[User]]:
        ids = list(group_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(UserGroup.group_id, User)
            .join(User, UserGroup.user_id == User.id)
            .where(UserGroup.group_id.in_(ids))
            .order_by(UserGroup.joined_at.desc()),
        )
        previews: dict[UUID, list[User]] = defaultdict(list)
        for group_id, user in result.all():
            if len(previews[group_id]) < per_group:
                previews[group_id].append(user)
        return previews

    async def delete_memberships(self, group_id: UUID) -> int:
        result = await self.db.execute(
            delete(UserGroup).where(UserGroup.group_id == group_id),
        )
        return result.rowcount

    async def groups_of_user(self, user_id: UUID) -> list[Group]:
        result = await self.db.execute(
            select(Group)
            .join(UserGroup, UserGroup.group_id == Group.id)
            .where(UserGroup.user_id == user_id)
            .order_by(UserGroup.joined_at.desc()),
        )
        return list(result.scalars().all())

    async def count_groups_of_user(self, user_id: UUID) -> int:
        return await self.db.scalar(
            select(func.count())
            .select_from(UserGroup)
            .where(UserGroup.user_id == user_id),
        ) or 0

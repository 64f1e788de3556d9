"""Group Manager — group lifecycle, membership and group-scoped post listing.

Invariants:
    - Only the creator may update or delete a group (id equality, no roles)
    - A user joins a group at most once and leaves only a group they belong to
    - create_group commits the group and the creator's membership separately: a failed
      second commit leaves a group whose creator is not a member (logged, not repaired)
    - delete_group removes posts (with comments and images), memberships and the group
      in one commit; remote assets are destroyed before that commit
    - Every failure returns a value (None/False/OperationResult), never raises

Design Decisions:
    - Requester identity is always an explicit parameter (no ambient user)
    - Blank-name validation happens before any asset-store call
    - A picture the asset store fails to store rejects the create/update
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from circle.config import get_settings
from circle.core.domain_types import (
    GroupId, UserId, MEMBER_PREVIEW_LIMIT, is_blank,
)
from circle.core.pagination import page_offset, total_pages
from circle.core.repository_protocols import AssetStore, UploadedFile
from circle.core.results import OperationResult
from circle.models.group import Group
from circle.models.post import Post
from circle.repositories.comment_store import CommentStore
from circle.repositories.group_store import GroupStore
from circle.repositories.post_store import PostStore
from circle.repositories.user_store import UserStore
from circle.schemas.common import Page
from circle.schemas.group import GroupDetail, GroupDraft, GroupPatch, GroupSummary
from circle.schemas.post import PostSummary
from circle.schemas.user import UserSummary
from circle.services.manage_post_images import PostImageLifecycle
from circle.services.post_feed import PostFeed

logger = logging.getLogger(__name__)

JOIN_REJECTED = "Group does not exist or user is already a member"
LEAVE_REJECTED = "Group does not exist or user is not a member"


class GroupManager:
    """Group aggregate operations for one unit of work."""

    def __init__(self, db: AsyncSession, assets: AssetStore):
        self.assets = assets
        self.groups = GroupStore(db)
        self.posts = PostStore(db)
        self.comments = CommentStore(db)
        self.users = UserStore(db)
        self.images = PostImageLifecycle(assets, self.posts)
        self.feed = PostFeed(self.posts, self.comments, self.users)

    async def _upload_picture(self, picture: UploadedFile) -> str | None:
        settings = get_settings()
        result = await self.assets.upload(
            picture, settings.group_picture_width, settings.group_picture_height,
        )
        if not result.stored:
            logger.warning(f"Group picture upload failed: {result.status}")
            return None
        return result.url

    # --- Lifecycle ------------------------------------------------------------

    async def create_group(
        self,
        creator_id: UserId,
        draft: GroupDraft,
        picture: UploadedFile | None = None,
    ) -> GroupId | None:
        """Create a group and make its creator the first member."""
        if is_blank(draft.name):
            return None

        picture_url = None
        if picture is not None:
            picture_url = await self._upload_picture(picture)
            if picture_url is None:
                return None

        group = Group(
            name=draft.name.strip(),
            description=draft.description,
            picture=picture_url,
            creator_id=creator_id,
        )
        self.groups.add(group)
        if not await self.groups.commit("create_group"):
            return None
        group_id = GroupId(group.id)

        self.groups.add_membership(creator_id, group_id)
        if not await self.groups.commit("create_group_membership"):
            logger.error(
                "Group created but creator membership failed",
                extra={"group_id": str(group_id), "user_id": str(creator_id)},
            )
            return None

        logger.info(
            "Group created",
            extra={"group_id": str(group_id), "user_id": str(creator_id)},
        )
        return group_id

    async def delete_group(self, group_id: GroupId, requester_id: UserId) -> bool:
        """Creator-only deletion of the group and everything scoped to it."""
        group = await self.groups.find(group_id)
        if group is None or group.creator_id != requester_id:
            return False

        posts = await self.posts.find_posts(group_id)
        post_ids = [p.id for p in posts]
        await self.images.release(await self.posts.images_of_posts(post_ids))

        await self.comments.delete_for_posts(post_ids)
        await self.posts.delete_images_of_posts(post_ids)
        await self.posts.delete_posts(post_ids)
        await self.groups.delete_memberships(group_id)
        deleted = await self.groups.delete(group_id)
        if deleted == 0 or not await self.groups.commit("delete_group"):
            return False

        logger.info(
            f"Group deleted with {len(post_ids)} post(s)",
            extra={"group_id": str(group_id), "user_id": str(requester_id)},
        )
        return True

    async def update_group(
        self,
        group_id: GroupId,
        requester_id: UserId,
        patch: GroupPatch | None,
        picture: UploadedFile | None = None,
    ) -> bool:
        """Apply non-blank fields and/or a new picture. Nothing to apply → False."""
        group = await self.groups.find(group_id)
        if group is None or group.creator_id != requester_id:
            return False

        changed = False
        if picture is not None:
            picture_url = await self._upload_picture(picture)
            if picture_url is None:
                return False
            group.picture = picture_url
            changed = True

        if patch is not None and not is_blank(patch.name):
            group.name = patch.name.strip()
            changed = True

        if patch is not None and not is_blank(patch.description):
            group.description = patch.description
            changed = True

        if not changed:
            return False
        return await self.groups.commit("update_group")

    # --- Reads ----------------------------------------------------------------

    async def get_group(
        self, requester_id: UserId | None, group_id: GroupId,
    ) -> GroupDetail | None:
        group = await self.groups.find(group_id)
        if group is None:
            return None

        is_member = False
        if requester_id is not None:
            is_member = await self.groups.is_member(requester_id, group_id)

        members = await self.groups.find_members(group_id)
        return GroupDetail(
            id=group.id,
            name=group.name,
            description=group.description,
            picture=group.picture,
            creator_id=group.creator_id,
            created_at=group.created_at,
            creator=await self.users.summary(group.creator_id),
            members=[UserSummary.model_validate(u) for u in members],
            members_count=await self.groups.count_members(group_id),
            is_member=is_member,
        )

    async def get_groups(self, page: int, limit: int) -> Page[GroupSummary]:
        rows = await self.groups.list_page(page_offset(page, limit), limit)
        count = await self.groups.count()
        previews = await self.groups.member_previews(
            [g.id for g in rows], MEMBER_PREVIEW_LIMIT,
        )
        creators = await self.users.summaries(g.creator_id for g in rows)
        return Page[GroupSummary](
            data=[
                GroupSummary(
                    id=g.id,
                    name=g.name,
                    description=g.description,
                    picture=g.picture,
                    creator_id=g.creator_id,
                    created_at=g.created_at,
                    creator=creators.get(g.creator_id),
                    members=[
                        UserSummary.model_validate(u) for u in previews.get(g.id, [])
                    ],
                )
                for g in rows
            ],
            count=count,
            pages=total_pages(count, limit),
        )

    async def get_posts_by_group(
        self, group_id: GroupId, requester_id: UserId, page: int, limit: int,
    ) -> Page[PostSummary] | None:
        """Group feed, newest first. None when the requester is not a member."""
        if not await self.groups.is_member(requester_id, group_id):
            return None
        return await self.feed.page(Post.group_id == group_id, page, limit)

    # --- Membership -----------------------------------------------------------

    async def join_group(
        self, user_id: UserId, group_id: GroupId,
    ) -> OperationResult[UserSummary]:
        exists = await self.groups.exists(group_id)
        if not exists or await self.groups.is_member(user_id, group_id):
            return OperationResult(success=False, message=JOIN_REJECTED)

        self.groups.add_membership(user_id, group_id)
        if not await self.groups.commit("join_group"):
            return OperationResult(success=False, message="Could not join group")

        return OperationResult(
            success=True,
            message="Joined group",
            data=await self.users.summary(user_id),
        )

    async def leave_group(
        self, user_id: UserId, group_id: GroupId,
    ) -> OperationResult[UserSummary]:
        exists = await self.groups.exists(group_id)
        membership = (
            await self.groups.find_membership(user_id, group_id) if exists else None
        )
        if membership is None:
            return OperationResult(success=False, message=LEAVE_REJECTED)

        await self.groups.remove_membership(membership)
        if not await self.groups.commit("leave_group"):
            return OperationResult(success=False, message="Could not leave group")

        return OperationResult(
            success=True,
            message="Left group",
            data=await self.users.summary(user_id),
        )

"""Post Manager — post lifecycle, content edits and image attachment/removal.

Invariants:
    - Only the post's creator may update or delete the post or its images
    - A group id on create is kept only when the author is currently a member;
      otherwise the post silently lands in the public feed
    - Image records never outnumber the upload results the asset store reported as stored
    - Image deletion is remote-first: rows go only for remotely confirmed objects
    - A failed commit empties the reported deletions even if the remote side already
      deleted them; the drift is logged with the affected public ids
    - A local delete that removes zero rows empties the reported deletions the same way
    - update_all checks ownership before any asset-store call and commits once

Design Decisions:
    - Image attachment after create_post is a secondary step: its failure does not
      roll back the post (ADR: post text is the primary artifact)
    - delete_post releases remote assets first and then removes comments, image rows
      and the post in one commit
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circle.core.domain_types import GroupId, ImageId, PostId, UserId, is_blank
from circle.core.repository_protocols import AssetStore, UploadedFile
from circle.core.results import ImageRemoval, UpdatedPost
from circle.models.post import Post
from circle.repositories.comment_store import CommentStore
from circle.repositories.group_store import GroupStore
from circle.repositories.post_store import PostStore
from circle.repositories.user_store import UserStore
from circle.schemas.common import Page
from circle.schemas.group import GroupRef
from circle.schemas.post import ImageOut, PostDetail, PostDraft, PostSummary
from circle.services.manage_post_images import PostImageLifecycle
from circle.services.post_feed import PostFeed

logger = logging.getLogger(__name__)


class PostManager:
    """Post aggregate operations for one unit of work."""

    def __init__(self, db: AsyncSession, assets: AssetStore):
        self.posts = PostStore(db)
        self.groups = GroupStore(db)
        self.comments = CommentStore(db)
        self.users = UserStore(db)
        self.images = PostImageLifecycle(assets, self.posts)
        self.feed = PostFeed(self.posts, self.comments, self.users)

    async def _owned_post(self, post_id: UUID, user_id: UUID) -> Post | None:
        post = await self.posts.find(post_id)
        if post is None or post.user_id != user_id:
            return None
        return post

    # --- Lifecycle ------------------------------------------------------------

    async def create_post(
        self,
        user_id: UserId,
        group_id: GroupId | None,
        draft: PostDraft,
        images: Sequence[UploadedFile] | None = None,
    ) -> PostId | None:
        if is_blank(draft.content):
            return None

        target_group = None
        if group_id is not None and await self.groups.is_member(user_id, group_id):
            target_group = group_id

        post = self.posts.add(
            Post(user_id=user_id, group_id=target_group, content=draft.content),
        )
        if not await self.posts.commit("create_post"):
            return None

        if images:
            added = await self.add_images_to_post(PostId(post.id), user_id, images)
            if not added:
                logger.warning(
                    "Post created without its images",
                    extra={"post_id": str(post.id), "user_id": str(user_id)},
                )
        return PostId(post.id)

    async def delete_post(self, user_id: UserId, post_id: PostId) -> bool:
        post = await self._owned_post(post_id, user_id)
        if post is None:
            return False

        await self.images.release(await self.posts.find_images(post_id))
        await self.comments.delete_for_posts([post_id])
        await self.posts.delete_images_of_posts([post_id])
        deleted = await self.posts.delete_posts([post_id])
        if deleted == 0:
            return False
        return await self.posts.commit("delete_post")

    async def update_post_content(
        self, post_id: PostId, user_id: UserId, content: str,
    ) -> tuple[bool, str]:
        """Replace the post text. Returns (success, echoed content)."""
        if is_blank(content):
            return False, ""
        post = await self._owned_post(post_id, user_id)
        if post is None:
            return False, ""

        post.content = content
        self.posts.touch(post)
        if not await self.posts.commit("update_post_content"):
            return False, ""
        return True, content

    # --- Reads ----------------------------------------------------------------

    async def get_post(self, post_id: PostId) -> PostDetail | None:
        post = await self.posts.find(post_id)
        if post is None:
            return None

        images = await self.posts.find_images(post_id)
        comment_counts = await self.comments.counts_for_posts([post_id])
        group_ref = None
        if post.group_id is not None:
            group = await self.groups.find(post.group_id)
            if group is not None:
                group_ref = GroupRef(id=group.id, name=group.name, picture=group.picture)

        return PostDetail(
            id=post.id,
            user_id=post.user_id,
            content=post.content,
            created_at=post.created_at,
            modified_at=post.modified_at,
            creator=await self.users.summary(post.user_id),
            images=[ImageOut.model_validate(i) for i in images],
            comment_count=comment_counts.get(post_id, 0),
            image_count=len(images),
            group=group_ref,
        )

    async def get_posts(self, page: int, limit: int) -> Page[PostSummary]:
        """Public feed: posts without a group, newest first."""
        return await self.feed.page(Post.group_id.is_(None), page, limit)

    async def get_posts_by_user(
        self, username: str, page: int, limit: int,
    ) -> Page[PostSummary]:
        """Author feed. Unknown usernames yield an empty page, not an error."""
        user = await self.users.find_by_username(username)
        if user is None:
            return Page[PostSummary](data=[], count=0, pages=0)
        return await self.feed.page(Post.user_id == user.id, page, limit)

    # --- Images ---------------------------------------------------------------

    async def add_images_to_post(
        self, post_id: PostId, user_id: UserId, images: Sequence[UploadedFile],
    ) -> list[ImageOut]:
        """Upload and attach images. Empty list on any failure."""
        post = await self._owned_post(post_id, user_id)
        if post is None or not images:
            return []

        staged = await self.images.stage_uploads(post_id, user_id, images)
        if not staged:
            return []

        added = [ImageOut.model_validate(i) for i in staged]
        uploaded = [i.public_id for i in staged]
        self.posts.touch(post)
        if not await self.posts.commit("add_images_to_post"):
            self.images.report_unpersisted_uploads(uploaded)
            return []
        return added

    async def delete_images_from_post(
        self, post_id: PostId, user_id: UserId, image_ids: Sequence[UUID],
    ) -> ImageRemoval:
        """Remote-first deletion of the requester's images on their own post."""
        post = await self._owned_post(post_id, user_id)
        if post is None:
            return ImageRemoval()

        staged = await self.images.stage_removal(post_id, user_id, image_ids)
        deleted = [ImageId(i.id) for i in staged.removed]
        not_deleted = [ImageId(i.id) for i in staged.kept]
        released = [i.public_id for i in staged.removed]
        remote_confirmed = bool(deleted)

        self.posts.touch(post)
        if not staged.persisted or not await self.posts.commit("delete_images_from_post"):
            self.images.report_unremoved_rows(released)
            return ImageRemoval(
                deleted=[], not_deleted=not_deleted,
                remote_confirmed=remote_confirmed, local_confirmed=False,
            )

        return ImageRemoval(
            deleted=deleted,
            not_deleted=not_deleted,
            remote_confirmed=remote_confirmed,
            local_confirmed=True,
        )

    async def update_all(
        self,
        post_id: PostId,
        user_id: UserId,
        content: str | None = None,
        new_images: Sequence[UploadedFile] | None = None,
        remove_image_ids: Sequence[UUID] | None = None,
    ) -> UpdatedPost:
        """Content + image additions + image removals, one modified stamp, one commit."""
        post = await self._owned_post(post_id, user_id)
        if post is None:
            return UpdatedPost()

        if not is_blank(content):
            post.content = content
        new_content = post.content

        staged = []
        if new_images:
            staged = await self.images.stage_uploads(post_id, user_id, new_images)
        added = [ImageOut.model_validate(i) for i in staged]
        uploaded = [i.public_id for i in staged]

        removed, kept, released = [], [], []
        if remove_image_ids:
            removal = await self.images.stage_removal(post_id, user_id, remove_image_ids)
            removed = [ImageId(i.id) for i in removal.removed]
            kept = [ImageId(i.id) for i in removal.kept]
            released = [i.public_id for i in removal.removed]
            if not removal.persisted:
                self.images.report_unremoved_rows(released)
                removed, released = [], []

        self.posts.touch(post)
        if not await self.posts.commit("update_all"):
            self.images.report_unpersisted_uploads(uploaded)
            self.images.report_unremoved_rows(released)
            return UpdatedPost()

        return UpdatedPost(
            success=True,
            new_content=new_content,
            added_images=added,
            removed_images=removed,
            not_removed_images=kept,
        )

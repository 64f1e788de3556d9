"""Post Store — posts, their images, and per-post counts.

Invariants:
    - Every feed query orders by created_at descending (newest first)
    - image_previews returns at most per_post images per post, one query total
    - owned_images filters by post, uploader and requested ids together
    - Delete methods return affected row counts
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select

from circle.models.image import Image
from circle.models.post import Post
from circle.repositories.base import BaseStore


class PostStore(BaseStore):

    async def find(self, post_id: UUID) -> Post | None:
        return await self.db.get(Post, post_id)

    def add(self, post: Post) -> Post:
        self.db.add(post)
        return post

    def touch(self, post: Post) -> None:
        """Stamp modified_at; persisted with the surrounding commit."""
        post.modified_at = datetime.now(timezone.utc)

    # --- Feeds ----------------------------------------------------------------

    async def list_page(
        self, where: ColumnElement[bool], offset: int, limit: int,
    ) -> list[Post]:
        result = await self.db.execute(
            select(Post)
            .where(where)
            .order_by(Post.created_at.desc(), Post.id)
            .offset(offset)
            .limit(limit),
        )
        return list(result.scalars().all())

    async def count(self, where: ColumnElement[bool]) -> int:
        return await self.db.scalar(
            select(func.count()).select_from(Post).where(where),
        ) or 0

    async def find_posts(self, group_id: UUID) -> list[Post]:
        result = await self.db.execute(
            select(Post).where(Post.group_id == group_id),
        )
        return list(result.scalars().all())

    async def count_by_user(self, user_id: UUID) -> int:
        return await self.count(Post.user_id == user_id)

    async def delete_posts(self, post_ids: Sequence[UUID]) -> int:
        if not post_ids:
            return 0
        result = await self.db.execute(
            delete(Post).where(Post.id.in_(post_ids)),
        )
        return result.rowcount

    # --- Images ---------------------------------------------------------------

    def add_images(self, images: Iterable[Image]) -> None:
        self.db.add_all(list(images))

    async def find_images(self, post_id: UUID) -> list[Image]:
        result = await self.db.execute(
            select(Image)
            .where(Image.post_id == post_id)
            .order_by(Image.created_at, Image.id),
        )
        return list(result.scalars().all())

    async def images_of_posts(self, post_ids: Sequence[UUID]) -> list[Image]:
        if not post_ids:
            return []
        result = await self.db.execute(
            select(Image).where(Image.post_id.in_(post_ids)),
        )
        return list(result.scalars().all())

    async def image_previews(
        self, post_ids: Sequence[UUID], per_post: int,
    ) -> dict[UUID, list[Image]]:
        previews: dict[UUID, list[Image]] = defaultdict(list)
        if not post_ids:
            return previews
        result = await self.db.execute(
            select(Image)
            .where(Image.post_id.in_(post_ids))
            .order_by(Image.created_at, Image.id),
        )
        for image in result.scalars().all():
            if len(previews[image.post_id]) < per_post:
                previews[image.post_id].append(image)
        return previews

    async def image_counts(self, post_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not post_ids:
            return {}
        result = await self.db.execute(
            select(Image.post_id, func.count())
            .where(Image.post_id.in_(post_ids))
            .group_by(Image.post_id),
        )
        return {post_id: n for post_id, n in result.all()}

    async def owned_images(
        self, post_id: UUID, user_id: UUID, image_ids: Sequence[UUID],
    ) -> list[Image]:
        if not image_ids:
            return []
        result = await self.db.execute(
            select(Image).where(
                Image.id.in_(image_ids),
                Image.post_id == post_id,
                Image.user_id == user_id,
            ),
        )
        return list(result.scalars().all())

    async def delete_images(self, image_ids: Sequence[UUID]) -> int:
        if not image_ids:
            return 0
        result = await self.db.execute(
            delete(Image).where(Image.id.in_(image_ids)),
        )
        return result.rowcount

    async def delete_images_of_posts(self, post_ids: Sequence[UUID]) -> int:
        if not post_ids:
            return 0
        result = await self.db.execute(
            delete(Image).where(Image.post_id.in_(post_ids)),
        )
        return result.rowcount

"""Comment Store — reply-tree lookups by parent id.

Invariants:
    - subtree_ids walks the tree breadth-first with one query per level (no recursion)
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select

from circle.models.comment import Comment
from circle.repositories.base import BaseStore


class CommentStore(BaseStore):

    async def find(self, comment_id: UUID) -> Comment | None:
        return await self.db.get(Comment, comment_id)

    def add(self, comment: Comment) -> Comment:
        self.db.add(comment)
        return comment

    async def list_for_post(self, post_id: UUID) -> list[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id),
        )
        return list(result.scalars().all())

    async def counts_for_posts(self, post_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not post_ids:
            return {}
        result = await self.db.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id),
        )
        return {post_id: n for post_id, n in result.all()}

    async def subtree_ids(self, root_id: UUID) -> list[UUID]:
        """root_id plus every descendant id."""
        collected = [root_id]
        frontier = [root_id]
        while frontier:
            result = await self.db.execute(
                select(Comment.id).where(Comment.parent_id.in_(frontier)),
            )
            frontier = [cid for cid in result.scalars().all() if cid not in collected]
            collected.extend(frontier)
        return collected

    async def delete(self, comment_ids: Sequence[UUID]) -> int:
        if not comment_ids:
            return 0
        result = await self.db.execute(
            delete(Comment).where(Comment.id.in_(comment_ids)),
        )
        return result.rowcount

    async def delete_for_posts(self, post_ids: Sequence[UUID]) -> int:
        if not post_ids:
            return 0
        result = await self.db.execute(
            delete(Comment).where(Comment.post_id.in_(post_ids)),
        )
        return result.rowcount

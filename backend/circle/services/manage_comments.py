"""Comment Manager — reply trees under posts.

Invariants:
    - A reply's parent lives on the same post as the reply
    - Only the author may edit or delete a comment
    - Deleting a comment deletes every reply beneath it in the same commit
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circle.core.domain_types import CommentId, PostId, UserId, is_blank
from circle.models.comment import Comment
from circle.repositories.comment_store import CommentStore
from circle.repositories.post_store import PostStore
from circle.repositories.user_store import UserStore
from circle.schemas.comment import CommentOut

logger = logging.getLogger(__name__)


class CommentManager:
    """Comment operations for one unit of work."""

    def __init__(self, db: AsyncSession):
        self.comments = CommentStore(db)
        self.posts = PostStore(db)
        self.users = UserStore(db)

    async def add_comment(
        self,
        user_id: UserId,
        post_id: PostId,
        content: str,
        parent_id: UUID | None = None,
    ) -> CommentOut | None:
        if is_blank(content):
            return None
        if await self.posts.find(post_id) is None:
            return None
        if parent_id is not None:
            parent = await self.comments.find(parent_id)
            if parent is None or parent.post_id != post_id:
                return None

        comment = self.comments.add(
            Comment(
                post_id=post_id, user_id=user_id,
                parent_id=parent_id, content=content.strip(),
            ),
        )
        if not await self.comments.commit("add_comment"):
            return None
        return CommentOut(
            id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            content=comment.content,
            created_at=comment.created_at,
            modified_at=comment.modified_at,
            author=await self.users.summary(user_id),
        )

    async def get_comments(self, post_id: PostId) -> list[CommentOut]:
        """Flat list in creation order; clients rebuild the tree from parent_id."""
        rows = await self.comments.list_for_post(post_id)
        authors = await self.users.summaries(c.user_id for c in rows)
        return [
            CommentOut(
                id=c.id,
                post_id=c.post_id,
                parent_id=c.parent_id,
                content=c.content,
                created_at=c.created_at,
                modified_at=c.modified_at,
                author=authors.get(c.user_id),
            )
            for c in rows
        ]

    async def update_comment(
        self, comment_id: CommentId, user_id: UserId, content: str,
    ) -> bool:
        if is_blank(content):
            return False
        comment = await self.comments.find(comment_id)
        if comment is None or comment.user_id != user_id:
            return False

        comment.content = content.strip()
        comment.modified_at = datetime.now(timezone.utc)
        return await self.comments.commit("update_comment")

    async def delete_comment(self, comment_id: CommentId, user_id: UserId) -> bool:
        comment = await self.comments.find(comment_id)
        if comment is None or comment.user_id != user_id:
            return False

        post_id = comment.post_id
        ids = await self.comments.subtree_ids(comment_id)
        await self.comments.delete(ids)
        if not await self.comments.commit("delete_comment"):
            return False
        logger.info(
            f"Comment deleted with {len(ids) - 1} repl(ies)",
            extra={"post_id": str(post_id), "user_id": str(user_id)},
        )
        return True

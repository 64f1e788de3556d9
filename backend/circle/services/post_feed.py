"""Post Feed Composition — projects Post rows into paginated PostSummary pages.

Invariants:
    - Each summary carries at most IMAGE_PREVIEW_LIMIT image previews
    - comment_count/image_count are totals, independent of the preview cap
    - A constant number of queries per page (creators, previews, counts), never per post

Design Decisions:
    - Shared by PostManager feeds and GroupManager.get_posts_by_group
"""

from sqlalchemy import ColumnElement

from circle.core.domain_types import IMAGE_PREVIEW_LIMIT
from circle.core.pagination import page_offset, total_pages
from circle.models.post import Post
from circle.repositories.comment_store import CommentStore
from circle.repositories.post_store import PostStore
from circle.repositories.user_store import UserStore
from circle.schemas.common import Page
from circle.schemas.post import ImageOut, PostSummary


class PostFeed:
    """Builds feed pages for any post filter."""

    def __init__(
        self, posts: PostStore, comments: CommentStore, users: UserStore,
    ):
        self.posts = posts
        self.comments = comments
        self.users = users

    async def page(
        self, where: ColumnElement[bool], page: int, limit: int,
    ) -> Page[PostSummary]:
        rows = await self.posts.list_page(where, page_offset(page, limit), limit)
        count = await self.posts.count(where)
        return Page[PostSummary](
            data=await self.summarize(rows),
            count=count,
            pages=total_pages(count, limit),
        )

    async def summarize(self, rows: list[Post]) -> list[PostSummary]:
        ids = [p.id for p in rows]
        creators = await self.users.summaries(p.user_id for p in rows)
        previews = await self.posts.image_previews(ids, IMAGE_PREVIEW_LIMIT)
        image_counts = await self.posts.image_counts(ids)
        comment_counts = await self.comments.counts_for_posts(ids)
        return [
            PostSummary(
                id=p.id,
                user_id=p.user_id,
                content=p.content,
                created_at=p.created_at,
                modified_at=p.modified_at,
                creator=creators.get(p.user_id),
                images=[ImageOut.model_validate(i) for i in previews.get(p.id, [])],
                comment_count=comment_counts.get(p.id, 0),
                image_count=image_counts.get(p.id, 0),
            )
            for p in rows
        ]

"""Post Image Lifecycle — batch upload staging and remote-first deletion.

Invariants:
    - Only upload results the asset store reports as stored become Image rows
    - A local Image row is removed only when the asset store confirmed its remote delete
      (or the remote object was already gone)
    - Nothing here commits: callers own the unit of work and its single commit
    - Callers capture ids before committing: a rollback expires loaded rows
    - Every drift between asset store and database is logged with the public ids involved
    - StagedRemoval.persisted is False when confirmed remote deletes removed no row

Design Decisions:
    - Shared by PostManager (add/delete/update_all/delete_post) and GroupManager
      (group deletion) so the two-phase rule lives in one place
    - release() is the deletion path for whole posts: remote failures are logged as
      orphaned assets and do not block removal of the rows (ADR: post/group deletion
      succeeds iff the requester owns the aggregate)
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence
from uuid import UUID, uuid4

from circle.core.repository_protocols import AssetStore, UploadedFile
from circle.models.image import Image
from circle.repositories.post_store import PostStore

logger = logging.getLogger(__name__)


@dataclass
class StagedRemoval:
    """Remote outcome for a set of candidate images, already removed from the session."""
    removed: list[Image] = field(default_factory=list)
    kept: list[Image] = field(default_factory=list)
    rows_deleted: int = 0

    @property
    def persisted(self) -> bool:
        """False when remotely deleted images removed no local row."""
        return not self.removed or self.rows_deleted > 0


class PostImageLifecycle:
    """Coordinates the asset store and the images table for one unit of work."""

    def __init__(self, assets: AssetStore, posts: PostStore):
        self.assets = assets
        self.posts = posts

    async def stage_uploads(
        self, post_id: UUID, user_id: UUID, files: Sequence[UploadedFile],
    ) -> list[Image]:
        """Upload files as a batch and stage an Image row per stored result.

        Ids are assigned here so callers can project the rows before flushing.
        """
        if not files:
            return []
        results = await self.assets.upload_many(files)
        stored = [r for r in results if r.stored]
        if len(stored) < len(files):
            logger.warning(
                f"Asset store stored {len(stored)} of {len(files)} images",
                extra={"post_id": str(post_id)},
            )
        images = [
            Image(
                id=uuid4(), post_id=post_id, user_id=user_id,
                url=r.url, public_id=r.public_id,
            )
            for r in stored
        ]
        self.posts.add_images(images)
        return images

    async def stage_removal(
        self, post_id: UUID, user_id: UUID, image_ids: Sequence[UUID],
    ) -> StagedRemoval:
        """Destroy owned candidates remotely, then delete the confirmed rows locally."""
        candidates = await self.posts.owned_images(post_id, user_id, image_ids)
        if not candidates:
            return StagedRemoval()
        outcome = await self.assets.destroy([i.public_id for i in candidates])
        failed = set(outcome.not_deleted)
        removed = [i for i in candidates if i.public_id not in failed]
        kept = [i for i in candidates if i.public_id in failed]
        if kept:
            logger.warning(
                f"Asset store could not delete {len(kept)} image(s); rows kept",
                extra={
                    "post_id": str(post_id),
                    "public_ids": [i.public_id for i in kept],
                },
            )
        rows = await self.posts.delete_images([i.id for i in removed])
        return StagedRemoval(removed=removed, kept=kept, rows_deleted=rows)

    async def release(self, images: Sequence[Image]) -> list[str]:
        """Destroy every image remotely ahead of a whole-post deletion.

        Returns the public ids the store failed to delete (now orphaned remotely
        once the caller removes the rows).
        """
        if not images:
            return []
        outcome = await self.assets.destroy([i.public_id for i in images])
        if outcome.not_deleted:
            logger.warning(
                f"Orphaned {len(outcome.not_deleted)} remote asset(s) during post deletion",
                extra={"public_ids": list(outcome.not_deleted)},
            )
        return list(outcome.not_deleted)

    def report_unpersisted_uploads(self, public_ids: Sequence[str]) -> None:
        """Log uploads whose rows failed to commit (remote objects without rows)."""
        if public_ids:
            logger.warning(
                f"{len(public_ids)} uploaded asset(s) have no image row after a failed commit",
                extra={"public_ids": list(public_ids)},
            )

    def report_unremoved_rows(self, public_ids: Sequence[str]) -> None:
        """Log rows that outlived their remote objects (failed commit or zero-row delete)."""
        if public_ids:
            logger.warning(
                f"{len(public_ids)} remote asset(s) deleted but their rows were not removed",
                extra={"public_ids": list(public_ids)},
            )

"""Post Images — upload attachment, remote-first removal and drift on commit failure.

Invariants:
    - Image rows never outnumber stored upload results
    - A row is removed only after the asset store confirms the remote delete
    - deleted and not_deleted are disjoint and cover only the requester's images
    - A failed commit reports nothing as deleted, even after remote deletion
    - update_all checks ownership before touching the asset store
"""

import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from circle.models.image import Image
from circle.schemas.post import PostDraft
from circle.services.manage_posts import PostManager


@pytest.fixture
def posts(test_db, assets):
    return PostManager(test_db, assets)


@pytest.fixture
async def post_with_images(posts, users, make_upload):
    """u1's post with three stored images. Returns (post_id, [image ids])."""
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="gallery"))
    added = await posts.add_images_to_post(
        post_id, users.u1.id, [make_upload(f"{i}.png") for i in range(3)],
    )
    return post_id, [i.id for i in added]


@pytest.fixture
def failing_commit(test_db, monkeypatch):
    """Make the next commits on the test session raise a DB error."""
    def _arm():
        def _commit():
            raise OperationalError("COMMIT", {}, Exception("disk full"))
        monkeypatch.setattr(test_db.sync_session, "commit", _commit)
    return _arm


async def _image_count(db) -> int:
    return await db.scalar(select(func.count()).select_from(Image))


async def _public_id(db, image_id) -> str:
    return await db.scalar(select(Image.public_id).where(Image.id == image_id))


# --- add_images_to_post -------------------------------------------------------

async def test_add_images_returns_stored_images(posts, post_with_images, test_db):
    post_id, image_ids = post_with_images

    detail = await posts.get_post(post_id)

    assert len(image_ids) == 3
    assert sorted(i.id for i in detail.images) == sorted(image_ids)
    assert detail.modified_at is not None
    assert await _image_count(test_db) == 3


async def test_add_images_by_non_owner_does_not_upload(
    posts, users, assets, make_upload,
):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="mine"))

    added = await posts.add_images_to_post(post_id, users.u2.id, [make_upload()])

    assert added == []
    assert assets.uploads == []


async def test_add_images_partial_batch(posts, users, assets, make_upload, test_db):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="mine"))
    assets.store_limit = 2

    added = await posts.add_images_to_post(
        post_id, users.u1.id, [make_upload() for _ in range(4)],
    )

    assert len(added) == 2
    assert await _image_count(test_db) == 2


async def test_add_images_all_failed(posts, users, assets, make_upload, test_db):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="mine"))
    assets.fail_uploads = True

    assert await posts.add_images_to_post(post_id, users.u1.id, [make_upload()]) == []
    assert await _image_count(test_db) == 0


async def test_add_images_commit_failure_logs_orphaned_uploads(
    posts, users, make_upload, failing_commit, caplog,
):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="mine"))
    failing_commit()

    with caplog.at_level(logging.WARNING):
        added = await posts.add_images_to_post(post_id, users.u1.id, [make_upload()])

    assert added == []
    assert any("no image row" in r.getMessage() for r in caplog.records)


# --- delete_images_from_post --------------------------------------------------

async def test_delete_images_all_confirmed(posts, users, post_with_images, test_db):
    post_id, image_ids = post_with_images

    removal = await posts.delete_images_from_post(post_id, users.u1.id, image_ids[:2])

    assert sorted(removal.deleted) == sorted(image_ids[:2])
    assert removal.not_deleted == []
    assert removal.remote_confirmed and removal.local_confirmed
    assert await _image_count(test_db) == 1


async def test_delete_images_partial_remote_failure(
    posts, users, assets, post_with_images, test_db,
):
    post_id, image_ids = post_with_images
    assets.undeletable.add(await _public_id(test_db, image_ids[0]))

    removal = await posts.delete_images_from_post(post_id, users.u1.id, image_ids)

    assert removal.not_deleted == [image_ids[0]]
    assert sorted(removal.deleted) == sorted(image_ids[1:])
    assert set(removal.deleted).isdisjoint(removal.not_deleted)
    remaining = (await test_db.execute(select(Image.id))).scalars().all()
    assert remaining == [image_ids[0]]


async def test_delete_images_by_non_owner_is_empty(
    posts, users, assets, post_with_images, test_db,
):
    post_id, image_ids = post_with_images

    removal = await posts.delete_images_from_post(post_id, users.u2.id, image_ids)

    assert removal.deleted == [] and removal.not_deleted == []
    assert assets.destroy_calls == []
    assert await _image_count(test_db) == 3


async def test_delete_images_ignores_ids_from_other_posts(
    posts, users, make_upload, post_with_images, test_db,
):
    post_id, image_ids = post_with_images
    other_post = await posts.create_post(users.u1.id, None, PostDraft(content="other"))
    other = await posts.add_images_to_post(other_post, users.u1.id, [make_upload()])

    removal = await posts.delete_images_from_post(
        post_id, users.u1.id, [image_ids[0], other[0].id],
    )

    assert removal.deleted == [image_ids[0]]
    assert removal.not_deleted == []
    assert await _image_count(test_db) == 3


async def test_delete_images_commit_failure_reports_nothing_deleted(
    posts, users, assets, post_with_images, failing_commit, test_db, caplog,
):
    post_id, image_ids = post_with_images
    public_id = await _public_id(test_db, image_ids[0])
    failing_commit()

    with caplog.at_level(logging.WARNING):
        removal = await posts.delete_images_from_post(
            post_id, users.u1.id, [image_ids[0]],
        )

    assert removal.deleted == []
    assert removal.remote_confirmed is True
    assert removal.local_confirmed is False
    assert public_id not in assets.live
    drift = [r for r in caplog.records if "rows were not removed" in r.getMessage()]
    assert drift and drift[0].public_ids == [public_id]


@pytest.fixture
def rows_vanish(posts, monkeypatch):
    """Make the local image delete affect zero rows (rows removed concurrently)."""
    async def _delete_images(image_ids):
        return 0
    monkeypatch.setattr(posts.posts, "delete_images", _delete_images)


async def test_delete_images_zero_rows_reports_nothing_deleted(
    posts, users, assets, post_with_images, rows_vanish, test_db, caplog,
):
    post_id, image_ids = post_with_images
    public_id = await _public_id(test_db, image_ids[0])

    with caplog.at_level(logging.WARNING):
        removal = await posts.delete_images_from_post(
            post_id, users.u1.id, [image_ids[0]],
        )

    assert removal.deleted == []
    assert removal.remote_confirmed is True
    assert removal.local_confirmed is False
    assert public_id not in assets.live
    drift = [r for r in caplog.records if "rows were not removed" in r.getMessage()]
    assert drift and drift[0].public_ids == [public_id]


async def test_update_all_zero_rows_reports_nothing_removed(
    posts, users, post_with_images, rows_vanish,
):
    post_id, image_ids = post_with_images

    result = await posts.update_all(post_id, users.u1.id, "edited", None, image_ids[:1])

    assert result.success is True
    assert result.new_content == "edited"
    assert result.removed_images == []
    assert result.not_removed_images == []


# --- update_all ---------------------------------------------------------------

async def test_update_all_by_non_owner_touches_nothing(
    posts, users, assets, make_upload, post_with_images,
):
    post_id, image_ids = post_with_images
    uploads_before = len(assets.uploads)

    result = await posts.update_all(
        post_id, users.u2.id, "stolen", [make_upload()], image_ids,
    )

    assert result.success is False
    assert len(assets.uploads) == uploads_before
    assert assets.destroy_calls == []
    assert (await posts.get_post(post_id)).content == "gallery"


async def test_update_all_applies_every_change(
    posts, users, assets, make_upload, post_with_images, test_db,
):
    post_id, image_ids = post_with_images
    assets.undeletable.add(await _public_id(test_db, image_ids[1]))

    result = await posts.update_all(
        post_id, users.u1.id, "edited", [make_upload("new.png")], image_ids[:2],
    )

    detail = await posts.get_post(post_id)
    assert result.success is True
    assert result.new_content == "edited"
    assert len(result.added_images) == 1
    assert result.removed_images == [image_ids[0]]
    assert result.not_removed_images == [image_ids[1]]
    assert detail.content == "edited"
    assert detail.image_count == 3
    assert detail.modified_at is not None


async def test_update_all_blank_content_keeps_text(posts, users, post_with_images):
    post_id, _ = post_with_images

    result = await posts.update_all(post_id, users.u1.id, "   ")

    assert result.success is True
    assert result.new_content == "gallery"


async def test_update_all_commit_failure(
    posts, users, make_upload, post_with_images, failing_commit,
):
    post_id, image_ids = post_with_images
    failing_commit()

    result = await posts.update_all(
        post_id, users.u1.id, "edited", [make_upload()], image_ids[:1],
    )

    assert result.success is False
    assert result.added_images == []
    assert result.removed_images == []

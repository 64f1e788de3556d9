"""Post Manager — creation, feeds, content edits, ownership and deletion.

Invariants:
    - Group placement requires membership, otherwise the post goes public
    - Only the creator may edit or delete; every failure is a value, not an exception
    - Feeds are newest first with capped image previews and total counts
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from circle.models.comment import Comment
from circle.models.group import Group
from circle.models.image import Image
from circle.models.post import Post
from circle.models.user_group import UserGroup
from circle.schemas.post import PostDraft
from circle.services.manage_posts import PostManager


@pytest.fixture
def posts(test_db, assets):
    return PostManager(test_db, assets)


@pytest.fixture
async def group(test_db, users):
    """A group owned by u1 with u1 as its only member."""
    g = Group(name="Readers", creator_id=users.u1.id)
    test_db.add(g)
    await test_db.flush()
    test_db.add(UserGroup(user_id=users.u1.id, group_id=g.id))
    await test_db.commit()
    return g


async def _count(db, model, *where) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*where))


# --- create_post --------------------------------------------------------------

@pytest.mark.parametrize("content", ["", "   "])
async def test_create_post_blank_content_rejected(posts, users, content):
    assert await posts.create_post(users.u1.id, None, PostDraft(content=content)) is None


async def test_create_post_public_by_default(posts, users):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="hello"))

    detail = await posts.get_post(post_id)
    assert detail.content == "hello"
    assert detail.group is None
    assert detail.creator.username == "alice"


async def test_create_post_in_group_when_member(posts, users, group):
    post_id = await posts.create_post(users.u1.id, group.id, PostDraft(content="hi"))

    detail = await posts.get_post(post_id)
    public = await posts.get_posts(1, 10)
    assert detail.group.id == group.id
    assert detail.group.name == "Readers"
    assert public.data == []


async def test_create_post_in_group_by_non_member_lands_in_public_feed(
    posts, users, group,
):
    post_id = await posts.create_post(users.u3.id, group.id, PostDraft(content="hi"))

    detail = await posts.get_post(post_id)
    public = await posts.get_posts(1, 10)
    assert detail.group is None
    assert [p.id for p in public.data] == [post_id]


async def test_create_post_with_images(posts, users, make_upload):
    post_id = await posts.create_post(
        users.u1.id, None, PostDraft(content="pics"),
        [make_upload("a.png"), make_upload("b.png")],
    )

    detail = await posts.get_post(post_id)
    assert detail.image_count == 2
    assert all(i.url.startswith("https://cdn.test/") for i in detail.images)


async def test_create_post_keeps_only_stored_images(posts, users, assets, make_upload):
    assets.store_limit = 1

    post_id = await posts.create_post(
        users.u1.id, None, PostDraft(content="pics"),
        [make_upload("a.png"), make_upload("b.png")],
    )

    assert (await posts.get_post(post_id)).image_count == 1


async def test_create_post_survives_image_upload_failure(
    posts, users, assets, make_upload,
):
    assets.fail_uploads = True

    post_id = await posts.create_post(
        users.u1.id, None, PostDraft(content="text wins"), [make_upload()],
    )

    detail = await posts.get_post(post_id)
    assert detail.content == "text wins"
    assert detail.image_count == 0


# --- feeds --------------------------------------------------------------------

async def test_get_posts_newest_first_with_pages(posts, users, test_db):
    base = datetime(2026, 3, 1, tzinfo=timezone.utc)
    for i in range(5):
        test_db.add(Post(
            user_id=users.u1.id, content=f"p{i}", created_at=base + timedelta(hours=i),
        ))
    await test_db.commit()

    first = await posts.get_posts(1, 2)
    last = await posts.get_posts(3, 2)

    assert [p.content for p in first.data] == ["p4", "p3"]
    assert [p.content for p in last.data] == ["p0"]
    assert first.count == 5
    assert first.pages == 3


async def test_feed_caps_image_previews_but_counts_all(posts, users, test_db):
    post = Post(user_id=users.u1.id, content="gallery")
    test_db.add(post)
    await test_db.flush()
    test_db.add_all([
        Image(post_id=post.id, user_id=users.u1.id, url=f"u{i}", public_id=f"p{i}")
        for i in range(7)
    ])
    test_db.add(Comment(post_id=post.id, user_id=users.u2.id, content="wow"))
    await test_db.commit()

    summary = (await posts.get_posts(1, 10)).data[0]

    assert len(summary.images) == 5
    assert summary.image_count == 7
    assert summary.comment_count == 1


async def test_get_posts_by_user(posts, users):
    await posts.create_post(users.u1.id, None, PostDraft(content="mine"))
    await posts.create_post(users.u2.id, None, PostDraft(content="theirs"))

    page = await posts.get_posts_by_user("alice", 1, 10)

    assert [p.content for p in page.data] == ["mine"]
    assert page.count == 1


async def test_get_posts_by_unknown_user_is_empty(posts):
    page = await posts.get_posts_by_user("nobody", 1, 10)

    assert page.data == []
    assert page.count == 0
    assert page.pages == 0


async def test_get_unknown_post_returns_none(posts):
    assert await posts.get_post(uuid4()) is None


# --- update_post_content ------------------------------------------------------

async def test_update_content_by_owner_stamps_modified(posts, users):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="v1"))

    updated, content = await posts.update_post_content(post_id, users.u1.id, "v2")

    detail = await posts.get_post(post_id)
    assert (updated, content) == (True, "v2")
    assert detail.content == "v2"
    assert detail.modified_at is not None


async def test_update_content_by_other_user_rejected(posts, users):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="v1"))

    assert await posts.update_post_content(post_id, users.u2.id, "v2") == (False, "")
    assert (await posts.get_post(post_id)).content == "v1"


async def test_update_content_blank_rejected(posts, users):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="v1"))

    assert await posts.update_post_content(post_id, users.u1.id, "  ") == (False, "")


async def test_update_content_unknown_post_rejected(posts, users):
    assert await posts.update_post_content(uuid4(), users.u1.id, "v2") == (False, "")


# --- delete_post --------------------------------------------------------------

async def test_delete_post_by_other_user_rejected(posts, users):
    post_id = await posts.create_post(users.u1.id, None, PostDraft(content="keep"))

    assert await posts.delete_post(users.u2.id, post_id) is False
    assert await posts.get_post(post_id) is not None


async def test_delete_post_removes_images_and_comments(
    posts, users, assets, make_upload, test_db,
):
    post_id = await posts.create_post(
        users.u1.id, None, PostDraft(content="bye"), [make_upload(), make_upload()],
    )
    test_db.add(Comment(post_id=post_id, user_id=users.u2.id, content="c"))
    await test_db.commit()

    assert await posts.delete_post(users.u1.id, post_id) is True
    assert await posts.get_post(post_id) is None
    assert await _count(test_db, Image) == 0
    assert await _count(test_db, Comment) == 0
    assert assets.live == set()


async def test_delete_unknown_post_rejected(posts, users):
    assert await posts.delete_post(users.u1.id, uuid4()) is False

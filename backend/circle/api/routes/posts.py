"""Post Routes — public feed, author feed, post lifecycle and image management.

Invariants:
    - Reads are anonymous; every mutation requires an identity
    - Feeds answer 200 with an empty page instead of 404
    - Image removal answers with the deleted / not-deleted split, even when partial
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from circle.api.deps import PageParams, get_post_manager, page_params
from circle.core.domain_types import GroupId, PostId, UserId
from circle.core.errors import RequestRejectedError, ResourceNotFoundError
from circle.infrastructure.auth import get_current_user_id
from circle.schemas.common import Page
from circle.schemas.post import (
    ContentUpdate, ContentUpdateResponse, ImageOut, ImageRemovalResponse,
    PostDetail, PostDraft, PostSummary, UpdatedPostResponse,
)
from circle.services.manage_posts import PostManager

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.post("/create")
async def create_post(
    content: str = Form("", max_length=10_000),
    group_id: UUID | None = Form(None),
    images: list[UploadFile] | None = File(None),
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    post_id = await posts.create_post(
        user_id,
        GroupId(group_id) if group_id else None,
        PostDraft(content=content),
        images,
    )
    if post_id is None:
        raise RequestRejectedError()
    return {"id": str(post_id)}


@router.get("/all", response_model=Page[PostSummary])
async def list_posts(
    paging: PageParams = Depends(page_params),
    posts: PostManager = Depends(get_post_manager),
):
    return await posts.get_posts(paging.page, paging.limit)


@router.get("/user/{username}", response_model=Page[PostSummary])
async def list_user_posts(
    username: str,
    paging: PageParams = Depends(page_params),
    posts: PostManager = Depends(get_post_manager),
):
    return await posts.get_posts_by_user(username, paging.page, paging.limit)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: UUID,
    posts: PostManager = Depends(get_post_manager),
):
    post = await posts.get_post(PostId(post_id))
    if post is None:
        raise ResourceNotFoundError("Post", str(post_id))
    return post


@router.patch("/{post_id}/content", response_model=ContentUpdateResponse)
async def update_post_content(
    post_id: UUID,
    body: ContentUpdate,
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    updated, content = await posts.update_post_content(
        PostId(post_id), user_id, body.content,
    )
    if not updated:
        raise RequestRejectedError()
    return ContentUpdateResponse(content=content)


@router.patch("/{post_id}", response_model=UpdatedPostResponse)
async def update_post(
    post_id: UUID,
    content: str | None = Form(None, max_length=10_000),
    images: list[UploadFile] | None = File(None),
    remove_image_ids: list[UUID] | None = Form(None),
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    """Content, new images and image removals in one request."""
    result = await posts.update_all(
        PostId(post_id), user_id, content, images, remove_image_ids,
    )
    if not result.success:
        raise RequestRejectedError()
    return UpdatedPostResponse(
        new_content=result.new_content,
        added_images=result.added_images,
        removed_images=result.removed_images,
        not_removed_images=result.not_removed_images,
    )


@router.delete("/{post_id}")
async def delete_post(
    post_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    if not await posts.delete_post(user_id, PostId(post_id)):
        raise RequestRejectedError()
    return {"id": str(post_id)}


# --- Images -------------------------------------------------------------------

@router.post("/{post_id}/images", response_model=list[ImageOut])
async def add_images(
    post_id: UUID,
    images: list[UploadFile] = File(...),
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    added = await posts.add_images_to_post(PostId(post_id), user_id, images)
    if not added:
        raise RequestRejectedError()
    return added


@router.delete("/{post_id}/images", response_model=ImageRemovalResponse)
async def delete_images(
    post_id: UUID,
    image_ids: list[UUID] = Query(...),
    user_id: UserId = Depends(get_current_user_id),
    posts: PostManager = Depends(get_post_manager),
):
    removal = await posts.delete_images_from_post(PostId(post_id), user_id, image_ids)
    if not removal.deleted and not removal.not_deleted:
        raise RequestRejectedError()
    return ImageRemovalResponse(
        deleted=removal.deleted, not_deleted=removal.not_deleted,
    )

"""Comment Routes — reply trees under posts."""

from uuid import UUID

from fastapi import APIRouter, Depends

from circle.api.deps import get_comment_manager
from circle.core.domain_types import CommentId, PostId, UserId
from circle.core.errors import RequestRejectedError
from circle.infrastructure.auth import get_current_user_id
from circle.schemas.comment import CommentCreate, CommentEdit, CommentOut
from circle.services.manage_comments import CommentManager

router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(
    post_id: UUID,
    comments: CommentManager = Depends(get_comment_manager),
):
    return await comments.get_comments(PostId(post_id))


@router.post("/posts/{post_id}/comments", response_model=CommentOut)
async def add_comment(
    post_id: UUID,
    body: CommentCreate,
    user_id: UserId = Depends(get_current_user_id),
    comments: CommentManager = Depends(get_comment_manager),
):
    comment = await comments.add_comment(
        user_id, PostId(post_id), body.content, body.parent_id,
    )
    if comment is None:
        raise RequestRejectedError()
    return comment


@router.patch("/comments/{comment_id}")
async def update_comment(
    comment_id: UUID,
    body: CommentEdit,
    user_id: UserId = Depends(get_current_user_id),
    comments: CommentManager = Depends(get_comment_manager),
):
    if not await comments.update_comment(CommentId(comment_id), user_id, body.content):
        raise RequestRejectedError()
    return {"id": str(comment_id)}


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    comments: CommentManager = Depends(get_comment_manager),
):
    """Deletes the comment and every reply beneath it."""
    if not await comments.delete_comment(CommentId(comment_id), user_id):
        raise RequestRejectedError()
    return {"id": str(comment_id)}

"""Group Routes — listing, detail, lifecycle, membership and the group feed.

Invariants:
    - Mutations and the group feed require an identity; listing and detail do not
    - Manager failures map to 400 (mutations) or 404 (reads) with no extra detail
    - An empty listing page is a 404
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from circle.api.deps import PageParams, get_group_manager, page_params
from circle.core.domain_types import GroupId, UserId
from circle.core.errors import RequestRejectedError, ResourceNotFoundError
from circle.infrastructure.auth import get_current_user_id, get_optional_user_id
from circle.schemas.common import Page
from circle.schemas.group import GroupDetail, GroupDraft, GroupPatch, GroupSummary
from circle.schemas.post import PostSummary
from circle.schemas.user import UserSummary
from circle.services.manage_groups import GroupManager

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


@router.get("/all", response_model=Page[GroupSummary])
async def list_groups(
    paging: PageParams = Depends(page_params),
    groups: GroupManager = Depends(get_group_manager),
):
    result = await groups.get_groups(paging.page, paging.limit)
    if not result.data:
        raise ResourceNotFoundError("Groups page", str(paging.page))
    return result


@router.get("/{group_id}", response_model=GroupDetail)
async def get_group(
    group_id: UUID,
    user_id: UserId | None = Depends(get_optional_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    group = await groups.get_group(user_id, GroupId(group_id))
    if group is None:
        raise ResourceNotFoundError("Group", str(group_id))
    return group


@router.post("/create")
async def create_group(
    name: str = Form("", max_length=100),
    description: str | None = Form(None, max_length=2000),
    picture: UploadFile | None = File(None),
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    group_id = await groups.create_group(
        user_id, GroupDraft(name=name, description=description), picture,
    )
    if group_id is None:
        raise RequestRejectedError()
    return {"id": str(group_id)}


@router.patch("/{group_id}")
async def update_group(
    group_id: UUID,
    name: str | None = Form(None, max_length=100),
    description: str | None = Form(None, max_length=2000),
    picture: UploadFile | None = File(None),
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    updated = await groups.update_group(
        GroupId(group_id), user_id,
        GroupPatch(name=name, description=description), picture,
    )
    if not updated:
        raise RequestRejectedError()
    return {"id": str(group_id)}


@router.delete("/{group_id}")
async def delete_group(
    group_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    if not await groups.delete_group(GroupId(group_id), user_id):
        raise RequestRejectedError()
    return {"id": str(group_id)}


@router.get("/{group_id}/posts", response_model=Page[PostSummary])
async def list_group_posts(
    group_id: UUID,
    paging: PageParams = Depends(page_params),
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    """Group feed, members only."""
    result = await groups.get_posts_by_group(
        GroupId(group_id), user_id, paging.page, paging.limit,
    )
    if result is None:
        raise RequestRejectedError()
    return result


# --- Membership ---------------------------------------------------------------

@router.post("/{group_id}/join", response_model=UserSummary)
async def join_group(
    group_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    result = await groups.join_group(user_id, GroupId(group_id))
    if not result.success:
        raise RequestRejectedError()
    return result.data


@router.post("/{group_id}/leave", response_model=UserSummary)
async def leave_group(
    group_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    groups: GroupManager = Depends(get_group_manager),
):
    result = await groups.leave_group(user_id, GroupId(group_id))
    if not result.success:
        raise RequestRejectedError()
    return result.data

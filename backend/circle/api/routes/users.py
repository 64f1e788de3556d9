"""User Routes — public profiles and the caller's own profile and groups."""

from fastapi import APIRouter, Depends

from circle.api.deps import get_user_manager
from circle.core.domain_types import UserId
from circle.core.errors import ResourceNotFoundError
from circle.infrastructure.auth import get_current_user_id
from circle.schemas.group import GroupRef
from circle.schemas.user import UserProfile
from circle.services.manage_users import UserManager

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=UserProfile)
async def get_me(
    user_id: UserId = Depends(get_current_user_id),
    users: UserManager = Depends(get_user_manager),
):
    profile = await users.get_own_profile(user_id)
    if profile is None:
        raise ResourceNotFoundError("User", str(user_id))
    return profile


@router.get("/me/groups", response_model=list[GroupRef])
async def get_my_groups(
    user_id: UserId = Depends(get_current_user_id),
    users: UserManager = Depends(get_user_manager),
):
    return await users.get_user_groups(user_id)


@router.get("/{username}", response_model=UserProfile)
async def get_profile(
    username: str,
    users: UserManager = Depends(get_user_manager),
):
    profile = await users.get_profile(username)
    if profile is None:
        raise ResourceNotFoundError("User", username)
    return profile

"""Route Dependencies — per-request managers, the shared asset store and paging.

Invariants:
    - One AsyncSession per request; every manager built for that request shares it
    - The asset store is a process-wide singleton (SDK config is global)
    - Page limits are clamped to max_page_limit
"""

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from circle.config import get_settings
from circle.core.repository_protocols import AssetStore
from circle.infrastructure.cloudinary_client import CloudinaryAssetStore
from circle.infrastructure.database import get_db
from circle.services.manage_comments import CommentManager
from circle.services.manage_groups import GroupManager
from circle.services.manage_messages import MessageManager
from circle.services.manage_posts import PostManager
from circle.services.manage_users import UserManager


@lru_cache
def get_asset_store() -> AssetStore:
    return CloudinaryAssetStore()


@dataclass
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> PageParams:
    settings = get_settings()
    return PageParams(
        page=page,
        limit=min(limit or settings.default_page_limit, settings.max_page_limit),
    )


def get_group_manager(
    db: AsyncSession = Depends(get_db),
    assets: AssetStore = Depends(get_asset_store),
) -> GroupManager:
    return GroupManager(db, assets)


def get_post_manager(
    db: AsyncSession = Depends(get_db),
    assets: AssetStore = Depends(get_asset_store),
) -> PostManager:
    return PostManager(db, assets)


def get_comment_manager(db: AsyncSession = Depends(get_db)) -> CommentManager:
    return CommentManager(db)


def get_message_manager(db: AsyncSession = Depends(get_db)) -> MessageManager:
    return MessageManager(db)


def get_user_manager(db: AsyncSession = Depends(get_db)) -> UserManager:
    return UserManager(db)

"""Identity Verification — HS256 access tokens carried by cookie or bearer header.

Invariants:
    - The token subject (sub) is the user's UUID; anything else is rejected
    - The cookie wins over the Authorization header when both are present
    - Invalid, expired or missing tokens never reach a manager as an identity

Design Decisions:
    - Verification only: tokens are minted by the identity provider; issue_access_token
      exists for that provider and for tests
"""

import logging
import time
from uuid import UUID

import jwt
from fastapi import Request

from circle.config import get_settings
from circle.core.domain_types import UserId
from circle.core.errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def issue_access_token(user_id: UUID, ttl_seconds: int | None = None) -> str:
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + (ttl_seconds or settings.jwt_ttl_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_user_id(token: str) -> UserId | None:
    """Subject of a valid token, or None."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return UserId(UUID(str(payload["sub"])))
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    except ValueError:
        logger.info("Rejected access token: subject is not a UUID")
        return None


def _token_from(request: Request) -> str | None:
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    header = request.headers.get("authorization", "")
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return None


async def get_optional_user_id(request: Request) -> UserId | None:
    """FastAPI dependency: the caller's id, or None for anonymous requests."""
    token = _token_from(request)
    return decode_user_id(token) if token else None


async def get_current_user_id(request: Request) -> UserId:
    """FastAPI dependency: the caller's id. 401 when absent or invalid."""
    user_id = await get_optional_user_id(request)
    if user_id is None:
        raise AuthenticationRequiredError()
    return user_id

"""Identity Verification — token round trip and rejection of bad tokens."""

import time
from uuid import uuid4

import jwt
import pytest
from starlette.requests import Request

from circle.config import get_settings
from circle.core.errors import AuthenticationRequiredError
from circle.infrastructure.auth import (
    decode_user_id, get_current_user_id, get_optional_user_id, issue_access_token,
)


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "headers": raw})


def test_issued_token_decodes_to_user():
    user_id = uuid4()

    assert decode_user_id(issue_access_token(user_id)) == user_id


def test_expired_token_rejected():
    token = issue_access_token(uuid4(), ttl_seconds=-10)

    assert decode_user_id(token) is None


def test_wrong_secret_rejected():
    token = jwt.encode(
        {"sub": str(uuid4()), "exp": int(time.time()) + 60},
        "another-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )

    assert decode_user_id(token) is None


def test_non_uuid_subject_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "alice", "exp": int(time.time()) + 60},
        settings.jwt_secret, algorithm=settings.jwt_algorithm,
    )

    assert decode_user_id(token) is None


async def test_cookie_and_bearer_both_accepted():
    user_id = uuid4()
    token = issue_access_token(user_id)
    cookie = f"{get_settings().auth_cookie_name}={token}"

    assert await get_current_user_id(_request({"Cookie": cookie})) == user_id
    assert await get_current_user_id(_request({"Authorization": f"Bearer {token}"})) == user_id


async def test_missing_identity():
    assert await get_optional_user_id(_request({})) is None
    with pytest.raises(AuthenticationRequiredError):
        await get_current_user_id(_request({"Authorization": "Basic abc"}))

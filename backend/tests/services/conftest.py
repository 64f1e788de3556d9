"""Service test fixtures — async DB, fake asset store and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_asset_store dependencies overridden for route tests
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for manager and route
      tests (foreign keys are not enforced, so deletions are asserted explicitly)
    - FakeAssetStore is scriptable per test: failed uploads, undeletable public ids
"""

from dataclasses import dataclass
from io import BytesIO
from itertools import count

import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from circle.api.deps import get_asset_store
from circle.core.repository_protocols import (
    UPLOAD_OK, DestroyResult, UploadResult,
)
from circle.db.base import Base
from circle.infrastructure.auth import issue_access_token
from circle.infrastructure.database import get_db, DatabaseSessionManager
import circle.infrastructure.database as db_module
import circle.models  # noqa: F401
from circle.models.user import User
from circle.main import app


class FakeAssetStore:
    """In-memory AssetStore double.

    - fail_uploads: every upload reports a failure status
    - store_limit: upload_many stores only the first N files
    - undeletable: public ids destroy() reports as not deleted
    """

    def __init__(self):
        self._seq = count(1)
        self.fail_uploads = False
        self.store_limit: int | None = None
        self.undeletable: set[str] = set()
        self.uploads: list[tuple[str | None, int | None, int | None]] = []
        self.live: set[str] = set()
        self.destroy_calls: list[list[str]] = []

    def _store(self, filename, width, height) -> UploadResult:
        self.uploads.append((filename, width, height))
        if self.fail_uploads:
            return UploadResult(url=None, public_id=None, status="upload failed")
        public_id = f"circle/img-{next(self._seq)}"
        self.live.add(public_id)
        return UploadResult(
            url=f"https://cdn.test/{public_id}.png",
            public_id=public_id,
            status=UPLOAD_OK,
        )

    async def upload(self, file, width, height):
        return self._store(file.filename, width, height)

    async def upload_many(self, files):
        results = []
        for i, f in enumerate(files):
            if self.store_limit is not None and i >= self.store_limit:
                results.append(UploadResult(url=None, public_id=None, status="rejected"))
            else:
                results.append(self._store(f.filename, None, None))
        return results

    async def destroy(self, public_ids):
        self.destroy_calls.append(list(public_ids))
        result = DestroyResult()
        for public_id in public_ids:
            if public_id in self.undeletable:
                result.not_deleted.append(public_id)
            else:
                self.live.discard(public_id)
                result.deleted.append(public_id)
        return result


@dataclass
class Users:
    u1: User
    u2: User
    u3: User


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def assets():
    return FakeAssetStore()


@pytest.fixture
def make_upload():
    """Factory for multipart-like files accepted by the managers."""
    def _make(name: str = "photo.png", payload: bytes = b"\x89PNG fake"):
        return UploadFile(file=BytesIO(payload), filename=name)
    return _make


@pytest.fixture
async def users(test_db):
    """Three users: u1 (group creator in most tests), u2 (joiner), u3 (outsider)."""
    seeded = Users(
        u1=User(username="alice"),
        u2=User(username="bob"),
        u3=User(username="carol"),
    )
    test_db.add_all([seeded.u1, seeded.u2, seeded.u3])
    await test_db.commit()
    return seeded


@pytest.fixture
def auth():
    """Authorization header for a user."""
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_access_token(user.id)}"}
    return _headers


@pytest.fixture
async def client(test_engine, test_session_factory, assets):
    """FastAPI test client with DB and asset store dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: assets

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager

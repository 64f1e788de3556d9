"""Database Session Manager — error classification and rollback-to-DatabaseError mapping."""

import pytest
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)

from circle.core.errors import DatabaseError
from circle.infrastructure.database import (
    DatabaseSessionManager, classify_db_error,
)


def test_classify_prefers_most_specific_error():
    assert classify_db_error(IntegrityError("stmt", {}, Exception("dup"))) == (
        "Integrity constraint violated", "commit",
    )
    assert classify_db_error(OperationalError("stmt", {}, Exception("gone")))[1] == "execute"
    assert classify_db_error(DBAPIError("stmt", {}, Exception("x")))[1] == "query"
    assert classify_db_error(SQLAlchemyError("other"))[1] == "unknown"


async def test_session_maps_sqlalchemy_errors():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    try:
        with pytest.raises(DatabaseError) as info:
            async with manager.session():
                raise OperationalError("stmt", {}, Exception("gone"))
        assert info.value.operation == "execute"
        assert await manager.health_check() is True
    finally:
        await manager.close()

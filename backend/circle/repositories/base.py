"""Store Base — shared session handle and commit-or-rollback.

Invariants:
    - commit() never raises SQLAlchemyError: it rolls back, logs and returns False

Design Decisions:
    - Boolean commit over exception: managers turn a failed commit into a failure
      result, matching the "zero rows affected" contract of the gateway
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class BaseStore:
    """Holds the unit-of-work session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self, operation: str) -> bool:
        """Commit the unit of work. False (after rollback) on any DB failure."""
        try:
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Commit failed during {operation}: {e}",
                extra={"error_code": "DATABASE_ERROR"},
            )
            return False

"""Base repository with common database operations."""

import logging
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, upstream_failure
from app.models.base import Base

T = TypeVar("T", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """Base repository with common read operations.

    Every statement goes through `_execute` / `_flush` so that a storage
    failure surfaces as a single `upstream_failure` error instead of a
    driver-specific exception.  "Not found" is always `None`, never an
    error.
    """

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def _execute(self, stmt: Any, operation: str) -> Any:
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Database failure during %s", operation, exc_info=True)
            raise upstream_failure(operation) from exc

    async def _flush(self, operation: str, on_conflict: AppError | None = None) -> None:
        """Flush pending changes.

        An `IntegrityError` becomes `on_conflict` when one is given; every
        other storage error is an `upstream_failure`.
        """
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if on_conflict is None:
                logger.error("Database failure during %s", operation, exc_info=True)
                raise upstream_failure(operation) from exc
            logger.info("Conflict during %s: %s", operation, on_conflict.detail)
            raise on_conflict from exc
        except SQLAlchemyError as exc:
            logger.error("Database failure during %s", operation, exc_info=True)
            raise upstream_failure(operation) from exc

    async def _refresh(self, instance: T, attributes: list[str], operation: str) -> None:
        try:
            await self.session.refresh(instance, attributes)
        except SQLAlchemyError as exc:
            logger.error("Database failure during %s", operation, exc_info=True)
            raise upstream_failure(operation) from exc

    def _select(self):
        """Base query; subclasses narrow it (e.g. to hide soft-deleted rows)."""
        return select(self.model)

    async def find_by_id(self, id: UUID) -> T | None:
        """Get a record by ID.

        Args:
            id: Record UUID

        Returns:
            Record or None if not found
        """
        result = await self._execute(
            self._select().where(self.model.id == id),
            f"{self.model.__tablename__}.find_by_id",
        )
        return result.scalar_one_or_none()

    async def find_all(self, limit: int = 20, offset: int = 0) -> list[T]:
        """Get records with pagination, oldest first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            List of records
        """
        result = await self._execute(
            self._select()
            .order_by(self.model.created_at, self.model.id)
            .offset(offset)
            .limit(limit),
            f"{self.model.__tablename__}.find_all",
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count records visible through `_select`."""
        result = await self._execute(
            select(func.count()).select_from(self._select().subquery()),
            f"{self.model.__tablename__}.count",
        )
        return result.scalar_one()

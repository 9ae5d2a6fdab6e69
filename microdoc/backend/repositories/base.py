"""
Base Repository.

Base class for all repositories with common CRUD operations and the
translation of SQLAlchemy failures into application exceptions.
"""

from collections.abc import Awaitable
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microdoc.backend.core.exceptions import ConflictError, DatabaseError
from microdoc.backend.core.logging import get_logger
from microdoc.backend.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _execute(self, operation: str, coro: Awaitable[T]) -> T:
        """
        Execute a database operation with error handling.

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors
        """
        try:
            return await coro
        except IntegrityError as e:
            logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e.orig)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError(f"{self.model.__name__} already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    async def add(self, instance: ModelType) -> ModelType:
        """Add a new record and flush it so defaults and keys are populated."""
        self.session.add(instance)
        await self._execute(f"insert {self.model.__tablename__}", self.session.flush())
        return instance

    async def exists_where(self, **filters: Any) -> bool:
        """Check whether any record matches all the given column values."""
        stmt = select(self.model.id).filter_by(**filters).limit(1)
        result = await self._execute(
            f"exists {self.model.__tablename__}",
            self.session.execute(stmt),
        )
        return result.scalar_one_or_none() is not None

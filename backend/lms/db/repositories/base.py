"""Generic async repository.

Every query runs inside ``_guard`` which logs and translates SQLAlchemy
errors into ``lms.db.exceptions`` types.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.exceptions import ConnectionError, ConstraintViolationError, DatabaseError, DuplicateRecordError
from lms.db.models import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD, counting and paging for one mapped class."""

    model: type[ModelT]
    search_columns: Sequence[Any] = ()
    load_options: Sequence[Any] = ()

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @property
    def _name(self) -> str:
        return self.model.__name__

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as e:
            if "unique" in str(e.orig).lower():
                logger.error(f"Duplicate {self._name} in {operation}: {e}")
                raise DuplicateRecordError(f"{self._name} already exists") from e
            logger.error(f"Constraint violation in {operation}: {e}")
            raise ConstraintViolationError(f"{self._name} violates a database constraint") from e
        except OperationalError as e:
            logger.error(f"Database connection error in {operation}: {e}")
            raise ConnectionError("Database connection failed") from e
        except SQLAlchemyError as e:
            logger.error(f"Unexpected error in {operation}: {e}")
            raise DatabaseError(f"Failed to {operation}: {e}") from e

    def _select(self) -> Select[tuple[ModelT]]:
        stmt = select(self.model)
        if self.load_options:
            stmt = stmt.options(*self.load_options)
        return stmt

    def _search_filter(self, search_term: str | None) -> ColumnElement[bool] | None:
        if not search_term or not self.search_columns:
            return None
        pattern = f"%{search_term.strip()}%"
        return or_(*(column.ilike(pattern) for column in self.search_columns))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: int) -> ModelT | None:
        async with self._guard(f"get {self._name} {entity_id}"):
            result = await self.session.execute(self._select().where(self.model.id == entity_id))
            return result.scalar_one_or_none()

    async def get_all(self) -> list[ModelT]:
        async with self._guard(f"list {self._name}"):
            result = await self.session.execute(self._select().order_by(self.model.id))
            return list(result.scalars().all())

    async def count(self, search_term: str | None = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        condition = self._search_filter(search_term)
        if condition is not None:
            stmt = stmt.where(condition)
        async with self._guard(f"count {self._name}"):
            result = await self.session.execute(stmt)
            return int(result.scalar_one())

    async def get_paged(
        self,
        page_number: int,
        page_size: int,
        search_term: str | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return one page ordered by id, plus the total matching count."""
        stmt = self._select()
        condition = self._search_filter(search_term)
        if condition is not None:
            stmt = stmt.where(condition)
        stmt = stmt.order_by(self.model.id).offset((page_number - 1) * page_size).limit(page_size)

        total = await self.count(search_term)
        async with self._guard(f"page {self._name}"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all()), total

    # ------------------------------------------------------------------
    # Writes (flushed, committed by the unit of work)
    # ------------------------------------------------------------------

    async def add(self, entity: ModelT) -> ModelT:
        async with self._guard(f"create {self._name}"):
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity

    async def update(self, entity: ModelT) -> ModelT:
        async with self._guard(f"update {self._name} {entity.id}"):
            await self.session.flush()
            await self.session.refresh(entity)
            return entity

    async def delete(self, entity: ModelT) -> None:
        async with self._guard(f"delete {self._name} {entity.id}"):
            await self.session.delete(entity)
            await self.session.flush()

"""
Generic repository over the catalog tables.

Every entity keyed by an integer ``id`` shares the same six operations:
find all, find by id, existence check, create, update and delete. Write
operations commit on their own and report failure as ``False`` rather than
raising, so callers can turn a failed write into a 500 response.
"""

from typing import Generic, List, Optional, Type, TypeVar

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Author, Base, Book

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD operations for one entity type."""

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def entity_name(self) -> str:
        return self.model.__name__.lower()

    async def find_all(self) -> List[ModelT]:
        """Return every row ordered by id."""
        result = await self.session.execute(select(self.model).order_by(self.model.id))
        return list(result.scalars().all())

    async def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def exists(self, entity_id: int) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        )
        return result.scalar_one() > 0

    async def create(self, entity: ModelT) -> bool:
        """
        Insert a new row.

        Args:
            entity: Transient entity; its ``id`` is filled in on success

        Returns:
            bool: True if the row was written. On failure the entity is
            detached again and keeps the values it was given.
        """
        self.session.add(entity)
        if not await self._save("create"):
            return False
        await self._reload(entity.id)
        return True

    async def update(self, entity: ModelT) -> bool:
        """
        Overwrite an existing row with every field of ``entity``.

        The caller has already checked that a row with ``entity.id`` exists.
        On failure the session is rolled back, which expires the stored
        instance; ``entity`` itself is left untouched.
        """
        try:
            merged = await self.session.merge(entity)
        except SQLAlchemyError as e:
            logger.warning("Repository write failed", entity=self.entity_name,
                           operation="update", error=str(e))
            await self.session.rollback()
            return False
        if not await self._save("update"):
            return False
        await self._reload(merged.id)
        return True

    async def delete(self, entity: ModelT) -> bool:
        """
        Remove a row previously loaded through this repository.

        When the write fails the rollback expires ``entity``; it is re-read
        so its attributes stay readable outside the session.
        """
        await self.session.delete(entity)
        if await self._save("delete"):
            return True
        await self.session.refresh(entity)
        return False

    async def _reload(self, entity_id: int) -> None:
        """Re-read a row so eagerly loaded relationships follow its foreign keys."""
        await self.session.get(self.model, entity_id, populate_existing=True)

    async def _save(self, operation: str) -> bool:
        try:
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            logger.warning("Repository write failed", entity=self.entity_name,
                           operation=operation, error=str(e))
            await self.session.rollback()
            return False


class AuthorRepository(Repository[Author]):
    model = Author


class BookRepository(Repository[Book]):
    model = Book

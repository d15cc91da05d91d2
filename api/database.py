"""
Database dependencies for the FastAPI application.
"""

from typing import AsyncIterator, Optional

import structlog
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import DatabaseManager
from catalog.repository import AuthorRepository, BookRepository
from catalog.users import UserStore

logger = structlog.get_logger(__name__)

# Global database manager, set by the application lifespan
db_manager: Optional[DatabaseManager] = None


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    global db_manager
    db_manager = manager


def get_db_manager() -> DatabaseManager:
    if db_manager is None:
        logger.error("Database manager requested before startup")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return db_manager


async def get_session(manager: DatabaseManager = Depends(get_db_manager)) -> AsyncIterator[AsyncSession]:
    """One session per request."""
    async with manager.session() as session:
        yield session


def get_book_repository(session: AsyncSession = Depends(get_session)) -> BookRepository:
    return BookRepository(session)


def get_author_repository(session: AsyncSession = Depends(get_session)) -> AuthorRepository:
    return AuthorRepository(session)


def get_user_store(session: AsyncSession = Depends(get_session)) -> UserStore:
    return UserStore(session)

"""
Relational database utilities for async operations.
Handles engine lifecycle, schema creation and session scoping for the catalog.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """
    Async SQLAlchemy manager for catalog data.
    Owns the engine and hands out one session per unit of work.
    """

    def __init__(self, connection_url: str, echo: bool = False):
        """
        Initialize database manager.

        Args:
            connection_url: SQLAlchemy async URL, e.g. ``sqlite+aiosqlite:///./bookstore.db``
            echo: Log every SQL statement
        """
        self.connection_url = connection_url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.connection_url.startswith("sqlite")

    async def connect(self) -> None:
        """Create the engine, verify connectivity and create missing tables."""
        try:
            self.engine = create_async_engine(self.connection_url, echo=self.echo)
            self._sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

            if self.is_sqlite:
                @event.listens_for(self.engine.sync_engine, "connect")
                def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON;")
                    cursor.close()

            # Test connection
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            await self._create_schema()
            logger.info("Successfully connected to database", url=self._safe_url())

        except SQLAlchemyError as e:
            logger.error("Failed to connect to database", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self._sessionmaker = None
            logger.info("Disconnected from database")

    async def _create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready", tables=sorted(Base.metadata.tables))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; callers commit their own work."""
        if self._sessionmaker is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        async with self._sessionmaker() as session:
            yield session

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        if self.engine is None:
            return {"status": "unhealthy", "error": "not connected"}
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except SQLAlchemyError as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    def _safe_url(self) -> str:
        """Connection URL with any password masked."""
        return self.engine.url.render_as_string(hide_password=True) if self.engine else ""

"""Catalog connection management."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from ...config import Settings, get_settings
from ...exceptions import CatalogNotAvailableError
from .cache import LookupCaches
from .catalog import CatalogDatabase, configure_connection, create_schema

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the catalog connection and the lookup caches for one process."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._conn: aiosqlite.Connection | None = None
        self._db: CatalogDatabase | None = None
        self._caches = LookupCaches.from_settings(self._settings)

    @property
    def db(self) -> CatalogDatabase:
        """Get the catalog database instance."""
        if self._db is None:
            raise RuntimeError("DatabaseManager not started. Call start() first.")
        return self._db

    @property
    def caches(self) -> LookupCaches:
        """Lookup caches shared by every search served through this manager."""
        return self._caches

    async def start(self) -> None:
        """Open the catalog connection.

        Raises:
            CatalogNotAvailableError: If the catalog file does not exist.
        """
        db_path = self._settings.catalog_db_path
        if not db_path.exists():
            raise CatalogNotAvailableError(str(db_path))

        conn = await aiosqlite.connect(db_path)
        try:
            await configure_connection(conn)
            await conn.execute("PRAGMA cache_size = -16000")  # 16MB
            await conn.execute("PRAGMA busy_timeout = 5000")  # 5 seconds
            await conn.execute("PRAGMA temp_store = MEMORY")
            await conn.execute("PRAGMA query_only = ON")
        except aiosqlite.Error:
            await conn.close()
            raise

        self._conn = conn
        self._db = CatalogDatabase(conn, max_connections=self._settings.db_max_connections)
        logger.info("Card catalog loaded from %s", db_path)

    async def stop(self) -> None:
        """Close the catalog connection and drop cached lookups."""
        if self._conn:
            # Save reference to thread before closing
            conn_thread = self._conn if hasattr(self._conn, "join") else None
            await self._conn.close()

            # Wait for aiosqlite thread to terminate to avoid hang on exit
            if conn_thread is not None:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, conn_thread.join, 2.0)

            self._conn = None
            self._db = None

        await self._caches.clear()


async def initialize_catalog(path: Path) -> None:
    """Create an empty catalog (tables and indexes) at the given path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(path) as conn:
        await conn.execute("PRAGMA journal_mode = WAL")
        await create_schema(conn)
    logger.info("Card catalog schema ready at %s", path)


@asynccontextmanager
async def create_catalog(settings: Settings | None = None) -> AsyncIterator[DatabaseManager]:
    """Start a DatabaseManager for the duration of the block."""
    manager = DatabaseManager(settings)
    await manager.start()
    try:
        yield manager
    finally:
        await manager.stop()

"""SQLite database connection management."""

import sqlite3
from pathlib import Path

import aiosqlite
import structlog

logger = structlog.get_logger()

_CREATE_TABLES = """
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    filename TEXT NOT NULL,
    content_type TEXT NOT NULL,
    size_bytes INTEGER NOT NULL,
    file_path TEXT NOT NULL,
    is_indexed INTEGER DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);
"""


class Database:
    """Async SQLite database wrapper.

    Owns a single aiosqlite connection. Every statement is committed on
    execution so that each repository call is its own unit of work.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the connection and create the schema if needed."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.executescript(_CREATE_TABLES)
        await self._connection.commit()

        logger.info("database_connected", path=str(self._db_path))

    async def disconnect(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("database_disconnected", path=str(self._db_path))

    async def execute(
        self,
        sql: str,
        parameters: tuple[object, ...] | dict[str, object] | None = None,
    ) -> aiosqlite.Cursor:
        """Execute and commit a single statement.

        Raises:
            RuntimeError: If the database is not connected.
        """
        if not self._connection:
            raise RuntimeError("Database not connected")

        if parameters:
            cursor = await self._connection.execute(sql, parameters)
        else:
            cursor = await self._connection.execute(sql)

        await self._connection.commit()
        return cursor

    async def fetch_one(
        self,
        sql: str,
        parameters: tuple[object, ...] | dict[str, object] | None = None,
    ) -> sqlite3.Row | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetch_all(
        self,
        sql: str,
        parameters: tuple[object, ...] | dict[str, object] | None = None,
    ) -> list[sqlite3.Row]:
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())


# Process-wide instance, set by init_database() during application startup
_database: Database | None = None


def get_database() -> Database:
    """Return the process-wide database.

    Raises:
        RuntimeError: If init_database() has not been called.
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call init_database first.")
    return _database


async def init_database(db_path: str | Path) -> Database:
    """Create, connect and register the process-wide database."""
    global _database
    _database = Database(db_path)
    await _database.connect()
    return _database


async def close_database() -> None:
    """Disconnect and unregister the process-wide database."""
    global _database
    if _database is not None:
        await _database.disconnect()
        _database = None

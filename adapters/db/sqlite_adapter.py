"""
SQLite adapter

Manages the SQLite connection in WAL mode.
The web process and scripts can read the same file concurrently.

Note: one adapter is one connection; the ledger assumes a single writer.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths

logger = logging.getLogger(__name__)


def get_db_path(path: Path | str | None = None) -> Path:
    """Resolve the DB file path

    Args:
        path: explicit path (None uses the default data/ledger.db)

    Returns:
        DB file path (Path)
    """
    if path is None:
        return Paths.DEFAULT_DB
    return Path(path)


def like_contains(text: str) -> str:
    """LIKE pattern matching text as a literal substring

    Use with ``LIKE ? ESCAPE '\\'``.

    Example:
        >>> like_contains("50%_off")
        '%50\\\\%\\\\_off%'
    """
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """Create a SQLite connection (WAL mode)

    Args:
        db_path: DB file path
        readonly: open read-only

    Returns:
        aiosqlite connection
    """
    db_path_str = str(db_path)

    # Create the directory when missing
    if not readonly:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # Rows support both index and column-name access
    conn.row_factory = aiosqlite.Row

    if not readonly:
        await conn.execute("PRAGMA journal_mode=WAL")

    # Wait on a concurrent writer instead of failing immediately
    await conn.execute("PRAGMA busy_timeout=30000")

    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(
        "SQLite connection opened",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite adapter

    Manages one SQLite connection in WAL mode and provides a
    transaction context manager.

    Args:
        db_path: DB file path
        readonly: read-only connection (report-only consumers)

    Example:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction() as conn:
        await conn.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """Connection state"""
        return self._conn is not None

    async def connect(self) -> None:
        """Open the connection"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """Close the connection"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite connection closed")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """Execute one statement"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """Execute one statement for each parameter tuple"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Row | None:
        """Fetch a single row"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[aiosqlite.Row]:
        """Fetch all rows"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """Commit"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """Roll back"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Transaction context manager

        Commits on success, rolls back on any exception.

        Example:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # committed on exit
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        try:
            yield self._conn
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        """Check whether a table exists"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """Column information of a table"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        return [
            {
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            }
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

"""
SQLite adapter tests

SQLiteAdapter and connection helpers.
"""

from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, create_connection, get_db_path, like_contains
from core.constants import Paths


class TestGetDbPath:
    """get_db_path tests"""

    def test_default(self) -> None:
        path = get_db_path()

        assert path == Paths.DEFAULT_DB
        assert isinstance(path, Path)

    def test_explicit(self, tmp_path: Path) -> None:
        assert get_db_path(str(tmp_path / "a.db")) == tmp_path / "a.db"


class TestCreateConnection:
    """create_connection tests"""

    @pytest.mark.asyncio
    async def test_wal_mode(self, tmp_path: Path) -> None:
        conn = await create_connection(tmp_path / "test.db")
        try:
            cursor = await conn.execute("PRAGMA journal_mode")
            row = await cursor.fetchone()
            assert row[0].lower() == "wal"
        finally:
            await conn.close()

    @pytest.mark.asyncio
    async def test_foreign_keys_on(self, tmp_path: Path) -> None:
        conn = await create_connection(tmp_path / "test.db")
        try:
            cursor = await conn.execute("PRAGMA foreign_keys")
            row = await cursor.fetchone()
            assert row[0] == 1
        finally:
            await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "test.db"
        conn = await create_connection(db_path)
        await conn.close()

        assert db_path.parent.exists()


class TestSQLiteAdapter:
    """SQLiteAdapter tests"""

    @pytest_asyncio.fixture
    async def adapter(self, tmp_path: Path):
        adapter = SQLiteAdapter(tmp_path / "test.db")
        await adapter.connect()
        await adapter.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)")
        await adapter.commit()
        yield adapter
        await adapter.close()

    @pytest.mark.asyncio
    async def test_connect_close(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "test.db")
        assert not adapter.is_connected

        await adapter.connect()
        assert adapter.is_connected

        await adapter.close()
        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_not_connected(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "test.db")

        with pytest.raises(RuntimeError, match="Not connected"):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "test.db") as adapter:
            assert adapter.is_connected
            row = await adapter.fetchone("SELECT 1 AS one")
            assert row["one"] == 1

        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_rows_by_name_and_index(self, adapter: SQLiteAdapter) -> None:
        await adapter.execute("INSERT INTO items (name) VALUES (?)", ("pen",))
        await adapter.commit()

        row = await adapter.fetchone("SELECT id, name FROM items")
        assert row["name"] == "pen"
        assert row[1] == "pen"

    @pytest.mark.asyncio
    async def test_fetchall_returns_list(self, adapter: SQLiteAdapter) -> None:
        await adapter.executemany(
            "INSERT INTO items (name) VALUES (?)",
            [("a",), ("b",), ("c",)],
        )
        await adapter.commit()

        rows = await adapter.fetchall("SELECT name FROM items ORDER BY id")
        assert isinstance(rows, list)
        assert [r["name"] for r in rows] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_transaction_commit(self, adapter: SQLiteAdapter) -> None:
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO items (name) VALUES ('kept')")

        row = await adapter.fetchone("SELECT COUNT(*) AS n FROM items")
        assert row["n"] == 1

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(ValueError):
            async with adapter.transaction():
                await adapter.execute("INSERT INTO items (name) VALUES ('lost')")
                raise ValueError("boom")

        row = await adapter.fetchone("SELECT COUNT(*) AS n FROM items")
        assert row["n"] == 0

    @pytest.mark.asyncio
    async def test_table_exists(self, adapter: SQLiteAdapter) -> None:
        assert await adapter.table_exists("items")
        assert not await adapter.table_exists("missing")

    @pytest.mark.asyncio
    async def test_get_table_info(self, adapter: SQLiteAdapter) -> None:
        info = await adapter.get_table_info("items")

        assert [c["name"] for c in info] == ["id", "name"]
        assert info[0]["pk"] is True
        assert info[1]["type"] == "TEXT"

    @pytest.mark.asyncio
    async def test_like_contains_matches_literally(self, adapter: SQLiteAdapter) -> None:
        await adapter.executemany(
            "INSERT INTO items (name) VALUES (?)",
            [("50%_off",), ("500 off",), ("a\\b",), ("ab",)],
        )
        await adapter.commit()

        async def names(text: str) -> list[str]:
            rows = await adapter.fetchall(
                "SELECT name FROM items WHERE name LIKE ? ESCAPE '\\' ORDER BY id",
                (like_contains(text),),
            )
            return [r["name"] for r in rows]

        assert await names("%_") == ["50%_off"]
        assert await names("\\") == ["a\\b"]
        assert await names("off") == ["50%_off", "500 off"]


class TestLikeContains:
    """like_contains tests"""

    def test_escapes_wildcards(self) -> None:
        assert like_contains("50%_off") == "%50\\%\\_off%"
        assert like_contains("a\\b") == "%a\\\\b%"
        assert like_contains("plain") == "%plain%"

"""
Database adapter

SQLite WAL-mode connection management.
"""

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    get_db_path,
)

__all__ = [
    "SQLiteAdapter",
    "get_db_path",
    "create_connection",
]

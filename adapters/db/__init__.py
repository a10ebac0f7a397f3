"""
Database adapter

SQLite WAL-mode connection management and per-month table DDL.
"""

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    init_month_tables,
    resolve_db_path,
)

__all__ = [
    "SQLiteAdapter",
    "create_connection",
    "init_month_tables",
    "resolve_db_path",
]

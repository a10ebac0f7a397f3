"""
SQLite adapter

Manages the SQLite connection in WAL mode so the web process and the
maintenance scripts can open the same file concurrently.

One table per month: the table name is the month identifier itself
(e.g. "september_2025"), validated before it is interpolated into SQL.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

import aiosqlite

from core.constants import PROJECT_ROOT
from core.domain.months import parse_month_id
from core.types import PaymentStatus

logger = logging.getLogger(__name__)


def resolve_db_path(path: Path | str) -> Path | str:
    """Resolve a configured DB path

    Relative paths are anchored at the project root. ":memory:" is kept as is.
    """
    if str(path) == ":memory:":
        return ":memory:"
    path = Path(path)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """Create a SQLite connection (WAL mode)

    Args:
        db_path: DB file path (or ":memory:")
        readonly: open read-only

    Returns:
        aiosqlite connection with dict-like rows
    """
    db_path_str = str(db_path)
    in_memory = db_path_str == ":memory:"

    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly and not in_memory:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    conn.row_factory = aiosqlite.Row

    if not in_memory:
        await conn.execute("PRAGMA journal_mode=WAL")

    # wait up to 30s on a locked database
    await conn.execute("PRAGMA busy_timeout=30000")

    logger.info(
        "SQLite connection created",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite adapter

    Connection lifecycle plus a transaction context manager.

    Args:
        db_path: DB file path
        readonly: read-only connection

    Usage:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite connection closed")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> aiosqlite.Cursor:
        conn = self._require_conn()

        if parameters:
            return await conn.execute(sql, tuple(parameters))
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        return await self._require_conn().executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> aiosqlite.Row | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> list[aiosqlite.Row]:
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Transaction context manager

        Commits on success, rolls back on exception. Nested blocks join the
        outermost transaction.
        """
        conn = self._require_conn()

        self._tx_depth += 1
        try:
            yield conn
        except Exception:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                await conn.rollback()
            raise
        else:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                await conn.commit()

    async def table_exists(self, table_name: str) -> bool:
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def list_tables(self) -> list[str]:
        rows = await self.fetchall(
            "SELECT name FROM sqlite_master WHERE type='table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row["name"] for row in rows]

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def month_table_sql(month: str) -> list[str]:
    """DDL for one month's table and its uniqueness indexes

    Raises:
        ValidationError: malformed month identifier
    """
    parse_month_id(month)
    statuses = ", ".join(f"'{s.value}'" for s in PaymentStatus)

    return [
        f"""
        CREATE TABLE IF NOT EXISTS {month} (
            id                     INTEGER PRIMARY KEY AUTOINCREMENT,
            token_number           INTEGER CHECK (token_number IS NULL OR token_number > 0),
            full_name              TEXT NOT NULL,
            mobile_number          TEXT NOT NULL,
            family                 TEXT NOT NULL DEFAULT 'Individual',
            payment_status         TEXT NOT NULL DEFAULT 'pending'
                                   CHECK (payment_status IN ({statuses})),
            paid_to                TEXT,
            draw_status            TEXT NOT NULL DEFAULT 'not_drawn',
            additional_information TEXT,
            created_at             TEXT NOT NULL,
            updated_at             TEXT NOT NULL
        )
        """,
        f"""
        CREATE UNIQUE INDEX IF NOT EXISTS ux_{month}_token
        ON {month}(token_number) WHERE token_number IS NOT NULL
        """,
        # only this month's own winner marker is unique; copied rows carry 'drawn'
        f"""
        CREATE UNIQUE INDEX IF NOT EXISTS ux_{month}_winner
        ON {month}(draw_status) WHERE draw_status = 'winner_{month}'
        """,
        f"""
        CREATE INDEX IF NOT EXISTS ix_{month}_identity
        ON {month}(full_name, mobile_number)
        """,
    ]


async def init_month_tables(adapter: SQLiteAdapter, months: Iterable[str]) -> None:
    """Create the per-month tables (idempotent)

    Args:
        adapter: connected SQLiteAdapter
        months: month identifiers of the scheme
    """
    created = 0
    async with adapter.transaction():
        for month in months:
            for statement in month_table_sql(month):
                await adapter.execute(statement)
            created += 1

    logger.info(f"Month tables initialized: {created}")

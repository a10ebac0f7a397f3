"""
SQLiteMemberStore - per-month member tables

ILedgerStore implementation on top of SQLiteAdapter.
Each month is an independent table; values are encoded to their storage
form here (enums -> value, draw status -> "winner_<month>", datetimes -> ISO).
"""

import logging
import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping, Sequence

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.draw_status import encode_draw_status, coerce_draw_status
from core.domain.errors import ConstraintViolation, NotFound, StoreError, ValidationError
from core.domain.member import UPDATABLE_FIELDS, Member
from core.domain.months import parse_month_id
from core.types import PaymentStatus
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


TIMESTAMP_FIELDS = frozenset({"created_at", "updated_at"})
COLUMNS = frozenset({"id"}) | UPDATABLE_FIELDS | TIMESTAMP_FIELDS

# "UNIQUE constraint failed: september_2025.token_number"
_FAILED_COLUMN = re.compile(r"constraint failed: \w+\.(\w+)")


def encode_value(field: str, value: Any) -> Any:
    """Domain value -> column value"""
    if value is None:
        return None
    if field == "payment_status":
        return PaymentStatus(value).value
    if field == "draw_status":
        return encode_draw_status(coerce_draw_status(value))
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteMemberStore:
    """Member record store (SQLite)

    Args:
        db: connected SQLiteAdapter

    Usage:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_month_tables(db, months)
        store = SQLiteMemberStore(db)

        member = await store.insert("september_2025", draft.to_record())
        members = await store.select("september_2025", order_by="full_name")
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def select(
        self,
        month: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[Member]:
        table = self._table(month)
        sql = f"SELECT * FROM {table}"
        params: list[Any] = []

        if filters:
            clauses = []
            for field, value in filters.items():
                self._check_column(field, month)
                if value is None:
                    clauses.append(f"{field} IS NULL")
                else:
                    clauses.append(f"{field} = ?")
                    params.append(encode_value(field, value))
            sql += " WHERE " + " AND ".join(clauses)

        if order_by:
            self._check_column(order_by, month)
            if order_by in ("full_name", "family"):
                sql += f" ORDER BY {order_by} COLLATE NOCASE ASC, id ASC"
            else:
                sql += f" ORDER BY {order_by} ASC, id ASC"

        with self._errors(month):
            rows = await self.db.fetchall(sql, params)

        return [Member.from_row(dict(row)) for row in rows]

    async def _get(self, month: str, member_id: int) -> Member:
        table = self._table(month)
        with self._errors(month, member_id):
            row = await self.db.fetchone(f"SELECT * FROM {table} WHERE id = ?", (member_id,))

        if row is None:
            raise NotFound(
                f"Member {member_id} not found in {month}",
                month=month,
                member_id=member_id,
            )
        return Member.from_row(dict(row))

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    async def insert(self, month: str, record: Mapping[str, Any]) -> Member:
        members = await self.insert_many(month, [record])
        return members[0]

    async def insert_many(
        self,
        month: str,
        records: Sequence[Mapping[str, Any]],
    ) -> list[Member]:
        """Insert all records in one transaction"""
        table = self._table(month)
        ids: list[int] = []

        with self._errors(month):
            async with self.db.transaction():
                for record in records:
                    row = self._prepare_insert(record, month)
                    columns = ", ".join(row)
                    placeholders = ", ".join("?" for _ in row)
                    cursor = await self.db.execute(
                        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                        list(row.values()),
                    )
                    ids.append(cursor.lastrowid)

        logger.debug(f"Inserted {len(ids)} member(s) into {month}")
        return [await self._get(month, member_id) for member_id in ids]

    async def update(
        self,
        month: str,
        member_id: int,
        patch: Mapping[str, Any],
    ) -> Member:
        members = await self.update_many(month, [(member_id, patch)])
        return members[0]

    async def update_many(
        self,
        month: str,
        patches: Sequence[tuple[int, Mapping[str, Any]]],
    ) -> list[Member]:
        """Apply all patches in one transaction (all or nothing)"""
        table = self._table(month)
        touched: list[int] = []

        with self._errors(month):
            async with self.db.transaction():
                for member_id, patch in patches:
                    row = self._prepare_update(patch, month)
                    assignments = ", ".join(f"{column} = ?" for column in row)
                    cursor = await self.db.execute(
                        f"UPDATE {table} SET {assignments} WHERE id = ?",
                        [*row.values(), member_id],
                    )
                    if cursor.rowcount == 0:
                        raise NotFound(
                            f"Member {member_id} not found in {month}",
                            month=month,
                            member_id=member_id,
                        )
                    if member_id not in touched:
                        touched.append(member_id)

        return [await self._get(month, member_id) for member_id in touched]

    async def delete(self, month: str, member_id: int) -> None:
        table = self._table(month)

        with self._errors(month, member_id):
            async with self.db.transaction():
                cursor = await self.db.execute(
                    f"DELETE FROM {table} WHERE id = ?", (member_id,)
                )
                if cursor.rowcount == 0:
                    raise NotFound(
                        f"Member {member_id} not found in {month}",
                        month=month,
                        member_id=member_id,
                    )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _table(month: str) -> str:
        try:
            parse_month_id(month)
        except ValidationError as e:
            raise StoreError(f"Invalid table name: {month!r}", month=month, cause=e) from e
        return month

    @staticmethod
    def _check_column(field: str, month: str) -> None:
        if field not in COLUMNS:
            raise StoreError(f"Unknown column '{field}'", month=month)

    def _prepare_insert(self, record: Mapping[str, Any], month: str) -> dict[str, Any]:
        now = now_utc()
        row: dict[str, Any] = {}
        for field, value in record.items():
            if field == "id":
                continue
            self._check_column(field, month)
            row[field] = encode_value(field, value)

        row.setdefault("created_at", now.isoformat())
        row.setdefault("updated_at", row["created_at"])
        return row

    def _prepare_update(self, patch: Mapping[str, Any], month: str) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for field, value in patch.items():
            if field in ("id", "created_at"):
                raise StoreError(f"Column '{field}' is immutable", month=month)
            self._check_column(field, month)
            row[field] = encode_value(field, value)

        row.setdefault("updated_at", now_utc().isoformat())
        return row

    @contextmanager
    def _errors(self, month: str, member_id: int | None = None) -> Iterator[None]:
        """sqlite3 errors -> StoreError / ConstraintViolation"""
        try:
            yield
        except sqlite3.IntegrityError as e:
            match = _FAILED_COLUMN.search(str(e))
            raise ConstraintViolation(
                f"Constraint violated in {month}: {e}",
                month=month,
                member_id=member_id,
                field=match.group(1) if match else None,
                cause=e,
            ) from e
        except sqlite3.OperationalError as e:
            if "no such table" in str(e):
                raise StoreError(
                    f"Month table does not exist: {month}",
                    month=month,
                    member_id=member_id,
                    cause=e,
                ) from e
            raise StoreError(f"Store error in {month}: {e}", month=month, cause=e) from e
        except sqlite3.Error as e:
            raise StoreError(f"Store error in {month}: {e}", month=month, cause=e) from e

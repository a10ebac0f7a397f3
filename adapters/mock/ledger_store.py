"""
In-memory ledger store

ILedgerStore implementation for tests.
Mirrors the SQLite store's constraints (unique tokens, one winner marker per
month) and supports failure injection.
"""

from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

from core.domain.draw_status import coerce_draw_status, is_winner_of
from core.domain.errors import ConstraintViolation, NotFound, StoreError
from core.domain.member import Member
from core.types import PaymentStatus
from core.utils.timezone import now_utc

_DEFAULTED_FIELDS = frozenset({"family", "payment_status", "draw_status"})

class InMemoryLedgerStore:
    """In-memory store

    ILedgerStore Protocol implementation.
    update_many applies patches one by one, so a failure mid-batch leaves
    the earlier patches applied.

    Args:
        months: collections that exist up front. None means every month
            exists on first access.

    Usage:
    ```python
    store = InMemoryLedgerStore()
    member = await store.insert("september_2025", {"full_name": "A", "mobile_number": "1"})

    # failure injection
    store.failing_months.add("october_2025")
    store.fail_after_updates = 2
    ```
    """

    def __init__(self, months: Iterable[str] | None = None):
        self._auto_create = months is None
        self._tables: dict[str, dict[int, Member]] = {m: {} for m in (months or ())}
        self._next_id: dict[str, int] = {}

        self.failing_months: set[str] = set()
        self.fail_after_updates: int | None = None
        self.calls: list[tuple[str, str]] = []

    # -------------------------------------------------------------------------
    # ILedgerStore
    # -------------------------------------------------------------------------

    async def select(
        self,
        month: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[Member]:
        table = self._table("select", month)
        members = list(table.values())

        if filters:
            members = [m for m in members if self._matches(m, filters)]

        if order_by == "full_name":
            members.sort(key=lambda m: (m.full_name.casefold(), m.id))
        elif order_by:
            members.sort(key=lambda m: (getattr(m, order_by) is None, getattr(m, order_by), m.id))
        else:
            members.sort(key=lambda m: m.id)

        return members

    async def insert(self, month: str, record: Mapping[str, Any]) -> Member:
        members = await self.insert_many(month, [record])
        return members[0]

    async def insert_many(
        self,
        month: str,
        records: Sequence[Mapping[str, Any]],
    ) -> list[Member]:
        table = self._table("insert", month)
        staged = dict(table)
        created: list[Member] = []

        for record in records:
            member_id = self._next_id.get(month, 1)
            self._next_id[month] = member_id + 1

            now = now_utc()
            member = self._build(member_id, record, now)
            self._check_constraints(month, staged, member)
            staged[member_id] = member
            created.append(member)

        table.clear()
        table.update(staged)
        return created

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
        table = self._table("update", month)
        touched: list[int] = []

        for applied, (member_id, patch) in enumerate(patches):
            if self.fail_after_updates is not None and applied >= self.fail_after_updates:
                raise StoreError(f"Injected failure after {applied} updates", month=month)

            current = table.get(member_id)
            if current is None:
                raise NotFound(
                    f"Member {member_id} not found in {month}",
                    month=month,
                    member_id=member_id,
                )

            values = self._coerce(patch)
            values.setdefault("updated_at", now_utc())
            updated = replace(current, **values)

            others = {k: v for k, v in table.items() if k != member_id}
            self._check_constraints(month, others, updated)
            table[member_id] = updated

            if member_id not in touched:
                touched.append(member_id)

        return [table[member_id] for member_id in touched]

    async def delete(self, month: str, member_id: int) -> None:
        table = self._table("delete", month)
        if member_id not in table:
            raise NotFound(
                f"Member {member_id} not found in {month}",
                month=month,
                member_id=member_id,
            )
        del table[member_id]

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def create_month(self, month: str) -> None:
        self._tables.setdefault(month, {})

    def count(self, month: str) -> int:
        return len(self._tables.get(month, {}))

    def writes(self, month: str | None = None) -> list[tuple[str, str]]:
        """Recorded write calls (insert/update/delete)"""
        return [
            call for call in self.calls
            if call[0] != "select" and (month is None or call[1] == month)
        ]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _table(self, op: str, month: str) -> dict[int, Member]:
        self.calls.append((op, month))

        if month in self.failing_months:
            raise StoreError(f"Injected failure for {month}", month=month)

        if month not in self._tables:
            if not self._auto_create:
                raise StoreError(f"Month table does not exist: {month}", month=month)
            self._tables[month] = {}

        return self._tables[month]

    @staticmethod
    def _coerce(values: Mapping[str, Any]) -> dict[str, Any]:
        result = dict(values)
        result.pop("id", None)
        if result.get("payment_status") is not None:
            result["payment_status"] = PaymentStatus(result["payment_status"])
        if result.get("draw_status") is not None:
            result["draw_status"] = coerce_draw_status(result["draw_status"])
        return result

    def _build(self, member_id: int, record: Mapping[str, Any], now: Any) -> Member:
        values = self._coerce(record)
        values.setdefault("created_at", now)
        values.setdefault("updated_at", values["created_at"])
        # None means "use the default" for the non-nullable fields
        values = {
            k: v for k, v in values.items()
            if v is not None or k not in _DEFAULTED_FIELDS
        }
        return Member(id=member_id, **values)

    @staticmethod
    def _matches(member: Member, filters: Mapping[str, Any]) -> bool:
        for field, expected in filters.items():
            actual = getattr(member, field)
            if field == "draw_status" and expected is not None:
                expected = coerce_draw_status(expected)
            elif field == "payment_status" and expected is not None:
                expected = PaymentStatus(expected)
            if actual != expected:
                return False
        return True

    @staticmethod
    def _check_constraints(month: str, others: Mapping[int, Member], member: Member) -> None:
        if member.token_number is not None:
            for other in others.values():
                if other.id != member.id and other.token_number == member.token_number:
                    raise ConstraintViolation(
                        f"Token {member.token_number} already used in {month}",
                        month=month,
                        member_id=member.id,
                        field="token_number",
                    )

        if is_winner_of(member.draw_status, month):
            for other in others.values():
                if other.id != member.id and is_winner_of(other.draw_status, month):
                    raise ConstraintViolation(
                        f"Winner already declared for {month}",
                        month=month,
                        member_id=member.id,
                        field="draw_status",
                    )

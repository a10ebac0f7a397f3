"""
Adapter interface definitions

Protocol based so that implementations (SQLite, in-memory, WhatsApp, mock)
can be injected and swapped in tests.
Every implementation must conform to these Protocols.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from core.domain.member import Member


@runtime_checkable
class ILedgerStore(Protocol):
    """Per-month member record store

    One independent collection per month. No cross-month transactions.
    Field dicts use domain values (PaymentStatus, DrawStatus variants);
    encoding to the storage format is the implementation's concern.

    Failures:
        NotFound: unknown record id
        StoreError: any store-level failure (missing collection, I/O, ...)
        ConstraintViolation: uniqueness constraint rejected a write
    """

    async def select(
        self,
        month: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[Member]:
        """Read records of `month`

        Args:
            month: month identifier
            filters: equality filters {field: value}
            order_by: field name; "full_name" sorts case-insensitively

        Returns:
            matching records
        """
        ...

    async def insert(self, month: str, record: Mapping[str, Any]) -> Member:
        """Insert one record, returning it with its assigned id"""
        ...

    async def insert_many(
        self,
        month: str,
        records: Sequence[Mapping[str, Any]],
    ) -> list[Member]:
        """Insert records in order (all or nothing where the store supports it)"""
        ...

    async def update(
        self,
        month: str,
        member_id: int,
        patch: Mapping[str, Any],
    ) -> Member:
        """Merge `patch` into record `member_id`"""
        ...

    async def update_many(
        self,
        month: str,
        patches: Sequence[tuple[int, Mapping[str, Any]]],
    ) -> list[Member]:
        """Apply patches in order, returning the final state of each touched record"""
        ...

    async def delete(self, month: str, member_id: int) -> None:
        """Remove record `member_id`"""
        ...


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one message delivery"""

    success: bool
    message_id: str | None = None
    error: str | None = None
    detail: str | None = None


@runtime_checkable
class IMessenger(Protocol):
    """Member messaging service interface

    Sends plain text to a member's mobile number.
    Delivery failures are returned, never raised.
    """

    async def send_message(self, mobile_number: str, text: str) -> DeliveryResult:
        """Send one message

        Args:
            mobile_number: raw mobile number as stored on the member
            text: message body

        Returns:
            delivery outcome
        """
        ...

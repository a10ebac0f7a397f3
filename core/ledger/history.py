"""
History / aggregation queries

Scheme-wide scans across every month of the sequence. A month that cannot be
read (e.g. its collection was never created) maps to None instead of failing
the whole scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.domain.draw_status import Winner
from core.domain.errors import LedgerError
from core.domain.member import Member
from core.domain.months import MonthSequence
from core.types import UNPAID_STATUSES, PaymentStatus

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthStats:
    """Roster summary of one month"""

    month: str
    total_members: int
    with_tokens: int
    paid: int
    pending: int
    overdue: int
    no_payment_required: int
    drawn: int
    winner: Member | None
    collected_amount: int

    @property
    def has_winner(self) -> bool:
        return self.winner is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "total_members": self.total_members,
            "with_tokens": self.with_tokens,
            "paid": self.paid,
            "pending": self.pending,
            "overdue": self.overdue,
            "no_payment_required": self.no_payment_required,
            "drawn": self.drawn,
            "has_winner": self.has_winner,
            "winner": self.winner.to_dict() if self.winner else None,
            "collected_amount": self.collected_amount,
        }


class LedgerHistory:
    """Cross-month queries

    Args:
        store: ILedgerStore implementation
        months: scheme month sequence
        contribution_amount: monthly contribution per paying member
    """

    def __init__(
        self,
        store: ILedgerStore,
        months: MonthSequence,
        contribution_amount: int = Defaults.CONTRIBUTION_AMOUNT,
    ):
        self.store = store
        self.months = months
        self.contribution_amount = contribution_amount

    async def get_member_history(
        self,
        full_name: str,
        mobile_number: str,
    ) -> dict[str, Member | None]:
        """month -> the member's record (None = did not participate / unreadable)"""
        history: dict[str, Member | None] = {}
        for month in self.months:
            history[month] = await self._first(
                month, {"full_name": full_name, "mobile_number": mobile_number}
            )
        return history

    async def get_all_winners(self) -> dict[str, Member | None]:
        """month -> that month's winner (None = no winner yet / unreadable)"""
        winners: dict[str, Member | None] = {}
        for month in self.months:
            winners[month] = await self._first(month, {"draw_status": Winner(month)})
        return winners

    async def count_winners(self) -> int:
        winners = await self.get_all_winners()
        return sum(1 for w in winners.values() if w is not None)

    async def get_month_stats(self, month: str) -> MonthStats:
        """
        Raises:
            NotFound: unknown month
            StoreError: the month cannot be read
        """
        self.months.require(month)
        members = await self.store.select(month)

        def count(status: PaymentStatus) -> int:
            return sum(1 for m in members if m.payment_status == status)

        paid = count(PaymentStatus.PAID)
        return MonthStats(
            month=month,
            total_members=len(members),
            with_tokens=sum(1 for m in members if m.token_number is not None),
            paid=paid,
            pending=count(PaymentStatus.PENDING),
            overdue=count(PaymentStatus.OVERDUE),
            no_payment_required=count(PaymentStatus.NO_PAYMENT_REQUIRED),
            drawn=sum(1 for m in members if m.has_won),
            winner=next((m for m in members if m.is_winner_of(month)), None),
            collected_amount=paid * self.contribution_amount,
        )

    async def get_unpaid_members(self, month: str) -> list[Member]:
        """Pending or overdue members in name order"""
        self.months.require(month)
        members = await self.store.select(month, order_by="full_name")
        return [m for m in members if m.payment_status in UNPAID_STATUSES]

    async def _first(self, month: str, filters: dict[str, Any]) -> Member | None:
        try:
            members = await self.store.select(month, filters)
        except LedgerError as e:
            logger.warning(f"No data for {month}: {e}")
            return None
        return members[0] if members else None

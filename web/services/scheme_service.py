"""
Scheme service

Month overview, winner board and member history shaped for the API.
"""

import logging
from typing import Any

from core.domain.errors import LedgerError
from core.domain.months import display_name
from core.ledger import LedgerEngine, LedgerHistory

logger = logging.getLogger(__name__)


class SchemeService:
    """Cross-month views over the ledger

    Args:
        engine: ledger engine
        history: history queries
    """

    def __init__(self, engine: LedgerEngine, history: LedgerHistory):
        self.engine = engine
        self.history = history

    async def get_months_overview(self) -> dict[str, Any]:
        """Every month with its member count (None when unreadable)"""
        months = []
        for index, month in enumerate(self.engine.months):
            try:
                count = len(await self.engine.list_members(month))
            except LedgerError as e:
                logger.warning(f"Cannot count members of {month}: {e}")
                count = None
            months.append({
                "month": month,
                "display_name": display_name(month),
                "index": index,
                "member_count": count,
            })

        return {
            "starting_month": self.engine.months.starting,
            "last_month": self.engine.months.last,
            "months": months,
        }

    async def get_winners(self) -> dict[str, Any]:
        winners = await self.history.get_all_winners()
        return {
            "total_winners": sum(1 for w in winners.values() if w is not None),
            "winners": [
                {
                    "month": month,
                    "display_name": display_name(month),
                    "winner": winner.to_dict() if winner else None,
                }
                for month, winner in winners.items()
            ],
        }

    async def get_member_history(self, full_name: str, mobile_number: str) -> dict[str, Any]:
        history = await self.history.get_member_history(full_name, mobile_number)
        return {
            "full_name": full_name,
            "mobile_number": mobile_number,
            "history": [
                {
                    "month": month,
                    "display_name": display_name(month),
                    "record": record.to_dict() if record else None,
                }
                for month, record in history.items()
            ],
        }

    async def advance(self, current_month: str) -> dict[str, Any]:
        next_month = await self.engine.advance_to_next_month(current_month)
        members = await self.engine.list_members(next_month)
        return {
            "current_month": current_month,
            "next_month": next_month,
            "member_count": len(members),
        }

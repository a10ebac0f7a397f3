"""
Messaging service

Picks the recipients of a bulk message kind for one month and hands them
to the broadcaster.
"""

import logging

from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import BroadcastResult, Broadcaster
from core.types import MessageKind

logger = logging.getLogger(__name__)


class MessagingService:
    """Bulk member messaging for one month

    Args:
        engine: ledger engine
        history: history queries
        broadcaster: bulk sender
    """

    def __init__(
        self,
        engine: LedgerEngine,
        history: LedgerHistory,
        broadcaster: Broadcaster,
    ):
        self.engine = engine
        self.history = history
        self.broadcaster = broadcaster

    async def send(self, month: str, kind: MessageKind) -> BroadcastResult:
        """
        Raises:
            NotFound: unknown month
            StoreError: the month cannot be read
        """
        logger.info(f"Bulk message requested: {kind.value} for {month}")

        if kind == MessageKind.REMINDERS:
            members = await self.history.get_unpaid_members(month)
            return await self.broadcaster.send_payment_reminders(members)

        members = await self.engine.list_members(month)

        if kind == MessageKind.TOKENS:
            return await self.broadcaster.send_token_assignments(members)
        if kind == MessageKind.DRAW:
            return await self.broadcaster.send_draw_reminders(members)
        return await self.broadcaster.send_receipts(members, month)

"""
Broadcaster - bulk member messaging

Sends one message per member through an IMessenger, retrying failed
deliveries and pacing sends so the WhatsApp backend is not flooded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable

from core.config.loader import SchemeConfig
from core.constants import WhatsAppDefaults
from core.domain.member import Member
from core.messaging.templates import (
    draw_reminder_message,
    is_receipt_eligible,
    receipt_message,
    reminder_message,
    token_assignment_message,
)
from core.types import UNPAID_STATUSES, PaymentStatus

if TYPE_CHECKING:
    from adapters.interfaces import IMessenger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryError:
    member_id: int
    member_name: str
    error: str


@dataclass
class BroadcastResult:
    """Summary of one bulk send"""

    sent: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[DeliveryError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": [
                {"member_id": e.member_id, "member_name": e.member_name, "error": e.error}
                for e in self.errors
            ],
        }


class Broadcaster:
    """Bulk sender

    Args:
        messenger: IMessenger implementation
        scheme: scheme parameters used in the message texts
        max_retries: attempts per member
        retry_backoff_sec: wait before retry n is backoff * n
        message_delay_sec: pause between members

    Usage:
    ```python
    broadcaster = Broadcaster(WhatsAppClient(api_url), settings.scheme)
    result = await broadcaster.send_payment_reminders(members)
    print(result.sent, result.failed)
    ```
    """

    def __init__(
        self,
        messenger: IMessenger,
        scheme: SchemeConfig | None = None,
        max_retries: int = WhatsAppDefaults.MAX_RETRIES,
        retry_backoff_sec: float = WhatsAppDefaults.RETRY_BACKOFF_SEC,
        message_delay_sec: float = WhatsAppDefaults.MESSAGE_DELAY_SEC,
    ):
        self.messenger = messenger
        self.scheme = scheme or SchemeConfig()
        self.max_retries = max(1, max_retries)
        self.retry_backoff_sec = retry_backoff_sec
        self.message_delay_sec = message_delay_sec

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    async def send_token_assignments(self, members: Iterable[Member]) -> BroadcastResult:
        """Token number to every tokened member"""
        return await self._broadcast(
            "token assignment",
            members,
            include=lambda m: m.token_number is not None,
            render=lambda m: token_assignment_message(
                m.full_name,
                m.token_number,
                total_months=self.scheme.total_months,
            ),
        )

    async def send_payment_reminders(self, members: Iterable[Member]) -> BroadcastResult:
        """Reminder to pending/overdue members"""
        return await self._broadcast(
            "payment reminder",
            members,
            include=lambda m: m.payment_status in UNPAID_STATUSES,
            render=lambda m: reminder_message(
                m.full_name,
                overdue=m.payment_status == PaymentStatus.OVERDUE,
                amount=self.scheme.contribution_amount,
                deadline_day=self.scheme.payment_deadline_day,
            ),
        )

    async def send_draw_reminders(self, members: Iterable[Member]) -> BroadcastResult:
        """Draw-day notice to every member"""
        text = draw_reminder_message()
        return await self._broadcast(
            "draw reminder",
            members,
            include=lambda m: True,
            render=lambda m: text,
        )

    async def send_receipts(self, members: Iterable[Member], month: str) -> BroadcastResult:
        """Receipt to every paid member of `month`"""
        return await self._broadcast(
            "receipt",
            members,
            include=is_receipt_eligible,
            render=lambda m: receipt_message(
                m,
                month,
                scheme_name=self.scheme.name,
                amount=self.scheme.contribution_amount,
            ),
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _broadcast(
        self,
        label: str,
        members: Iterable[Member],
        include: Callable[[Member], bool],
        render: Callable[[Member], str],
    ) -> BroadcastResult:
        result = BroadcastResult()
        targets = []
        for member in members:
            if include(member):
                targets.append(member)
            else:
                result.skipped += 1

        logger.info(f"Sending {label} to {len(targets)} member(s), skipped {result.skipped}")

        for i, member in enumerate(targets):
            error = await self._deliver(member, render(member))
            if error is None:
                result.sent += 1
            else:
                result.failed += 1
                result.errors.append(DeliveryError(member.id, member.full_name, error))

            if i < len(targets) - 1 and self.message_delay_sec > 0:
                await asyncio.sleep(self.message_delay_sec)

        logger.info(f"{label.capitalize()} done: {result.sent} sent, {result.failed} failed")
        if result.failed:
            logger.warning(f"{result.failed} {label} message(s) failed; retry them later")
        return result

    async def _deliver(self, member: Member, text: str) -> str | None:
        """Send with retries; returns the last error, None on success"""
        error = "Unknown error"
        for attempt in range(1, self.max_retries + 1):
            delivery = await self.messenger.send_message(member.mobile_number, text)
            if delivery.success:
                logger.debug(f"Delivered to {member.full_name} (attempt {attempt})")
                return None

            error = delivery.error or delivery.detail or "Unknown error"
            if attempt < self.max_retries:
                logger.warning(
                    f"Retry {attempt}/{self.max_retries} for {member.full_name}: {error}"
                )
                if self.retry_backoff_sec > 0:
                    await asyncio.sleep(self.retry_backoff_sec * attempt)

        logger.error(f"Failed to deliver to {member.full_name} after {self.max_retries} attempts: {error}")
        return error

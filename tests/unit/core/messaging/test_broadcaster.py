"""
Broadcaster tests

Recipient selection, retries and pacing against MockMessenger.
"""

from unittest.mock import AsyncMock, patch

import pytest

from adapters.mock.messenger import MockMessenger
from core.config.loader import SchemeConfig
from core.domain.draw_status import DRAWN
from core.domain.member import Member
from core.messaging import BroadcastResult, Broadcaster
from core.types import PaymentStatus

MONTH = "october_2025"


def member(member_id: int, name: str, **fields) -> Member:
    return Member(id=member_id, full_name=name, mobile_number=f"90000000{member_id:02d}", **fields)


@pytest.fixture
def members() -> list[Member]:
    return [
        member(1, "Asha", token_number=1, payment_status=PaymentStatus.PAID, paid_to="Rafi"),
        member(2, "Bilal", token_number=2),
        member(3, "Charu", payment_status=PaymentStatus.OVERDUE),
        member(
            4,
            "Dev",
            token_number=4,
            payment_status=PaymentStatus.NO_PAYMENT_REQUIRED,
            draw_status=DRAWN,
        ),
    ]


class TestBroadcastResult:
    def test_to_dict(self) -> None:
        """Serializable summary"""
        result = BroadcastResult(sent=2)

        assert result.success is True
        assert result.to_dict() == {
            "success": True,
            "sent": 2,
            "failed": 0,
            "skipped": 0,
            "errors": [],
        }


class TestRecipientSelection:
    """Which members each kind addresses"""

    @pytest.mark.asyncio
    async def test_token_assignments_skip_untokened(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Members without a token are skipped"""
        result = await broadcaster.send_token_assignments(members)

        assert (result.sent, result.skipped) == (3, 1)
        assert "Your scheme token number is *2*." in messenger.sent_to("9000000002")[0].text
        assert messenger.sent_to("9000000003") == []

    @pytest.mark.asyncio
    async def test_reminders_to_unpaid_only(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Pending and overdue members only"""
        result = await broadcaster.send_payment_reminders(members)

        assert (result.sent, result.skipped) == (2, 2)
        assert {m.mobile_number for m in messenger.messages} == {"9000000002", "9000000003"}

    @pytest.mark.asyncio
    async def test_overdue_variant(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Overdue members get the alert text"""
        await broadcaster.send_payment_reminders(members)

        assert "Payment Overdue Alert" in messenger.sent_to("9000000003")[0].text

    @pytest.mark.asyncio
    async def test_draw_reminders_to_everyone(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Every member, same text"""
        result = await broadcaster.send_draw_reminders(members)

        assert (result.sent, result.skipped) == (4, 0)
        assert len({m.text for m in messenger.messages}) == 1

    @pytest.mark.asyncio
    async def test_receipts_to_paid_only(
        self, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Receipts use the scheme settings"""
        broadcaster = Broadcaster(
            messenger,
            SchemeConfig(name="GOLD", contribution_amount=1500),
            retry_backoff_sec=0,
            message_delay_sec=0,
        )

        result = await broadcaster.send_receipts(members, MONTH)

        assert (result.sent, result.skipped) == (1, 3)
        text = messenger.last_message.text
        assert "*GOLD*" in text
        assert "*Amount:* ₹1500" in text
        assert "*Month:* October 2025" in text

    @pytest.mark.asyncio
    async def test_empty_roster(self, broadcaster: Broadcaster, messenger: MockMessenger) -> None:
        """Nothing to send"""
        result = await broadcaster.send_draw_reminders([])

        assert result.success
        assert messenger.messages == []


class TestRetries:
    """Delivery retries"""

    @pytest.mark.asyncio
    async def test_transient_failure_retried(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """A failure followed by success counts as sent"""
        messenger.fail_times["9000000002"] = 2

        result = await broadcaster.send_draw_reminders(members)

        assert result.sent == 4
        assert result.failed == 0
        assert messenger.failed_count == 2

    @pytest.mark.asyncio
    async def test_permanent_failure_reported(
        self, broadcaster: Broadcaster, messenger: MockMessenger, members: list[Member]
    ) -> None:
        """Failures after all retries are reported, others still go out"""
        messenger.fail_numbers.add("9000000002")

        result = await broadcaster.send_draw_reminders(members)

        assert (result.sent, result.failed) == (3, 1)
        assert result.success is False
        assert result.errors[0].member_id == 2
        assert result.errors[0].member_name == "Bilal"
        assert result.errors[0].error == "Mock delivery failure"
        assert len([m for m in messenger.messages if m.mobile_number == "9000000002"]) == 3

    @pytest.mark.asyncio
    async def test_backoff_and_pacing(self, messenger: MockMessenger, members: list[Member]) -> None:
        """Backoff grows with the attempt, pause between members"""
        broadcaster = Broadcaster(messenger, max_retries=3, retry_backoff_sec=2, message_delay_sec=1.5)
        messenger.fail_numbers.add("9000000001")

        with patch("core.messaging.broadcaster.asyncio.sleep", new=AsyncMock()) as sleep:
            await broadcaster.send_draw_reminders(members[:2])

        delays = [call.args[0] for call in sleep.await_args_list]
        assert delays == [2, 4, 1.5]

    @pytest.mark.asyncio
    async def test_at_least_one_attempt(self, messenger: MockMessenger, members: list[Member]) -> None:
        """max_retries below 1 still sends once"""
        broadcaster = Broadcaster(messenger, max_retries=0, message_delay_sec=0)

        result = await broadcaster.send_draw_reminders(members[:1])

        assert result.sent == 1

"""
Mock messenger

IMessenger implementation for tests.
"""

from dataclasses import dataclass, field
from datetime import datetime

from adapters.interfaces import DeliveryResult
from core.utils.timezone import now_utc


@dataclass
class SentMessage:
    """One recorded send attempt"""

    mobile_number: str
    text: str
    timestamp: datetime
    delivered: bool


@dataclass
class MockMessenger:
    """Mock messenger

    Records every send attempt so tests can inspect them.

    Args:
        should_fail: every send fails
        fail_numbers: numbers whose sends always fail
        fail_times: number -> how many initial attempts fail before succeeding

    Usage:
    ```python
    messenger = MockMessenger(fail_times={"9876543210": 1})

    await messenger.send_message("9876543210", "hi")  # fails
    await messenger.send_message("9876543210", "hi")  # delivered

    assert messenger.sent_count == 1
    ```
    """

    should_fail: bool = False
    fail_numbers: set[str] = field(default_factory=set)
    fail_times: dict[str, int] = field(default_factory=dict)
    messages: list[SentMessage] = field(default_factory=list)

    async def send_message(self, mobile_number: str, text: str) -> DeliveryResult:
        delivered = not self._should_fail(mobile_number)
        self.messages.append(
            SentMessage(
                mobile_number=mobile_number,
                text=text,
                timestamp=now_utc(),
                delivered=delivered,
            )
        )

        if not delivered:
            return DeliveryResult(success=False, error="Mock delivery failure")
        return DeliveryResult(success=True, message_id=f"mock-{len(self.messages)}")

    def _should_fail(self, mobile_number: str) -> bool:
        if self.should_fail or mobile_number in self.fail_numbers:
            return True
        remaining = self.fail_times.get(mobile_number, 0)
        if remaining > 0:
            self.fail_times[mobile_number] = remaining - 1
            return True
        return False

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        self.messages.clear()

    def sent_to(self, mobile_number: str) -> list[SentMessage]:
        return [m for m in self.messages if m.mobile_number == mobile_number and m.delivered]

    @property
    def last_message(self) -> SentMessage | None:
        return self.messages[-1] if self.messages else None

    @property
    def sent_count(self) -> int:
        return sum(1 for m in self.messages if m.delivered)

    @property
    def failed_count(self) -> int:
        return sum(1 for m in self.messages if not m.delivered)

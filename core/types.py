"""
Type definitions

Core enums shared across the engine, the store and the web layer.
Every Enum inherits from str so it serializes as a plain string.
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """Payment status of a member for one month

    NO_PAYMENT_REQUIRED is terminal and system-managed: it is only set by
    the advance operation for members who already won.
    """

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    NO_PAYMENT_REQUIRED = "no_payment_required"


class DrawKind(str, Enum):
    """Storage tags of the draw status variant"""

    NOT_DRAWN = "not_drawn"
    DRAWN = "drawn"
    WINNER = "winner"


class MessageKind(str, Enum):
    """Bulk message kinds sent to members"""

    REMINDERS = "reminders"
    TOKENS = "tokens"
    DRAW = "draw"
    RECEIPTS = "receipts"


# Payment statuses that still owe the monthly contribution
UNPAID_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.OVERDUE})

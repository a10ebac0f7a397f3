"""
Member messaging

Message texts and the bulk broadcaster. Delivery itself goes through an
IMessenger (WhatsApp backend in production, MockMessenger in tests).
"""

from core.messaging.broadcaster import BroadcastResult, Broadcaster, DeliveryError
from core.messaging.templates import (
    deadline_info,
    draw_reminder_message,
    format_phone_number,
    format_token,
    receipt_message,
    reminder_message,
    token_assignment_message,
)

__all__ = [
    "Broadcaster",
    "BroadcastResult",
    "DeliveryError",
    "deadline_info",
    "draw_reminder_message",
    "format_phone_number",
    "format_token",
    "receipt_message",
    "reminder_message",
    "token_assignment_message",
]

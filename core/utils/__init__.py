"""
Utility package

Timezone handling shared by the engine and the message templates
"""

from core.utils.timezone import (
    IST,
    to_ist,
    format_ist,
    now_utc,
    now_ist,
)

__all__ = [
    "IST",
    "to_ist",
    "format_ist",
    "now_utc",
    "now_ist",
]

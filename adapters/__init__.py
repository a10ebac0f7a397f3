"""
Adapter layer

Integration with external services (database, WhatsApp backend).
Protocol based interfaces so mocks can be swapped in.
"""

from adapters.interfaces import (
    DeliveryResult,
    ILedgerStore,
    IMessenger,
)

__all__ = [
    "DeliveryResult",
    "ILedgerStore",
    "IMessenger",
]

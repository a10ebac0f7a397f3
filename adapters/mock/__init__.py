"""
Mock adapters

Test implementations conforming to the adapter Protocols, swappable for
the real ones.
"""

from adapters.mock.ledger_store import InMemoryLedgerStore
from adapters.mock.messenger import MockMessenger, SentMessage

__all__ = [
    "InMemoryLedgerStore",
    "MockMessenger",
    "SentMessage",
]

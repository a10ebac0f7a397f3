"""
Monthly ledger engine

Lifecycle operations over the per-month member collections, plus the
cross-month history queries.

Usage:
```python
from core.ledger import LedgerEngine, LedgerHistory

engine = LedgerEngine(store, months)
history = LedgerHistory(store, months)

await engine.assign_tokens(months.starting)
winners = await history.get_all_winners()
```
"""

from core.ledger.engine import LedgerEngine, TokenAudit
from core.ledger.history import LedgerHistory, MonthStats

__all__ = [
    "LedgerEngine",
    "LedgerHistory",
    "TokenAudit",
    "MonthStats",
]

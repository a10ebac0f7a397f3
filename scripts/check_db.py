#!/usr/bin/env python3
"""Print member counts, payment totals and the winner of every month"""

import argparse
import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter, resolve_db_path
from core.config.loader import get_settings
from core.domain.errors import LedgerError
from core.domain.months import display_name
from core.ledger import LedgerHistory
from core.storage import SQLiteMemberStore


async def main(db_path: str | None) -> None:
    settings = get_settings()
    path = resolve_db_path(db_path or settings.db_path)

    async with SQLiteAdapter(path, readonly=True) as db:
        history = LedgerHistory(
            SQLiteMemberStore(db),
            settings.months,
            contribution_amount=settings.scheme.contribution_amount,
        )

        print(f"DB Path: {path}")
        print(f"Scheme: {settings.scheme.name}\n")

        for month in settings.months:
            try:
                stats = await history.get_month_stats(month)
            except LedgerError as e:
                print(f"  {display_name(month):<16} -- {e}")
                continue

            winner = stats.winner.full_name if stats.winner else "-"
            print(
                f"  {display_name(month):<16} members={stats.total_members:<4} "
                f"paid={stats.paid:<4} pending={stats.pending:<4} "
                f"exempt={stats.no_payment_required:<4} winner={winner}"
            )

        print(f"\nTotal winners: {await history.count_winners()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ledger DB status")
    parser.add_argument("--db", default=None, help="DB path (default: from settings)")
    args = parser.parse_args()

    asyncio.run(main(args.db))

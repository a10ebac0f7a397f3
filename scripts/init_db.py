"""
Create the per-month member tables

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --db data/scheme.db --config config/settings.yaml
"""

import argparse
import asyncio
import logging
from pathlib import Path

# project root on the Python path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, init_month_tables, resolve_db_path
from core.config.loader import get_settings
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def main(db_path: str | None, config_path: Path | None) -> None:
    settings = get_settings(config_path)
    months = settings.months
    path = resolve_db_path(db_path or settings.db_path)

    logger.info(f"Initializing {path} for {months!r}")

    async with SQLiteAdapter(path) as db:
        await init_month_tables(db, months)
        tables = set(await db.list_tables())

    missing = [m for m in months if m not in tables]
    if missing:
        raise RuntimeError(f"Tables not created: {', '.join(missing)}")

    logger.info(f"Done: {len(months)} month tables present")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the month tables")
    parser.add_argument("--db", default=None, help="DB path (default: from settings)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="settings.yaml path (default: config/settings.yaml)",
    )
    args = parser.parse_args()

    setup_logging("cli")
    asyncio.run(main(args.db, args.config))

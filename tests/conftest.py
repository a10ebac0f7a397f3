"""
Shared pytest fixtures

Month sequence, in-memory store, engine and SQLite-backed store.
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_month_tables
from adapters.mock.ledger_store import InMemoryLedgerStore
from adapters.mock.messenger import MockMessenger
from core.config.loader import Settings
from core.domain.member import Member, MemberDraft
from core.domain.months import MonthSequence
from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import Broadcaster
from core.storage import SQLiteMemberStore


START = "september_2025"


@pytest.fixture
def temp_dir() -> Path:
    """OS independent temporary directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings singleton never leaks between tests"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def months() -> MonthSequence:
    """September 2025 .. December 2026"""
    return MonthSequence.starting_at(START, 16)


@pytest.fixture
def short_months() -> MonthSequence:
    """Three-month sequence for end-of-sequence cases"""
    return MonthSequence.starting_at(START, 3)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def engine(store: InMemoryLedgerStore, months: MonthSequence) -> LedgerEngine:
    return LedgerEngine(store, months)


@pytest.fixture
def history(store: InMemoryLedgerStore, months: MonthSequence) -> LedgerHistory:
    return LedgerHistory(store, months, contribution_amount=2000)


@pytest.fixture
def messenger() -> MockMessenger:
    return MockMessenger()


@pytest.fixture
def broadcaster(messenger: MockMessenger) -> Broadcaster:
    """No sleeping between sends or retries"""
    return Broadcaster(messenger, max_retries=3, retry_backoff_sec=0, message_delay_sec=0)


@pytest_asyncio.fixture
async def sqlite_db(temp_dir: Path, months: MonthSequence) -> AsyncGenerator[SQLiteAdapter, None]:
    """File-backed SQLite with every month table created"""
    async with SQLiteAdapter(temp_dir / "scheme.db") as db:
        await init_month_tables(db, months)
        yield db


@pytest.fixture
def sqlite_store(sqlite_db: SQLiteAdapter) -> SQLiteMemberStore:
    return SQLiteMemberStore(sqlite_db)


@pytest.fixture
def settings_file(temp_dir: Path) -> Path:
    """Valid settings.yaml"""
    content = """# test settings
database:
  path: data/test.db

scheme:
  name: TEST SCHEME
  start_month: january_2026
  total_months: 4
  contribution_amount: 1500
  payment_deadline_day: 10
  paid_to_recipients: [Rafi, Basheer]
  enforce_winner_eligibility: true

whatsapp:
  api_url: http://whatsapp.local:3001
  timeout_sec: 5
  max_retries: 2
  retry_backoff_sec: 0.5
  message_delay_sec: 0
"""
    path = temp_dir / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


async def add_roster(engine: LedgerEngine, *names: str, month: str = START) -> list[Member]:
    """Add members named `names` with mobile numbers 90000000NN"""
    members = []
    for i, name in enumerate(names, start=1):
        draft = MemberDraft(full_name=name, mobile_number=f"90000000{i:02d}")
        members.append(await engine.add_member(month, draft))
    return members


@pytest.fixture
def roster():
    """add_roster helper as a fixture"""
    return add_roster

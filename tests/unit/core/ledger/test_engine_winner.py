"""
Winner declaration tests
"""

import pytest

from adapters.mock.ledger_store import InMemoryLedgerStore
from core.domain.draw_status import DRAWN, Winner
from core.domain.errors import DuplicateWinnerError, InvariantViolation, NotFound
from core.domain.member import MemberDraft
from core.domain.months import MonthSequence
from core.ledger import LedgerEngine

START = "september_2025"


async def paid_roster(engine: LedgerEngine, *names: str) -> list:
    """Tokened roster with every member paid"""
    for i, name in enumerate(names, start=1):
        await engine.add_member(START, MemberDraft(name, f"90000000{i:02d}", payment_status="paid"))
    return await engine.assign_tokens(START)


class TestDeclareWinner:
    """declare_winner"""

    @pytest.mark.asyncio
    async def test_declare(self, engine: LedgerEngine, roster) -> None:
        """Winner carries the month marker"""
        asha, _ = await roster(engine, "Asha", "Bilal")

        winner = await engine.declare_winner(START, asha.id)

        assert winner.draw_status == Winner(START)
        assert winner.is_winner_of(START)
        assert (await engine.get_current_winner(START)).id == asha.id

    @pytest.mark.asyncio
    async def test_no_winner_yet(self, engine: LedgerEngine, roster) -> None:
        """No winner before a declaration"""
        await roster(engine, "Asha")
        assert await engine.get_current_winner(START) is None

    @pytest.mark.asyncio
    async def test_second_winner_rejected(
        self, engine: LedgerEngine, store: InMemoryLedgerStore, roster
    ) -> None:
        """One winner per month, no write on rejection"""
        asha, bilal = await roster(engine, "Asha", "Bilal")
        await engine.declare_winner(START, asha.id)
        writes_before = len(store.writes(START))

        with pytest.raises(DuplicateWinnerError) as exc_info:
            await engine.declare_winner(START, bilal.id)

        assert exc_info.value.member_id == asha.id
        assert len(store.writes(START)) == writes_before
        winners = [m for m in await engine.list_members(START) if m.is_winner_of(START)]
        assert [m.id for m in winners] == [asha.id]

    @pytest.mark.asyncio
    async def test_redeclare_same_member_rejected(self, engine: LedgerEngine, roster) -> None:
        """Declaring the same member again"""
        (asha,) = await roster(engine, "Asha")
        await engine.declare_winner(START, asha.id)

        with pytest.raises(DuplicateWinnerError):
            await engine.declare_winner(START, asha.id)

    @pytest.mark.asyncio
    async def test_second_winner_via_update_rejected(self, engine: LedgerEngine, roster) -> None:
        """The update path cannot add a second winner"""
        asha, bilal = await roster(engine, "Asha", "Bilal")
        await engine.declare_winner(START, asha.id)

        with pytest.raises(InvariantViolation):
            await engine.update_member(START, bilal.id, {"draw_status": f"winner_{START}"})

        assert (await engine.get_current_winner(START)).id == asha.id

    @pytest.mark.asyncio
    async def test_unknown_member(self, engine: LedgerEngine) -> None:
        """Unknown member id"""
        with pytest.raises(NotFound):
            await engine.declare_winner(START, 404)

    @pytest.mark.asyncio
    async def test_ineligible_allowed_when_not_enforced(self, engine: LedgerEngine, roster) -> None:
        """Pending, untokened member can still be declared"""
        (asha,) = await roster(engine, "Asha")

        winner = await engine.declare_winner(START, asha.id)

        assert winner.is_winner_of(START)

    @pytest.mark.asyncio
    async def test_winner_payment_locked(self, engine: LedgerEngine) -> None:
        """Payment fields lock once declared"""
        (asha,) = await paid_roster(engine, "Asha")
        await engine.declare_winner(START, asha.id)

        with pytest.raises(InvariantViolation):
            await engine.update_member(START, asha.id, {"payment_status": "pending"})


class TestEnforcedEligibility:
    """enforce_winner_eligibility=True"""

    @pytest.fixture
    def strict_engine(self, store: InMemoryLedgerStore, months: MonthSequence) -> LedgerEngine:
        return LedgerEngine(store, months, enforce_winner_eligibility=True)

    @pytest.mark.asyncio
    async def test_eligible_member(self, strict_engine: LedgerEngine) -> None:
        """Paid, tokened and not drawn"""
        asha, _ = await paid_roster(strict_engine, "Asha", "Bilal")

        winner = await strict_engine.declare_winner(START, asha.id)

        assert winner.is_winner_of(START)

    @pytest.mark.asyncio
    async def test_unpaid_rejected(self, strict_engine: LedgerEngine, roster) -> None:
        """Unpaid member cannot win"""
        (asha,) = await roster(strict_engine, "Asha")
        await strict_engine.assign_tokens(START)

        with pytest.raises(InvariantViolation) as exc_info:
            await strict_engine.declare_winner(START, asha.id)

        assert exc_info.value.member_id == asha.id
        assert await strict_engine.get_current_winner(START) is None

    @pytest.mark.asyncio
    async def test_untokened_rejected(self, strict_engine: LedgerEngine) -> None:
        """Member without a token cannot win"""
        asha = await strict_engine.add_member(START, MemberDraft("Asha", "1", payment_status="paid"))

        with pytest.raises(InvariantViolation):
            await strict_engine.declare_winner(START, asha.id)

    @pytest.mark.asyncio
    async def test_drawn_rejected(self, strict_engine: LedgerEngine) -> None:
        """Previous winner cannot win again"""
        asha = await strict_engine.add_member(
            START, MemberDraft("Asha", "1", payment_status="paid", token_number=1, draw_status=DRAWN)
        )

        with pytest.raises(InvariantViolation):
            await strict_engine.declare_winner(START, asha.id)

    @pytest.mark.asyncio
    async def test_update_cannot_bypass_eligibility(self, strict_engine: LedgerEngine, roster) -> None:
        """An ineligible member cannot be made winner through an update"""
        _, bilal = await roster(strict_engine, "Asha", "Bilal")

        with pytest.raises(InvariantViolation) as exc_info:
            await strict_engine.update_member(START, bilal.id, {"draw_status": Winner(START)})

        assert exc_info.value.field == "draw_status"
        assert await strict_engine.get_current_winner(START) is None
        member = await strict_engine.get_member(START, bilal.id)
        assert member.draw_status != Winner(START)


class TestEligibleForDraw:
    @pytest.mark.asyncio
    async def test_token_order_and_filter(self, engine: LedgerEngine) -> None:
        """Eligible members in token order"""
        await paid_roster(engine, "Charu", "Asha", "Bilal")
        members = await engine.list_members(START)
        bilal = next(m for m in members if m.full_name == "Bilal")
        await engine.update_member(START, bilal.id, {"payment_status": "pending"})
        await engine.add_member(START, MemberDraft("Dev", "4", payment_status="paid"))

        eligible = await engine.eligible_for_draw(START)

        assert [(m.full_name, m.token_number) for m in eligible] == [("Asha", 1), ("Charu", 3)]

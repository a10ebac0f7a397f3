"""
Month routes

Sequence overview, stats, advance and reconciliation
"""

from fastapi import APIRouter, Depends, Path

from core.ledger import LedgerEngine, LedgerHistory
from web.dependencies import get_engine, get_history
from web.models.responses import (
    AdvanceResponse,
    MonthsResponse,
    MonthStatsResponse,
    ReconcileResponse,
)
from web.services.scheme_service import SchemeService

router = APIRouter(prefix="/api/months", tags=["Months"])


@router.get("", response_model=MonthsResponse)
async def list_months(
    engine: LedgerEngine = Depends(get_engine),
    history: LedgerHistory = Depends(get_history),
) -> MonthsResponse:
    """All months of the scheme with member counts"""
    service = SchemeService(engine, history)
    return MonthsResponse(**await service.get_months_overview())


@router.get("/{month}/stats", response_model=MonthStatsResponse)
async def month_stats(
    month: str = Path(..., description="Month identifier"),
    history: LedgerHistory = Depends(get_history),
) -> MonthStatsResponse:
    stats = await history.get_month_stats(month)
    return MonthStatsResponse(**stats.to_dict())


@router.post("/{month}/advance", response_model=AdvanceResponse)
async def advance_month(
    month: str = Path(..., description="Month to advance from"),
    engine: LedgerEngine = Depends(get_engine),
    history: LedgerHistory = Depends(get_history),
) -> AdvanceResponse:
    """Seed the next month from this one

    Fails with 409 when the next month is already seeded, the roster is
    empty or this is the last month.
    """
    service = SchemeService(engine, history)
    return AdvanceResponse(**await service.advance(month))


@router.post("/{month}/reconcile", response_model=ReconcileResponse)
async def reconcile_month(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> ReconcileResponse:
    """Force payment exemption on members who already won"""
    corrected = await engine.reconcile_month(month)
    return ReconcileResponse(month=month, corrected=corrected)

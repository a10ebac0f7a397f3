"""
Winner routes

Declaration, draw eligibility, winner board and member history
"""

from fastapi import APIRouter, Depends, Path, Query

from core.ledger import LedgerEngine, LedgerHistory
from web.dependencies import get_engine, get_history
from web.models.requests import DeclareWinnerRequest
from web.models.responses import HistoryResponse, MemberResponse, WinnersResponse
from web.services.scheme_service import SchemeService

router = APIRouter(prefix="/api", tags=["Winners"])


@router.get("/months/{month}/winner", response_model=MemberResponse | None)
async def get_winner(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> MemberResponse | None:
    """This month's winner (null if not declared yet)"""
    winner = await engine.get_current_winner(month)
    return MemberResponse(**winner.to_dict()) if winner else None


@router.post("/months/{month}/winner", response_model=MemberResponse)
async def declare_winner(
    request: DeclareWinnerRequest,
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> MemberResponse:
    """Declare the winner (409 if one already exists)"""
    winner = await engine.declare_winner(month, request.member_id)
    return MemberResponse(**winner.to_dict())


@router.get("/months/{month}/eligible", response_model=list[MemberResponse])
async def eligible_members(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[MemberResponse]:
    """Paid, tokened, not yet drawn members in token order"""
    members = await engine.eligible_for_draw(month)
    return [MemberResponse(**m.to_dict()) for m in members]


@router.get("/winners", response_model=WinnersResponse)
async def all_winners(
    engine: LedgerEngine = Depends(get_engine),
    history: LedgerHistory = Depends(get_history),
) -> WinnersResponse:
    service = SchemeService(engine, history)
    return WinnersResponse(**await service.get_winners())


@router.get("/history", response_model=HistoryResponse)
async def member_history(
    name: str = Query(..., description="Full name (exact)"),
    mobile: str = Query(..., description="Mobile number (exact)"),
    engine: LedgerEngine = Depends(get_engine),
    history: LedgerHistory = Depends(get_history),
) -> HistoryResponse:
    """One member's record in every month"""
    service = SchemeService(engine, history)
    return HistoryResponse(**await service.get_member_history(name, mobile))

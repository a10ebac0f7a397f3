"""
Token routes

POST assigns tokens 1..N in name order, GET audits them.
"""

from fastapi import APIRouter, Depends, Path

from core.ledger import LedgerEngine
from web.dependencies import get_engine
from web.models.responses import MemberResponse, TokenAuditResponse

router = APIRouter(prefix="/api/months/{month}", tags=["Tokens"])


@router.post("/tokens", response_model=list[MemberResponse])
async def assign_tokens(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[MemberResponse]:
    """Renumber tokens; running it again repairs an inconsistent roster"""
    members = await engine.assign_tokens(month)
    return [MemberResponse(**m.to_dict()) for m in members]


@router.get("/tokens", response_model=TokenAuditResponse)
async def audit_tokens(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> TokenAuditResponse:
    audit = await engine.audit_tokens(month)
    return TokenAuditResponse(**audit.to_dict())

"""
Member routes

Per-month member CRUD
"""

from fastapi import APIRouter, Depends, Path, Response

from core.domain.member import MemberDraft
from core.ledger import LedgerEngine, LedgerHistory
from web.dependencies import get_engine, get_history
from web.models.requests import MemberCreateRequest, MemberUpdateRequest
from web.models.responses import MemberResponse

router = APIRouter(prefix="/api/months/{month}", tags=["Members"])


@router.get("/members", response_model=list[MemberResponse])
async def list_members(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[MemberResponse]:
    """Members of the month in name order"""
    members = await engine.list_members(month)
    return [MemberResponse(**m.to_dict()) for m in members]


@router.post("/members", response_model=MemberResponse, status_code=201)
async def add_member(
    request: MemberCreateRequest,
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> MemberResponse:
    """Add a member (starting month only)"""
    draft = MemberDraft(
        full_name=request.full_name,
        mobile_number=request.mobile_number,
        family=request.family,
        payment_status=request.payment_status,
        paid_to=request.paid_to,
        token_number=request.token_number,
        additional_information=request.additional_information,
    )
    member = await engine.add_member(
        month, draft, share_family_mobile=request.share_family_mobile
    )
    return MemberResponse(**member.to_dict())


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(
    month: str = Path(..., description="Month identifier"),
    member_id: int = Path(..., description="Member id"),
    engine: LedgerEngine = Depends(get_engine),
) -> MemberResponse:
    member = await engine.get_member(month, member_id)
    return MemberResponse(**member.to_dict())


@router.patch("/members/{member_id}", response_model=MemberResponse)
async def update_member(
    request: MemberUpdateRequest,
    month: str = Path(..., description="Month identifier"),
    member_id: int = Path(..., description="Member id"),
    engine: LedgerEngine = Depends(get_engine),
) -> MemberResponse:
    """Partial update

    Payment fields of winners and exempt members are locked (409).
    """
    member = await engine.update_member(
        month,
        member_id,
        request.to_patch(),
        share_family_mobile=request.share_family_mobile,
    )
    return MemberResponse(**member.to_dict())


@router.delete("/members/{member_id}", status_code=204)
async def delete_member(
    month: str = Path(..., description="Month identifier"),
    member_id: int = Path(..., description="Member id"),
    engine: LedgerEngine = Depends(get_engine),
) -> Response:
    await engine.delete_member(month, member_id)
    return Response(status_code=204)


@router.get("/families", response_model=list[str])
async def list_families(
    month: str = Path(..., description="Month identifier"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[str]:
    """Family names in use (Individual excluded)"""
    return await engine.get_existing_family_names(month)


@router.get("/families/{family}", response_model=list[MemberResponse])
async def list_family_members(
    month: str = Path(..., description="Month identifier"),
    family: str = Path(..., description="Family name"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[MemberResponse]:
    members = await engine.get_family_members(month, family)
    return [MemberResponse(**m.to_dict()) for m in members]


@router.get("/unpaid", response_model=list[MemberResponse])
async def list_unpaid(
    month: str = Path(..., description="Month identifier"),
    history: LedgerHistory = Depends(get_history),
) -> list[MemberResponse]:
    """Pending and overdue members"""
    members = await history.get_unpaid_members(month)
    return [MemberResponse(**m.to_dict()) for m in members]

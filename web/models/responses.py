"""
Response schemas (Pydantic)

API response serialization
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Service status")
    scheme: str = Field(..., description="Scheme name")
    starting_month: str = Field(..., description="First month of the scheme")
    version: str = Field(..., description="API version")


class ErrorResponse(BaseModel):
    """Ledger error payload"""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human readable message")
    month: str | None = Field(default=None, description="Month involved")
    member_id: int | None = Field(default=None, description="Member involved")
    field: str | None = Field(default=None, description="Field involved")


class MemberResponse(BaseModel):
    id: int = Field(..., description="Record id (per month)")
    token_number: int | None = Field(default=None, description="Token number")
    full_name: str = Field(..., description="Member name")
    mobile_number: str = Field(..., description="Mobile number")
    family: str = Field(..., description="Family group")
    payment_status: str = Field(..., description="pending / paid / overdue / no_payment_required")
    paid_to: str | None = Field(default=None, description="Collected by")
    draw_status: str = Field(..., description="not_drawn / drawn / winner_<month>")
    additional_information: str | None = Field(default=None, description="Notes")
    created_at: str | None = Field(default=None, description="Created at (UTC)")
    updated_at: str | None = Field(default=None, description="Last update (UTC)")


class MonthInfo(BaseModel):
    month: str = Field(..., description="Month identifier")
    display_name: str = Field(..., description="e.g. September 2025")
    index: int = Field(..., description="Position in the sequence")
    member_count: int | None = Field(default=None, description="Members (None = unreadable)")


class MonthsResponse(BaseModel):
    """Month sequence overview"""

    starting_month: str = Field(..., description="First month")
    last_month: str = Field(..., description="Last month")
    months: list[MonthInfo] = Field(default_factory=list, description="All months in order")


class TokenAuditResponse(BaseModel):
    month: str = Field(..., description="Audited month")
    total_members: int = Field(..., description="Roster size")
    missing: list[int] = Field(default_factory=list, description="Member ids without a token")
    duplicates: dict[str, list[int]] = Field(default_factory=dict, description="Token -> member ids")
    gaps: list[int] = Field(default_factory=list, description="Unused token numbers below the max")
    is_consistent: bool = Field(..., description="No missing, duplicate or gap")


class MonthStatsResponse(BaseModel):
    month: str = Field(..., description="Month identifier")
    total_members: int = Field(..., description="Roster size")
    with_tokens: int = Field(..., description="Members with a token")
    paid: int = Field(..., description="Paid members")
    pending: int = Field(..., description="Pending members")
    overdue: int = Field(..., description="Overdue members")
    no_payment_required: int = Field(..., description="Exempt (past winners)")
    drawn: int = Field(..., description="Members who have won")
    has_winner: bool = Field(..., description="Winner declared this month")
    winner: MemberResponse | None = Field(default=None, description="This month's winner")
    collected_amount: int = Field(..., description="paid x contribution")


class AdvanceResponse(BaseModel):
    current_month: str = Field(..., description="Month advanced from")
    next_month: str = Field(..., description="Newly seeded month")
    member_count: int = Field(..., description="Members carried forward")


class ReconcileResponse(BaseModel):
    month: str = Field(..., description="Reconciled month")
    corrected: list[int] = Field(default_factory=list, description="Corrected member ids")


class WinnerEntry(BaseModel):
    month: str = Field(..., description="Month identifier")
    display_name: str = Field(..., description="e.g. September 2025")
    winner: MemberResponse | None = Field(default=None, description="Winner (None = not drawn)")


class WinnersResponse(BaseModel):
    total_winners: int = Field(..., description="Months with a winner")
    winners: list[WinnerEntry] = Field(default_factory=list, description="Per month, in order")


class HistoryEntry(BaseModel):
    month: str = Field(..., description="Month identifier")
    display_name: str = Field(..., description="e.g. September 2025")
    record: MemberResponse | None = Field(default=None, description="None = did not participate")


class HistoryResponse(BaseModel):
    full_name: str = Field(..., description="Member name")
    mobile_number: str = Field(..., description="Mobile number")
    history: list[HistoryEntry] = Field(default_factory=list, description="Per month, in order")


class DeliveryErrorResponse(BaseModel):
    member_id: int
    member_name: str
    error: str


class BroadcastResponse(BaseModel):
    kind: str = Field(..., description="Message kind")
    month: str = Field(..., description="Month identifier")
    success: bool = Field(..., description="No failed delivery")
    sent: int = Field(..., description="Delivered messages")
    failed: int = Field(..., description="Failed after retries")
    skipped: int = Field(..., description="Members not addressed by this kind")
    errors: list[DeliveryErrorResponse] = Field(default_factory=list, description="Failures")


class WhatsAppStatusResponse(BaseModel):
    is_accessible: bool = Field(..., description="Backend reachable")
    is_ready: bool = Field(..., description="WhatsApp session ready")
    status: str = Field(..., description="Connection status")
    error: str | None = Field(default=None, description="Error detail")

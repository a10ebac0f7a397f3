"""
Request schemas (Pydantic)

Shape validation only; field rules (blank names, token ranges, locked
payment fields) are enforced by the ledger engine.
"""

from typing import Literal

from pydantic import BaseModel, Field

from core.types import PaymentStatus


class MemberCreateRequest(BaseModel):
    """New member (starting month only)"""

    full_name: str = Field(..., description="Member name")
    mobile_number: str = Field(default="", description="Mobile number (may be shared with family)")
    family: str | None = Field(default=None, description="Family group (default Individual)")
    payment_status: PaymentStatus | None = Field(default=None, description="Initial payment status")
    paid_to: str | None = Field(default=None, description="Collected by")
    token_number: int | None = Field(default=None, description="Token number")
    additional_information: str | None = Field(default=None, description="Notes")
    share_family_mobile: bool = Field(
        default=False,
        description="Use the mobile number of an existing family member",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Asha Begum",
                    "mobile_number": "9876543210",
                    "family": "Begum",
                    "share_family_mobile": False,
                }
            ]
        }
    }


class MemberUpdateRequest(BaseModel):
    """Partial member update (only the fields sent are applied)"""

    full_name: str | None = Field(default=None, description="Member name")
    mobile_number: str | None = Field(default=None, description="Mobile number")
    family: str | None = Field(default=None, description="Family group")
    payment_status: PaymentStatus | None = Field(default=None, description="Payment status")
    paid_to: str | None = Field(default=None, description="Collected by")
    draw_status: Literal["not_drawn", "drawn"] | None = Field(
        default=None,
        description="not_drawn / drawn (winners are declared through /winner)",
    )
    token_number: int | None = Field(default=None, description="Token number")
    additional_information: str | None = Field(default=None, description="Notes")
    share_family_mobile: bool = Field(
        default=False,
        description="Use the mobile number of an existing family member",
    )

    def to_patch(self) -> dict:
        patch = self.model_dump(exclude_unset=True, exclude={"share_family_mobile"})
        if patch.get("payment_status") is not None:
            patch["payment_status"] = PaymentStatus(patch["payment_status"])
        return patch


class DeclareWinnerRequest(BaseModel):
    member_id: int = Field(..., description="Winning member id")

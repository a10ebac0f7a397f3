"""
Member record model

A Member is scoped to exactly one month's collection. Drafts and patches are
validated here before they reach the store.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from core.constants import Defaults
from core.domain.draw_status import (
    NOT_DRAWN,
    DrawStatus,
    coerce_draw_status,
    encode_draw_status,
    has_won,
    is_winner_of,
)
from core.domain.errors import ValidationError
from core.types import PaymentStatus


# Fields an ordinary edit may touch
UPDATABLE_FIELDS = frozenset({
    "full_name",
    "mobile_number",
    "family",
    "payment_status",
    "paid_to",
    "draw_status",
    "token_number",
    "additional_information",
})

# Fields frozen once a member has won
PAYMENT_FIELDS = frozenset({"payment_status", "paid_to"})


@dataclass(frozen=True)
class Member:
    """Member record of one month"""

    id: int
    full_name: str
    mobile_number: str
    family: str = Defaults.FAMILY
    payment_status: PaymentStatus = PaymentStatus.PENDING
    paid_to: str | None = None
    draw_status: DrawStatus = NOT_DRAWN
    token_number: int | None = None
    additional_information: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_won(self) -> bool:
        """Won in this or any earlier month"""
        return has_won(self.draw_status)

    @property
    def is_payment_locked(self) -> bool:
        """Payment fields can no longer be edited"""
        return self.has_won or self.payment_status == PaymentStatus.NO_PAYMENT_REQUIRED

    @property
    def identity(self) -> tuple[str, str]:
        """Cross-month identity: (full_name, mobile_number)"""
        return self.full_name, self.mobile_number

    @property
    def payment_date(self) -> datetime | None:
        """When the payment was recorded (updated_at of a paid record)"""
        if self.payment_status == PaymentStatus.PAID:
            return self.updated_at
        return None

    def is_winner_of(self, month: str) -> bool:
        return is_winner_of(self.draw_status, month)

    def is_eligible_for_draw(self) -> bool:
        """Paid, tokened and not drawn yet"""
        return (
            self.payment_status == PaymentStatus.PAID
            and self.token_number is not None
            and not self.has_won
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain data for messaging and the web layer"""
        return {
            "id": self.id,
            "token_number": self.token_number,
            "full_name": self.full_name,
            "mobile_number": self.mobile_number,
            "family": self.family,
            "payment_status": self.payment_status.value,
            "paid_to": self.paid_to,
            "draw_status": encode_draw_status(self.draw_status),
            "additional_information": self.additional_information,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Member":
        """Build from a storage row (strings for enums and timestamps)"""
        return cls(
            id=int(row["id"]),
            full_name=row["full_name"],
            mobile_number=row["mobile_number"],
            family=row.get("family") or Defaults.FAMILY,
            payment_status=PaymentStatus(row.get("payment_status") or PaymentStatus.PENDING),
            paid_to=row.get("paid_to"),
            draw_status=coerce_draw_status(row.get("draw_status") or NOT_DRAWN),
            token_number=row.get("token_number"),
            additional_information=row.get("additional_information"),
            created_at=_parse_ts(row.get("created_at")),
            updated_at=_parse_ts(row.get("updated_at")),
        )


def _parse_ts(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class MemberDraft:
    """Input for a new member record

    Omitted fields take the defaults: family "Individual", payment pending,
    not drawn.
    """

    full_name: str
    mobile_number: str
    family: str | None = None
    payment_status: PaymentStatus | str | None = None
    paid_to: str | None = None
    draw_status: DrawStatus | str | None = None
    token_number: int | None = None
    additional_information: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Validated field dict with defaults applied

        Raises:
            ValidationError: empty name/mobile, unknown status values
        """
        return normalize_patch({
            "full_name": self.full_name,
            "mobile_number": self.mobile_number,
            "family": self.family or Defaults.FAMILY,
            "payment_status": self.payment_status or PaymentStatus.PENDING,
            "paid_to": self.paid_to,
            "draw_status": self.draw_status or NOT_DRAWN,
            "token_number": self.token_number,
            "additional_information": self.additional_information,
        })


def normalize_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce a field dict

    Returns:
        new dict with enum/variant values and stripped strings

    Raises:
        ValidationError: unknown field or invalid value
    """
    result: dict[str, Any] = {}

    for key, value in patch.items():
        if key not in UPDATABLE_FIELDS:
            raise ValidationError(f"Field cannot be set: '{key}'", field=key)

        if key in ("full_name", "mobile_number"):
            if value is None or not str(value).strip():
                raise ValidationError(f"{key} is required", field=key)
            value = str(value).strip()

        elif key == "family":
            value = str(value).strip() if value and str(value).strip() else Defaults.FAMILY

        elif key == "payment_status":
            try:
                value = PaymentStatus(value)
            except ValueError:
                raise ValidationError(
                    f"Invalid payment status: '{value}'", field=key
                ) from None

        elif key == "draw_status":
            value = coerce_draw_status(value)

        elif key == "token_number":
            if value is not None:
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise ValidationError(
                        f"Token number must be a positive integer: {value!r}", field=key
                    )

        elif key in ("paid_to", "additional_information"):
            if value is not None:
                value = str(value).strip() or None

        result[key] = value

    return result

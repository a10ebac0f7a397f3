"""
core/domain/member.py tests

Member model, drafts and patch normalization
"""

from datetime import datetime, timezone

import pytest

from core.domain.draw_status import DRAWN, NOT_DRAWN, Winner
from core.domain.errors import ValidationError
from core.domain.member import Member, MemberDraft, normalize_patch
from core.types import PaymentStatus


def make_member(**overrides) -> Member:
    values = {"id": 1, "full_name": "Asha", "mobile_number": "9876543210"}
    values.update(overrides)
    return Member(**values)


class TestMember:
    """Member properties"""

    def test_defaults(self) -> None:
        """New record defaults"""
        member = make_member()
        assert member.family == "Individual"
        assert member.payment_status == PaymentStatus.PENDING
        assert member.draw_status == NOT_DRAWN
        assert member.token_number is None

    @pytest.mark.parametrize(
        "overrides, locked",
        [
            ({}, False),
            ({"payment_status": PaymentStatus.PAID}, False),
            ({"draw_status": DRAWN}, True),
            ({"draw_status": Winner("september_2025")}, True),
            ({"payment_status": PaymentStatus.NO_PAYMENT_REQUIRED}, True),
        ],
    )
    def test_payment_lock(self, overrides: dict, locked: bool) -> None:
        """Drawn and exempt records lock payment fields"""
        assert make_member(**overrides).is_payment_locked is locked

    def test_eligible_for_draw(self) -> None:
        """Paid, tokened and not drawn"""
        assert make_member(payment_status=PaymentStatus.PAID, token_number=3).is_eligible_for_draw()
        assert not make_member(payment_status=PaymentStatus.PAID).is_eligible_for_draw()
        assert not make_member(token_number=3).is_eligible_for_draw()
        assert not make_member(
            payment_status=PaymentStatus.PAID, token_number=3, draw_status=DRAWN
        ).is_eligible_for_draw()

    def test_payment_date_only_when_paid(self) -> None:
        """Receipt date comes from updated_at"""
        ts = datetime(2025, 9, 5, 10, 0, tzinfo=timezone.utc)
        assert make_member(payment_status=PaymentStatus.PAID, updated_at=ts).payment_date == ts
        assert make_member(updated_at=ts).payment_date is None

    def test_row_round_trip(self) -> None:
        """to_dict output reads back through from_row"""
        member = make_member(
            token_number=4,
            draw_status=Winner("october_2025"),
            created_at=datetime(2025, 9, 1, tzinfo=timezone.utc),
            updated_at=datetime(2025, 9, 2, tzinfo=timezone.utc),
        )
        data = member.to_dict()

        assert data["draw_status"] == "winner_october_2025"
        assert data["payment_status"] == "pending"
        assert Member.from_row(data) == member


class TestMemberDraft:
    def test_defaults_applied(self) -> None:
        """Draft fills family and statuses"""
        record = MemberDraft(full_name="  Asha ", mobile_number=" 98765 ").to_record()

        assert record["full_name"] == "Asha"
        assert record["mobile_number"] == "98765"
        assert record["family"] == "Individual"
        assert record["payment_status"] == PaymentStatus.PENDING
        assert record["draw_status"] == NOT_DRAWN

    @pytest.mark.parametrize("name, mobile", [("", "1"), ("   ", "1"), ("Asha", ""), ("Asha", "  ")])
    def test_blank_required_fields(self, name: str, mobile: str) -> None:
        """Name and mobile are required"""
        with pytest.raises(ValidationError) as exc_info:
            MemberDraft(full_name=name, mobile_number=mobile).to_record()
        assert exc_info.value.field in ("full_name", "mobile_number")


class TestNormalizePatch:
    def test_unknown_field(self) -> None:
        """Unknown patch field"""
        with pytest.raises(ValidationError) as exc_info:
            normalize_patch({"created_at": "x"})
        assert exc_info.value.field == "created_at"

    def test_id_is_not_settable(self) -> None:
        """id is immutable"""
        with pytest.raises(ValidationError):
            normalize_patch({"id": 5})

    @pytest.mark.parametrize("token", [0, -1, "3", 2.5, True])
    def test_invalid_token(self, token) -> None:
        """Token must be positive"""
        with pytest.raises(ValidationError):
            normalize_patch({"token_number": token})

    def test_token_can_be_cleared(self) -> None:
        """None clears the token"""
        assert normalize_patch({"token_number": None}) == {"token_number": None}

    def test_status_coercion(self) -> None:
        """Status strings become enums"""
        patch = normalize_patch({"payment_status": "paid", "draw_status": "drawn"})
        assert patch == {"payment_status": PaymentStatus.PAID, "draw_status": DRAWN}

    def test_invalid_payment_status(self) -> None:
        """Unknown payment status"""
        with pytest.raises(ValidationError):
            normalize_patch({"payment_status": "refunded"})

    def test_blank_optional_text_becomes_none(self) -> None:
        """Blank notes are stored as None"""
        patch = normalize_patch({"paid_to": "  ", "additional_information": " note "})
        assert patch == {"paid_to": None, "additional_information": "note"}

    def test_blank_family_defaults(self) -> None:
        """Blank family falls back to Individual"""
        assert normalize_patch({"family": ""}) == {"family": "Individual"}

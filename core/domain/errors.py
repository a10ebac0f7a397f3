"""
Ledger error taxonomy

Every engine failure carries enough context (month, member id, field)
for the caller to render a user-facing message verbatim.
"""

from typing import Any


class LedgerError(Exception):
    """Base ledger error

    Args:
        message: human readable message
        month: month identifier involved (optional)
        member_id: member record id involved (optional)
        field: field name involved (optional)
    """

    def __init__(
        self,
        message: str,
        month: str | None = None,
        member_id: int | None = None,
        field: str | None = None,
    ):
        self.message = message
        self.month = month
        self.member_id = member_id
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable error payload"""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "month": self.month,
            "member_id": self.member_id,
            "field": self.field,
        }


class ValidationError(LedgerError):
    """Bad input to create/update"""
    pass


class NotFound(LedgerError):
    """Unknown member id or month"""
    pass


class InvariantViolation(LedgerError):
    """Attempted mutation of a protected record"""
    pass


class DuplicateWinnerError(LedgerError):
    """A winner already exists for the month"""
    pass


class EmptyRosterError(LedgerError):
    """Operation needs members, found none"""
    pass


class AlreadySeededError(LedgerError):
    """Next month is already populated"""
    pass


class EndOfSequenceError(LedgerError):
    """No next month exists"""
    pass


class StoreError(LedgerError):
    """Underlying store failure

    The original exception is kept as ``cause`` (and chained with ``from``).
    """

    def __init__(
        self,
        message: str,
        month: str | None = None,
        member_id: int | None = None,
        cause: BaseException | None = None,
    ):
        self.cause = cause
        super().__init__(message, month=month, member_id=member_id)


class ConstraintViolation(StoreError):
    """Store-side constraint rejected a write

    ``field`` names the constrained column when the store can tell
    (token_number, draw_status).
    """

    def __init__(
        self,
        message: str,
        month: str | None = None,
        member_id: int | None = None,
        field: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, month=month, member_id=member_id, cause=cause)
        self.field = field

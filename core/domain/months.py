"""
Month Sequence

Fixed, totally ordered list of the month identifiers the scheme runs over.
A month identifier has the form "<monthname>_<year>" (e.g. "september_2025").

The starting month is structurally index 0 of the sequence.
"""

from collections.abc import Iterator, Sequence

from core.constants import Defaults
from core.domain.errors import NotFound, ValidationError


MONTH_NAMES: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


def parse_month_id(month: str) -> tuple[int, int]:
    """Split a month identifier into (month number 1-12, year)

    Raises:
        ValidationError: malformed identifier
    """
    name, sep, year = month.partition("_")
    if not sep or name not in MONTH_NAMES or not year.isdigit() or len(year) != 4:
        raise ValidationError(f"Invalid month identifier: '{month}'", month=month)
    return MONTH_NAMES.index(name) + 1, int(year)


def make_month_id(month_number: int, year: int) -> str:
    """(3, 2026) -> "march_2026" """
    return f"{MONTH_NAMES[month_number - 1]}_{year}"


def display_name(month: str) -> str:
    """"september_2025" -> "September 2025" """
    name, _, year = month.partition("_")
    return f"{name.capitalize()} {year}"


class MonthSequence:
    """Immutable ordered month sequence

    Args:
        months: month identifiers in scheme order

    Usage:
    ```python
    months = MonthSequence.starting_at("september_2025", 16)
    months.starting          # "september_2025"
    months.next("december_2025")  # "january_2026"
    months.next(months.last)      # None
    ```
    """

    def __init__(self, months: Sequence[str]):
        if not months:
            raise ValidationError("Month sequence must not be empty")

        for month in months:
            parse_month_id(month)

        if len(set(months)) != len(months):
            raise ValidationError("Month sequence contains duplicates")

        self._months: tuple[str, ...] = tuple(months)
        self._index: dict[str, int] = {m: i for i, m in enumerate(self._months)}

    @classmethod
    def starting_at(
        cls,
        start_month: str = Defaults.START_MONTH,
        length: int = Defaults.TOTAL_MONTHS,
    ) -> "MonthSequence":
        """Build `length` consecutive calendar months from `start_month`"""
        if length < 1:
            raise ValidationError(f"Sequence length must be positive: {length}")

        month_number, year = parse_month_id(start_month)
        months = []
        for offset in range(length):
            absolute = (month_number - 1) + offset
            months.append(make_month_id(absolute % 12 + 1, year + absolute // 12))
        return cls(months)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    @property
    def months(self) -> tuple[str, ...]:
        return self._months

    @property
    def starting(self) -> str:
        """First month of the scheme"""
        return self._months[0]

    @property
    def last(self) -> str:
        return self._months[-1]

    def index(self, month: str) -> int:
        """Position of `month` in the sequence

        Raises:
            NotFound: month is not part of the sequence
        """
        try:
            return self._index[month]
        except KeyError:
            raise NotFound(f"Unknown month: '{month}'", month=month) from None

    def require(self, month: str) -> str:
        """Return `month` if known, raise NotFound otherwise"""
        self.index(month)
        return month

    def next(self, month: str) -> str | None:
        """Following month, None if `month` is the last one"""
        i = self.index(month)
        if i == len(self._months) - 1:
            return None
        return self._months[i + 1]

    def previous(self, month: str) -> str | None:
        """Preceding month, None if `month` is the starting one"""
        i = self.index(month)
        if i == 0:
            return None
        return self._months[i - 1]

    def before(self, month: str) -> tuple[str, ...]:
        """All months strictly earlier than `month`"""
        return self._months[: self.index(month)]

    def is_starting(self, month: str) -> bool:
        return self.index(month) == 0

    def is_last(self, month: str) -> bool:
        return self.index(month) == len(self._months) - 1

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[str]:
        return iter(self._months)

    def __len__(self) -> int:
        return len(self._months)

    def __contains__(self, month: object) -> bool:
        return month in self._index

    def __repr__(self) -> str:
        return f"MonthSequence({self.starting!r}..{self.last!r}, {len(self)} months)"

"""
Draw status variant

NotDrawn | Drawn | Winner(month)

Winner carries the month it was won in as structured data. The string form
("not_drawn", "drawn", "winner_<month>") only exists at the storage boundary
through encode_draw_status / decode_draw_status.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from core.domain.errors import ValidationError
from core.domain.months import parse_month_id
from core.types import DrawKind


@dataclass(frozen=True)
class NotDrawn:
    """Has not won yet"""

    kind: ClassVar[DrawKind] = DrawKind.NOT_DRAWN


@dataclass(frozen=True)
class Drawn:
    """Won in a past month whose identity is no longer tracked on this row"""

    kind: ClassVar[DrawKind] = DrawKind.DRAWN


@dataclass(frozen=True)
class Winner:
    """Winner of `month`"""

    month: str
    kind: ClassVar[DrawKind] = DrawKind.WINNER

    def __post_init__(self) -> None:
        parse_month_id(self.month)


DrawStatus = Union[NotDrawn, Drawn, Winner]

NOT_DRAWN = NotDrawn()
DRAWN = Drawn()

_WINNER_PREFIX = f"{DrawKind.WINNER.value}_"


def encode_draw_status(status: DrawStatus) -> str:
    """Variant -> storage string"""
    if isinstance(status, Winner):
        return f"{_WINNER_PREFIX}{status.month}"
    return status.kind.value


def decode_draw_status(value: str) -> DrawStatus:
    """Storage string -> variant

    A bare "winner" (no month tag) is read as Drawn.

    Raises:
        ValidationError: unknown value
    """
    if value == DrawKind.NOT_DRAWN.value:
        return NOT_DRAWN
    if value in (DrawKind.DRAWN.value, DrawKind.WINNER.value):
        return DRAWN
    if value.startswith(_WINNER_PREFIX):
        return Winner(value[len(_WINNER_PREFIX):])
    raise ValidationError(f"Invalid draw status: '{value}'", field="draw_status")


def coerce_draw_status(value: "DrawStatus | str") -> DrawStatus:
    """Accept a variant or its storage string"""
    if isinstance(value, (NotDrawn, Drawn, Winner)):
        return value
    if isinstance(value, str):
        return decode_draw_status(value)
    raise ValidationError(f"Invalid draw status: {value!r}", field="draw_status")


def has_won(status: DrawStatus) -> bool:
    """Won in this or any earlier month"""
    return isinstance(status, (Drawn, Winner))


def is_winner_of(status: DrawStatus, month: str) -> bool:
    return isinstance(status, Winner) and status.month == month

"""Duration and date comparators for secondary match signals.

Unparseable input yields ``None`` and contributes no signal; nothing here raises on
bad data.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from contentyield.domain.model import Descriptor

DEFAULT_DURATION_TOLERANCE_SECONDS: Final[int] = 2
DEFAULT_DATE_TOLERANCE_DAYS: Final[int] = 2


def to_seconds(value: Descriptor) -> int | None:
    """Parse ``H:M:S``, ``M:S`` or a bare count of seconds."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    parts = [part.strip() for part in text.split(":")]
    if len(parts) > 3:
        return None
    if not all(part.isascii() and part.isdigit() for part in parts):
        return None

    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def durations_equal(
    left: Descriptor,
    right: Descriptor,
    tolerance_seconds: int = DEFAULT_DURATION_TOLERANCE_SECONDS,
) -> bool:
    left_seconds = to_seconds(left)
    right_seconds = to_seconds(right)
    if left_seconds is None or right_seconds is None:
        return False
    return abs(left_seconds - right_seconds) <= tolerance_seconds


def parse_date(value: Descriptor) -> date | None:
    """Parse a calendar date from ISO text or a ``date``/``datetime``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def dates_close(
    left: Descriptor,
    right: Descriptor,
    tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
) -> bool:
    left_date = parse_date(left)
    right_date = parse_date(right)
    if left_date is None or right_date is None:
        return False
    return abs((left_date - right_date).days) <= tolerance_days

"""Month arithmetic and birthdate parsing.

Everything here takes its reference date as an argument; nothing reads the
system clock.
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Iterable, List, Optional

_ISO_DAY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_MONTH = re.compile(r"^(\d{4})-(\d{2})$")
_SWISS_DAY = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
_COMPACT_MONTH = re.compile(r"^(\d{4})(\d{2})$")

_FIRST_MONTH = date.min.year * 12 + date.min.month - 1
_LAST_MONTH = date.max.year * 12 + date.max.month - 1


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_birthdate(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD``, ``YYYY-MM``, ``DD.MM.YYYY`` or ``YYYYMM``.

    Month-only inputs resolve to the first of the month. Anything else,
    including impossible calendar dates, yields ``None``.
    """
    if not value:
        return None
    text = value.strip()

    match = _ISO_DAY.match(text)
    if match:
        return _safe_date(int(match[1]), int(match[2]), int(match[3]))
    match = _ISO_MONTH.match(text)
    if match:
        return _safe_date(int(match[1]), int(match[2]), 1)
    match = _SWISS_DAY.match(text)
    if match:
        return _safe_date(int(match[3]), int(match[2]), int(match[1]))
    match = _COMPACT_MONTH.match(text)
    if match:
        return _safe_date(int(match[1]), int(match[2]), 1)
    return None


def parse_birthdates(values: Iterable[Optional[str]]) -> List[date]:
    """Parse a list of birthdates, silently dropping the unparseable ones."""
    parsed = (parse_birthdate(value) for value in values)
    return [birth for birth in parsed if birth is not None]


def month_start(value: date) -> date:
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamped to the range ``date`` can represent."""
    index = value.year * 12 + (value.month - 1) + months
    index = min(_LAST_MONTH, max(_FIRST_MONTH, index))
    year, month = divmod(index, 12)
    day = min(value.day, calendar.monthrange(year, month + 1)[1])
    return date(year, month + 1, day)


def months_between(later: date, earlier: date) -> int:
    """Whole calendar months from ``earlier`` to ``later`` (days ignored)."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def yyyymm(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def age_on(birth: date, reference: date) -> int:
    age = reference.year - birth.year
    if (reference.month, reference.day) < (birth.month, birth.day):
        age -= 1
    return age

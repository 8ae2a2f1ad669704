"""
Values -- Defensive numeric and date primitives for claim data.

Responsibility:
    Converts the loosely typed values that cross the record-store boundary
    (currency strings, percentages, ISO date strings) into ``Decimal`` and
    ``date`` objects, and provides the rounding and calendar helpers every
    calculator shares.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: amounts are never floats once parsed.
    - Total parsing: ``parse_numeric`` never raises; anything that is not a
      number is zero, so corrupt reference data cannot crash a calculation.
    - Rounding to cents is half-up; the injury formula rounds up (ceiling).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def parse_numeric(value: Any) -> Decimal:
    """Parse a stored currency/percentage value into a Decimal.

    Characters other than digits, ``.`` and ``-`` are stripped first, so
    ``"K 1,250.50"`` parses as ``1250.50``.  Floats are converted exactly
    from their repr, exponent included.  ``None``, empty strings, NaN and
    infinities, and anything that still fails to parse yield zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        return Decimal(repr(value))
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return ZERO
    try:
        parsed = Decimal(cleaned)
    except InvalidOperation:
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def round2(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_places(value: Decimal, places: int) -> Decimal:
    """Round to ``places`` decimal places, half-up."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def ceil_whole(value: Decimal) -> Decimal:
    """Round up to the next whole unit."""
    return value.quantize(Decimal(1), rounding=ROUND_CEILING)


def format_number(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros (``2.50`` -> ``2.5``)."""
    if value == 0:
        return "0"
    text = format(value.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_date(value: Any) -> date | None:
    """Parse a stored date (``date``, ``datetime`` or ISO-8601 string).

    Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def add_years(d: date, years: int) -> date:
    """Shift a date by whole years; 29 February rolls to 1 March."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return date(d.year + years, 3, 1)


def calculate_age(dob: date, reference: date) -> int:
    """Age in completed years on ``reference``."""
    age = reference.year - dob.year
    if (reference.month, reference.day) < (dob.month, dob.day):
        age -= 1
    return age

"""Output formatting for money, quantities and timestamps.

Values are only rounded here, at the response boundary; callers keep full
precision while accumulating.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")
_SATOSHI = Decimal("0.00000001")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def q2(x: Decimal) -> Decimal:
    return x.quantize(_CENT, rounding=ROUND_HALF_UP)


def money(x: Decimal) -> str:
    """Fixed two-decimal string, e.g. ``Decimal("1.005") -> "1.01"``."""
    return format(q2(x), "f")


def quantity(x: Decimal) -> str:
    return format(x.quantize(_SATOSHI, rounding=ROUND_HALF_UP), "f")


def as_utc(dt: datetime) -> datetime:
    # some backends (sqlite) hand back naive datetimes; they are stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def timestamp(dt: datetime) -> str:
    return as_utc(dt).strftime(TIMESTAMP_FORMAT)


def date_only(dt: datetime) -> str:
    return as_utc(dt).strftime(DATE_FORMAT)


def parse_timestamp(raw: object) -> datetime:
    """Parse ``Y-m-d H:i:s``, ``Y-m-d`` or ISO-8601 input; naive values are UTC.

    Raises ValueError when the value cannot be read as a timestamp.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"not a timestamp: {raw!r}")
    parsed = datetime.fromisoformat(raw.strip())
    try:
        return as_utc(parsed)
    except OverflowError:
        # e.g. 0001-01-01 with a positive offset lands before datetime.min in UTC
        raise ValueError(f"timestamp out of range: {raw!r}")

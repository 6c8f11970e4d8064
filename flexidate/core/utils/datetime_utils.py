"""
Date and time utilities for flexidate.

Provides timezone-aware datetime helpers shared by the pattern engine,
the timezone resolver and the construction engine.
"""
import calendar
import math
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional

# Unix epoch, used as the default for every date part the input does not supply
EPOCH = datetime(1970, 1, 1)

# PHP-style is_numeric(): optional sign, digits with optional fraction, optional exponent
_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def utcnow(tz: Optional[tzinfo] = None) -> datetime:
    """
    Get the current instant as a timezone-aware datetime.

    Args:
        tz: Zone to express the instant in (default: UTC)

    Note:
        The construction engine takes its "now" defaults from here, so
        the result never depends on the host's local zone.
    """
    now = datetime.now(timezone.utc)
    return now.astimezone(tz) if tz is not None else now


def parse_ISO_date(v) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        try:
            return date.fromisoformat(v[:10])
        except ValueError as e:
            raise ValueError(f"Input must be an ISO date string (YYYY-MM-DD). Error: {e}")
    raise TypeError(f"Input must be a str, date or datetime, got {type(v)}")


def is_numeric(value: Any) -> bool:
    """
    Check whether a value is numeric the way user input is judged numeric.

    Accepts int and float (but not bool) and strings holding a number
    (``"2010"``, ``" 12.5"``, ``"1e3"``).

    Examples:
        >>> is_numeric(2010)
        True
        >>> is_numeric("07")
        True
        >>> is_numeric("")
        False
        >>> is_numeric(True)
        False
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_RE.match(value))
    return False


def to_number(value: Any) -> int | float:
    """Convert a numeric value (see is_numeric) to int when integral, float otherwise."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = value
    else:
        number = float(str(value).strip())
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def int_value(value: Any) -> int:
    """
    Integer value of a date part, truncating numbers and mapping anything else to 0.

    Infinities and NaN (``"1e999"``, ``float("nan")``) also map to 0.

    Examples:
        >>> int_value("07")
        7
        >>> int_value(12.9)
        12
        >>> int_value("abc")
        0
    """
    if not is_numeric(value):
        return 0
    number = to_number(value)
    if isinstance(number, float) and not math.isfinite(number):
        return 0
    return int(number)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month of the proleptic Gregorian calendar."""
    return calendar.monthrange(year, month)[1]


def is_valid_calendar_date(year: int, month: int, day: int) -> bool:
    """
    Check a year/month/day triple against the proleptic Gregorian calendar.

    Examples:
        >>> is_valid_calendar_date(2012, 2, 29)
        True
        >>> is_valid_calendar_date(2011, 2, 29)
        False
    """
    if not 1 <= year <= 9999 or not 1 <= month <= 12:
        return False
    return 1 <= day <= days_in_month(year, month)


def rollover(year: int, month: int, day: int, hour: int = 0, minute: int = 0,
             second: int = 0, microsecond: int = 0) -> Optional[datetime]:
    """
    Build a naive datetime, carrying out-of-range fields into the next unit.

    Month 13 becomes January of the next year, day 0 the last day of the
    previous month, hour 24 midnight of the next day, and so on.

    Returns:
        The normalized naive datetime, or None when the result falls
        outside the representable year range.

    Examples:
        >>> rollover(2009, 2, 30)
        datetime.datetime(2009, 3, 2, 0, 0)
        >>> rollover(2010, 0, 0)
        datetime.datetime(2009, 11, 30, 0, 0)
    """
    year_offset, month_index = divmod(month - 1, 12)
    try:
        base = datetime(year + year_offset, month_index + 1, 1)
        return base + timedelta(
            days=day - 1,
            hours=hour,
            minutes=minute,
            seconds=second,
            microseconds=microsecond
            )
    except (ValueError, OverflowError):
        return None


# ============================================================================
# TIMEZONE NAMES AND OFFSETS
# ============================================================================

def format_utc_offset(seconds: int, colon: bool = True) -> str:
    """
    Format an offset in seconds as ``+HH:MM`` (or ``+HHMM`` without colon).

    Examples:
        >>> format_utc_offset(-21600)
        '-06:00'
        >>> format_utc_offset(19800, colon=False)
        '+0530'
    """
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    separator = ":" if colon else ""
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def offset_seconds(dt: datetime) -> int:
    """UTC offset of an aware datetime in whole seconds (0 for naive values)."""
    offset = dt.utcoffset()
    if offset is None:
        return 0
    return int(offset.total_seconds())


def zone_name(tz: Optional[tzinfo], dt: Optional[datetime] = None) -> str:
    """
    Canonical name of a tzinfo object.

    IANA zones report their key (``America/Chicago``), the UTC singleton
    reports ``UTC`` and fixed offsets report ``+05:00``.
    """
    if tz is None:
        return "UTC"
    key = getattr(tz, "key", None)
    if key:
        return key
    if tz is timezone.utc:
        return "UTC"
    offset = tz.utcoffset(dt)
    if offset is not None:
        return format_utc_offset(int(offset.total_seconds()))
    return str(tz)

"""
Classification of raw date input.

The construction engine accepts input of unknown shape. classify_input()
decides once, at the boundary, which shape it is and wraps it in one of the
DateInput variants below; the engine then dispatches on the variant type.

Priority (first match wins):
1. DateObjectInput       datetime, date or an existing DateValue
2. PartsInput            mapping of date parts ({"year": 2010, "month": 2})
3. TimestampInput        numeric value with no format, or with format "U"
4. FormattedStringInput  string with a format
5. FreeFormInput         anything else (lenient parser)
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from flexidate.core.utils.datetime_utils import is_numeric, to_number

TIMESTAMP_FORMAT = "U"


@dataclass(frozen=True)
class DateObjectInput:
    """Existing date-bearing object (datetime, date or DateValue)."""
    value: Any


@dataclass(frozen=True)
class PartsInput:
    """Structured mapping of date parts, keyed by part name."""
    parts: Mapping[str, Any]


@dataclass(frozen=True)
class TimestampInput:
    """Unix timestamp in seconds (fractions allowed)."""
    timestamp: Union[int, float]


@dataclass(frozen=True)
class FormattedStringInput:
    """String to parse strictly against a known pattern."""
    text: str
    fmt: str


@dataclass(frozen=True)
class FreeFormInput:
    """Anything else, handed to the lenient parser (may be None or empty)."""
    value: Any


DateInput = Union[DateObjectInput, PartsInput, TimestampInput, FormattedStringInput, FreeFormInput]


def is_date_object(value: Any) -> bool:
    """True for datetime/date instances and objects wrapping one in a ``datetime`` attribute."""
    if isinstance(value, (datetime, date)):
        return True
    return isinstance(getattr(value, "datetime", None), datetime)


def classify_input(raw: Any, fmt: Optional[str] = None) -> DateInput:
    """
    Classify raw date input.

    Args:
        raw: The input value
        fmt: Optional parse pattern

    Returns:
        One of the DateInput variants

    Examples:
        >>> classify_input({"year": 2010})
        PartsInput(parts={'year': 2010})
        >>> classify_input("2010", "Y")
        FormattedStringInput(text='2010', fmt='Y')
        >>> classify_input("1262304000")
        TimestampInput(timestamp=1262304000)
        >>> classify_input("2009-03-07 10:30")
        FreeFormInput(value='2009-03-07 10:30')
    """
    if is_date_object(raw):
        return DateObjectInput(raw)
    if isinstance(raw, Mapping):
        return PartsInput(dict(raw))
    if is_numeric(raw) and (not fmt or fmt == TIMESTAMP_FORMAT):
        return TimestampInput(to_number(raw))
    if isinstance(raw, str) and fmt:
        return FormattedStringInput(raw, fmt)
    return FreeFormInput(raw)

"""
Date granularity utilities.

Keeps track of which date parts (year, month, day, hour, minute, second) are
known for a date, either from the values provided in a mapping of parts or
from the parts a parser could identify in a string. Also derives patterns
from a granularity: the storage pattern for a given precision, a display
pattern limited to some parts, and the order in which parts appear in a
pattern.

Usage:
    from flexidate.core.utils.granularity import Granularity, limit_format

    Granularity.from_parts_map({"year": 2010, "month": 2})
    # Granularity(['year', 'month'])

    limit_format("F j, Y - H:i", ["year", "month", "day"])
    # 'F j, Y'
"""
import re
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

import structlog
from dateutil import parser as dateutil_parser

from flexidate.core.utils.datetime_utils import is_numeric

logger = structlog.get_logger(__name__)

GRANULARITY_PARTS: Tuple[str, ...] = ("year", "month", "day", "hour", "minute", "second")
DATE_PARTS: Tuple[str, ...] = ("year", "month", "day")
TIME_PARTS: Tuple[str, ...] = ("hour", "minute", "second")

# Storage pattern for each precision (prefixes of DEFAULT_FORMAT)
DEFAULT_FORMAT = "Y-m-d H:i:s"
GRANULARITY_FORMATS = {
    "year": "Y",
    "month": "Y-m",
    "day": "Y-m-d",
    "hour": "Y-m-d H",
    "minute": "Y-m-d H:i",
    "second": DEFAULT_FORMAT,
    }

# Two reference dates that differ in every part; both years are leap years so
# a parsed "Feb 29" without a year is valid against either of them.
_PROBE_DEFAULTS = (datetime(2000, 1, 1, 0, 0, 0), datetime(2004, 2, 2, 1, 1, 1))


# ============================================================================
# GRANULARITY VALUE
# ============================================================================

class Granularity:
    """
    Immutable, ordered set of known date parts.

    Members are always kept in canonical order (year ... second) whatever
    order they were given in.

    Examples:
        >>> g = Granularity(["day", "year", "month"])
        >>> list(g)
        ['year', 'month', 'day']
        >>> g.precision
        'day'
        >>> g.date_only
        True
    """

    __slots__ = ("_parts",)

    def __init__(self, parts: Iterable[str] = ()):
        requested = set(parts)
        unknown = requested.difference(GRANULARITY_PARTS)
        if unknown:
            raise ValueError(f"Unknown date parts: {sorted(unknown)}. Allowed: {list(GRANULARITY_PARTS)}")
        self._parts = tuple(part for part in GRANULARITY_PARTS if part in requested)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_time_string(cls, text: Any) -> "Granularity":
        """
        Granularity of a free-form date string.

        A part is included only when the forgiving parser resolved it from
        the text. The string is parsed against two reference dates that
        differ in every part: a part that comes out the same both times was
        read from the input. Unparseable input yields an empty granularity.

        Examples:
            >>> list(Granularity.from_time_string("2009-03-07 10:30"))
            ['year', 'month', 'day', 'hour', 'minute']
            >>> list(Granularity.from_time_string("not a date"))
            []
        """
        if not isinstance(text, str) or not text.strip():
            return cls()
        try:
            first, second = (dateutil_parser.parse(text, default=probe) for probe in _PROBE_DEFAULTS)
        except (ValueError, OverflowError) as e:
            logger.debug("No granularity found in string", text=text, error=str(e))
            return cls()
        return cls(part for part in GRANULARITY_PARTS if getattr(first, part) == getattr(second, part))

    @classmethod
    def from_parts_map(cls, parts: Mapping[str, Any]) -> "Granularity":
        """
        Granularity of a mapping of date parts.

        A part is included when its key is present and its value is numeric;
        empty or non-numeric values and unknown keys are left out.

        Examples:
            >>> list(Granularity.from_parts_map({"year": 2010, "month": "2", "day": ""}))
            ['year', 'month']
        """
        return cls(
            part for part, value in parts.items()
            if part in GRANULARITY_PARTS and is_numeric(value)
            )

    @classmethod
    def from_precision(cls, precision: Optional[str]) -> "Granularity":
        """Granularity holding every part down to (and including) the given precision."""
        return cls(range_for_precision(precision))

    @classmethod
    def full(cls) -> "Granularity":
        return cls(GRANULARITY_PARTS)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def parts(self) -> Tuple[str, ...]:
        return self._parts

    @property
    def precision(self) -> Optional[str]:
        """Most precise part, or None when empty."""
        return self._parts[-1] if self._parts else None

    @property
    def has_time(self) -> bool:
        return has_time(self._parts)

    @property
    def has_date(self) -> bool:
        return has_date(self._parts)

    @property
    def date_only(self) -> bool:
        return self.has_date and not self.has_time

    @property
    def time_only(self) -> bool:
        return self.has_time and not self.has_date

    def nongranularity(self) -> List[str]:
        return nongranularity(self._parts)

    def format(self) -> str:
        """Storage pattern for this granularity (see format_for_granularity)."""
        return format_for_granularity(self._parts)

    def has(self, parts: Any) -> bool:
        """True if the part (or every part of a list) belongs to this granularity."""
        if isinstance(parts, str):
            return parts in self._parts
        return all(part in self._parts for part in parts)

    def with_part(self, part: str) -> "Granularity":
        return Granularity(self._parts + (part,))

    def without_part(self, part: str) -> "Granularity":
        return Granularity(p for p in self._parts if p != part)

    def limit_to(self, allowed: Iterable[str]) -> "Granularity":
        """Keep only the parts that are also in ``allowed``."""
        allowed = set(allowed)
        return Granularity(p for p in self._parts if p in allowed)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __iter__(self):
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, part: object) -> bool:
        return part in self._parts

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Granularity):
            return self._parts == other._parts
        if isinstance(other, (list, tuple)):
            return list(self._parts) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._parts)

    def __repr__(self) -> str:
        return f"Granularity({list(self._parts)})"


# ============================================================================
# PART LIST HELPERS
# ============================================================================

def sorted_parts(parts: Iterable[str]) -> List[str]:
    """Known parts of ``parts`` in canonical order (unknown names are dropped)."""
    wanted = set(parts)
    return [part for part in GRANULARITY_PARTS if part in wanted]


def range_for_precision(precision: Optional[str]) -> List[str]:
    """
    Parts from 'year' down to the given precision.

    Examples:
        >>> range_for_precision("month")
        ['year', 'month']
        >>> range_for_precision("bogus")
        ['year', 'month', 'day', 'hour', 'minute', 'second']
    """
    if precision not in GRANULARITY_PARTS:
        return list(GRANULARITY_PARTS)
    return list(GRANULARITY_PARTS[:GRANULARITY_PARTS.index(precision) + 1])


def highest_precision(parts: Iterable[str]) -> Optional[str]:
    """Most precise part of a list, or None if it holds no known part."""
    ordered = sorted_parts(parts)
    return ordered[-1] if ordered else None


def nongranularity(parts: Iterable[str]) -> List[str]:
    """Canonical parts missing from ``parts``."""
    present = set(parts or ())
    return [part for part in GRANULARITY_PARTS if part not in present]


def has_time(parts: Optional[Iterable[str]]) -> bool:
    return any(part in TIME_PARTS for part in parts or ())


def has_date(parts: Optional[Iterable[str]]) -> bool:
    return any(part in DATE_PARTS for part in parts or ())


def format_for_granularity(granularity: Any) -> str:
    """
    Storage pattern limited to a granularity.

    Accepts a precision name or a collection of parts. Empty or unknown
    input returns the full pattern.

    Examples:
        >>> format_for_granularity("day")
        'Y-m-d'
        >>> format_for_granularity(["year", "month", "day", "hour", "minute"])
        'Y-m-d H:i'
    """
    precision = granularity if isinstance(granularity, str) else highest_precision(granularity or ())
    return GRANULARITY_FORMATS.get(precision, DEFAULT_FORMAT)


# ============================================================================
# PATTERN LIMITING
# ============================================================================

# Token classes per component; an optional separator and space before the
# token are removed with it. (?<!\\) keeps escaped letters.
_SEPARATOR = r"[\-/\.,:]?\s?(?<!\\)"
_PART_TOKEN_PATTERNS = {
    "year": re.compile(_SEPARATOR + r"[YyoL]"),
    "month": re.compile(_SEPARATOR + r"[FMmnt]"),
    "day": re.compile(_SEPARATOR + r"(?:[lDdjNwWz]S?|S)"),
    "hour": re.compile(_SEPARATOR + r"[HhGg]"),
    "minute": re.compile(_SEPARATOR + r"i"),
    "second": re.compile(_SEPARATOR + r"[suv]"),
    }
_TIMEZONE_TOKENS = re.compile(_SEPARATOR + r"[eOPpTZI]")
_MERIDIEM_TOKENS = re.compile(r"(?<!\\)[aAB]")
_EMPTY_GROUPS = re.compile(r"\(\)|\[\]|\|\|")
_LEADING_PUNCTUATION = re.compile(r"^[\-/\.,:']")
_TRAILING_PUNCTUATION = re.compile(r"[\-/,:']$")
_TRAILING_BACKSLASH = re.compile(r"\\$")
_ESCAPED_LITERALS = re.compile(r"\\\S{1,3}")

# Escaped punctuation that does not need the escape outside of parsing
_UNESCAPE = {
    "\\-": "-",
    "\\:": ":",
    "\\'": "'",
    "\\. ": " . ",
    "\\,": ",",
    }


def _unescape_punctuation(fmt: str) -> str:
    for escaped, plain in _UNESCAPE.items():
        fmt = fmt.replace(escaped, plain)
    return fmt


def limit_format(fmt: str, granularity: Iterable[str]) -> str:
    """
    Limit a display pattern to the given parts.

    Tokens of every other part are removed together with the separator
    right before them; empty (), [] and || groups and orphaned punctuation
    at either end are cleaned up. When the parts hold only a date or only a
    time, the ISO date/time separator T becomes a space, and without a time
    am/pm and timezone tokens go too. A pattern left with nothing but
    escaped literals becomes empty.

    Examples:
        >>> limit_format("F j, Y - H:i", ["year", "month", "day"])
        'F j, Y'
        >>> limit_format("m/d/Y H:i", ["hour", "minute"])
        'H:i'
        >>> limit_format(r"Y-m-d\\TH:i:s", ["year", "month"])
        'Y-m'
    """
    parts = list(granularity or ())
    fmt = _unescape_punctuation(fmt or "")

    if not has_time(parts) or not has_date(parts):
        fmt = fmt.replace("\\T", " ").replace("T", " ")

    patterns = []
    if not has_time(parts):
        patterns.append(_MERIDIEM_TOKENS)
        patterns.append(_TIMEZONE_TOKENS)
    patterns.extend(_PART_TOKEN_PATTERNS[part] for part in nongranularity(parts))
    patterns.append(_EMPTY_GROUPS)

    for pattern in patterns:
        fmt = pattern.sub("", fmt)

    fmt = fmt.strip()
    fmt = _LEADING_PUNCTUATION.sub("", fmt)
    fmt = _TRAILING_PUNCTUATION.sub("", fmt)
    fmt = _TRAILING_BACKSLASH.sub("", fmt)
    fmt = fmt.strip()

    if not _ESCAPED_LITERALS.sub("", fmt).strip():
        return ""
    return fmt


def part_format(part: str, fmt: str) -> str:
    """
    Pattern for one section of a date field.

    ``part`` is 'date', 'time' or a single date part name.

    Examples:
        >>> part_format("date", "m/d/Y - H:i")
        'm/d/Y'
        >>> part_format("time", "m/d/Y - H:i")
        'H:i'
    """
    if part == "date":
        return limit_format(fmt, DATE_PARTS)
    if part == "time":
        return limit_format(fmt, TIME_PARTS)
    return limit_format(fmt, [part])


# Token character -> part, for entry-order detection
_ORDER_TOKENS = {
    "d": "day", "j": "day",
    "F": "month", "M": "month", "m": "month", "n": "month",
    "Y": "year", "y": "year",
    "g": "hour", "G": "hour", "h": "hour", "H": "hour",
    "i": "minute",
    "s": "second",
    }


def format_order(fmt: Optional[str]) -> List[str]:
    """
    Parts in the order their tokens appear in a pattern.

    Duplicates are kept; escaped characters and unrecognized characters
    are skipped.

    Examples:
        >>> format_order("m/d/Y H:i")
        ['month', 'day', 'year', 'hour', 'minute']
    """
    order: List[str] = []
    if not fmt:
        return order
    escaped = False
    for char in fmt:
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        part = _ORDER_TOKENS.get(char)
        if part:
            order.append(part)
    return order

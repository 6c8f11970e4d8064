"""
Pattern engine for PHP date()-style format strings.

This is the low-level "platform" facility the construction engine relies on:
- tokenize(): split a pattern into literal and token segments
- render(): format an aware datetime with a pattern
- parse_with_format(): strict parse of a string against a pattern,
  reporting errors and warnings instead of raising
- format_parts(): date parts implied by the tokens of a pattern

Pattern characters (a backslash escapes the next character):
    d j D l N S w z        day
    W                      ISO week number
    F m M n t              month
    L o Y y                year
    a A B g G h H i s u v  time
    e I O P p T Z          timezone
    c r U                  full date/time

Parsing follows createFromFormat() semantics: numeric tokens consume bounded
digit runs, textual tokens consume English names, and out-of-range values
roll over into the next unit with a "The parsed date was invalid" warning.
Fields missing from the pattern default to the Unix epoch (1970-01-01 00:00:00).
"""
import calendar
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flexidate.core.utils.datetime_utils import (
    EPOCH,
    format_utc_offset,
    is_valid_calendar_date,
    offset_seconds,
    rollover,
    zone_name,
    )

# ============================================================================
# CONSTANTS
# ============================================================================

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
    ]

# PHP order: index 0 is Sunday
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

TOKEN_CHARS = frozenset("dDjlNSwzWFmMntLoYyaABgGhHisuveIOPpTZcrU")

# Characters with a special meaning only while parsing
PARSE_SPECIALS = frozenset("#?*!|+")

SEPARATORS = ";:/.,-()"

DATE_INVALID_WARNING = "The parsed date was invalid"
TIME_INVALID_WARNING = "The parsed time was invalid"

# Token -> date part, used to derive the granularity a pattern carries
TOKEN_PARTS = {
    "Y": "year", "y": "year", "o": "year",
    "F": "month", "M": "month", "m": "month", "n": "month",
    "d": "day", "j": "day", "z": "day",
    "H": "hour", "h": "hour", "G": "hour", "g": "hour",
    "i": "minute",
    "s": "second",
    }

ALL_PARTS = ("year", "month", "day", "hour", "minute", "second")

# Composite tokens that carry a complete date and time
FULL_TOKENS = frozenset("crU")

# (min digits, max digits, field, error message)
_NUMERIC_TOKENS = {
    "d": (1, 2, "day", "A two digit day could not be found"),
    "j": (1, 2, "day", "A two digit day could not be found"),
    "z": (1, 3, "day_of_year", "A three digit day-of-year could not be found"),
    "m": (1, 2, "month", "A two digit month could not be found"),
    "n": (1, 2, "month", "A two digit month could not be found"),
    "Y": (1, 4, "year", "A four digit year could not be found"),
    "y": (2, 2, "year", "A two digit year could not be found"),
    "g": (1, 2, "hour", "A two digit hour could not be found"),
    "h": (1, 2, "hour", "A two digit hour could not be found"),
    "G": (1, 2, "hour", "A two digit hour could not be found"),
    "H": (1, 2, "hour", "A two digit hour could not be found"),
    "i": (2, 2, "minute", "A two digit minute could not be found"),
    "s": (2, 2, "second", "A two digit second could not be found"),
    "u": (1, 6, "microsecond", "A six digit microsecond could not be found"),
    "v": (3, 3, "millisecond", "A three digit millisecond could not be found"),
    }

_FIELDS = ("year", "month", "day", "hour", "minute", "second", "microsecond")

_MONTH_LOOKUP = {}
for _index, _name in enumerate(MONTH_NAMES, start=1):
    _MONTH_LOOKUP[_name.lower()] = _index
    _MONTH_LOOKUP[_name[:3].lower()] = _index
_MONTH_LOOKUP["sept"] = 9

_WEEKDAY_LOOKUP = {}
for _index, _name in enumerate(WEEKDAY_NAMES):
    _WEEKDAY_LOOKUP[_name.lower()] = _index
    _WEEKDAY_LOOKUP[_name[:3].lower()] = _index

_WORD_RE = re.compile(r"[A-Za-z]+")
_SUFFIX_RE = re.compile(r"(st|nd|rd|th)", re.IGNORECASE)
_MERIDIEM_RE = re.compile(r"([ap])\.?m\.?", re.IGNORECASE)
_TIMESTAMP_RE = re.compile(r"[+-]?\d+")
_TIMEZONE_RE = re.compile(
    r"Z(?![A-Za-z])|[+-]\d{1,2}(?::?\d{2})?|[A-Za-z][A-Za-z0-9_+\-]*(?:/[A-Za-z0-9_+\-]+)*"
    )
_OFFSET_RE = re.compile(r"^([+-])(\d{1,2})(?::?(\d{2}))?$")
_WHITESPACE = " \t\u00a0\u202f"


@lru_cache(maxsize=None)
def _digits_re(min_digits: int, max_digits: int) -> re.Pattern:
    return re.compile(r"\d{%d,%d}" % (min_digits, max_digits))


# ============================================================================
# TOKENIZER
# ============================================================================

@dataclass(frozen=True)
class FormatSegment:
    """One piece of a tokenized pattern: either literal text or a single token character."""
    text: str
    is_token: bool = False


def tokenize(fmt: str) -> List[FormatSegment]:
    """
    Split a pattern into literal and token segments.

    Adjacent literal characters are merged; a backslash makes the next
    character literal (a trailing backslash is kept as-is).

    Examples:
        >>> [s.text for s in tokenize(r"Y-m-d\\TH")]
        ['Y', '-', 'm', '-', 'd', 'T', 'H']
        >>> tokenize(r"\\T")[0].is_token
        False
    """
    segments: List[FormatSegment] = []
    literal = []
    i = 0
    while i < len(fmt):
        char = fmt[i]
        if char == "\\":
            i += 1
            literal.append(fmt[i] if i < len(fmt) else "\\")
        elif char in TOKEN_CHARS:
            if literal:
                segments.append(FormatSegment("".join(literal)))
                literal = []
            segments.append(FormatSegment(char, is_token=True))
        else:
            literal.append(char)
        i += 1
    if literal:
        segments.append(FormatSegment("".join(literal)))
    return segments


def format_parts(fmt: Optional[str]) -> List[str]:
    """
    Ordered, de-duplicated date parts implied by the tokens of a pattern.

    Examples:
        >>> format_parts("d/m/Y")
        ['year', 'month', 'day']
        >>> format_parts(r"H:i")
        ['hour', 'minute']
        >>> format_parts("U")
        ['year', 'month', 'day', 'hour', 'minute', 'second']
    """
    if not fmt:
        return []
    found = set()
    for segment in tokenize(fmt):
        if not segment.is_token:
            continue
        if segment.text in FULL_TOKENS:
            return list(ALL_PARTS)
        part = TOKEN_PARTS.get(segment.text)
        if part:
            found.add(part)
    return [part for part in ALL_PARTS if part in found]


# ============================================================================
# RENDERING
# ============================================================================

def _php_weekday(dt: datetime) -> int:
    """Weekday with 0 = Sunday."""
    return dt.isoweekday() % 7


def ordinal_suffix(day: int) -> str:
    """English ordinal suffix for a day of the month."""
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _twelve_hour(hour: int) -> int:
    return hour % 12 or 12


def _swatch_beat(dt: datetime) -> str:
    utc = dt - timedelta(seconds=offset_seconds(dt))
    seconds = (utc.hour * 3600 + utc.minute * 60 + utc.second + 3600) % 86400
    return f"{int(seconds / 86.4):03d}"


def _timestamp(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int((dt - datetime(1970, 1, 1, tzinfo=timezone.utc)) // timedelta(seconds=1))


def render_token(dt: datetime, token: str) -> str:
    """Render a single pattern character for a datetime."""
    if token == "d":
        return f"{dt.day:02d}"
    if token == "D":
        return WEEKDAY_NAMES[_php_weekday(dt)][:3]
    if token == "j":
        return str(dt.day)
    if token == "l":
        return WEEKDAY_NAMES[_php_weekday(dt)]
    if token == "N":
        return str(dt.isoweekday())
    if token == "S":
        return ordinal_suffix(dt.day)
    if token == "w":
        return str(_php_weekday(dt))
    if token == "z":
        return str(dt.timetuple().tm_yday - 1)
    if token == "W":
        return f"{dt.isocalendar()[1]:02d}"
    if token == "F":
        return MONTH_NAMES[dt.month - 1]
    if token == "m":
        return f"{dt.month:02d}"
    if token == "M":
        return MONTH_NAMES[dt.month - 1][:3]
    if token == "n":
        return str(dt.month)
    if token == "t":
        return str(calendar.monthrange(dt.year, dt.month)[1])
    if token == "L":
        return "1" if calendar.isleap(dt.year) else "0"
    if token == "o":
        return str(dt.isocalendar()[0])
    if token == "Y":
        return f"{dt.year:04d}"
    if token == "y":
        return f"{dt.year % 100:02d}"
    if token == "a":
        return "am" if dt.hour < 12 else "pm"
    if token == "A":
        return "AM" if dt.hour < 12 else "PM"
    if token == "B":
        return _swatch_beat(dt)
    if token == "g":
        return str(_twelve_hour(dt.hour))
    if token == "G":
        return str(dt.hour)
    if token == "h":
        return f"{_twelve_hour(dt.hour):02d}"
    if token == "H":
        return f"{dt.hour:02d}"
    if token == "i":
        return f"{dt.minute:02d}"
    if token == "s":
        return f"{dt.second:02d}"
    if token == "u":
        return f"{dt.microsecond:06d}"
    if token == "v":
        return f"{dt.microsecond // 1000:03d}"
    if token == "e":
        return zone_name(dt.tzinfo, dt)
    if token == "I":
        dst = dt.dst()
        return "1" if dst else "0"
    if token == "O":
        return format_utc_offset(offset_seconds(dt), colon=False)
    if token == "P":
        return format_utc_offset(offset_seconds(dt))
    if token == "p":
        seconds = offset_seconds(dt)
        return "Z" if seconds == 0 else format_utc_offset(seconds)
    if token == "T":
        abbreviation = dt.tzname()
        if not abbreviation or abbreviation[0] in "+-":
            return format_utc_offset(offset_seconds(dt))
        return abbreviation
    if token == "Z":
        return str(offset_seconds(dt))
    if token == "c":
        return render(dt, r"Y-m-d\TH:i:sP")
    if token == "r":
        return render(dt, "D, d M Y H:i:s O")
    if token == "U":
        return str(_timestamp(dt))
    return token


def render(dt: datetime, fmt: str) -> str:
    """
    Format a datetime with a PHP date()-style pattern.

    Examples:
        >>> render(datetime(2009, 3, 7, 10, 30, tzinfo=timezone.utc), "c")
        '2009-03-07T10:30:00+00:00'
        >>> render(datetime(2009, 3, 7), r"l jS \\o\\f F Y")
        'Saturday 7th of March 2009'
    """
    return "".join(
        render_token(dt, segment.text) if segment.is_token else segment.text
        for segment in tokenize(fmt)
        )


# ============================================================================
# PARSING
# ============================================================================

@dataclass
class ParseResult:
    """
    Outcome of a strict parse.

    Attributes:
        value: Best-effort aware datetime (always set, even when errors occurred)
        fields: Raw field values found in the input, before defaults and rollover
        errors: Fatal diagnostics (input did not match the pattern)
        warnings: Non-fatal diagnostics (e.g. DATE_INVALID_WARNING)
        tzinfo: Zone found in the input, if the pattern had a timezone token
    """
    value: Optional[datetime] = None
    fields: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    tzinfo: Optional[tzinfo] = None

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings


def parse_timezone_name(name: str) -> Optional[tzinfo]:
    """
    Resolve a timezone identifier or numeric offset, or None if unknown.

    Accepts IANA names (``Europe/Rome``), ``UTC``/``GMT``/``Z`` and offsets
    (``+05:00``, ``-0800``, ``+5``).
    """
    if not name:
        return None
    if name.upper() in ("Z", "UTC", "GMT"):
        return ZoneInfo("UTC")
    match = _OFFSET_RE.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if delta >= timedelta(hours=24):
            return None
        return timezone(-delta if sign == "-" else delta)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def _expand_two_digit_year(year: int) -> int:
    return year + (1900 if year >= 70 else 2000)


def parse_with_format(fmt: str, text: str, tz: Optional[tzinfo] = None) -> ParseResult:
    """
    Parse a string strictly against a pattern.

    Never raises for bad input: problems are reported through
    ParseResult.errors and ParseResult.warnings, and ParseResult.value always
    holds a best-effort datetime in the parsed (or given) zone.

    Args:
        fmt: PHP date()-style pattern
        text: Input string
        tz: Zone for the wall-clock fields when the input carries none (default UTC)

    Examples:
        >>> parse_with_format("Y-m-d", "2009-02-30").warnings
        ['The parsed date was invalid']
        >>> parse_with_format("d M Y", "23 abc 2012").errors
        ['A textual month could not be found']
    """
    result = ParseResult()
    fields: Dict[str, Optional[int]] = dict.fromkeys(_FIELDS + ("day_of_year",))
    meridiem: Optional[str] = None
    allow_trailing = False
    pos = 0
    i = 0

    def fail(message: str) -> None:
        result.errors.append(message)

    while i < len(fmt):
        char = fmt[i]
        i += 1

        if char == "\\":
            literal = fmt[i] if i < len(fmt) else "\\"
            i += 1
            if text[pos:pos + 1] == literal:
                pos += 1
                continue
            fail("The escaped character could not be found")
            break

        if char == "!":
            fields = dict.fromkeys(fields)
            meridiem = None
            result.tzinfo = None
            continue
        if char == "|":
            continue
        if char == "+":
            allow_trailing = True
            continue
        if char == " ":
            while pos < len(text) and text[pos] in _WHITESPACE:
                pos += 1
            continue

        if char not in TOKEN_CHARS and char not in PARSE_SPECIALS:
            if text[pos:pos + 1] == char:
                pos += 1
                continue
            if pos >= len(text):
                fail("Not enough data available to satisfy format")
            elif char in SEPARATORS:
                fail("The separation symbol could not be found")
            else:
                fail("The format separator does not match")
            break

        if pos >= len(text):
            fail("Not enough data available to satisfy format")
            break

        if char in _NUMERIC_TOKENS:
            min_digits, max_digits, name, message = _NUMERIC_TOKENS[char]
            match = _digits_re(min_digits, max_digits).match(text, pos)
            if not match:
                fail(message)
                break
            number = int(match.group())
            pos = match.end()
            if char == "y":
                number = _expand_two_digit_year(number)
            if name == "millisecond":
                fields["microsecond"] = number * 1000
            elif name == "microsecond":
                fields["microsecond"] = int(match.group().ljust(6, "0"))
            else:
                fields[name] = number
        elif char in "MF":
            match = _WORD_RE.match(text, pos)
            month = _MONTH_LOOKUP.get(match.group().lower()) if match else None
            if month is None:
                fail("A textual month could not be found")
                break
            fields["month"] = month
            pos = match.end()
        elif char in "Dl":
            match = _WORD_RE.match(text, pos)
            if not match or match.group().lower() not in _WEEKDAY_LOOKUP:
                fail("A textual day could not be found")
                break
            pos = match.end()
        elif char == "S":
            match = _SUFFIX_RE.match(text, pos)
            if match:
                pos = match.end()
        elif char in "aA":
            if fields["hour"] is None:
                fail("Meridian can only come after an hour has been found")
                break
            match = _MERIDIEM_RE.match(text, pos)
            if not match:
                fail("A meridian could not be found")
                break
            meridiem = match.group(1).lower()
            pos = match.end()
        elif char == "U":
            match = _TIMESTAMP_RE.match(text, pos)
            if not match:
                fail("A unix timestamp could not be found")
                break
            try:
                moment = EPOCH + timedelta(seconds=int(match.group()))
            except OverflowError:
                fail("A unix timestamp could not be found")
                break
            fields.update(
                year=moment.year, month=moment.month, day=moment.day,
                hour=moment.hour, minute=moment.minute, second=moment.second,
                )
            result.tzinfo = timezone.utc
            pos = match.end()
        elif char in "eTOPp":
            match = _TIMEZONE_RE.match(text, pos)
            zone = parse_timezone_name(match.group()) if match else None
            if zone is None:
                fail("The timezone could not be found in the database")
                break
            result.tzinfo = zone
            pos = match.end()
        elif char == "#":
            if text[pos] not in SEPARATORS:
                fail("The separation symbol ([;:/.,-]) could not be found")
                break
            pos += 1
        elif char == "?":
            pos += 1
        elif char == "*":
            while pos < len(text) and not (text[pos] in SEPARATORS + " " or text[pos].isdigit()):
                pos += 1
        else:
            # Tokens that only make sense for output (N, w, W, t, L, o, B, I, Z, c, r)
            fail(f"The format character '{char}' is not supported for parsing")
            break

    if not result.errors and pos < len(text):
        if allow_trailing:
            result.warnings.append("Trailing data")
        else:
            fail("Trailing data")

    if fields["day_of_year"] is not None:
        year = fields["year"] if fields["year"] is not None else EPOCH.year
        moment = rollover(year, 1, fields["day_of_year"] + 1)
        if moment is None:
            fields["month"], fields["day"] = 1, fields["day_of_year"] + 1
        else:
            fields["year"], fields["month"], fields["day"] = moment.year, moment.month, moment.day

    if meridiem is not None and fields["hour"] is not None:
        hour = fields["hour"] % 12 if fields["hour"] <= 12 else fields["hour"]
        fields["hour"] = hour + 12 if meridiem == "p" and hour < 12 else hour

    result.fields = {name: value for name, value in fields.items() if value is not None and name in _FIELDS}
    result.value = _assemble(fields, result, tz)
    return result


def _assemble(fields: Dict[str, Optional[int]], result: ParseResult, tz: Optional[tzinfo]) -> datetime:
    """Apply epoch defaults, roll over out-of-range values and attach the zone."""
    values = {
        "year": EPOCH.year, "month": EPOCH.month, "day": EPOCH.day,
        "hour": 0, "minute": 0, "second": 0, "microsecond": 0,
        }
    values.update({name: fields[name] for name in _FIELDS if fields[name] is not None})

    if not is_valid_calendar_date(values["year"], values["month"], values["day"]):
        result.warnings.append(DATE_INVALID_WARNING)
    if values["hour"] > 23 or values["minute"] > 59 or values["second"] > 59:
        result.warnings.append(TIME_INVALID_WARNING)

    naive = rollover(**values)
    if naive is None:
        # Year out of range: keep the time of day on the epoch date
        naive = rollover(EPOCH.year, EPOCH.month, EPOCH.day, values["hour"],
                         values["minute"], values["second"], values["microsecond"])

    zone = result.tzinfo or tz or timezone.utc
    return naive.replace(tzinfo=zone)

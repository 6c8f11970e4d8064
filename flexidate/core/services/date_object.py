"""
Date construction engine.

DateValue accepts a date expressed in any of several shapes and normalizes it
into an aware datetime, a timezone handle, a granularity and a list of
errors. Construction never raises for bad date input: problems are collected
on the value and the instant holds a best-effort result.

Input shapes (see date_input.classify_input):
1. date object     re-rendered with DEFAULT_FORMAT and re-parsed in the target zone
2. parts mapping   validated, serialized to a full ISO string, parsed strictly
3. timestamp       instant set directly; the zone only affects display
4. string + format strict parse, then round-trip validation (validate_format)
5. anything else   lenient parser; failures are recorded, not raised

Usage:
    from flexidate.core.services.date_object import DateValue

    date = DateValue("2009-03-07 10:30", "America/Chicago")
    date.format("c")          # '2009-03-07T10:30:00-06:00'
    date.granularity          # Granularity(['year', 'month', 'day', 'hour', 'minute'])

    date = DateValue({"year": 2010, "month": 27}, "UTC")
    date.has_errors()         # True
    date.error_messages       # ['The month is invalid', 'The date is invalid']
"""
import copy
import math
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import structlog
from dateutil import parser as dateutil_parser

from flexidate.core.config import get_settings
from flexidate.core.schemas.common import DateError, DateSettings, ErrorCollector, ErrorKind
from flexidate.core.services.date_formatter import DateFormatter
from flexidate.core.services.date_input import (
    DateObjectInput,
    FormattedStringInput,
    FreeFormInput,
    PartsInput,
    TimestampInput,
    classify_input,
    )
from flexidate.core.services.timezone_service import (
    InvalidTimezoneError,
    TimezoneContext,
    TimezoneHandle,
    TimezoneLike,
    get_timezone_context,
    resolve_timezone,
    )
from flexidate.core.utils.date_patterns import (
    DATE_INVALID_WARNING,
    TIME_INVALID_WARNING,
    ParseResult,
    format_parts,
    parse_with_format,
    render,
    )
from flexidate.core.utils.datetime_utils import (
    EPOCH,
    days_in_month,
    int_value,
    is_numeric,
    offset_seconds,
    to_number,
    utcnow,
    )
from flexidate.core.utils.granularity import (
    DATE_PARTS,
    GRANULARITY_PARTS,
    Granularity,
    )

logger = structlog.get_logger(__name__)

# Pattern of the string built from structured parts
ISO_FORMAT = "Y-m-d\\TH:i:s"

# Values filled in for missing parts when a full ISO string is required
FULL_ISO_DEFAULTS = {"year": EPOCH.year, "month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0}

DATE_INVALID_MESSAGE = "The date is invalid"
TIME_INVALID_MESSAGE = "The time is invalid"
FORMAT_MISMATCH_MESSAGE = "The created date does not match the input date."
NO_INPUT_MESSAGE = "No date input was provided"


# ============================================================================
# STRUCTURED PART HELPERS
# ============================================================================

def date_pad(value: Any, size: int = 2) -> str:
    """
    Left-pad a date part with zeros.

    Examples:
        >>> date_pad(7)
        '07'
        >>> date_pad(2010, 4)
        '2010'
    """
    return f"{int_value(value):0{size}d}"


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def to_iso(parts: Mapping[str, Any], full: bool = False) -> str:
    """
    Build an ISO-like string from a mapping of date parts.

    Year is padded to 4 digits, other parts to 2, with ``-`` and ``:``
    separators and a ``T`` only when both a date and a time are present.
    Without ``full``, output stops at the first missing part of each
    segment. With ``full``, missing parts are filled with 1970-01-01 00:00:00.

    Examples:
        >>> to_iso({"year": 2010, "month": 2, "day": 28})
        '2010-02-28'
        >>> to_iso({"year": 2010, "month": 2}, full=True)
        '2010-02-01T00:00:00'
        >>> to_iso({"hour": 10, "minute": 30})
        '10:30'
    """
    values = {part: parts.get(part) for part in GRANULARITY_PARTS}
    if full:
        values = {part: FULL_ISO_DEFAULTS[part] if _is_blank(value) else value for part, value in values.items()}

    datetime_str = ""
    if not _is_blank(values["year"]):
        datetime_str = date_pad(values["year"], 4)
        if not _is_blank(values["month"]):
            datetime_str += "-" + date_pad(values["month"])
            if not _is_blank(values["day"]):
                datetime_str += "-" + date_pad(values["day"])
    if not _is_blank(values["hour"]):
        datetime_str += "T" if datetime_str else ""
        datetime_str += date_pad(values["hour"])
        if not _is_blank(values["minute"]):
            datetime_str += ":" + date_pad(values["minute"])
            if not _is_blank(values["second"]):
                datetime_str += ":" + date_pad(values["second"])
    return datetime_str


def is_valid_part(part: str, value: Any, month: Optional[int] = None, year: Optional[int] = None) -> bool:
    """
    Check a single date part value.

    Days are checked against the month length when both month and year are
    given, else against 31. Only integers are valid.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    if part == "year":
        settings = get_settings()
        return settings.YEAR_MIN <= value <= settings.YEAR_MAX
    if part == "month":
        return 1 <= value <= 12
    if part == "day":
        known_month = year and month and 1 <= year <= 9999 and 1 <= month <= 12
        return 1 <= value <= (days_in_month(year, month) if known_month else 31)
    upper = {"hour": 23, "minute": 59, "second": 59}.get(part)
    return upper is None or 0 <= value <= upper


def force_valid(part: str, value: Any, default: str = "first", month: Optional[int] = None,
                year: Optional[int] = None, timezone: TimezoneLike = None) -> Any:
    """
    Turn a date part value into one that produces a valid date.

    Valid values are returned unchanged. Invalid years fall back to the
    current year; other parts fall back to their first value (``default``
    = "first") or to the current value (``default`` = "now"). "Now" is read
    in ``timezone``, the default zone when omitted.

    Examples:
        >>> force_valid("month", 13)
        1
        >>> force_valid("day", 30, month=2, year=2010)
        1
        >>> force_valid("hour", 23)
        23
    """
    if part not in GRANULARITY_PARTS or is_valid_part(part, value, month, year):
        return value
    now = utcnow(resolve_timezone(timezone).tzinfo)
    if part == "year":
        return now.year
    if default == "first":
        return 0 if part in ("hour", "minute", "second") else 1
    return getattr(now, part)


def _part_number(value: Any) -> Union[int, float, None]:
    """Numeric value of a structured part (None for blanks and non-numeric values)."""
    if _is_blank(value) or not is_numeric(value):
        return None
    return to_number(value)


def array_errors(parts: Mapping[str, Any]) -> List[DateError]:
    """
    Errors for the values of a structured parts mapping.

    Blank values (None or "") are placeholders and never errors. Non-numeric
    values, fractions and out-of-range values are, one error per part.

    Examples:
        >>> [str(e) for e in array_errors({"year": 2010, "month": 27})]
        ['The month is invalid']
    """
    year = _part_number(parts.get("year"))
    month = _part_number(parts.get("month"))
    context_year = year if is_valid_part("year", year) else None
    context_month = month if is_valid_part("month", month) else None

    errors: List[DateError] = []
    for part in GRANULARITY_PARTS:
        value = parts.get(part)
        if _is_blank(value):
            continue
        if not is_valid_part(part, _part_number(value), context_month, context_year):
            kind = ErrorKind.INVALID_CALENDAR_DATE if part in DATE_PARTS else ErrorKind.INVALID_TIME_COMPONENT
            errors.append(DateError(kind=kind, message=f"The {part} is invalid", part=part))
    return errors


# ============================================================================
# DATE VALUE
# ============================================================================

class DateValue:
    """
    A date built from flexible input, with its granularity and errors.

    Args:
        value: datetime/date/DateValue, Unix timestamp, mapping of date parts,
            string with ``fmt``, or free-form string (default: "now")
        timezone: Zone name, offset, tzinfo or TimezoneHandle. When omitted,
            the zone of a date-bearing input is used, else the default zone.
        fmt: PHP date()-style pattern for strict parsing of string input
            ("U" marks a timestamp)
        settings: DateSettings or dict (validate_format, locale, calendar, langcode)
        context: TimezoneContext providing the default zone

    Raises:
        pydantic.ValidationError: only for invalid ``settings``
    """

    def __init__(self, value: Any = "now", timezone: TimezoneLike = None, fmt: Optional[str] = None,
                 settings: Union[DateSettings, Mapping[str, Any], None] = None,
                 context: Optional[TimezoneContext] = None):
        self.settings = DateSettings.coerce(settings)
        self.input_value = value
        self.input_format = fmt
        self._context = context or get_timezone_context()
        self._errors = ErrorCollector()
        self._granularity = Granularity()
        self._timezone = self._resolve_zone(timezone, value)
        self._datetime: datetime = self._now()

        kind = classify_input(value, fmt)
        logger.debug("Constructing date", input_kind=type(kind).__name__, timezone=self._timezone.name)

        if isinstance(kind, DateObjectInput):
            self._construct_from_object(kind.value)
        elif isinstance(kind, PartsInput):
            self._construct_from_parts(kind.parts)
        elif isinstance(kind, TimestampInput):
            self._construct_from_timestamp(kind.timestamp)
        elif isinstance(kind, FormattedStringInput):
            self._construct_from_format(kind.fmt, kind.text)
        else:
            self._construct_from_string(kind.value)

        if self._errors:
            logger.debug("Date input has errors", input=repr(value), errors=self.error_messages)

    # ------------------------------------------------------------------
    # Construction strategies
    # ------------------------------------------------------------------

    def _resolve_zone(self, timezone: TimezoneLike, value: Any) -> TimezoneHandle:
        try:
            return resolve_timezone(timezone, value, self._context)
        except InvalidTimezoneError as e:
            self._errors.record(ErrorKind.INVALID_TIMEZONE, str(e))
            return self._context.default_handle()

    def _now(self) -> datetime:
        return utcnow(self._timezone.tzinfo)

    def _absorb(self, result: ParseResult) -> None:
        """Take the value of a parse result and fold its diagnostics into the errors."""
        for message in result.errors:
            self._errors.record(ErrorKind.UNDERLYING_PARSE_ERROR, message)
        for message in result.warnings:
            if message == DATE_INVALID_WARNING:
                self._errors.record(ErrorKind.INVALID_CALENDAR_DATE, DATE_INVALID_MESSAGE)
            elif message == TIME_INVALID_WARNING:
                self._errors.record(ErrorKind.INVALID_TIME_COMPONENT, TIME_INVALID_MESSAGE)
            else:
                self._errors.record(ErrorKind.UNDERLYING_PARSE_WARNING, message)
        if result.tzinfo is not None:
            self._timezone = TimezoneHandle.from_tzinfo(result.tzinfo, result.value)
        self._datetime = result.value

    def _construct_from_object(self, source: Any) -> None:
        if isinstance(source, DateValue):
            self._errors.extend(source.errors)
            self._granularity = source.granularity
            source_dt, fmt = source.datetime, get_settings().DEFAULT_FORMAT
        elif isinstance(source, datetime):
            self._granularity = Granularity.full()
            source_dt, fmt = source, get_settings().DEFAULT_FORMAT
        elif isinstance(source, date):
            self._granularity = Granularity(DATE_PARTS)
            source_dt, fmt = datetime(source.year, source.month, source.day), "Y-m-d"
        else:
            self._granularity = Granularity.full()
            source_dt, fmt = source.datetime, get_settings().DEFAULT_FORMAT

        self._absorb(parse_with_format(fmt, render(source_dt, fmt), self._timezone.tzinfo))

    def _construct_from_parts(self, parts: Mapping[str, Any]) -> None:
        self._errors.extend(array_errors(parts))
        iso = to_iso(parts, full=True)
        self._absorb(parse_with_format(ISO_FORMAT, iso, self._timezone.tzinfo))
        self._granularity = Granularity.from_parts_map(parts)

    def _construct_from_timestamp(self, timestamp: Union[int, float]) -> None:
        self._granularity = Granularity.full()
        try:
            self._datetime = datetime.fromtimestamp(timestamp, self._timezone.tzinfo)
        except (OverflowError, OSError, ValueError) as e:
            self._errors.record(ErrorKind.UNDERLYING_PARSE_ERROR, f"The timestamp {timestamp} is out of range")
            logger.debug("Timestamp out of range", timestamp=timestamp, error=str(e))
            self._datetime = self._timezone.convert(EPOCH.replace(tzinfo=dt_timezone.utc))

    def _construct_from_format(self, fmt: str, text: str) -> None:
        result = parse_with_format(fmt, text, self._timezone.tzinfo)
        self._absorb(result)
        self._granularity = Granularity(format_parts(fmt))
        if self.settings.validate_format and not result.errors and render(self._datetime, fmt) != text:
            self._errors.record(ErrorKind.FORMAT_MISMATCH, FORMAT_MISMATCH_MESSAGE)

    def _construct_from_string(self, value: Any) -> None:
        if _is_blank(value) or (isinstance(value, str) and not value.strip()):
            self._errors.record(ErrorKind.NO_INPUT_PROVIDED, NO_INPUT_MESSAGE)
            return
        if not isinstance(value, str):
            self._errors.record(ErrorKind.UNDERLYING_PARSE_ERROR, f"Unsupported date input of type {type(value).__name__}")
            return

        keyword = value.strip().lower()
        if keyword == "now":
            self._granularity = Granularity.full()
            return
        today = self._now().replace(hour=0, minute=0, second=0, microsecond=0)
        if keyword == "today":
            self._datetime = today
            self._granularity = Granularity(DATE_PARTS)
            return

        try:
            parsed = dateutil_parser.parse(value, default=today.replace(tzinfo=None))
        except (ValueError, OverflowError) as e:
            self._errors.record(ErrorKind.UNDERLYING_PARSE_ERROR, str(e))
            return

        if parsed.tzinfo is not None:
            zone = _normalize_parsed_zone(parsed)
            self._timezone = TimezoneHandle.from_tzinfo(zone, parsed)
            parsed = parsed.replace(tzinfo=zone)
        else:
            parsed = self._timezone.localize(parsed)
        self._datetime = parsed
        self._granularity = Granularity.from_time_string(value)

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def now(cls, timezone: TimezoneLike = None, **kwargs) -> "DateValue":
        return cls("now", timezone, **kwargs)

    def with_timezone(self, timezone: TimezoneLike) -> "DateValue":
        """
        Same instant expressed in another zone.

        When the instant cannot be expressed in the new zone (it would fall
        outside the year range), the copy keeps the current zone and carries
        an UNDERLYING_PARSE_ERROR instead.

        Raises:
            InvalidTimezoneError: if the timezone cannot be resolved
        """
        handle = resolve_timezone(timezone, context=self._context)
        clone = copy.copy(self)
        clone._errors = ErrorCollector(self.errors)
        try:
            clone._datetime = handle.convert(self._datetime)
        except OverflowError as e:
            clone.record_error(
                ErrorKind.UNDERLYING_PARSE_ERROR,
                f"The date cannot be expressed in the timezone {handle.name}"
                )
            logger.debug("Timezone conversion out of range", timezone=handle.name, error=str(e))
            return clone
        clone._timezone = handle
        return clone

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def errors(self) -> List[DateError]:
        return self._errors.errors

    @property
    def error_messages(self) -> List[str]:
        return self._errors.messages()

    def has_errors(self) -> bool:
        return bool(self._errors)

    def record_error(self, kind: ErrorKind, message: str, part: Optional[str] = None) -> None:
        """Append an error found after construction (e.g. while formatting)."""
        self._errors.record(kind, message, part)

    @property
    def granularity(self) -> Granularity:
        return self._granularity

    def has_granularity(self, parts: Union[str, Iterable[str]]) -> bool:
        return self._granularity.has(parts)

    @property
    def timezone(self) -> TimezoneHandle:
        return self._timezone

    @property
    def timezone_name(self) -> str:
        return self._timezone.name

    @property
    def datetime(self) -> datetime:
        """Aware datetime in the value's zone."""
        return self._datetime

    @property
    def timestamp(self) -> int:
        return math.floor(self._datetime.timestamp())

    @property
    def offset(self) -> int:
        """UTC offset in seconds."""
        return offset_seconds(self._datetime)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def format(self, fmt: str) -> str:
        """Render with a PHP date()-style pattern (untranslated)."""
        return render(self._datetime, fmt)

    def format_localized(self, fmt: str, locale: Optional[str] = None, calendar: Optional[str] = None,
                         langcode: Optional[str] = None, use_locale: bool = True) -> str:
        """
        Render through the locale-aware formatter.

        Unset arguments come from the value's settings, then the library
        settings. Formatter failures are recorded on this value.
        """
        formatter = DateFormatter(
            locale=locale or self.settings.locale,
            calendar=calendar or self.settings.calendar,
            langcode=langcode or self.settings.langcode,
            )
        return formatter.format(self, fmt, use_locale=use_locale)

    to_iso = staticmethod(to_iso)
    date_pad = staticmethod(date_pad)

    def to_array(self, full: bool = False) -> Dict[str, Any]:
        """
        Date parts of this value as integers.

        Parts outside the granularity are "" unless ``full`` is set, so
        ``to_iso(value.to_array())`` gives back the ISO string of the input.
        """
        dt = self._datetime
        return {
            part: getattr(dt, part) if full or part in self._granularity else ""
            for part in GRANULARITY_PARTS
            }

    def __str__(self) -> str:
        return self.format("c")

    def __repr__(self) -> str:
        return (
            f"DateValue({self.format('c')!r}, timezone={self._timezone.name!r}, "
            f"granularity={list(self._granularity)}, errors={self.error_messages})"
            )


def _normalize_parsed_zone(parsed: datetime):
    """zoneinfo/fixed-offset equivalent of the tzinfo the lenient parser attached."""
    offset = parsed.utcoffset() or timedelta(0)
    if parsed.tzname() in ("UTC", "GMT", "Z") and not offset:
        return TimezoneHandle.from_name("UTC").tzinfo
    return dt_timezone(offset)

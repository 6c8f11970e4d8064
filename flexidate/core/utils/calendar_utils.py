"""
Calendar arithmetic helpers.

Day and week counts, calendar week numbering with a configurable first day
of the week (or ISO-8601 weeks), week date ranges and the option lists UI
collaborators build selects from.

All helpers accepting a date take a ``date``/``datetime``, an object
exposing a ``datetime`` attribute (e.g. a DateValue), an ISO or free-form
string, or None (today). Inputs that cannot be resolved return None.
"""
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
from dateutil import parser as dateutil_parser

from flexidate.core.config import get_settings
from flexidate.core.utils import translation_utils
from flexidate.core.utils.datetime_utils import days_in_month as _days_in_month, parse_ISO_date

logger = structlog.get_logger(__name__)

OptionList = Dict[Union[int, str], Union[int, str]]

# Blank entry prepended to option lists that are not required
_NONE_OPTION: OptionList = {"": ""}


def _to_date(value: Any = None) -> Optional[date]:
    """Resolve a date-like argument to a ``date``, or None when it cannot be resolved."""
    if value is None or value == "":
        return date.today()
    inner = getattr(value, "datetime", None)
    if isinstance(inner, datetime):
        return inner.date()
    if isinstance(value, (date, datetime)):
        return parse_ISO_date(value)
    if isinstance(value, str):
        try:
            return parse_ISO_date(value)
        except ValueError:
            pass
        try:
            return dateutil_parser.parse(value).date()
        except (ValueError, OverflowError) as e:
            logger.debug("Could not resolve date", value=value, error=str(e))
            return None
    return None


def _first_day(first_day: Optional[int]) -> int:
    return get_settings().FIRST_DAY if first_day is None else first_day


def _iso8601(iso8601: Optional[bool]) -> bool:
    return get_settings().ISO8601_WEEKS if iso8601 is None else iso8601


def _with_none(options: OptionList, required: bool) -> OptionList:
    return options if required else {**_NONE_OPTION, **options}


# ============================================================================
# NAME LISTS
# ============================================================================

def month_names_untranslated() -> List[str]:
    """English month names, January first."""
    return list(translation_utils.MONTH_NAMES_EN)


def week_days_untranslated() -> List[str]:
    """English weekday names, Sunday first."""
    return list(translation_utils.WEEKDAY_NAMES_EN)


def month_names(required: bool = False, language: Optional[str] = None) -> OptionList:
    """
    Localized month names keyed by month number (1-12).

    Args:
        required: If False, a blank option is prepended
        language: Language code (default: settings LANGCODE)

    Examples:
        >>> month_names(required=True, language='en')[3]
        'March'
    """
    names = translation_utils.month_names(language or get_settings().LANGCODE)
    return _with_none(dict(enumerate(names, start=1)), required)


def month_names_abbr(required: bool = False, language: Optional[str] = None) -> OptionList:
    """Localized abbreviated month names keyed by month number (1-12)."""
    names = translation_utils.month_names(language or get_settings().LANGCODE, abbr=True)
    return _with_none(dict(enumerate(names, start=1)), required)


def week_days(required: bool = False, language: Optional[str] = None) -> OptionList:
    """Localized weekday names keyed by day number (0 = Sunday)."""
    names = translation_utils.weekday_names(language or get_settings().LANGCODE)
    return _with_none(dict(enumerate(names)), required)


def week_days_abbr(required: bool = False, language: Optional[str] = None) -> OptionList:
    """Localized abbreviated weekday names keyed by day number (0 = Sunday)."""
    names = translation_utils.weekday_names(language or get_settings().LANGCODE, abbr=True)
    return _with_none(dict(enumerate(names)), required)


def week_days_ordered(weekdays: List[Any], first_day: Optional[int] = None) -> List[Any]:
    """
    Rotate a Sunday-first list of weekdays so it starts on the first day of the week.

    Examples:
        >>> week_days_ordered(['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat'], first_day=1)
        ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
    """
    shift = _first_day(first_day) % 7
    weekdays = list(weekdays)
    return weekdays[shift:] + weekdays[:shift]


# ============================================================================
# OPTION LISTS
# ============================================================================

def years(min_year: int = 0, max_year: int = 0, required: bool = False) -> OptionList:
    """Years from min_year to max_year (defaults: current year -3 / +3)."""
    current = date.today().year
    min_year = min_year or current - 3
    max_year = max_year or current + 3
    return _with_none({year: year for year in range(min_year, max_year + 1)}, required)


def days(required: bool = False, month: Optional[int] = None, year: Optional[int] = None) -> OptionList:
    """Days of a month (31 when month or year is not given)."""
    max_day = days_in_month(year, month) if month and year else None
    return _with_none({day: day for day in range(1, (max_day or 31) + 1)}, required)


def hours(fmt: str = "H", required: bool = False) -> OptionList:
    """
    Hours for a select, 0-23 for ``H``/``G`` and 1-12 for ``h``/``g``.

    ``H`` and ``h`` zero-pad the labels.
    """
    first, last = (1, 12) if fmt in ("h", "g") else (0, 23)
    pad = fmt in ("H", "h")
    return _with_none({hour: f"{hour:02d}" if pad else hour for hour in range(first, last + 1)}, required)


def minutes(fmt: str = "i", required: bool = False, increment: int = 1) -> OptionList:
    """Minutes for a select, stepping by ``increment``; ``i`` zero-pads the labels."""
    step = increment or 1
    pad = fmt == "i"
    return _with_none({minute: f"{minute:02d}" if pad else minute for minute in range(0, 60, step)}, required)


def seconds(fmt: str = "s", required: bool = False, increment: int = 1) -> OptionList:
    """Seconds for a select, stepping by ``increment``; ``s`` zero-pads the labels."""
    step = increment or 1
    pad = fmt == "s"
    return _with_none({second: f"{second:02d}" if pad else second for second in range(0, 60, step)}, required)


def ampm(required: bool = False, language: Optional[str] = None) -> OptionList:
    """am/pm options with localized labels."""
    am, pm = translation_utils.ampm_names(language or get_settings().LANGCODE)
    return _with_none({"am": am.lower(), "pm": pm.lower()}, required)


# ============================================================================
# DAY AND WEEK COUNTS
# ============================================================================

def days_in_month(year: Any, month: Any) -> Optional[int]:
    """Number of days in a month, or None for an invalid year/month."""
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        return None
    if not 1 <= year <= 9999 or not 1 <= month <= 12:
        return None
    return _days_in_month(year, month)


def days_in_year(value: Any = None) -> Optional[int]:
    """366 for dates in a leap year, 365 otherwise."""
    day = _to_date(value)
    if day is None:
        return None
    return 366 if _days_in_month(day.year, 2) == 29 else 365


def iso_weeks_in_year(value: Any = None) -> Optional[int]:
    """Number of ISO weeks (52 or 53) in the year of a date. December 28 is always in the last one."""
    day = _to_date(value)
    if day is None:
        return None
    return date(day.year, 12, 28).isocalendar()[1]


def day_of_week(value: Any = None) -> Optional[int]:
    """Day of the week of a date, 0 = Sunday ... 6 = Saturday."""
    day = _to_date(value)
    if day is None:
        return None
    return day.isoweekday() % 7


def day_of_week_name(value: Any = None, abbr: bool = True, language: Optional[str] = None) -> Optional[str]:
    """Localized (abbreviated by default) weekday name of a date."""
    dow = day_of_week(value)
    if dow is None:
        return None
    names = week_days_abbr(True, language) if abbr else week_days(True, language)
    return names[dow]


def calendar_week(value: Any, first_day: Optional[int] = None, iso8601: Optional[bool] = None) -> Optional[int]:
    """
    Calendar week number of a date.

    With ISO-8601 weeks this is the ISO week. Otherwise weeks start on
    ``first_day`` (0 = Sunday) and week 1 is the week holding January 1st,
    so the result ranges from 1 to 54.

    Examples:
        >>> calendar_week("2024-01-06", first_day=0, iso8601=False)
        1
        >>> calendar_week("2024-01-07", first_day=0, iso8601=False)
        2
    """
    day = _to_date(value)
    if day is None:
        return None
    iso_year, week, iso_weekday = day.isocalendar()
    if _iso8601(iso8601):
        return week

    year_start = date(day.year, 1, 1)
    year_week = year_start.isocalendar()[1]

    # Drop the ISO leap week
    if iso_year > day.year:
        week = (day - timedelta(days=7)).isocalendar()[1] + 1
    elif iso_year < day.year:
        week = 0

    if year_week != 1:
        week += 1

    # ISO weekday (1 = Monday ... 7 = Sunday) of the first day of the week
    iso_first_day = 1 + (_first_day(first_day) + 6) % 7
    if iso_weekday < iso_first_day:
        week -= 1
    if year_start.isoweekday() < iso_first_day:
        week += 1
    return week


def weeks_in_year(year: int, first_day: Optional[int] = None, iso8601: Optional[bool] = None) -> Optional[int]:
    """Number of calendar weeks in a year (the week number of December 31st)."""
    try:
        last_day = date(int(year), 12, 31)
    except (TypeError, ValueError):
        return None
    return calendar_week(last_day, first_day, iso8601)


def iso_week_range(week: int, year: int) -> Optional[Tuple[date, date]]:
    """
    Start (Monday) and end (the following Monday, exclusive) of an ISO week.

    Week numbers past the last week of the year continue into the next one.
    """
    if week < 1:
        return None
    try:
        start = date.fromisocalendar(int(year), 1, 1) + timedelta(weeks=int(week) - 1)
        return start, start + timedelta(days=7)
    except (ValueError, OverflowError) as e:
        logger.debug("ISO week out of range", week=week, year=year, error=str(e))
        return None


def calendar_week_range(week: int, year: int, first_day: Optional[int] = None,
                        iso8601: Optional[bool] = None) -> Optional[Tuple[date, date]]:
    """
    Start and end (exclusive) of a calendar week.

    The start is moved back to the first day of the week, but never before
    January 1st of the requested year.

    Examples:
        >>> calendar_week_range(1, 2024, first_day=0, iso8601=False)
        (datetime.date(2024, 1, 1), datetime.date(2024, 1, 7))
    """
    if _iso8601(iso8601):
        return iso_week_range(week, year)
    try:
        year = int(year)
        start = date(year, 1, 1) + timedelta(days=7 * (int(week) - 1))
        weekday = start.isoweekday() % 7
        start -= timedelta(days=(7 + weekday - _first_day(first_day)) % 7)
        end = start + timedelta(days=7)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug("Calendar week out of range", week=week, year=year, error=str(e))
        return None
    if start.year != year:
        start = date(year, 1, 1)
    return start, end

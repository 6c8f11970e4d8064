"""
Timezone resolution service.

Normalizes a timezone argument (name, handle, tzinfo or nothing) into a
TimezoneHandle. Offsets are computed by zoneinfo (IANA database shipped by
the tzdata package where the host has none).

Resolution order (first match wins):
1. A TimezoneHandle or tzinfo object is used as is
2. No timezone given, but the date input carries its own zone: adopt it
3. A non-empty name: looked up, InvalidTimezoneError if unknown
4. Otherwise the default zone of the TimezoneContext

The default zone name is the only process-wide state: it is resolved lazily
on first read (settings DEFAULT_TIMEZONE, then the host TZ variable, then
UTC) and cached in the TimezoneContext.
"""
import os
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Optional, Union

import structlog

from flexidate.core.config import get_settings
from flexidate.core.utils.date_patterns import parse_timezone_name
from flexidate.core.utils.datetime_utils import offset_seconds, zone_name

logger = structlog.get_logger(__name__)

DEFAULT_TIMEZONE_NAME = "UTC"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class DateApiError(Exception):
    """Base exception for flexidate helpers."""
    pass


class InvalidTimezoneError(DateApiError):
    """Raised when a timezone name is not known to the timezone database."""

    def __init__(self, name: Any):
        super().__init__(f"The timezone '{name}' is invalid")
        self.name = name


# ============================================================================
# TIMEZONE HANDLE
# ============================================================================

@dataclass(frozen=True)
class TimezoneHandle:
    """
    Resolved timezone: canonical name plus the tzinfo computing its offsets.

    Examples:
        >>> tz = TimezoneHandle.from_name("America/Chicago")
        >>> tz.utcoffset(datetime(2009, 3, 7, 10, 30))
        -21600
    """
    name: str
    tzinfo: tzinfo

    @classmethod
    def from_name(cls, name: str) -> "TimezoneHandle":
        tz = parse_timezone_name(name.strip()) if isinstance(name, str) else None
        if tz is None:
            raise InvalidTimezoneError(name)
        return cls(name=zone_name(tz), tzinfo=tz)

    @classmethod
    def from_tzinfo(cls, tz: tzinfo, dt: Optional[datetime] = None) -> "TimezoneHandle":
        return cls(name=zone_name(tz, dt), tzinfo=tz)

    def utcoffset(self, dt: datetime) -> int:
        """Offset from UTC in seconds at a wall-clock (naive) or absolute (aware) time."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=self.tzinfo)
        return offset_seconds(dt.astimezone(self.tzinfo))

    def localize(self, dt: datetime) -> datetime:
        """Attach this zone to wall-clock fields (naive datetime)."""
        return dt.replace(tzinfo=self.tzinfo)

    def convert(self, dt: datetime) -> datetime:
        """Re-express an aware datetime in this zone (same instant)."""
        return dt.astimezone(self.tzinfo)

    def __str__(self) -> str:
        return self.name


# ============================================================================
# DEFAULT TIMEZONE CONTEXT
# ============================================================================

class TimezoneContext:
    """
    Holder of the default timezone name.

    Lifecycle: the name is resolved on first read of ``default_name`` and
    cached; ``set_default_name`` overrides it, ``reset`` drops the cache so
    the next read resolves it again.
    """

    def __init__(self, default_name: Optional[str] = None):
        self._default_name: Optional[str] = None
        if default_name:
            self.set_default_name(default_name)

    @property
    def default_name(self) -> str:
        if self._default_name is None:
            self._default_name = self._resolve_default_name()
        return self._default_name

    def default_handle(self) -> TimezoneHandle:
        return TimezoneHandle.from_name(self.default_name)

    def set_default_name(self, name: str) -> None:
        """
        Set the default timezone.

        Raises:
            InvalidTimezoneError: if the name is not a known timezone
        """
        self._default_name = TimezoneHandle.from_name(name).name

    def reset(self) -> None:
        self._default_name = None

    @staticmethod
    def _resolve_default_name() -> str:
        candidates = (
            ("settings", get_settings().DEFAULT_TIMEZONE),
            ("environment", os.environ.get("TZ", "")),
            )
        for source, name in candidates:
            name = (name or "").strip().lstrip(":")
            if not name:
                continue
            if parse_timezone_name(name) is None:
                logger.warning("Ignoring invalid default timezone", source=source, timezone=name)
                continue
            logger.info("Default timezone resolved", source=source, timezone=name)
            return name
        logger.info("Default timezone resolved", source="fallback", timezone=DEFAULT_TIMEZONE_NAME)
        return DEFAULT_TIMEZONE_NAME


_default_context = TimezoneContext()


def get_timezone_context() -> TimezoneContext:
    """Process-wide TimezoneContext used when callers do not pass their own."""
    return _default_context


# ============================================================================
# RESOLUTION
# ============================================================================

TimezoneLike = Union[TimezoneHandle, tzinfo, str, None]


def _zone_of_input(raw_input: Any) -> Optional[TimezoneHandle]:
    """Zone carried by a date-bearing input (aware datetime or DateValue), if any."""
    handle = getattr(raw_input, "timezone", None)
    if isinstance(handle, TimezoneHandle):
        return handle
    if isinstance(raw_input, datetime) and raw_input.tzinfo is not None:
        return TimezoneHandle.from_tzinfo(raw_input.tzinfo, raw_input)
    return None


def resolve_timezone(timezone: TimezoneLike = None, raw_input: Any = None,
                     context: Optional[TimezoneContext] = None) -> TimezoneHandle:
    """
    Resolve a timezone argument to a TimezoneHandle.

    Args:
        timezone: Handle, tzinfo, zone name/offset, or None
        raw_input: The date input, consulted when no timezone is given
        context: Default-zone holder (default: the process-wide context)

    Returns:
        TimezoneHandle

    Raises:
        InvalidTimezoneError: if a timezone name cannot be resolved

    Examples:
        >>> resolve_timezone("Europe/Rome").name
        'Europe/Rome'
        >>> resolve_timezone("+05:30").name
        '+05:30'
    """
    if isinstance(timezone, TimezoneHandle):
        return timezone
    if isinstance(timezone, tzinfo):
        return TimezoneHandle.from_tzinfo(timezone)
    if timezone is None or (isinstance(timezone, str) and not timezone.strip()):
        adopted = _zone_of_input(raw_input)
        if adopted is not None:
            return adopted
        return (context or get_timezone_context()).default_handle()
    return TimezoneHandle.from_name(timezone)

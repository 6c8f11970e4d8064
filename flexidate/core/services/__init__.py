"""
Services package.
Date construction, timezone resolution and formatting.

- DateValue: flexible date construction with granularity and error collection
- TimezoneContext / resolve_timezone: timezone resolution with a default zone
- DateFormatter: Babel (CLDR) formatting with fixed-pattern fallback
"""
from flexidate.core.services.date_formatter import DateFormatter, php_to_icu
from flexidate.core.services.date_input import classify_input
from flexidate.core.services.date_object import DateValue, array_errors, force_valid, to_iso
from flexidate.core.services.timezone_service import (
    DateApiError,
    InvalidTimezoneError,
    TimezoneContext,
    TimezoneHandle,
    get_timezone_context,
    resolve_timezone,
    )

__all__ = [
    "DateApiError",
    "DateFormatter",
    "DateValue",
    "InvalidTimezoneError",
    "TimezoneContext",
    "TimezoneHandle",
    "array_errors",
    "classify_input",
    "force_valid",
    "get_timezone_context",
    "php_to_icu",
    "resolve_timezone",
    "to_iso",
    ]

"""
Common schemas shared across the construction engine and the formatter.

**Domain Coverage**:
- ErrorKind: Taxonomy of date construction problems
- DateError: One recorded problem (kind, message, optional date part)
- ErrorCollector: Ordered, de-duplicating accumulator of DateError records
- DateSettings: Per-call construction/formatting options

**Design Notes**:
- Problems with the date input are collected, never raised
- Invalid DateSettings are a caller bug and raise pydantic.ValidationError
"""
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flexidate.core.utils.granularity import GRANULARITY_PARTS


# ============================================================================
# ERROR TAXONOMY
# ============================================================================

class ErrorKind(str, Enum):
    """
    Kind of problem found while building or formatting a date.

    - INVALID_CALENDAR_DATE: year/month/day is not a real Gregorian date
    - INVALID_TIME_COMPONENT: hour, minute or second out of range
    - FORMAT_MISMATCH: re-rendering the parsed value does not reproduce the input
    - UNDERLYING_PARSE_ERROR / UNDERLYING_PARSE_WARNING: diagnostics from the parser, verbatim
    - INVALID_TIMEZONE: the timezone name could not be resolved
    - NO_INPUT_PROVIDED: empty input
    - FORMATTER_ERROR: exception caught in the locale-aware formatter
    """
    INVALID_CALENDAR_DATE = "INVALID_CALENDAR_DATE"
    INVALID_TIME_COMPONENT = "INVALID_TIME_COMPONENT"
    FORMAT_MISMATCH = "FORMAT_MISMATCH"
    UNDERLYING_PARSE_ERROR = "UNDERLYING_PARSE_ERROR"
    UNDERLYING_PARSE_WARNING = "UNDERLYING_PARSE_WARNING"
    INVALID_TIMEZONE = "INVALID_TIMEZONE"
    NO_INPUT_PROVIDED = "NO_INPUT_PROVIDED"
    FORMATTER_ERROR = "FORMATTER_ERROR"


class DateError(BaseModel):
    """
    A single problem recorded against a date value.

    Attributes:
        kind: ErrorKind of the problem
        message: Human-readable message (parser messages are kept verbatim)
        part: Date part concerned (year ... second), when known

    Examples:
        >>> err = DateError(kind=ErrorKind.INVALID_CALENDAR_DATE, message="The month is invalid", part="month")
        >>> str(err)
        'The month is invalid'
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ErrorKind
    message: str
    part: Optional[str] = Field(None, description="Date part concerned, if any")

    @field_validator("part")
    @classmethod
    def validate_part(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GRANULARITY_PARTS:
            raise ValueError(f"part must be one of {list(GRANULARITY_PARTS)}, got '{v}'")
        return v

    def __str__(self) -> str:
        return self.message


class ErrorCollector:
    """
    Ordered accumulator of DateError records.

    Identical records (same kind, message and part) are kept once, in the
    order they were first added.
    """

    def __init__(self, errors: Optional[List[DateError]] = None):
        self._errors: List[DateError] = []
        for error in errors or ():
            self.add(error)

    def add(self, error: DateError) -> None:
        if error not in self._errors:
            self._errors.append(error)

    def record(self, kind: ErrorKind, message: str, part: Optional[str] = None) -> DateError:
        """Build a DateError and add it. Returns the record."""
        error = DateError(kind=kind, message=message, part=part)
        self.add(error)
        return error

    def extend(self, errors) -> None:
        for error in errors:
            self.add(error)

    @property
    def errors(self) -> List[DateError]:
        return list(self._errors)

    def messages(self) -> List[str]:
        return [error.message for error in self._errors]

    def __iter__(self) -> Iterator[DateError]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)


# ============================================================================
# PER-CALL SETTINGS
# ============================================================================

class DateSettings(BaseModel):
    """
    Options for a single date construction.

    Attributes:
        validate_format: Re-render a format-parsed value and compare it with the input
        locale: Locale for locale-aware formatting (e.g. "it_IT"); None = library setting
        calendar: Calendar for locale-aware formatting (e.g. "gregorian"); None = library setting
        langcode: Language for translated month/day names; None = library setting
    """
    model_config = ConfigDict(extra="forbid")

    validate_format: bool = True
    locale: Optional[str] = None
    calendar: Optional[str] = None
    langcode: Optional[str] = None

    @classmethod
    def coerce(cls, settings: Union["DateSettings", Mapping[str, Any], None]) -> "DateSettings":
        """Accept an instance, a plain dict or None (all defaults)."""
        if settings is None:
            return cls()
        if isinstance(settings, cls):
            return settings
        return cls.model_validate(dict(settings))

"""
Test common schemas: error records, the error collector and per-call settings.
"""
import pytest
from pydantic import ValidationError

from flexidate.core.schemas.common import DateError, DateSettings, ErrorCollector, ErrorKind


# ============================================================================
# TESTS: ErrorKind / DateError
# ============================================================================

class TestErrorKind:
    """Test the error taxonomy."""

    def test_string_values(self):
        assert ErrorKind.FORMAT_MISMATCH == "FORMAT_MISMATCH"
        assert ErrorKind("INVALID_TIMEZONE") is ErrorKind.INVALID_TIMEZONE

    def test_all_kinds(self):
        assert len(ErrorKind) == 8


class TestDateError:
    """Test the error record model."""

    def test_str_is_message(self):
        err = DateError(kind=ErrorKind.INVALID_CALENDAR_DATE, message="The month is invalid", part="month")
        assert str(err) == "The month is invalid"

    def test_part_optional(self):
        assert DateError(kind=ErrorKind.NO_INPUT_PROVIDED, message="No date input was provided").part is None

    def test_unknown_part_rejected(self):
        with pytest.raises(ValidationError):
            DateError(kind=ErrorKind.INVALID_CALENDAR_DATE, message="x", part="week")

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            DateError(kind=ErrorKind.INVALID_CALENDAR_DATE, message="x", severity="high")

    def test_frozen(self):
        err = DateError(kind=ErrorKind.FORMATTER_ERROR, message="x")
        with pytest.raises(ValidationError):
            err.message = "y"

    def test_equality_by_value(self):
        a = DateError(kind=ErrorKind.INVALID_TIME_COMPONENT, message="The hour is invalid", part="hour")
        b = DateError(kind=ErrorKind.INVALID_TIME_COMPONENT, message="The hour is invalid", part="hour")
        assert a == b

    def test_json_dump(self):
        err = DateError(kind=ErrorKind.INVALID_TIMEZONE, message="bad zone")
        assert err.model_dump(mode="json") == {"kind": "INVALID_TIMEZONE", "message": "bad zone", "part": None}


# ============================================================================
# TESTS: ErrorCollector
# ============================================================================

class TestErrorCollector:
    """Test ordered, de-duplicating error accumulation."""

    def test_empty(self):
        collector = ErrorCollector()
        assert not collector
        assert len(collector) == 0
        assert collector.errors == []

    def test_record_returns_error(self):
        collector = ErrorCollector()
        err = collector.record(ErrorKind.INVALID_CALENDAR_DATE, "The day is invalid", "day")
        assert err.part == "day"
        assert collector.errors == [err]

    def test_duplicates_kept_once_in_order(self):
        collector = ErrorCollector()
        collector.record(ErrorKind.INVALID_CALENDAR_DATE, "The date is invalid")
        collector.record(ErrorKind.FORMAT_MISMATCH, "The created date does not match the input date.")
        collector.record(ErrorKind.INVALID_CALENDAR_DATE, "The date is invalid")
        assert collector.messages() == ["The date is invalid", "The created date does not match the input date."]

    def test_same_message_different_kind_kept(self):
        collector = ErrorCollector()
        collector.record(ErrorKind.UNDERLYING_PARSE_ERROR, "oops")
        collector.record(ErrorKind.FORMATTER_ERROR, "oops")
        assert len(collector) == 2

    def test_extend_and_init(self):
        errors = [
            DateError(kind=ErrorKind.INVALID_TIMEZONE, message="a"),
            DateError(kind=ErrorKind.INVALID_TIMEZONE, message="a"),
            DateError(kind=ErrorKind.INVALID_TIMEZONE, message="b"),
            ]
        assert len(ErrorCollector(errors)) == 2
        collector = ErrorCollector()
        collector.extend(errors)
        assert [e.message for e in collector] == ["a", "b"]

    def test_errors_is_a_copy(self):
        collector = ErrorCollector()
        collector.record(ErrorKind.FORMATTER_ERROR, "x")
        collector.errors.clear()
        assert len(collector) == 1


# ============================================================================
# TESTS: DateSettings
# ============================================================================

class TestDateSettings:
    """Test per-call settings."""

    def test_defaults(self):
        settings = DateSettings()
        assert settings.validate_format is True
        assert settings.locale is None
        assert settings.calendar is None
        assert settings.langcode is None

    def test_coerce(self):
        assert DateSettings.coerce(None) == DateSettings()
        instance = DateSettings(validate_format=False)
        assert DateSettings.coerce(instance) is instance
        assert DateSettings.coerce({"locale": "it_IT"}).locale == "it_IT"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            DateSettings.coerce({"validate": False})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

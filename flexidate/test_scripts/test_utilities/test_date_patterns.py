"""
Test the pattern engine (tokenize, render, strict parse).

Patterns use PHP date() characters; a backslash escapes the next character.
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from flexidate.core.utils.date_patterns import (
    DATE_INVALID_WARNING,
    TIME_INVALID_WARNING,
    FormatSegment,
    format_parts,
    ordinal_suffix,
    parse_timezone_name,
    parse_with_format,
    render,
    tokenize,
    )

CHICAGO = ZoneInfo("America/Chicago")
SAMPLE = datetime(2009, 3, 7, 14, 5, 9, 123456, tzinfo=CHICAGO)


# ============================================================================
# TESTS: tokenize / format_parts
# ============================================================================

class TestTokenize:
    """Test splitting patterns into literal and token segments."""

    def test_tokens_and_literals(self):
        assert tokenize("Y-m") == [
            FormatSegment("Y", True),
            FormatSegment("-"),
            FormatSegment("m", True),
            ]

    def test_escaped_characters_are_literals(self):
        segments = tokenize(r"Y\Tm")
        assert [s.text for s in segments] == ["Y", "T", "m"]
        assert [s.is_token for s in segments] == [True, False, True]

    def test_adjacent_literals_are_merged(self):
        assert tokenize(r"\o\f ") == [FormatSegment("of ")]

    def test_trailing_backslash_is_literal(self):
        assert tokenize("Y\\") == [FormatSegment("Y", True), FormatSegment("\\")]


class TestFormatParts:
    """Test the date parts implied by a pattern."""

    def test_canonical_order_without_duplicates(self):
        assert format_parts("d/m/Y H:i d") == ["year", "month", "day", "hour", "minute"]

    def test_full_tokens_imply_all_parts(self):
        for fmt in ("c", "r", "U"):
            assert format_parts(fmt) == ["year", "month", "day", "hour", "minute", "second"]

    def test_escaped_tokens_are_ignored(self):
        assert format_parts(r"\Y\m\d H") == ["hour"]

    def test_empty_pattern(self):
        assert format_parts("") == []
        assert format_parts(None) == []


# ============================================================================
# TESTS: render
# ============================================================================

class TestRender:
    """Test rendering of every token family."""

    @pytest.mark.parametrize("fmt,expected", [
        ("d", "07"),
        ("j", "7"),
        ("D", "Sat"),
        ("l", "Saturday"),
        ("N", "6"),
        ("w", "6"),
        ("S", "th"),
        ("z", "65"),
        ("W", "10"),
        ("F", "March"),
        ("M", "Mar"),
        ("m", "03"),
        ("n", "3"),
        ("t", "31"),
        ("L", "0"),
        ("o", "2009"),
        ("Y", "2009"),
        ("y", "09"),
        ("a", "pm"),
        ("A", "PM"),
        ("g", "2"),
        ("G", "14"),
        ("h", "02"),
        ("H", "14"),
        ("i", "05"),
        ("s", "09"),
        ("u", "123456"),
        ("v", "123"),
        ("e", "America/Chicago"),
        ("I", "0"),
        ("O", "-0600"),
        ("P", "-06:00"),
        ("p", "-06:00"),
        ("T", "CST"),
        ("Z", "-21600"),
        ])
    def test_single_tokens(self, fmt, expected):
        assert render(SAMPLE, fmt) == expected

    def test_iso_and_rfc_composites(self):
        assert render(SAMPLE, "c") == "2009-03-07T14:05:09-06:00"
        assert render(SAMPLE, "r") == "Sat, 07 Mar 2009 14:05:09 -0600"

    def test_timestamp(self):
        assert render(datetime(1970, 1, 1, tzinfo=timezone.utc), "U") == "0"
        assert render(datetime(1969, 12, 31, 16, tzinfo=ZoneInfo("America/Los_Angeles")), "U") == "0"

    def test_escapes_and_literals(self):
        assert render(SAMPLE, r"l jS \o\f F Y") == "Saturday 7th of March 2009"

    def test_utc_p_token(self):
        assert render(datetime(2009, 3, 7, tzinfo=timezone.utc), "p") == "Z"

    def test_small_years_are_padded(self):
        assert render(datetime(11, 8, 1), "Y-m-d") == "0011-08-01"

    @pytest.mark.parametrize("day,suffix", [(1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (11, "th"),
                                            (12, "th"), (13, "th"), (21, "st"), (22, "nd"), (23, "rd")])
    def test_ordinal_suffix(self, day, suffix):
        assert ordinal_suffix(day) == suffix


# ============================================================================
# TESTS: parse_timezone_name
# ============================================================================

class TestParseTimezoneName:
    """Test zone lookup used by tz tokens and the timezone resolver."""

    def test_iana_names(self):
        assert parse_timezone_name("Europe/Rome") == ZoneInfo("Europe/Rome")

    def test_utc_aliases(self):
        for name in ("UTC", "utc", "GMT", "Z"):
            assert parse_timezone_name(name).utcoffset(None) == timedelta(0)

    @pytest.mark.parametrize("name,offset", [
        ("+05:00", timedelta(hours=5)),
        ("-0800", timedelta(hours=-8)),
        ("+5", timedelta(hours=5)),
        ("+05:30", timedelta(hours=5, minutes=30)),
        ])
    def test_offsets(self, name, offset):
        assert parse_timezone_name(name).utcoffset(None) == offset

    @pytest.mark.parametrize("name", ["", "Mars/Olympus", "+25:00", "not a zone"])
    def test_unknown_names(self, name):
        assert parse_timezone_name(name) is None


# ============================================================================
# TESTS: parse_with_format
# ============================================================================

class TestParseWithFormat:
    """Test strict parsing against a pattern."""

    def test_full_datetime(self):
        result = parse_with_format(r"Y-m-d\TH:i:s", "2010-02-28T10:30:45", CHICAGO)
        assert result.ok
        assert result.value == datetime(2010, 2, 28, 10, 30, 45, tzinfo=CHICAGO)
        assert result.fields == {"year": 2010, "month": 2, "day": 28, "hour": 10, "minute": 30, "second": 45}

    def test_missing_fields_default_to_epoch(self):
        result = parse_with_format("Y", "2009")
        assert result.ok
        assert result.value == datetime(2009, 1, 1, tzinfo=timezone.utc)

        result = parse_with_format("H:i:s", "10:30:00")
        assert result.value == datetime(1970, 1, 1, 10, 30, tzinfo=timezone.utc)

    def test_textual_month_and_day(self):
        result = parse_with_format("D, d M Y", "Sat, 07 Mar 2009")
        assert result.ok
        assert result.value.date() == datetime(2009, 3, 7).date()

        result = parse_with_format("F j, Y", "september 5, 2011")
        assert result.value.month == 9

    def test_textual_month_not_found(self):
        result = parse_with_format("d M Y", "23 abc 2012")
        assert result.errors == ["A textual month could not be found"]

    def test_textual_day_not_found(self):
        assert parse_with_format("D Y", "Xyz 2012").errors == ["A textual day could not be found"]

    def test_two_digit_year(self):
        assert parse_with_format("y", "09").value.year == 2009
        assert parse_with_format("y", "75").value.year == 1975

    def test_meridiem(self):
        assert parse_with_format("g:i a", "2:05 pm").value.hour == 14
        assert parse_with_format("h:i A", "12:00 AM").value.hour == 0
        assert parse_with_format("h:i A", "12:00 PM").value.hour == 12

    def test_meridiem_before_hour(self):
        result = parse_with_format("a g", "pm 2")
        assert result.errors == ["Meridian can only come after an hour has been found"]

    def test_ordinal_suffix_is_consumed(self):
        result = parse_with_format("jS F Y", "7th March 2009")
        assert result.ok
        assert result.value.day == 7

    def test_invalid_date_rolls_over_with_warning(self):
        result = parse_with_format("Y-m-d", "2009-02-30")
        assert result.errors == []
        assert result.warnings == [DATE_INVALID_WARNING]
        assert result.value.date() == datetime(2009, 3, 2).date()

    def test_invalid_time_rolls_over_with_warning(self):
        result = parse_with_format("Y-m-d H:i", "2009-02-01 10:88")
        assert result.warnings == [TIME_INVALID_WARNING]
        assert (result.value.hour, result.value.minute) == (11, 28)

    def test_zero_date_and_bad_hour(self):
        result = parse_with_format(r"Y-m-d\TH:i:s", "0000-00-00T45:30:00")
        assert DATE_INVALID_WARNING in result.warnings
        assert TIME_INVALID_WARNING in result.warnings
        assert result.value is not None

    def test_separator_mismatch(self):
        result = parse_with_format("Y-m-d", "2009/03/07")
        assert result.errors == ["The separation symbol could not be found"]

    def test_not_enough_data(self):
        result = parse_with_format("Y-m-d", "2009-03")
        assert result.errors == ["Not enough data available to satisfy format"]

    def test_trailing_data(self):
        assert parse_with_format("Y-m-d", "2009-03-07 10:30").errors == ["Trailing data"]

    def test_plus_tolerates_trailing_data(self):
        result = parse_with_format("Y-m-d+", "2009-03-07 10:30")
        assert result.errors == []
        assert result.warnings == ["Trailing data"]

    def test_minutes_need_two_digits(self):
        assert parse_with_format("H:i", "10:5").errors == ["A two digit minute could not be found"]

    def test_escaped_literal(self):
        assert parse_with_format(r"Y\TH", "2009T10").ok
        assert parse_with_format(r"Y\TH", "2009X10").errors == ["The escaped character could not be found"]

    def test_wildcards(self):
        assert parse_with_format("Y#m#d", "2009/03.07").ok
        assert parse_with_format("Y?m", "2009x03").ok
        assert parse_with_format("* Y", "Year 2009").value.year == 2009

    def test_space_matches_any_whitespace(self):
        assert parse_with_format("Y m", "2009   03").ok
        assert parse_with_format("Y m", "200903").ok

    def test_bang_resets_fields(self):
        result = parse_with_format("Y!m", "200903")
        assert result.value.year == 1970
        assert result.value.month == 3

    def test_timezone_tokens(self):
        result = parse_with_format("Y-m-d H:i e", "2009-03-07 10:30 Europe/Rome")
        assert result.tzinfo == ZoneInfo("Europe/Rome")
        assert result.value.utcoffset() == timedelta(hours=1)

        result = parse_with_format("Y-m-d H:i P", "2009-03-07 10:30 +05:30", CHICAGO)
        assert result.value.utcoffset() == timedelta(hours=5, minutes=30)

    def test_unknown_timezone(self):
        result = parse_with_format("Y e", "2009 Mars/Olympus")
        assert result.errors == ["The timezone could not be found in the database"]

    def test_unix_timestamp(self):
        result = parse_with_format("U", "86400", CHICAGO)
        assert result.value == datetime(1970, 1, 2, tzinfo=timezone.utc)

    def test_day_of_year(self):
        result = parse_with_format("Y z", "2009 65")
        assert result.value.date() == datetime(2009, 3, 7).date()

    def test_microseconds(self):
        assert parse_with_format("s.u", "09.123").value.microsecond == 123000
        assert parse_with_format("s.v", "09.123").value.microsecond == 123000

    def test_output_only_token(self):
        result = parse_with_format("Y L", "2009 0")
        assert result.errors == ["The format character 'L' is not supported for parsing"]

    def test_value_always_set(self):
        result = parse_with_format("Y-m-d", "garbage")
        assert result.errors
        assert result.value is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

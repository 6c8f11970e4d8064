"""
Test calendar arithmetic helpers.

Tests cover:
- Day/week counts and day of week
- Calendar week numbering (first day of week and ISO-8601 weeks)
- Week ranges
- Option lists and name lists
"""
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from flexidate.core.utils import calendar_utils


class _Wrapped:
    """Anything exposing a ``datetime`` attribute."""

    def __init__(self, dt):
        self.datetime = dt


# ============================================================================
# TESTS: counts
# ============================================================================

class TestCounts:
    """Test day and week counts."""

    def test_days_in_month(self):
        assert calendar_utils.days_in_month(2024, 2) == 29
        assert calendar_utils.days_in_month("2023", "2") == 28
        assert calendar_utils.days_in_month(2023, 13) is None
        assert calendar_utils.days_in_month("x", 1) is None

    def test_days_in_year(self):
        assert calendar_utils.days_in_year("2024-05-01") == 366
        assert calendar_utils.days_in_year(date(2023, 5, 1)) == 365
        assert calendar_utils.days_in_year("not a date") is None

    def test_iso_weeks_in_year(self):
        assert calendar_utils.iso_weeks_in_year("2020-06-01") == 53
        assert calendar_utils.iso_weeks_in_year("2021-06-01") == 52

    def test_day_of_week(self):
        assert calendar_utils.day_of_week("2024-01-07") == 0
        assert calendar_utils.day_of_week(date(2024, 1, 6)) == 6
        assert calendar_utils.day_of_week(_Wrapped(datetime(2024, 1, 8, tzinfo=ZoneInfo("UTC")))) == 1

    def test_day_of_week_name(self):
        assert calendar_utils.day_of_week_name("2024-01-07", language="en") == "Sun"
        assert calendar_utils.day_of_week_name("2024-01-07", abbr=False, language="en") == "Sunday"
        assert calendar_utils.day_of_week_name("not a date") is None

    def test_free_form_string(self):
        assert calendar_utils.day_of_week("January 7, 2024") == 0

    def test_none_is_today(self):
        assert calendar_utils.day_of_week(None) == date.today().isoweekday() % 7


# ============================================================================
# TESTS: calendar weeks
# ============================================================================

class TestCalendarWeek:
    """Test calendar week numbering."""

    def test_sunday_first(self):
        assert calendar_utils.calendar_week("2024-01-06", first_day=0, iso8601=False) == 1
        assert calendar_utils.calendar_week("2024-01-07", first_day=0, iso8601=False) == 2

    def test_monday_first(self):
        assert calendar_utils.calendar_week("2024-01-07", first_day=1, iso8601=False) == 1
        assert calendar_utils.calendar_week("2024-01-08", first_day=1, iso8601=False) == 2

    def test_january_first_always_week_one(self):
        assert calendar_utils.calendar_week("2021-01-01", first_day=0, iso8601=False) == 1
        assert calendar_utils.calendar_week("2021-01-03", first_day=0, iso8601=False) == 2

    def test_iso_weeks(self):
        assert calendar_utils.calendar_week("2021-01-01", iso8601=True) == 53
        assert calendar_utils.calendar_week("2024-01-07", iso8601=True) == 1

    def test_invalid_input(self):
        assert calendar_utils.calendar_week("not a date", 0, False) is None

    def test_weeks_in_year(self):
        assert calendar_utils.weeks_in_year(2024, first_day=0, iso8601=False) == 53
        assert calendar_utils.weeks_in_year(2020, iso8601=True) == 53
        assert calendar_utils.weeks_in_year("abc") is None


class TestWeekRanges:
    """Test week start/end ranges (end exclusive)."""

    def test_iso_week_range(self):
        assert calendar_utils.iso_week_range(1, 2024) == (date(2024, 1, 1), date(2024, 1, 8))
        assert calendar_utils.iso_week_range(1, 2021) == (date(2021, 1, 4), date(2021, 1, 11))

    def test_iso_week_zero(self):
        assert calendar_utils.iso_week_range(0, 2024) is None

    def test_calendar_week_range_clamped_to_year(self):
        assert calendar_utils.calendar_week_range(1, 2024, first_day=0, iso8601=False) == \
            (date(2024, 1, 1), date(2024, 1, 7))

    def test_calendar_week_range(self):
        assert calendar_utils.calendar_week_range(2, 2024, first_day=0, iso8601=False) == \
            (date(2024, 1, 7), date(2024, 1, 14))
        assert calendar_utils.calendar_week_range(1, 2024, first_day=1, iso8601=False) == \
            (date(2024, 1, 1), date(2024, 1, 8))

    def test_calendar_week_range_iso(self):
        assert calendar_utils.calendar_week_range(1, 2021, iso8601=True) == (date(2021, 1, 4), date(2021, 1, 11))


# ============================================================================
# TESTS: option and name lists
# ============================================================================

class TestOptionLists:
    """Test select option lists."""

    def test_years(self):
        assert calendar_utils.years(2000, 2002, required=True) == {2000: 2000, 2001: 2001, 2002: 2002}
        assert list(calendar_utils.years(2000, 2002))[0] == ""

    def test_years_default_range(self):
        current = date.today().year
        options = calendar_utils.years(required=True)
        assert min(options) == current - 3
        assert max(options) == current + 3

    def test_days(self):
        assert len(calendar_utils.days(True, 2, 2023)) == 28
        assert len(calendar_utils.days(True)) == 31

    def test_hours(self):
        assert list(calendar_utils.hours("h", True)) == list(range(1, 13))
        assert calendar_utils.hours("h", True)[1] == "01"
        assert calendar_utils.hours("G", True)[5] == 5
        assert len(calendar_utils.hours("H", True)) == 24

    def test_minutes_and_seconds(self):
        assert calendar_utils.minutes("i", True, 15) == {0: "00", 15: "15", 30: "30", 45: "45"}
        assert len(calendar_utils.seconds("s", True)) == 60

    def test_ampm(self):
        assert calendar_utils.ampm(True, "en") == {"am": "am", "pm": "pm"}
        assert calendar_utils.ampm(False, "en")[""] == ""


class TestNameLists:
    """Test month/weekday name lists."""

    def test_untranslated(self):
        assert calendar_utils.month_names_untranslated()[0] == "January"
        assert calendar_utils.week_days_untranslated()[0] == "Sunday"

    def test_month_names(self):
        assert calendar_utils.month_names(True, "en")[3] == "March"
        assert calendar_utils.month_names(True, "it")[1] == "gennaio"
        assert calendar_utils.month_names_abbr(True, "en")[12] == "Dec"

    def test_week_days(self):
        assert calendar_utils.week_days(True, "en")[0] == "Sunday"
        assert calendar_utils.week_days_abbr(True, "en")[6] == "Sat"

    def test_not_required_adds_blank(self):
        assert "" in calendar_utils.month_names(False, "en")

    def test_week_days_ordered(self):
        names = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert calendar_utils.week_days_ordered(names, first_day=1) == names[1:] + names[:1]
        assert calendar_utils.week_days_ordered(names, first_day=0) == names


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

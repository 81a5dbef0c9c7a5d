"""Tests for range selector resolution."""

from datetime import date, datetime, timezone

import pytest

from finance_tracker.ranges import RANGE_SELECTORS, DateRange, previous_range, resolve_range

NOW = date(2025, 9, 30)


class TestResolveRange:
    """Tests for resolve_range."""

    def test_last7days(self) -> None:
        """Test the documented seven day example."""
        assert resolve_range("last7days", NOW) == DateRange(
            start_date=date(2025, 9, 23), end_date=date(2025, 9, 30)
        )

    def test_last30days(self) -> None:
        result = resolve_range("last30days", NOW)
        assert result.start_date == date(2025, 8, 31)
        assert result.end_date == NOW

    def test_last90days(self) -> None:
        result = resolve_range("last90days", NOW)
        assert result.start_date == date(2025, 7, 2)

    def test_last365days_is_one_calendar_year(self) -> None:
        """Test last365days steps back a calendar year, not 365 days."""
        result = resolve_range("last365days", date(2024, 3, 1))
        assert result.start_date == date(2023, 3, 1)
        assert (result.end_date - result.start_date).days == 366

    def test_last365days_from_leap_day(self) -> None:
        """Test Feb 29 clamps to Feb 28 of the previous year."""
        result = resolve_range("last365days", date(2024, 2, 29))
        assert result.start_date == date(2023, 2, 28)

    @pytest.mark.parametrize("selector", RANGE_SELECTORS)
    def test_start_not_after_end(self, selector: str) -> None:
        result = resolve_range(selector, NOW)
        assert result.start_date <= result.end_date == NOW

    @pytest.mark.parametrize("selector", ["", "yesterday", "LAST7DAYS", "dashboard", None])
    def test_unknown_selector_falls_back_to_30_days(self, selector: str) -> None:
        """Test unrecognized selectors resolve like last30days."""
        assert resolve_range(selector, NOW) == resolve_range("last30days", NOW)

    def test_datetime_uses_its_calendar_date(self) -> None:
        now = datetime(2025, 9, 30, 23, 59, tzinfo=timezone.utc)
        assert resolve_range("last7days", now).end_date == date(2025, 9, 30)

    def test_defaults_to_today(self) -> None:
        result = resolve_range("last7days")
        assert result.end_date == datetime.now(timezone.utc).date()

    def test_serializes_as_iso_dates(self) -> None:
        assert resolve_range("last7days", NOW).model_dump(mode="json") == {
            "start_date": "2025-09-23",
            "end_date": "2025-09-30",
        }


class TestPreviousRange:
    """Tests for previous_range."""

    def test_same_number_of_days_ending_before_start(self) -> None:
        current = resolve_range("last7days", NOW)
        previous = previous_range(current)
        assert previous == DateRange(start_date=date(2025, 9, 15), end_date=date(2025, 9, 22))
        assert (previous.end_date - previous.start_date) == (current.end_date - current.start_date)

    def test_single_day_range(self) -> None:
        previous = previous_range(DateRange(start_date=NOW, end_date=NOW))
        assert previous == DateRange(start_date=date(2025, 9, 29), end_date=date(2025, 9, 29))

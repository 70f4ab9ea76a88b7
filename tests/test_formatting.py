"""Tests for selfcraft.formatting."""

from __future__ import annotations

from selfcraft.formatting import format_duration, format_relative_time

START_MS = 1_700_000_000_000
SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class TestFormatDuration:
    def test_zero(self) -> None:
        assert format_duration(0) == "0 seconds"

    def test_seconds_only_below_a_minute(self) -> None:
        assert format_duration(30_000) == "30 seconds"
        assert format_duration(1_000) == "1 second"
        assert format_duration(999) == "0 seconds"

    def test_minutes_and_seconds(self) -> None:
        assert format_duration(90_000) == "1 minute, 30 seconds"
        assert format_duration(61_000) == "1 minute, 1 second"
        assert format_duration(120_000) == "2 minutes, 0 seconds"

    def test_hours_and_minutes(self) -> None:
        assert format_duration(HOUR + MINUTE) == "1 hour, 1 minute"
        assert format_duration(5 * HOUR + 59 * MINUTE + 59 * SECOND) == "5 hours, 59 minutes"

    def test_days_and_hours(self) -> None:
        assert format_duration(90_061_000) == "1 day, 1 hour"
        assert format_duration(3 * DAY) == "3 days, 0 hours"

    def test_negative_clamps_to_zero(self) -> None:
        assert format_duration(-5_000) == "0 seconds"


class TestFormatRelativeTime:
    def test_just_now(self) -> None:
        assert format_relative_time(START_MS - 30 * SECOND, now=START_MS) == "just now"

    def test_minutes(self) -> None:
        assert format_relative_time(START_MS - MINUTE, now=START_MS) == "1 minute ago"
        assert format_relative_time(START_MS - 5 * MINUTE, now=START_MS) == "5 minutes ago"

    def test_hours(self) -> None:
        assert format_relative_time(START_MS - 2 * HOUR, now=START_MS) == "2 hours ago"

    def test_yesterday_and_days(self) -> None:
        assert format_relative_time(START_MS - DAY, now=START_MS) == "yesterday"
        assert format_relative_time(START_MS - 3 * DAY, now=START_MS) == "3 days ago"

    def test_weeks_months_years(self) -> None:
        assert format_relative_time(START_MS - 7 * DAY, now=START_MS) == "1 week ago"
        assert format_relative_time(START_MS - 21 * DAY, now=START_MS) == "3 weeks ago"
        assert format_relative_time(START_MS - 30 * DAY, now=START_MS) == "1 month ago"
        assert format_relative_time(START_MS - 400 * DAY, now=START_MS) == "1 year ago"

"""Tests for an.utils.dates module."""

from __future__ import annotations

from datetime import date

from an.utils.dates import format_date, parse_task_date


class TestParseTaskDate:
    """Tests for parse_task_date."""

    def test_iso_date(self):
        assert parse_task_date("2024-05-20") == date(2024, 5, 20)

    def test_slash_date(self):
        assert parse_task_date("2024/05/20") == date(2024, 5, 20)

    def test_rfc3339_keeps_own_offset(self):
        # 23:30 at -02:00 is already the next day in UTC
        assert parse_task_date("2024-05-20T23:30:00-02:00") == date(2024, 5, 20)
        assert parse_task_date("2024-05-20T09:30:00Z") == date(2024, 5, 20)

    def test_relative_keywords(self):
        today = date(2025, 1, 31)
        assert parse_task_date("today", today) == today
        assert parse_task_date("tomorrow", today) == date(2025, 2, 1)
        assert parse_task_date("Tomorrow", today) == date(2025, 2, 1)

    def test_relative_keywords_default_to_local_date(self, fixed_today: date):
        assert parse_task_date("today") == fixed_today
        assert parse_task_date("tomorrow") == date(2025, 11, 29)

    def test_whitespace_is_trimmed(self):
        assert parse_task_date("  2024-05-20 ") == date(2024, 5, 20)

    def test_unparseable_values(self):
        assert parse_task_date("") is None
        assert parse_task_date("someday") is None
        assert parse_task_date("next week") is None
        assert parse_task_date("2024-13-01") is None
        assert parse_task_date("2024-5-1") is None
        assert parse_task_date("20240501") is None
        assert parse_task_date("2024-05-20T25:00:00Z") is None


class TestFormatDate:
    """Tests for format_date."""

    def test_format(self):
        assert format_date(date(2024, 3, 9)) == "2024-03-09"

    def test_none(self):
        assert format_date(None) == ""

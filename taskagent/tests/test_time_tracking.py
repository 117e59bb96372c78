"""Tests for time-tracking windows and reports."""

from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

TZ = "Europe/Lisbon"
# Wednesday
NOW = datetime(2024, 3, 13, 15, 30, tzinfo=ZoneInfo(TZ))
HOUR = 3_600_000


class TestPeriodRange:
    def test_today(self):
        from taskagent.query.time_tracking import period_range
        window = period_range("today", NOW)
        assert window.start == datetime(2024, 3, 13, tzinfo=ZoneInfo(TZ))
        assert window.end == NOW
        assert window.label == "сьогодні"

    def test_yesterday_is_a_full_day(self):
        from taskagent.query.time_tracking import period_range
        window = period_range("yesterday", NOW)
        assert window.start.date().day == 12
        assert window.end.date().day == 12
        assert window.end.hour == 23 and window.end.minute == 59

    def test_weeks_start_on_monday(self):
        from taskagent.query.time_tracking import period_range
        this_week = period_range("this_week", NOW)
        last_week = period_range("last_week", NOW)

        assert this_week.start.date() == datetime(2024, 3, 11).date()
        assert last_week.start.date() == datetime(2024, 3, 4).date()
        assert last_week.end.date() == datetime(2024, 3, 10).date()

    def test_last_month_crosses_year(self):
        from taskagent.query.time_tracking import period_range
        now = datetime(2024, 1, 20, 9, 0, tzinfo=ZoneInfo(TZ))
        window = period_range("last_month", now)
        assert window.start.date() == datetime(2023, 12, 1).date()
        assert window.end.date() == datetime(2023, 12, 31).date()

    def test_unknown_period_means_this_month(self):
        from taskagent.query.time_tracking import period_range
        window = period_range("fortnight", NOW)
        assert window.start.date() == datetime(2024, 3, 1).date()
        assert window.label == "цього місяця"

    def test_millis(self):
        from taskagent.query.time_tracking import period_range
        window = period_range("today", NOW)
        assert window.start_ms < window.end_ms
        assert window.end_ms == int(NOW.timestamp() * 1000)


class TestTimeTracker:
    def test_report_totals_and_top_tasks(self):
        from taskagent.query.time_tracking import TimeTracker
        tracker = Mock()
        tracker.get_time_entries.return_value = [
            {"duration": str(2 * HOUR), "task": {"id": "a", "name": "Design"}},
            {"duration": str(HOUR // 2), "task": {"id": "b", "name": "Review"}},
            {"duration": str(HOUR), "task": {"id": "a", "name": "Design"}},
            {"duration": "900000"},
        ]

        result = TimeTracker(tracker, TZ).report("100", "Anna", "this_week", now=NOW)

        args = tracker.get_time_entries.call_args.args
        assert args[2] == "100"
        assert result["totalHours"] == 3
        assert result["totalMinutes"] == 45
        assert result["entries"] == 4
        text = result["formattedText"]
        assert text.startswith("⏱ <b>Time tracking: Anna</b>\n📅 Період: цього тижня")
        assert "<b>Всього: 3г 45хв</b>" in text
        assert text.index("Design: 3г 0хв") < text.index("Review: 0г 30хв")
        assert "Без задачі: 0г 15хв" in text

    def test_no_entries(self):
        from taskagent.query.time_tracking import TimeTracker
        tracker = Mock()
        tracker.get_time_entries.return_value = []

        result = TimeTracker(tracker, TZ).report("100", "Anna", "today", now=NOW)

        assert result["formattedText"].endswith("❌ Немає записів за цей період")
        assert result["totalHours"] == 0

    def test_tracker_failure(self):
        from taskagent.common.tracker_client import TrackerAPIError
        from taskagent.query.time_tracking import TimeTracker
        tracker = Mock()
        tracker.get_time_entries.side_effect = TrackerAPIError(401, "bad token")

        result = TimeTracker(tracker, TZ).report("100", "Anna", "today", now=NOW)

        assert result["error"] is True
        assert result["formattedText"].startswith("❌ Помилка отримання time tracking даних")

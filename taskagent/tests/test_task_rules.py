"""Tests for timezone-aware task predicates."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

TZ = "Europe/Lisbon"
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=ZoneInfo(TZ))


def millis(moment: datetime) -> str:
    return str(int(moment.timestamp() * 1000))


class TestFromMillis:
    def test_empty_values_are_none(self):
        from taskagent.query.task_rules import from_millis
        assert from_millis(None, TZ) is None
        assert from_millis("", TZ) is None

    def test_string_and_number_agree(self):
        from taskagent.query.task_rules import from_millis
        moment = datetime(2024, 3, 14, 9, 30, tzinfo=ZoneInfo(TZ))
        ms = millis(moment)
        assert from_millis(ms, TZ) == moment
        assert from_millis(int(ms), TZ) == moment

    def test_unparsable_raises(self):
        from taskagent.query.task_rules import from_millis
        with pytest.raises(ValueError):
            from_millis("tomorrow", TZ)

    def test_result_is_in_configured_zone(self):
        from taskagent.query.task_rules import from_millis
        # 23:30 UTC on the 14th is already the 15th in Kyiv
        utc = datetime(2024, 3, 14, 23, 30, tzinfo=ZoneInfo("UTC"))
        local = from_millis(millis(utc), "Europe/Kyiv")
        assert local.day == 15


class TestOverdueAndDueToday:
    @pytest.mark.parametrize("offset_hours", [-72, -25, -13, -1, 0, 1, 11, 12, 30])
    def test_mutually_exclusive(self, offset_hours):
        from taskagent.query.task_rules import is_hard_overdue, is_due_today
        due = NOW + timedelta(hours=offset_hours)
        assert not (is_hard_overdue(due, NOW) and is_due_today(due, NOW))

    def test_earlier_today_is_due_today_not_overdue(self):
        from taskagent.query.task_rules import is_hard_overdue, is_due_today
        due = NOW.replace(hour=0, minute=5)
        assert is_due_today(due, NOW)
        assert not is_hard_overdue(due, NOW)

    def test_yesterday_late_evening_is_overdue(self):
        from taskagent.query.task_rules import is_hard_overdue, overdue_days
        due = datetime(2024, 3, 14, 23, 59, tzinfo=ZoneInfo(TZ))
        assert is_hard_overdue(due, NOW)
        assert overdue_days(due, NOW) == 1

    def test_no_due_date(self):
        from taskagent.query.task_rules import is_hard_overdue, is_due_today
        assert not is_hard_overdue(None, NOW)
        assert not is_due_today(None, NOW)


class TestStuck:
    def test_undated_active_old_task_is_stuck(self):
        from taskagent.query.task_rules import is_stuck
        created = NOW - timedelta(days=3)
        assert is_stuck(None, "В роботі", created, NOW)

    def test_any_due_date_clears_stuck(self):
        from taskagent.query.task_rules import is_stuck
        created = NOW - timedelta(days=3)
        for due in (NOW - timedelta(days=10), NOW, NOW + timedelta(days=10)):
            assert not is_stuck(due, "В роботі", created, NOW)

    def test_younger_than_a_day_is_not_stuck(self):
        from taskagent.query.task_rules import is_stuck
        created = NOW - timedelta(hours=23)
        assert not is_stuck(None, "to do", created, NOW)

    def test_unknown_status_is_not_stuck(self):
        from taskagent.query.task_rules import is_stuck
        created = NOW - timedelta(days=5)
        assert not is_stuck(None, "waiting for client", created, NOW)

    def test_missing_creation_date_is_not_stuck(self):
        from taskagent.query.task_rules import is_stuck
        assert not is_stuck(None, "open", None, NOW)


class TestStatusVocabulary:
    def test_active_status_substring_match(self):
        from taskagent.query.task_rules import is_active_status
        assert is_active_status("ЗАДАЧІ НА СЬОГОДНІ")
        assert is_active_status("Backlog")
        assert not is_active_status("complete")
        assert not is_active_status("")

    def test_in_progress_keywords(self):
        from taskagent.query.task_rules import is_in_progress_status
        assert is_in_progress_status("In Progress")
        assert is_in_progress_status("в процесі")
        assert not is_in_progress_status("to do")

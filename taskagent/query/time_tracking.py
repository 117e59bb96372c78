"""
Time tracking reports

Computes the requested period in the configured zone, fetches a person's
time entries and renders the total with a per-task breakdown.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..common.tracker_client import TrackerClient
from . import task_rules
from .formatting import escape_html

logger = logging.getLogger("taskagent.query.time_tracking")

TOP_TASKS = 10
NO_TASK_LABEL = "Без задачі"
HOUR_MS = 3_600_000
MINUTE_MS = 60_000


class Period(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"


PERIOD_LABELS = {
    Period.TODAY: "сьогодні",
    Period.YESTERDAY: "вчора",
    Period.THIS_WEEK: "цього тижня",
    Period.LAST_WEEK: "минулого тижня",
    Period.THIS_MONTH: "цього місяця",
    Period.LAST_MONTH: "минулого місяця",
}


@dataclass
class PeriodRange:
    start: datetime
    end: datetime
    label: str

    @property
    def start_ms(self) -> int:
        return int(self.start.timestamp() * 1000)

    @property
    def end_ms(self) -> int:
        return int(self.end.timestamp() * 1000)


def _day_start(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def _day_end(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=tz)


def period_range(period: str, now: datetime) -> PeriodRange:
    """
    Window for a named period. Weeks start on Monday.

    Unknown periods fall back to the current month.
    """
    tz = now.tzinfo
    today = now.date()
    try:
        period = Period(period)
    except ValueError:
        period = Period.THIS_MONTH

    if period == Period.TODAY:
        return PeriodRange(_day_start(today, tz), now, PERIOD_LABELS[period])

    if period == Period.YESTERDAY:
        day = today - timedelta(days=1)
        return PeriodRange(_day_start(day, tz), _day_end(day, tz), PERIOD_LABELS[period])

    week_start = today - timedelta(days=today.weekday())
    if period == Period.THIS_WEEK:
        return PeriodRange(_day_start(week_start, tz), now, PERIOD_LABELS[period])

    if period == Period.LAST_WEEK:
        start = week_start - timedelta(days=7)
        end = week_start - timedelta(days=1)
        return PeriodRange(_day_start(start, tz), _day_end(end, tz), PERIOD_LABELS[period])

    month_start = today.replace(day=1)
    if period == Period.LAST_MONTH:
        last_month_end = month_start - timedelta(days=1)
        return PeriodRange(
            _day_start(last_month_end.replace(day=1), tz),
            _day_end(last_month_end, tz),
            PERIOD_LABELS[period],
        )

    return PeriodRange(_day_start(month_start, tz), now, PERIOD_LABELS[Period.THIS_MONTH])


def _hours_minutes(duration_ms: int) -> str:
    return f"{duration_ms // HOUR_MS}г {(duration_ms % HOUR_MS) // MINUTE_MS}хв"


def summarize_entries(entries: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Total duration and per-task durations (insertion order)"""
    total_ms = 0
    by_task: Dict[str, Dict[str, Any]] = {}

    for entry in entries:
        try:
            duration = int(float(entry.get("duration") or 0))
        except (TypeError, ValueError):
            duration = 0
        total_ms += duration

        task = entry.get("task") if isinstance(entry.get("task"), dict) else {}
        task_id = task.get("id") or "no_task"
        bucket = by_task.setdefault(task_id, {"name": task.get("name") or NO_TASK_LABEL, "duration": 0})
        bucket["duration"] += duration

    return {"total_ms": total_ms, "by_task": by_task}


def render_time_report(person_name: str, label: str, summary: Dict[str, Any]) -> str:
    total_ms = summary["total_ms"]
    text = f"⏱ <b>Time tracking: {escape_html(person_name)}</b>\n"
    text += f"📅 Період: {label}\n\n"

    if total_ms == 0:
        return text + "❌ Немає записів за цей період"

    text += f"<b>Всього: {_hours_minutes(total_ms)}</b>\n\n"

    top = sorted(summary["by_task"].values(), key=lambda t: t["duration"], reverse=True)[:TOP_TASKS]
    if top:
        text += "📋 По задачах:\n"
        for task in top:
            text += f"• {escape_html(task['name'])}: {_hours_minutes(task['duration'])}\n"
    return text


class TimeTracker:
    """Builds time-tracking answers for the get_time_tracked tool."""

    def __init__(self, tracker: TrackerClient, timezone: str):
        self._tracker = tracker
        self._timezone = timezone

    def report(
        self,
        person_id: str,
        person_name: str,
        period: str,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        window = period_range(period, task_rules.zone_now(self._timezone, now))
        logger.info("Time tracking for %s: %s", person_id, window.label)

        try:
            entries = self._tracker.get_time_entries(window.start_ms, window.end_ms, person_id)
        except Exception as e:
            logger.error("Time tracking for %s failed: %s", person_id, e)
            return {
                "formattedText": f"❌ Помилка отримання time tracking даних: {escape_html(str(e))}",
                "error": True,
            }

        summary = summarize_entries(entries)
        total_ms = summary["total_ms"]
        logger.info("Time tracking for %s: %d entries, %d ms", person_id, len(entries), total_ms)

        return {
            "formattedText": render_time_report(person_name, window.label, summary),
            "totalHours": total_ms // HOUR_MS,
            "totalMinutes": (total_ms % HOUR_MS) // MINUTE_MS,
            "entries": len(entries),
        }

"""
Task Rules

Timezone-aware date arithmetic and the problem-category predicates shared by
the retrieval filters, the statistics engine and tool-result triage.

All "today" comparisons happen in the configured zone, never in the
tracker's own notion of the current day.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

# Statuses that count as "active" for stuck detection (substring match)
ACTIVE_STATUSES = (
    "сьогодні", "today", "urgent", "в роботі", "in progress",
    "задачі на сьогодні", "на затвердження", "допрацювати",
    "усі задачі", "all tasks", "to do", "open", "backlog",
)

# Statuses that mean somebody is working on the task (substring match)
PROGRESS_KEYWORDS = (
    "in progress", "progress", "робот", "в роботі", "в процесі",
    "in work", "working",
)

Timestamp = Union[str, int, float, None]


def zone_now(timezone: str, now: Optional[datetime] = None) -> datetime:
    """Current (or given) instant expressed in the configured zone."""
    tz = ZoneInfo(timezone)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def from_millis(value: Timestamp, timezone: str) -> Optional[datetime]:
    """
    Epoch-millis (string or number) to an aware datetime in the zone.

    Returns None for empty values; raises ValueError when unparsable.
    """
    if value is None or value == "":
        return None
    millis = float(value)
    return datetime.fromtimestamp(millis / 1000, tz=ZoneInfo(timezone))


def calendar_day(moment: datetime) -> date:
    return moment.date()


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def is_hard_overdue(due: Optional[datetime], now: datetime) -> bool:
    """Due day strictly before today"""
    if due is None:
        return False
    return calendar_day(due) < calendar_day(now)


def is_due_today(due: Optional[datetime], now: datetime) -> bool:
    if due is None:
        return False
    return calendar_day(due) == calendar_day(now)


def overdue_days(due: datetime, now: datetime) -> int:
    """Whole calendar days between the due day and today"""
    return (calendar_day(now) - calendar_day(due)).days


def days_old(created: Optional[datetime], now: datetime) -> int:
    """Whole days elapsed since creation; 0 when unknown"""
    if created is None:
        return 0
    return (now - created) // timedelta(days=1)


def is_active_status(status: str) -> bool:
    lowered = (status or "").lower()
    return any(s in lowered for s in ACTIVE_STATUSES)


def is_in_progress_status(status: str) -> bool:
    lowered = (status or "").lower()
    return any(kw in lowered for kw in PROGRESS_KEYWORDS)


def is_stuck(
    due: Optional[datetime],
    status: str,
    created: Optional[datetime],
    now: datetime,
) -> bool:
    """No due date, active status, created at least one full day ago"""
    if due is not None:
        return False
    if not is_active_status(status):
        return False
    if created is None:
        return False
    return days_old(created, now) >= 1

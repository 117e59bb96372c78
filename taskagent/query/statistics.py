"""
Assignee statistics

Aggregates raw tracker tasks into per-assignee problem counts and renders
the "top problem owners" leaderboard.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from . import task_rules

logger = logging.getLogger("taskagent.query.statistics")

TOP_N = 5
NO_PROBLEMS_TEXT = "✅ Проблемних задач ні у кого немає!"
NO_DEPARTMENT = "Без відділу"
MEDALS = ("🥇", "🥈", "🥉")


@dataclass
class AssigneeStats:
    """Problem counts for one assignee"""
    name: str
    hard_overdue: int = 0
    stuck: int = 0
    due_today: int = 0
    departments: Set[str] = field(default_factory=set)

    @property
    def total(self) -> int:
        return self.hard_overdue + self.stuck + self.due_today


def status_of(task: Dict[str, Any]) -> str:
    """Status name of a raw task, whichever shape the status has"""
    status = task.get("status")
    if isinstance(status, dict):
        return status.get("status") or ""
    return status or ""


def _location_name(task: Dict[str, Any], key: str) -> Optional[str]:
    location = task.get(key)
    if isinstance(location, dict):
        return location.get("name")
    return None


def assignee_name(assignee: Any) -> Optional[str]:
    """Username, then email, then the numeric id as text"""
    if isinstance(assignee, str):
        return assignee or None
    if not isinstance(assignee, dict):
        return None
    name = assignee.get("username") or assignee.get("email")
    if name:
        return name
    if assignee.get("id") is not None:
        return str(assignee["id"])
    return None


def collect_assignee_stats(
    tasks: List[Dict[str, Any]],
    now: datetime,
    timezone: str,
) -> List[AssigneeStats]:
    """
    Count overdue / stuck / due-today tasks per assignee.

    Returns assignees with at least one problem, sorted by total
    descending; ties keep first-seen order.
    """
    now = task_rules.zone_now(timezone, now)
    by_assignee: Dict[str, AssigneeStats] = {}

    for task in tasks:
        assignees = task.get("assignees") or []
        if not assignees:
            continue

        try:
            due = task_rules.from_millis(task.get("due_date"), timezone)
            created = task_rules.from_millis(task.get("date_created"), timezone)
        except (TypeError, ValueError, OverflowError) as e:
            logger.error("Skipping task %s in statistics: %s", task.get("id"), e)
            continue

        hard_overdue = task_rules.is_hard_overdue(due, now)
        due_today = task_rules.is_due_today(due, now)
        stuck = task_rules.is_stuck(due, status_of(task), created, now)

        department = (
            _location_name(task, "list")
            or _location_name(task, "folder")
            or _location_name(task, "space")
            or NO_DEPARTMENT
        )

        for assignee in assignees:
            name = assignee_name(assignee)
            if not name:
                continue
            stats = by_assignee.setdefault(name, AssigneeStats(name=name))
            stats.departments.add(department)
            if hard_overdue:
                stats.hard_overdue += 1
            if stuck:
                stats.stuck += 1
            if due_today:
                stats.due_today += 1

    ranked = [s for s in by_assignee.values() if s.total > 0]
    ranked.sort(key=lambda s: s.total, reverse=True)
    return ranked


def render_leaderboard(ranked: List[AssigneeStats]) -> str:
    if not ranked:
        return NO_PROBLEMS_TEXT

    shown = ranked[:TOP_N]
    lines = [f"📊 <b>Топ-{len(shown)} за проблемними задачами:</b>\n"]

    for i, stats in enumerate(shown):
        parts = []
        if stats.hard_overdue > 0:
            parts.append(f"🔴{stats.hard_overdue}")
        if stats.stuck > 0:
            parts.append(f"🟠{stats.stuck}")
        if stats.due_today > 0:
            parts.append(f"🟡{stats.due_today}")

        medal = MEDALS[i] if i < len(MEDALS) else f"{i + 1}."
        name = html.escape(stats.name, quote=False)
        lines.append(f"{medal} <b>{name}</b> — {stats.total} ({' + '.join(parts)})")

    if len(ranked) > TOP_N:
        lines.append(f"\n<i>...та ще {len(ranked) - TOP_N} співробітників</i>")

    return "\n".join(lines)


def generate_overdue_stats(
    tasks: List[Dict[str, Any]],
    now: Optional[datetime] = None,
    timezone: str = "UTC",
) -> str:
    """Leaderboard of assignees by problem-task count."""
    logger.info("Generating statistics for %d tasks", len(tasks))
    ranked = collect_assignee_stats(tasks, task_rules.zone_now(timezone, now), timezone)
    if ranked:
        logger.info(
            "Statistics ready: %d people, top %s (%d)",
            len(ranked), ranked[0].name, ranked[0].total,
        )
    return render_leaderboard(ranked)

"""
Tool result reduction

Tool results go back to the model as JSON text. Results at or above
SUMMARY_THRESHOLD characters are reduced to fit the context window:

- workspace hierarchies are flattened to id/name/type/children
- member lists are pruned to id/full_name/email
- task lists are triaged down to problem tasks, with a ready-made report
  and the per-assignee leaderboard
- anything else is cut to TRUNCATE_LIMIT characters
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..query import task_rules
from ..query.formatting import escape_attr, escape_html
from ..query.statistics import generate_overdue_stats, status_of

logger = logging.getLogger("taskagent.assistant.tool_results")

SUMMARY_THRESHOLD = 5000
HIERARCHY_LIMIT = 15000
TRUNCATE_LIMIT = 10000
MAX_PROBLEM_TASKS = 50

CLOSED_MARKERS = ("complete", "done")

PRIORITY_OVERDUE = 1
PRIORITY_STUCK = 2
PRIORITY_DUE_TODAY = 3


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------

def _node_type(item: Dict[str, Any]) -> str:
    if item.get("type"):
        return item["type"]
    if item.get("lists"):
        return "folder"
    if item.get("tasks"):
        return "list"
    return "space"


def _simplify_hierarchy(items: List[Any]) -> List[Dict[str, Any]]:
    simplified = []
    for item in items:
        if not isinstance(item, dict):
            continue
        node = {"id": item.get("id"), "name": item.get("name"), "type": _node_type(item)}
        for key in ("spaces", "folders", "lists"):
            if item.get(key):
                node["children"] = _simplify_hierarchy(item[key])
                break
        simplified.append(node)
    return simplified


def flatten_hierarchy(result: Any, now: datetime, timezone: str) -> Optional[str]:
    items = result if isinstance(result, list) else [result]
    return to_json(_simplify_hierarchy(items))[:HIERARCHY_LIMIT]


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

def prune_members(result: Any, now: datetime, timezone: str) -> Optional[str]:
    members = result.get("members") if isinstance(result, dict) else result
    if not isinstance(members, list):
        return None

    simplified = []
    for member in members:
        if not isinstance(member, dict):
            continue
        user = member.get("user") or {}
        simplified.append({
            "id": user.get("id") or member.get("id"),
            "full_name": user.get("username") or member.get("name"),
            "email": user.get("email") or member.get("email"),
        })
    return to_json({"members": simplified})


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def _is_closed(task: Dict[str, Any]) -> bool:
    status = status_of(task).lower()
    return any(marker in status for marker in CLOSED_MARKERS)


def _problem(task: Dict[str, Any], now: datetime, timezone: str) -> Dict[str, Any]:
    """Compact view of a task with its problem label and priority (0 when none)"""
    due = task_rules.from_millis(task.get("due_date"), timezone)
    created = task_rules.from_millis(task.get("date_created"), timezone)
    status = status_of(task)
    age = task_rules.days_old(created, now)

    problem_type = None
    priority = 0
    if task_rules.is_hard_overdue(due, now):
        problem_type = f"🔴 Прострочено на {task_rules.overdue_days(due, now)} днів"
        priority = PRIORITY_OVERDUE
    elif task_rules.is_stuck(due, status, created, now):
        problem_type = f"🟠 Зависла {age} днів без руху"
        priority = PRIORITY_STUCK
    elif task_rules.is_due_today(due, now):
        problem_type = "🟡 Дедлайн сьогодні"
        priority = PRIORITY_DUE_TODAY

    task_list = task.get("list")
    return {
        "id": task.get("id"),
        "name": task.get("name"),
        "status": status or None,
        "assignees": [a.get("username") for a in task.get("assignees") or [] if isinstance(a, dict)],
        "due_date_human": due.strftime("%Y-%m-%d") if due else None,
        "list_name": task_list.get("name") if isinstance(task_list, dict) else None,
        "url": task.get("url"),
        "problem_type": problem_type,
        "problem_priority": priority,
    }


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else many


def _ready_report(problematic: List[Dict[str, Any]], counts: Dict[int, int]) -> str:
    if not problematic:
        return "✅ Проблемних задач не знайдено!"

    overdue = counts[PRIORITY_OVERDUE]
    stuck = counts[PRIORITY_STUCK]
    due_today = counts[PRIORITY_DUE_TODAY]

    parts = []
    if overdue > 0:
        parts.append(f"{overdue} прострочен{_plural(overdue, 'а', 'і')}")
    if stuck > 0:
        parts.append(f"{stuck} завис{_plural(stuck, 'ла', 'ли')}")
    if due_today > 0:
        parts.append(f"{due_today} на сьогодні")

    lines = [f"⚠️ <b>Знайдено {len(problematic)} проблемних задач:</b> {', '.join(parts)}\n"]
    for task in problematic:
        due_info = f" • до {task['due_date_human']}" if task["due_date_human"] else ""
        lines.append(f"{task['problem_type']} <b>{escape_html(task['name'] or '')}</b>")
        lines.append(
            f"   📂 {escape_html(task['list_name'] or '—')}{due_info} • "
            f'<a href="{escape_attr(task["url"] or "")}">відкрити</a>\n'
        )
    return "\n".join(lines)


def triage_tasks(result: Any, now: datetime, timezone: str) -> Optional[str]:
    """
    Keep only overdue, stuck and due-today tasks, most urgent first.

    Entries that are not objects are ignored. Tasks whose status says
    complete/done are dropped before triage; the leaderboard is computed
    over every task object in the input.
    """
    tasks = result.get("tasks") if isinstance(result, dict) else None
    if not isinstance(tasks, list):
        return None

    now = task_rules.zone_now(timezone, now)
    task_dicts = [t for t in tasks if isinstance(t, dict)]
    open_tasks = [t for t in task_dicts if not _is_closed(t)]
    logger.info("Triage: %d tasks received, %d open", len(tasks), len(open_tasks))

    simplified = []
    for task in open_tasks:
        try:
            simplified.append(_problem(task, now, timezone))
        except (TypeError, ValueError, OverflowError) as e:
            logger.error("Skipping task %s in triage: %s", task.get("id"), e)

    problematic = sorted(
        (t for t in simplified if t["problem_type"] is not None),
        key=lambda t: t["problem_priority"],
    )
    counts = {p: 0 for p in (PRIORITY_OVERDUE, PRIORITY_STUCK, PRIORITY_DUE_TODAY)}
    for task in problematic:
        counts[task["problem_priority"]] += 1

    logger.info(
        "Triage: overdue=%d stuck=%d due_today=%d problematic=%d",
        counts[PRIORITY_OVERDUE], counts[PRIORITY_STUCK], counts[PRIORITY_DUE_TODAY], len(problematic),
    )

    return to_json({
        "READY_REPORT": _ready_report(problematic, counts),
        "STATISTICS_BY_ASSIGNEE": generate_overdue_stats(task_dicts, now, timezone),
        "problematic_tasks": problematic[:MAX_PROBLEM_TASKS],
        "summary": {
            "total_problems": len(problematic),
            "overdue": counts[PRIORITY_OVERDUE],
            "stuck": counts[PRIORITY_STUCK],
            "dueToday": counts[PRIORITY_DUE_TODAY],
        },
    })


Reducer = Callable[[Any, datetime, str], Optional[str]]


def _is_hierarchy(result: Any) -> bool:
    nodes = result if isinstance(result, list) else [result]
    return bool(nodes) and all(
        isinstance(node, dict) and any(isinstance(node.get(key), list) for key in ("spaces", "folders", "lists"))
        for node in nodes
    )


def _reducer_for(result: Any) -> Optional[Reducer]:
    """Reducers are chosen by the shape of the payload, whichever tool produced it"""
    if isinstance(result, dict) and isinstance(result.get("tasks"), list):
        return triage_tasks
    if isinstance(result, dict) and isinstance(result.get("members"), list):
        return prune_members
    if _is_hierarchy(result):
        return flatten_hierarchy
    return None


def summarize_tool_result(name: str, result: Any, now: datetime, timezone: str) -> str:
    """JSON text of a tool result, reduced when it is too large for the model."""
    serialized = to_json(result)
    if len(serialized) < SUMMARY_THRESHOLD:
        return serialized

    reducer = _reducer_for(result)
    if reducer is not None:
        reduced = reducer(result, now, timezone)
        if reduced is not None:
            logger.info("Reduced %s result: %d -> %d chars", name, len(serialized), len(reduced))
            return reduced

    logger.info("Truncated %s result: %d chars", name, len(serialized))
    return serialized[:TRUNCATE_LIMIT]

"""
HTML rendering of task lists for the chat client.

Output uses the limited HTML dialect the chat supports (<b>, <i>, <a>).
Every external string is escaped before it is embedded.
"""

import html
from collections import OrderedDict
from typing import List, Optional

from . import task_rules
from .query_types import FilterType, TaskData

DEFAULT_DISPLAY_LIMIT = 25
NO_PROJECT = "Без проєкту"

FILTER_TITLES = {
    FilterType.STUCK: "⏳ Зависли без руху",
    FilterType.OVERDUE: "🔴 Прострочені",
    FilterType.DUE_TODAY: "📅 На сьогодні",
    FilterType.IN_PROGRESS: "🟢 В роботі",
    FilterType.NONE: "📋 Всі задачі",
}


def escape_html(value: str) -> str:
    return html.escape(value or "", quote=False)


def escape_attr(value: str) -> str:
    return (value or "").replace("&", "&amp;").replace('"', "&quot;")


def format_deadline(task: TaskData, timezone: str) -> str:
    """dd.mm in the configured zone, or a dash"""
    try:
        due = task_rules.from_millis(task.due_date, timezone)
    except (TypeError, ValueError, OverflowError):
        return "—"
    return due.strftime("%d.%m") if due else "—"


def task_link(task: TaskData, app_url: str) -> str:
    if task.url:
        return task.url
    short_url = getattr(task, "short_url", None)
    if short_url:
        return short_url
    if task.id:
        return f"{app_url.rstrip('/')}/t/{task.id}"
    return ""


def format_task_list(
    tasks: List[TaskData],
    filter_type: FilterType,
    *,
    header_name: Optional[str],
    people_url: str,
    app_url: str,
    timezone: str,
    display_limit: int = DEFAULT_DISPLAY_LIMIT,
) -> str:
    """
    Render tasks grouped by project.

    Only the first `display_limit` tasks are shown; the rest are counted
    in a trailing note.
    """
    title = FILTER_TITLES.get(filter_type, "📋 Задачі")
    if not tasks:
        return f"{title}\n\n✅ Задач не знайдено!"

    shown = tasks[:display_limit]
    remaining = len(tasks) - len(shown)

    header_label = (
        f'<a href="{escape_attr(people_url)}">{escape_html(header_name or "—")}</a>'
    )
    text = f"<b>{title}</b> — {header_label} ({len(tasks)})\n\n"

    grouped: "OrderedDict[str, List[TaskData]]" = OrderedDict()
    for task in shown:
        grouped.setdefault(task.project_name or NO_PROJECT, []).append(task)

    for project_name, project_tasks in grouped.items():
        text += f"<b>Проект:</b> {escape_html(project_name)}\n"
        for task in project_tasks:
            link = task_link(task, app_url)
            text += f"<b>Таска:</b> {escape_html(task.name)}\n"
            text += f"<b>Статус:</b> {escape_html(task.status_name or '—')}\n"
            text += f"<b>Дедлайн:</b> {escape_html(format_deadline(task, timezone))}\n"
            if link:
                text += f'<a href="{escape_attr(link)}">🔗 Відкрити</a>\n\n'
            else:
                text += "🔗 Відкрити\n\n"

    if remaining > 0:
        text += f"<i>+ ще {remaining}</i>"

    return text


def format_task_count(tasks: List[TaskData], filter_type: FilterType, *, header_name: Optional[str]) -> str:
    """One-line answer to a "how many" question"""
    title = FILTER_TITLES.get(filter_type, "📋 Задачі")
    return f"<b>{title}</b> — {escape_html(header_name or '—')}: {len(tasks)}"

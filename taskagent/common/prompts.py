"""
System prompt loading

The agent's system prompt is a text template with {{name}} placeholders.
A file configured via AGENT_PROMPT_PATH takes precedence over the built-in
template below.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger("taskagent.common.prompts")

DEFAULT_TEMPLATE = """You are an assistant that answers questions about the team's tasks in ClickUp.
Answer in the language of the user (Ukrainian by default). Never invent tasks: use tools for live data.

Tools:
- load_and_filter_tasks: the ONLY way to list tasks. Choose entityType person/department/all and
  filterType overdue/stuck/due_today/in_progress/none. Set operation "count" for "how many" questions
  and "stats" for "who has the most problem tasks" questions; the default "show" lists the tasks.
- update_context: remember the person the user is talking about.
- get_time_tracked: tracked time for a person over a period.

Departments (use the key as entityId): {{departments}}
Departments config:
{{departments_config}}

Members (use the numeric id as entityId / personId):
{{members_config}}

Context from the previous turns:
last_department: {{last_department}}
last_report_type: {{last_report_type}}
last_days: {{last_days}}
last_person_id: {{last_person_id}}
last_person_name: {{last_person_name}}

Rules:
- If the user refers to "him"/"her"/"його"/"її" without a name, use last_person_id and last_person_name.
- If the user omits the department, use last_department when present.
- "прострочені"/"overdue" -> overdue, "зависли"/"stuck" -> stuck, "на сьогодні"/"today" -> due_today,
  "в роботі"/"in progress" -> in_progress, otherwise none.
- If the request is ambiguous, ask one short clarifying question.

Current time: {{current_time}} ({{current_time_ms}} ms), date {{current_date}}, timezone {{timezone}}."""

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def apply_template(template: str, variables: Dict[str, str]) -> str:
    """Replace {{name}} placeholders; unknown names become empty strings."""
    return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), ""), template)


def load_system_prompt(variables: Dict[str, str], prompt_path: Optional[str] = None) -> str:
    template = DEFAULT_TEMPLATE
    used_default = True

    if prompt_path:
        resolved = Path(prompt_path).expanduser().resolve()
        try:
            template = resolved.read_text(encoding="utf-8")
            used_default = False
        except OSError as e:
            logger.warning("Failed to read prompt %s: %s", resolved, e)

    rendered = apply_template(template, variables)
    logger.debug("System prompt ready (default: %s, %d chars)", used_default, len(rendered))
    return rendered


def _or_none(value) -> str:
    return "none" if value is None else str(value)


def prompt_variables(state, directory, timezone: str, now: datetime) -> Dict[str, str]:
    """Template variables for the current session state and time."""
    keys = directory.department_keys
    departments, members = directory.to_prompt_dicts()
    return {
        "departments": ", ".join(keys) if keys else "none",
        "departments_config": json.dumps(departments, indent=2, ensure_ascii=False),
        "members_config": json.dumps(members, indent=2, ensure_ascii=False),
        "last_department": _or_none(state.department),
        "last_report_type": _or_none(state.last_report_type),
        "last_days": _or_none(state.last_days),
        "last_person_id": _or_none(state.last_person_id),
        "last_person_name": _or_none(state.last_person_name),
        "current_time": now.isoformat(),
        "current_time_ms": str(int(now.timestamp() * 1000)),
        "current_date": now.strftime("%Y-%m-%d"),
        "timezone": timezone,
    }

"""
Team info shortcut

Questions about roles, head count and the member list are answered
straight from the team directory, without a model call.
"""

import logging
import re
from typing import Optional

from ..common.directory import TeamDirectory
from ..query.formatting import escape_html
from .loop import looks_like_task_query

logger = logging.getLogger("taskagent.assistant.team_info")

NO_ROLE = "роль не вказана"

TASK_WORDS = re.compile(r"(таск|task|задач|задачи|завдан)", re.IGNORECASE)
ROLE_QUERY = re.compile(
    r"(\bроль|\bролі|\broles?\b|должност|посад|кто\s+за\s+что|хто\s+за\s+що|кто\s+чем|хто\s+чим)",
    re.IGNORECASE,
)
COUNT_QUERY = re.compile(
    r"(сколько|скільки).*(людей|людина|человек|співробітник|сотрудник|працівник)"
    r"|team\s+size|кількість\s+людей",
    re.IGNORECASE,
)
LIST_QUERY = re.compile(
    r"(кто|хто)\s+(у\s+нас\s+)?(работает|працює)|співробітники|сотрудники|team\s+members|команда",
    re.IGNORECASE,
)


def build_team_info_response(text: str, directory: TeamDirectory) -> Optional[str]:
    """
    Templated answer for a team question, or None when the text is not one.

    Task-related wording (including deadline and problem-state words)
    disables the shortcut unless the question is about roles. Counts and listings skip members excluded from counts.
    """
    lowered = (text or "").lower()
    is_role = bool(ROLE_QUERY.search(lowered))
    is_count = bool(COUNT_QUERY.search(lowered))
    is_list = bool(LIST_QUERY.search(lowered))

    if not (is_role or is_count or is_list):
        return None
    if (TASK_WORDS.search(lowered) or looks_like_task_query(lowered)) and not is_role:
        return None

    visible = directory.visible_members

    if is_role:
        member = directory.find_member_in_text(lowered)
        if member is not None:
            logger.info("Team shortcut: role of %s", member.name)
            return (
                f"👤 <b>{escape_html(member.name)}</b>\n"
                f"<b>Роль:</b> {escape_html(member.role or NO_ROLE)}"
            )
        lines = [f"• <b>{escape_html(m.name)}</b> — {escape_html(m.role or NO_ROLE)}" for m in visible]
        logger.info("Team shortcut: roles of %d members", len(visible))
        return "👥 <b>Ролі в команді</b>\n\n" + "\n".join(lines)

    if is_count and not is_list:
        logger.info("Team shortcut: head count %d", len(visible))
        return f"👥 <b>У команді: {len(visible)}</b>"

    lines = [f"• {escape_html(m.name)}" for m in visible]
    logger.info("Team shortcut: member list (%d)", len(visible))
    return "👥 <b>Команда</b>\n\n" + "\n".join(lines) + f"\n\n<b>Всього:</b> {len(visible)}"

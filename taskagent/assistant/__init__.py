"""
Task Agent Assistant

Conversational layer: team-info shortcut, bounded tool-calling loop and
tool-result reduction.
"""

from .agent import Agent
from .loop import MAX_MODEL_TURNS, TerminationReason, looks_like_task_query
from .team_info import build_team_info_response

__all__ = [
    "Agent",
    "MAX_MODEL_TURNS",
    "TerminationReason",
    "looks_like_task_query",
    "build_team_info_response",
]

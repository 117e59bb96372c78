"""
Agent loop state machine

One incoming message moves through these states:

    AwaitingModel(turn) --reply with tool calls--> ExecutingTool(turn, calls)
    ExecutingTool       --no direct answer-------> AwaitingModel(turn + 1)
    any                 --------------------------> Terminated(reason, text)

The transition functions are pure: they never call the model or a tool,
so the turn bound and the first-turn rule can be tested on their own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from .messages import FALLBACK_TEXT, NO_DATA_TEXT, TOO_MANY_STEPS_TEXT

MAX_MODEL_TURNS = 6

TASK_KEYWORDS = (
    "таск",
    "task",
    "задач",
    "просроч",
    "прострочен",
    "overdue",
    "завис",
    "stuck",
    "дедлайн",
    "deadline",
)


class TerminationReason(str, Enum):
    ANSWERED = "answered"
    DIRECT_TOOL_ANSWER = "direct_tool_answer"
    NO_DATA = "no_data"
    TOO_MANY_STEPS = "too_many_steps"
    COMPLETION_ERROR = "completion_error"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class AwaitingModel:
    turn: int = 1


@dataclass(frozen=True)
class ExecutingTool:
    turn: int
    tool_calls: Tuple[Any, ...]


@dataclass(frozen=True)
class Terminated:
    reason: TerminationReason
    text: str


LoopState = Union[AwaitingModel, ExecutingTool, Terminated]


def looks_like_task_query(text: str) -> bool:
    """True when the text mentions tasks, deadlines or problem states."""
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in TASK_KEYWORDS)


def tool_choice_for(turn: int, text: str) -> str:
    """Tool use is forced on the first turn of a task-like message."""
    if turn == 1 and looks_like_task_query(text):
        return "required"
    return "auto"


def check_budget(state: AwaitingModel) -> LoopState:
    if state.turn > MAX_MODEL_TURNS:
        return Terminated(TerminationReason.TOO_MANY_STEPS, TOO_MANY_STEPS_TEXT)
    return state


def after_model_reply(state: AwaitingModel, message: Optional[Any], text: str) -> LoopState:
    """
    Decide what follows a completion.

    A first-turn answer without tool calls to a task-like message is
    rejected: the model would be answering without live data.
    """
    if message is None:
        return Terminated(TerminationReason.EMPTY_RESPONSE, FALLBACK_TEXT)

    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        return ExecutingTool(turn=state.turn, tool_calls=tuple(tool_calls))

    if state.turn == 1 and looks_like_task_query(text):
        return Terminated(TerminationReason.NO_DATA, NO_DATA_TEXT)

    content = getattr(message, "content", None)
    return Terminated(TerminationReason.ANSWERED, content or FALLBACK_TEXT)


def after_tools(state: ExecutingTool, direct_answer: Optional[str]) -> LoopState:
    if direct_answer is not None:
        return Terminated(TerminationReason.DIRECT_TOOL_ANSWER, direct_answer)
    return AwaitingModel(turn=state.turn + 1)

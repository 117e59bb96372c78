"""
Conversational Agent

Answers one chat message at a time:
1. Team questions (roles, head count, member list) from the directory
2. Otherwise a bounded tool-calling loop against the completion service
3. Task lists, counts and leaderboards rendered by load_and_filter_tasks
   go straight to the user

The user text and the final answer are saved to the conversation store
for every handled message.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..common.config import AgentConfig
from ..common.directory import TeamDirectory
from ..common.llm_client import LLMClient, classify_completion_error
from ..common.prompts import load_system_prompt, prompt_variables
from ..query import task_rules
from ..query.formatting import format_task_count, format_task_list
from ..query.query_processor import QueryProcessor
from ..query.query_types import EntityType, OperationType, QueryClassification
from ..query.statistics import generate_overdue_stats
from ..query.time_tracking import TimeTracker
from ..storage.base import ConversationStore, SessionState
from .loop import (
    AwaitingModel,
    ExecutingTool,
    LoopState,
    Terminated,
    TerminationReason,
    after_model_reply,
    after_tools,
    check_budget,
    tool_choice_for,
)
from .messages import COMPLETION_FAILURE_TEXTS
from .team_info import build_team_info_response
from .tool_results import summarize_tool_result
from .tools import (
    GET_TIME_TRACKED,
    LOAD_AND_FILTER_TASKS,
    TOOL_SCHEMAS,
    UPDATE_CONTEXT,
    LoadAndFilterArgs,
    TimeTrackedArgs,
    UpdateContextArgs,
)

logger = logging.getLogger("taskagent.assistant.agent")


class Agent:
    """
    Tool-calling chat agent over the task tracker.

    Args:
        llm: Completion client
        store: Conversation history and session state
        processor: Task retrieval pipeline
        time_tracker: Time-tracking reports
        directory: Departments and members
        timezone: Zone for every "today" decision
        people_url: Tracker page linked from task list headers
        app_url: Tracker web app base URL, for task links
        config: Agent settings (history size, display limit, prompt file)
        clock: Returns the current time; injectable for tests
    """

    def __init__(
        self,
        llm: LLMClient,
        store: ConversationStore,
        processor: QueryProcessor,
        time_tracker: TimeTracker,
        directory: TeamDirectory,
        timezone: str,
        people_url: str,
        app_url: str,
        config: Optional[AgentConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._llm = llm
        self._store = store
        self._processor = processor
        self._time_tracker = time_tracker
        self._directory = directory
        self._timezone = timezone
        self._people_url = people_url
        self._app_url = app_url
        self._config = config or AgentConfig()
        self._clock = clock

    def handle_message(self, user_id: int, text: str) -> str:
        """
        Answer one message.

        Raises:
            Exception: completion-service errors that are not quota, rate
                limit, credential or model errors
        """
        logger.info("Message from %s (%d chars)", user_id, len(text or ""))

        shortcut = build_team_info_response(text, self._directory)
        if shortcut is not None:
            self._remember(user_id, text, shortcut)
            return shortcut

        now = task_rules.zone_now(self._timezone, self._clock() if self._clock else None)
        messages = self._initial_messages(user_id, text, now)

        state: LoopState = AwaitingModel(turn=1)
        while not isinstance(state, Terminated):
            if isinstance(state, AwaitingModel):
                state = check_budget(state)
                if isinstance(state, AwaitingModel):
                    state = self._model_turn(state, messages, text)
            elif isinstance(state, ExecutingTool):
                direct_answer = self._execute_tools(user_id, state.tool_calls, messages, now)
                state = after_tools(state, direct_answer)

        logger.info("Message from %s finished: %s", user_id, state.reason.value)
        self._remember(user_id, text, state.text)
        return state.text

    # ------------------------------------------------------------------
    # Model turns
    # ------------------------------------------------------------------

    def _initial_messages(self, user_id: int, text: str, now: datetime) -> List[Dict[str, Any]]:
        session = self._store.get_state(user_id)
        try:
            history = self._store.get_recent_messages(user_id, self._config.history_limit)
        except Exception as e:
            logger.warning("History unavailable for %s: %s", user_id, e)
            history = []

        variables = prompt_variables(session, self._directory, self._timezone, now)
        system_prompt = load_system_prompt(variables, self._config.prompt_path or None)

        messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": m.role, "content": m.content} for m in history)
        messages.append({"role": "user", "content": text})
        return messages

    def _model_turn(self, state: AwaitingModel, messages: List[Dict[str, Any]], text: str) -> LoopState:
        tool_choice = tool_choice_for(state.turn, text)
        logger.debug("Turn %d (tool_choice=%s)", state.turn, tool_choice)

        try:
            message = self._llm.complete(
                messages, tools=TOOL_SCHEMAS, tool_choice=tool_choice, temperature=0.0,
            )
        except Exception as e:
            failure = classify_completion_error(e)
            if failure is None:
                raise
            logger.error("Completion failed (%s): %s", failure.value, e)
            return Terminated(TerminationReason.COMPLETION_ERROR, COMPLETION_FAILURE_TEXTS[failure])

        if message is not None:
            messages.append(_assistant_message(message))
        return after_model_reply(state, message, text)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def _execute_tools(
        self,
        user_id: int,
        tool_calls,
        messages: List[Dict[str, Any]],
        now: datetime,
    ) -> Optional[str]:
        """Run the requested calls; returns a task list meant for the user, if any."""
        for call in tool_calls:
            if getattr(call, "type", "function") != "function":
                continue
            name = call.function.name
            arguments = call.function.arguments or "{}"
            logger.info("Tool call %s: %s", name, arguments)

            try:
                if name == LOAD_AND_FILTER_TASKS:
                    args = LoadAndFilterArgs.model_validate_json(arguments)
                    return self._load_and_filter_tasks(user_id, args, now)
                if name == UPDATE_CONTEXT:
                    result = self._update_context(user_id, UpdateContextArgs.model_validate_json(arguments))
                elif name == GET_TIME_TRACKED:
                    args = TimeTrackedArgs.model_validate_json(arguments)
                    result = self._time_tracker.report(
                        args.person_id, args.person_name, args.period.value, now=now,
                    )
                else:
                    logger.warning("Unknown tool requested: %s", name)
                    result = {"error": f"Unknown tool: {name}"}
            except ValidationError as e:
                logger.warning("Invalid arguments for %s: %s", name, e)
                result = {"error": f"Invalid arguments for {name}: {e}"}
            except Exception as e:
                logger.error("Tool %s failed: %s", name, e)
                result = {"error": str(e)}

            messages.append({
                "role": "tool",
                "tool_call_id": call.id,
                "content": summarize_tool_result(name, result, now, self._timezone),
            })
        return None

    def _load_and_filter_tasks(self, user_id: int, args: LoadAndFilterArgs, now: datetime) -> str:
        classification = QueryClassification(
            entity_type=args.entity_type,
            entity_id=args.entity_id,
            entity_name=args.entity_name,
            filter_type=args.filter_type,
            operation=args.operation,
        )
        tasks = self._processor.process_query(classification, now)
        header_name = args.entity_name or args.entity_id

        if classification.operation == OperationType.STATS:
            text = generate_overdue_stats(
                [task.model_dump(by_alias=True) for task in tasks], now, self._timezone,
            )
        elif classification.operation == OperationType.COUNT:
            text = format_task_count(tasks, args.filter_type, header_name=header_name)
        else:
            text = format_task_list(
                tasks,
                args.filter_type,
                header_name=header_name,
                people_url=self._people_url,
                app_url=self._app_url,
                timezone=self._timezone,
                display_limit=self._config.display_limit,
            )

        update = SessionState(last_report_type=args.filter_type.value)
        if args.entity_type == EntityType.PERSON and args.entity_id and args.entity_name:
            update.last_person_id = args.entity_id
            update.last_person_name = args.entity_name
        elif args.entity_type == EntityType.DEPARTMENT:
            update.department = self._directory.resolve_department_key(args.entity_id, args.entity_name)
        self._store.update_state(user_id, update)
        logger.info("Context for %s updated after %s: %s", user_id, classification.operation.value, update)

        return text

    def _update_context(self, user_id: int, args: UpdateContextArgs) -> Dict[str, Any]:
        self._store.update_state(
            user_id,
            SessionState(last_person_id=args.person_id, last_person_name=args.person_name),
        )
        logger.info("Context for %s: %s (%s)", user_id, args.person_name, args.person_id)
        return {"success": True, "message": f"Context updated: {args.person_name} ({args.person_id})"}

    def _remember(self, user_id: int, text: str, answer: str) -> None:
        self._store.save_message(user_id, "user", text)
        self._store.save_message(user_id, "assistant", answer)


def _assistant_message(message: Any) -> Dict[str, Any]:
    """Completion message as a plain dict that can be sent back to the service"""
    entry: Dict[str, Any] = {"role": "assistant", "content": getattr(message, "content", None)}
    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        entry["tool_calls"] = [
            {
                "id": call.id,
                "type": getattr(call, "type", "function"),
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in tool_calls
        ]
    return entry

"""Tests for the agent loop state machine."""

from types import SimpleNamespace

import pytest


def reply(content=None, tool_calls=None):
    return SimpleNamespace(content=content, tool_calls=tool_calls)


class TestLooksLikeTaskQuery:
    @pytest.mark.parametrize("text", [
        "Покажи прострочені задачі",
        "what is OVERDUE for Anna?",
        "що зависло у ботоксі",
        "stuck tasks",
        "Дедлайн сьогодні?",
        "таски Іллі",
        "просрочено у кого",
        "хто має прострочені?",
    ])
    def test_task_like(self, text):
        from taskagent.assistant.loop import looks_like_task_query
        assert looks_like_task_query(text)

    @pytest.mark.parametrize("text", ["Привіт!", "скільки людей у команді", "", None])
    def test_not_task_like(self, text):
        from taskagent.assistant.loop import looks_like_task_query
        assert not looks_like_task_query(text)

    def test_tool_choice_forced_only_on_first_turn(self):
        from taskagent.assistant.loop import tool_choice_for
        assert tool_choice_for(1, "overdue tasks") == "required"
        assert tool_choice_for(2, "overdue tasks") == "auto"
        assert tool_choice_for(1, "hello") == "auto"


class TestTransitions:
    def test_budget_allows_six_turns(self):
        from taskagent.assistant.loop import AwaitingModel, check_budget, MAX_MODEL_TURNS
        assert MAX_MODEL_TURNS == 6
        state = AwaitingModel(turn=6)
        assert check_budget(state) is state

    def test_seventh_turn_terminates(self):
        from taskagent.assistant.loop import AwaitingModel, Terminated, TerminationReason, check_budget
        from taskagent.assistant.messages import TOO_MANY_STEPS_TEXT
        result = check_budget(AwaitingModel(turn=7))
        assert result == Terminated(TerminationReason.TOO_MANY_STEPS, TOO_MANY_STEPS_TEXT)

    def test_tool_calls_lead_to_execution(self):
        from taskagent.assistant.loop import AwaitingModel, ExecutingTool, after_model_reply
        calls = [SimpleNamespace(id="c1")]
        result = after_model_reply(AwaitingModel(turn=2), reply(tool_calls=calls), "x")
        assert isinstance(result, ExecutingTool)
        assert result.turn == 2
        assert result.tool_calls == tuple(calls)

    def test_first_turn_bare_answer_to_task_query_is_rejected(self):
        from taskagent.assistant.loop import AwaitingModel, TerminationReason, after_model_reply
        from taskagent.assistant.messages import NO_DATA_TEXT
        result = after_model_reply(AwaitingModel(turn=1), reply("Anna has 3 overdue"), "overdue for Anna?")
        assert result.reason == TerminationReason.NO_DATA
        assert result.text == NO_DATA_TEXT

    def test_later_turn_bare_answer_is_accepted(self):
        from taskagent.assistant.loop import AwaitingModel, TerminationReason, after_model_reply
        result = after_model_reply(AwaitingModel(turn=2), reply("Done."), "overdue for Anna?")
        assert result.reason == TerminationReason.ANSWERED
        assert result.text == "Done."

    def test_empty_content_uses_fallback(self):
        from taskagent.assistant.loop import AwaitingModel, after_model_reply
        from taskagent.assistant.messages import FALLBACK_TEXT
        result = after_model_reply(AwaitingModel(turn=1), reply(""), "hello")
        assert result.text == FALLBACK_TEXT

    def test_missing_message(self):
        from taskagent.assistant.loop import AwaitingModel, TerminationReason, after_model_reply
        result = after_model_reply(AwaitingModel(turn=3), None, "hello")
        assert result.reason == TerminationReason.EMPTY_RESPONSE

    def test_after_tools(self):
        from taskagent.assistant.loop import (
            AwaitingModel, ExecutingTool, TerminationReason, after_tools,
        )
        state = ExecutingTool(turn=3, tool_calls=())
        assert after_tools(state, None) == AwaitingModel(turn=4)
        direct = after_tools(state, "<b>list</b>")
        assert direct.reason == TerminationReason.DIRECT_TOOL_ANSWER
        assert direct.text == "<b>list</b>"

    def test_tool_loop_never_exceeds_six_model_turns(self):
        from taskagent.assistant.loop import (
            AwaitingModel, ExecutingTool, Terminated, TerminationReason,
            after_model_reply, after_tools, check_budget,
        )
        state = AwaitingModel(turn=1)
        model_calls = 0
        while not isinstance(state, Terminated):
            if isinstance(state, AwaitingModel):
                state = check_budget(state)
                if isinstance(state, AwaitingModel):
                    model_calls += 1
                    state = after_model_reply(state, reply(tool_calls=[object()]), "overdue")
            elif isinstance(state, ExecutingTool):
                state = after_tools(state, None)

        assert model_calls == 6
        assert state.reason == TerminationReason.TOO_MANY_STEPS

"""Tests for system prompt rendering."""

import json
from datetime import datetime
from zoneinfo import ZoneInfo


class TestApplyTemplate:
    def test_placeholders(self):
        from taskagent.common.prompts import apply_template
        assert apply_template("{{a}} and {{b}} and {{c}}", {"a": "1", "b": "2"}) == "1 and 2 and "


class TestLoadSystemPrompt:
    def test_default_template(self):
        from taskagent.common.prompts import load_system_prompt
        text = load_system_prompt({"timezone": "Europe/Lisbon"})
        assert "timezone Europe/Lisbon" in text
        assert "{{" not in text

    def test_file_template(self, tmp_path):
        from taskagent.common.prompts import load_system_prompt
        path = tmp_path / "prompt.md"
        path.write_text("Team: {{departments}}", encoding="utf-8")
        assert load_system_prompt({"departments": "botox"}, str(path)) == "Team: botox"

    def test_missing_file_falls_back(self, tmp_path, caplog):
        import logging
        from taskagent.common.prompts import load_system_prompt, DEFAULT_TEMPLATE
        with caplog.at_level(logging.WARNING, logger="taskagent.common.prompts"):
            text = load_system_prompt({}, str(tmp_path / "missing.md"))
        assert text.startswith(DEFAULT_TEMPLATE.split("\n")[0])
        assert "Failed to read prompt" in caplog.text


class TestPromptVariables:
    def test_state_and_time(self):
        from taskagent.common.directory import TeamDirectory
        from taskagent.common.prompts import prompt_variables
        from taskagent.storage import SessionState

        directory = TeamDirectory.from_dicts(
            {"botox": {"list_ids": ["L1"]}, "kyt": {}},
            [{"id": 1, "name": "Ілля"}],
        )
        now = datetime(2024, 3, 15, 12, 0, tzinfo=ZoneInfo("Europe/Lisbon"))
        state = SessionState(department="botox", last_days=7)

        variables = prompt_variables(state, directory, "Europe/Lisbon", now)

        assert variables["departments"] == "botox, kyt"
        assert variables["last_department"] == "botox"
        assert variables["last_days"] == "7"
        assert variables["last_person_id"] == "none"
        assert variables["current_date"] == "2024-03-15"
        assert variables["current_time_ms"] == str(int(now.timestamp() * 1000))
        assert json.loads(variables["members_config"])[0]["name"] == "Ілля"
        assert "Ілля" in variables["members_config"]

    def test_empty_directory(self):
        from taskagent.common.directory import TeamDirectory
        from taskagent.common.prompts import prompt_variables
        from taskagent.storage import SessionState

        variables = prompt_variables(
            SessionState(), TeamDirectory(), "UTC", datetime(2024, 1, 1, tzinfo=ZoneInfo("UTC")),
        )
        assert variables["departments"] == "none"
        assert variables["last_report_type"] == "none"

"""Tests for tool result reduction."""

import json
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

TZ = "Europe/Lisbon"
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=ZoneInfo(TZ))


def millis(moment: datetime) -> str:
    return str(int(moment.timestamp() * 1000))


def summarize(name, result):
    from taskagent.assistant.tool_results import summarize_tool_result
    return summarize_tool_result(name, result, NOW, TZ)


def padded_task(task_id, status="to do", due=None, created=None, username="anna"):
    return {
        "id": task_id,
        "name": f"Task {task_id}",
        "status": {"status": status},
        "due_date": millis(due) if due else None,
        "date_created": millis(created or NOW - timedelta(days=1, hours=1)),
        "assignees": [{"username": username}],
        "list": {"name": "Main"},
        "url": f"https://app.clickup.com/t/{task_id}",
        "description": "x" * 400,
    }


class TestSmallResults:
    def test_small_result_is_plain_json(self):
        result = {"success": True, "message": "Context updated: Anna (100)"}
        assert json.loads(summarize("update_context", result)) == result

    def test_non_ascii_is_kept_readable(self):
        assert "Привіт" in summarize("x", {"text": "Привіт"})


class TestTruncation:
    def test_unknown_large_result_is_cut(self):
        text = summarize("get_time_tracked", {"blob": "y" * 20000})
        assert len(text) == 10000

    def test_large_member_list_is_pruned(self):
        members = [
            {"user": {"id": i, "username": f"user{i}", "email": f"u{i}@x.io", "color": "#fff" * 20}}
            for i in range(60)
        ]
        data = json.loads(summarize("get_time_tracked", {"members": members}))

        assert data["members"][0] == {"id": 0, "full_name": "user0", "email": "u0@x.io"}
        assert len(data["members"]) == 60

    def test_non_list_members_fall_back_to_truncation(self):
        text = summarize("get_time_tracked", {"members": "z" * 12000})
        assert len(text) == 10000

    def test_hierarchy_is_flattened(self):
        lists = [{"id": f"l{i}", "name": f"List {i}", "tasks": [{"id": "t"}], "extra": "e" * 300} for i in range(20)]
        spaces = [{"id": "s1", "name": "Space", "folders": [{"id": "f1", "name": "Folder", "lists": lists}]}]

        data = json.loads(summarize("get_time_tracked", {"id": "team", "name": "Team", "spaces": spaces}))

        team = data[0]
        assert team["type"] == "space"
        folder = team["children"][0]["children"][0]
        assert folder["type"] == "folder"
        assert folder["children"][0] == {"id": "l0", "name": "List 0", "type": "list"}


class TestTaskTriage:
    def tasks(self):
        tasks = [
            padded_task("today", due=NOW + timedelta(hours=2)),
            padded_task("late", due=NOW - timedelta(days=3)),
            padded_task("stuck", status="в роботі", created=NOW - timedelta(days=5)),
            padded_task("closed", status="complete", due=NOW - timedelta(days=9)),
            padded_task("calm", due=NOW + timedelta(days=5)),
        ]
        return tasks + [padded_task(f"f{i}", due=NOW + timedelta(days=8)) for i in range(10)]

    def test_only_problem_tasks_sorted_by_priority(self):
        data = json.loads(summarize("get_time_tracked", {"tasks": self.tasks()}))

        problems = data["problematic_tasks"]
        assert [t["id"] for t in problems] == ["late", "stuck", "today"]
        assert problems[0]["problem_type"] == "🔴 Прострочено на 3 днів"
        assert problems[1]["problem_type"] == "🟠 Зависла 5 днів без руху"
        assert problems[2]["problem_type"] == "🟡 Дедлайн сьогодні"
        assert [t["problem_priority"] for t in problems] == [1, 2, 3]
        assert data["summary"] == {"total_problems": 3, "overdue": 1, "stuck": 1, "dueToday": 1}

    def test_ready_report(self):
        data = json.loads(summarize("get_time_tracked", {"tasks": self.tasks()}))
        report = data["READY_REPORT"]

        assert report.startswith(
            "⚠️ <b>Знайдено 3 проблемних задач:</b> 1 прострочена, 1 зависла, 1 на сьогодні\n"
        )
        assert "🔴 Прострочено на 3 днів <b>Task late</b>" in report
        assert '   📂 Main • до 2024-03-12 • <a href="https://app.clickup.com/t/late">відкрити</a>' in report

    def test_leaderboard_included(self):
        data = json.loads(summarize("get_time_tracked", {"tasks": self.tasks()}))
        assert "<b>anna</b>" in data["STATISTICS_BY_ASSIGNEE"]

    def test_no_problems(self):
        tasks = [padded_task(f"f{i}", due=NOW + timedelta(days=8)) for i in range(15)]
        data = json.loads(summarize("get_time_tracked", {"tasks": tasks}))
        assert data["READY_REPORT"] == "✅ Проблемних задач не знайдено!"
        assert data["problematic_tasks"] == []

    def test_problem_list_capped(self):
        tasks = [padded_task(f"l{i}", due=NOW - timedelta(days=1)) for i in range(60)]
        data = json.loads(summarize("get_time_tracked", {"tasks": tasks}))
        assert len(data["problematic_tasks"]) == 50
        assert data["summary"]["total_problems"] == 60

    def test_shape_detection_for_other_tools(self):
        data = json.loads(summarize("search_tasks", {"tasks": self.tasks()}))
        assert "READY_REPORT" in data

    def test_non_object_entries_are_ignored(self):
        tasks = self.tasks() + ["not a task", None, 7]
        data = json.loads(summarize("get_time_tracked", {"tasks": tasks}))

        assert [t["id"] for t in data["problematic_tasks"]] == ["late", "stuck", "today"]
        assert "<b>anna</b>" in data["STATISTICS_BY_ASSIGNEE"]

    def test_hierarchy_list_is_detected_by_shape(self):
        spaces = [{"id": f"s{i}", "name": f"Space {i}", "folders": [], "lists": [], "x": "e" * 400} for i in range(20)]
        data = json.loads(summarize("get_time_tracked", spaces))
        assert data[0] == {"id": "s0", "name": "Space 0", "type": "space"}

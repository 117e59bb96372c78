"""
Task Query - retrieval, filtering and statistics over tracker tasks.

Key Components:
- QueryProcessor: resolves a classification to tracker calls and filters the result
- statistics: per-assignee problem counts and the leaderboard
- formatting: HTML rendering of task lists
- TimeTracker: time-tracking summaries

Pipeline:
1. Load tasks for a person, a department or everyone
2. Filter in the configured timezone (overdue, stuck, due today, in progress)
3. Render for the chat client
"""

from .query_processor import QueryProcessor
from .query_types import (
    EntityType,
    FilterType,
    OperationType,
    QueryClassification,
    TaskData,
)
from .statistics import AssigneeStats, collect_assignee_stats, generate_overdue_stats
from .time_tracking import TimeTracker

__all__ = [
    "QueryProcessor",
    "EntityType",
    "FilterType",
    "OperationType",
    "QueryClassification",
    "TaskData",
    "AssigneeStats",
    "collect_assignee_stats",
    "generate_overdue_stats",
    "TimeTracker",
]

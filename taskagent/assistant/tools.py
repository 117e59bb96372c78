"""
Tool palette offered to the completion service, and the pydantic models
that validate the arguments it sends back.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..query.query_types import EntityType, FilterType, OperationType
from ..query.time_tracking import Period

LOAD_AND_FILTER_TASKS = "load_and_filter_tasks"
UPDATE_CONTEXT = "update_context"
GET_TIME_TRACKED = "get_time_tracked"

TOOL_SCHEMAS = [
    {
        "type": "function",
        "function": {
            "name": LOAD_AND_FILTER_TASKS,
            "description": "Universal tool to load and filter tasks. Use this for ALL task queries.",
            "parameters": {
                "type": "object",
                "properties": {
                    "entityType": {
                        "type": "string",
                        "enum": ["person", "department", "all"],
                        "description": (
                            "What to query: 'person' for specific person, "
                            "'department' for project/department, 'all' for all tasks"
                        ),
                    },
                    "entityId": {
                        "type": "string",
                        "description": (
                            "Person ID (e.g. '100636815') or project key (e.g. 'botox', "
                            "'kyt_group', 'all_clients'). Required for person/department queries."
                        ),
                    },
                    "entityName": {
                        "type": "string",
                        "description": "Person name (e.g. 'Ilya Senchuk') or project name (e.g. 'Botox', 'KYT Group')",
                    },
                    "filterType": {
                        "type": "string",
                        "enum": ["none", "overdue", "stuck", "due_today", "in_progress"],
                        "description": (
                            "Filter to apply: 'none' (all tasks), 'overdue' (past due), "
                            "'stuck' (no due date, old), 'due_today' (due today), "
                            "'in_progress' (currently in work)"
                        ),
                    },
                    "operation": {
                        "type": "string",
                        "enum": [o.value for o in OperationType],
                        "description": (
                            "What to return: 'show' (task list, default), 'count' (number of tasks), "
                            "'stats' (leaderboard of assignees by overdue/stuck/due-today tasks)"
                        ),
                    },
                },
                "required": ["entityType", "filterType"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": UPDATE_CONTEXT,
            "description": (
                "Save context about the person being discussed. MUST be called after querying "
                "tasks for a specific person to enable follow-up questions."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "personId": {
                        "type": "string",
                        "description": "The user ID of the person (e.g. '100636815')",
                    },
                    "personName": {
                        "type": "string",
                        "description": "The name of the person (e.g. 'Ilya Senchuk')",
                    },
                },
                "required": ["personId", "personName"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": GET_TIME_TRACKED,
            "description": (
                "Get time tracking data for a person. Use for questions like "
                "'how much time did X track', 'скільки годин затрекав'"
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "personId": {
                        "type": "string",
                        "description": "The ClickUp user ID of the person",
                    },
                    "personName": {
                        "type": "string",
                        "description": "Name of the person for display",
                    },
                    "period": {
                        "type": "string",
                        "enum": [p.value for p in Period],
                        "description": "Time period to query",
                    },
                },
                "required": ["personId", "personName", "period"],
            },
        },
    },
]


class ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @staticmethod
    def id_to_str(value: Any) -> Any:
        # The model sometimes sends numeric ids unquoted
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class LoadAndFilterArgs(ToolArgs):
    entity_type: EntityType = Field(alias="entityType")
    entity_id: Optional[str] = Field(default=None, alias="entityId")
    entity_name: Optional[str] = Field(default=None, alias="entityName")
    filter_type: FilterType = Field(alias="filterType")
    operation: OperationType = OperationType.SHOW

    @field_validator("entity_id", mode="before")
    @classmethod
    def _entity_id_to_str(cls, value):
        return cls.id_to_str(value)


class UpdateContextArgs(ToolArgs):
    person_id: str = Field(alias="personId")
    person_name: str = Field(alias="personName")

    @field_validator("person_id", mode="before")
    @classmethod
    def _person_id_to_str(cls, value):
        return cls.id_to_str(value)


class TimeTrackedArgs(ToolArgs):
    person_id: str = Field(alias="personId")
    person_name: str = Field(alias="personName")
    period: Period

    @field_validator("person_id", mode="before")
    @classmethod
    def _person_id_to_str(cls, value):
        return cls.id_to_str(value)

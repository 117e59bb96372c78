"""
Query classification types for the task agent
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityType(str, Enum):
    """Subject of a query"""
    PERSON = "person"  # Specific person's tasks
    DEPARTMENT = "department"  # Department's tasks
    ALL = "all"  # Every configured member


class FilterType(str, Enum):
    """Problem category used to narrow a task list"""
    OVERDUE = "overdue"  # Due day before today
    STUCK = "stuck"  # No due date, active status, at least a day old
    DUE_TODAY = "due_today"
    IN_PROGRESS = "in_progress"
    NONE = "none"


class OperationType(str, Enum):
    SHOW = "show"
    COUNT = "count"
    STATS = "stats"


class QueryClassification(BaseModel):
    """Structured query produced from the model's tool-call arguments"""
    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    filter_type: FilterType = FilterType.NONE
    operation: OperationType = OperationType.SHOW


class TaskStatus(BaseModel):
    """Structured status object as returned by the tracker"""
    model_config = ConfigDict(extra="allow")

    status: str = ""
    id: Optional[str] = None
    color: Optional[str] = None
    type: Optional[str] = None
    orderindex: Optional[Union[int, str]] = None


class Assignee(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    username: Optional[str] = None
    email: Optional[str] = None


class Location(BaseModel):
    """List, folder or space a task lives in"""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None


class TaskData(BaseModel):
    """
    Normalized task record.

    `status` arrives either as a plain label or as a structured object;
    read it through `status_name` only.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str = ""
    status: Union[TaskStatus, str, None] = None
    due_date: Optional[str] = None
    date_created: Optional[str] = None
    assignees: List[Assignee] = Field(default_factory=list)
    task_list: Optional[Location] = Field(default=None, alias="list")
    folder: Optional[Location] = None
    space: Optional[Location] = None
    url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return str(value)

    @field_validator("due_date", "date_created", mode="before")
    @classmethod
    def _timestamp_to_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @property
    def status_name(self) -> str:
        """Plain status label, empty when absent"""
        if isinstance(self.status, TaskStatus):
            return self.status.status or ""
        return self.status or ""

    @property
    def project_name(self) -> Optional[str]:
        """Space, then list, then folder name"""
        for location in (self.space, self.task_list, self.folder):
            if location and location.name:
                return location.name
        return None

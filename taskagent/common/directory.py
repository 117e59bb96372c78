"""
Team Directory

Static description of the workspace: departments (groups of tracker lists) and team
members. Built once at process start and passed to the components that
need it.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger("taskagent.common.directory")


class Department(BaseModel):
    """A named group of tracker lists"""
    list_ids: List[str] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list)


class Member(BaseModel):
    """A team member as known to the tracker"""
    id: Union[int, str]
    name: str
    username: Optional[str] = None
    email: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    role: Optional[str] = None
    exclude_from_counts: bool = False

    @property
    def name_candidates(self) -> List[str]:
        """Name, username and aliases, in lookup order"""
        return [c for c in [self.name, self.username, *self.aliases] if c]


class TeamDirectory:
    """
    Read-only lookup over departments and members.

    Department keys are matched case-insensitively, then through aliases.
    """

    def __init__(
        self,
        departments: Optional[Dict[str, Department]] = None,
        members: Optional[List[Member]] = None,
    ):
        self.departments: Dict[str, Department] = dict(departments or {})
        self.members: List[Member] = list(members or [])

        self._alias_index: Dict[str, str] = {}
        for key, department in self.departments.items():
            for alias in department.aliases:
                self._alias_index[alias.strip().lower()] = key

    @classmethod
    def from_dicts(cls, departments: dict, members: list) -> "TeamDirectory":
        """Build a directory from raw JSON-compatible data (validated)"""
        return cls(
            departments={k: Department.model_validate(v) for k, v in (departments or {}).items()},
            members=[Member.model_validate(m) for m in (members or [])],
        )

    @property
    def department_keys(self) -> List[str]:
        return list(self.departments.keys())

    @property
    def visible_members(self) -> List[Member]:
        """Members that count towards team size and listings"""
        return [m for m in self.members if not m.exclude_from_counts]

    def normalize_department_key(self, value: Optional[str]) -> Optional[str]:
        """Resolve a key or alias to the canonical department key"""
        if not value:
            return None
        lowered = value.strip().lower()
        if not lowered:
            return None
        for key in self.departments:
            if key.lower() == lowered:
                return key
        return self._alias_index.get(lowered)

    def get_department(self, value: Optional[str]) -> Optional[Department]:
        key = self.normalize_department_key(value)
        return self.departments.get(key) if key else None

    def find_department_in_text(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        lowered = text.lower()
        for key in self.departments:
            if key.lower() in lowered:
                return key
        for alias, key in self._alias_index.items():
            if alias and alias in lowered:
                return key
        return None

    def resolve_department_key(self, value: Optional[str], name: Optional[str] = None) -> Optional[str]:
        """Key or alias first, then a key or alias mentioned in the display name"""
        return self.normalize_department_key(value) or self.find_department_in_text(name)

    def find_member_in_text(self, text: str) -> Optional[Member]:
        """First member whose name, username or alias occurs in the text"""
        lowered = text.lower()
        for member in self.members:
            for candidate in member.name_candidates:
                if candidate.lower() in lowered:
                    return member
        return None

    def to_prompt_dicts(self) -> tuple:
        """(departments, members) as plain data for prompt rendering"""
        departments = {k: v.model_dump() for k, v in self.departments.items()}
        members = [m.model_dump(exclude_none=True) for m in self.members]
        return departments, members


def _read_json(path: Path, default):
    if not path.exists():
        logger.warning("Directory file not found: %s", path)
        return default
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_directory(departments_path: str, members_path: str) -> TeamDirectory:
    """
    Load the team directory from JSON files.

    Missing files yield empty sections. Malformed entries raise
    pydantic.ValidationError so a broken directory fails at startup.
    """
    departments = _read_json(Path(departments_path), {})
    members = _read_json(Path(members_path), [])
    directory = TeamDirectory.from_dicts(departments, members)
    logger.info(
        "Loaded directory: %d departments, %d members",
        len(directory.departments), len(directory.members),
    )
    return directory

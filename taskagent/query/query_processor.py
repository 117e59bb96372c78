"""
Query Processor

Loads tasks for a classified query and narrows them with a filter.

Pipeline:
1. Resolve the entity (person / department / all) to tracker calls
2. Merge the pages and lists into a single task list
3. Apply the filter predicate in the configured timezone

Retrieval prefers availability over completeness: a failing page, list or
member is logged and skipped, and whatever was collected is returned.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..common.directory import TeamDirectory
from ..common.tracker_client import TrackerClient
from . import task_rules
from .query_types import EntityType, FilterType, QueryClassification, TaskData

logger = logging.getLogger("taskagent.query.processor")

DEFAULT_MAX_PAGES = 10


class QueryProcessor:
    """
    Loads and filters tasks for a QueryClassification.

    Holds no conversational state; the result depends only on the
    classification, the current time and the tracker's answers.
    """

    def __init__(
        self,
        tracker: TrackerClient,
        directory: TeamDirectory,
        timezone: str,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self._tracker = tracker
        self._directory = directory
        self._timezone = timezone
        self._max_pages = max_pages

        self._filters: Dict[FilterType, Callable[[List[TaskData], datetime], List[TaskData]]] = {
            FilterType.OVERDUE: self._filter_overdue,
            FilterType.STUCK: self._filter_stuck,
            FilterType.DUE_TODAY: self._filter_due_today,
            FilterType.IN_PROGRESS: self._filter_in_progress,
        }

    def process_query(
        self,
        classification: QueryClassification,
        now: Optional[datetime] = None,
    ) -> List[TaskData]:
        """
        Main entry point - load tasks for the entity and apply the filter.

        Args:
            classification: Structured query
            now: Reference time (defaults to the current time)

        Returns:
            Filtered tasks, in retrieval order
        """
        logger.info(
            "Processing query: entity=%s id=%s filter=%s",
            classification.entity_type.value,
            classification.entity_id,
            classification.filter_type.value,
        )

        tasks = self.load_tasks(classification)
        logger.info("Loaded %d tasks", len(tasks))

        filtered = self.apply_filter(tasks, classification.filter_type, now)
        logger.info(
            "Filtered to %d tasks (filter: %s)",
            len(filtered), classification.filter_type.value,
        )
        return filtered

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_tasks(self, classification: QueryClassification) -> List[TaskData]:
        entity_type = classification.entity_type

        if entity_type == EntityType.PERSON:
            if not classification.entity_id:
                raise ValueError("entityId is required for person queries")
            return self.load_person_tasks(classification.entity_id)

        if entity_type == EntityType.DEPARTMENT:
            if not classification.entity_id and not classification.entity_name:
                raise ValueError("entityId is required for department queries")
            return self.load_department_tasks(classification.entity_id, classification.entity_name)

        if entity_type == EntityType.ALL:
            return self.load_all_tasks()

        raise ValueError(f"Unknown entity type: {entity_type}")

    def load_person_tasks(self, person_id: str) -> List[TaskData]:
        """Paginate the assignee-filtered team endpoint."""
        all_tasks: List[TaskData] = []

        for page in range(self._max_pages):
            try:
                raw_tasks = self._tracker.get_team_tasks(person_id, page=page)
            except Exception as e:
                logger.error("Person %s page %d failed: %s", person_id, page, e)
                break

            all_tasks.extend(self._parse_tasks(raw_tasks))
            logger.info(
                "Person %s page %d: %d tasks (total %d)",
                person_id, page, len(raw_tasks), len(all_tasks),
            )

            if not raw_tasks:
                break

        logger.info("Person %s: %d tasks loaded", person_id, len(all_tasks))
        return all_tasks

    def load_department_tasks(
        self,
        department_key: Optional[str],
        department_name: Optional[str] = None,
    ) -> List[TaskData]:
        """
        Fetch every list of a department, skipping lists that fail.

        The key may be an alias; when it does not resolve, a department
        mentioned in the display name is used instead.
        """
        key = self._directory.resolve_department_key(department_key, department_name)
        department = self._directory.get_department(key)
        if department is None or not department.list_ids:
            logger.warning("Department not found or has no lists: %s", department_key or department_name)
            return []

        all_tasks: List[TaskData] = []
        for list_id in department.list_ids:
            try:
                raw_tasks = self._tracker.get_list_tasks(list_id)
            except Exception as e:
                logger.error("Department %s list %s failed: %s", key, list_id, e)
                continue

            all_tasks.extend(self._parse_tasks(raw_tasks))
            logger.info(
                "Department %s list %s: %d tasks (total %d)",
                key, list_id, len(raw_tasks), len(all_tasks),
            )

        logger.info("Department %s: %d tasks loaded", key, len(all_tasks))
        return all_tasks

    def load_all_tasks(self) -> List[TaskData]:
        """One person load per configured member, deduplicated by task id."""
        all_tasks: List[TaskData] = []
        seen = set()

        for member in self._directory.members:
            try:
                tasks = self.load_person_tasks(str(member.id))
            except Exception as e:
                logger.error("Loading tasks for member %s failed: %s", member.id, e)
                continue

            for task in tasks:
                if task.id in seen:
                    continue
                seen.add(task.id)
                all_tasks.append(task)

        return all_tasks

    def _parse_tasks(self, raw_tasks: List[dict]) -> List[TaskData]:
        parsed = []
        for raw in raw_tasks:
            try:
                parsed.append(TaskData.model_validate(raw))
            except ValidationError as e:
                logger.error("Skipping malformed task %s: %s", raw.get("id"), e)
        return parsed

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def apply_filter(
        self,
        tasks: List[TaskData],
        filter_type: FilterType,
        now: Optional[datetime] = None,
    ) -> List[TaskData]:
        """Apply a filter predicate; order is preserved."""
        predicate_filter = self._filters.get(filter_type)
        if predicate_filter is None:
            return list(tasks)
        return predicate_filter(tasks, task_rules.zone_now(self._timezone, now))

    def _keep(self, tasks: List[TaskData], predicate, label: str) -> List[TaskData]:
        kept = []
        for task in tasks:
            try:
                if predicate(task):
                    kept.append(task)
            except (TypeError, ValueError, OverflowError) as e:
                logger.error(
                    "%s filter failed for task %s (%s): %s",
                    label, task.id, task.name, e,
                )
        return kept

    def _due(self, task: TaskData) -> Optional[datetime]:
        return task_rules.from_millis(task.due_date, self._timezone)

    def _filter_overdue(self, tasks: List[TaskData], now: datetime) -> List[TaskData]:
        return self._keep(
            tasks, lambda t: task_rules.is_hard_overdue(self._due(t), now), "overdue"
        )

    def _filter_due_today(self, tasks: List[TaskData], now: datetime) -> List[TaskData]:
        return self._keep(
            tasks, lambda t: task_rules.is_due_today(self._due(t), now), "due_today"
        )

    def _filter_in_progress(self, tasks: List[TaskData], now: datetime) -> List[TaskData]:
        return self._keep(
            tasks, lambda t: task_rules.is_in_progress_status(t.status_name), "in_progress"
        )

    def _filter_stuck(self, tasks: List[TaskData], now: datetime) -> List[TaskData]:
        def stuck(task: TaskData) -> bool:
            if task.due_date:
                return False
            created = task_rules.from_millis(task.date_created, self._timezone)
            return task_rules.is_stuck(None, task.status_name, created, now)

        filtered = self._keep(tasks, stuck, "stuck")
        logger.info("Stuck filter: %d of %d tasks", len(filtered), len(tasks))
        return filtered

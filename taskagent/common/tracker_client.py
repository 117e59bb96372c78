"""
ClickUp REST client

Thin synchronous wrapper over the endpoints the task agent reads.
Every method returns plain JSON-compatible data; envelope-less responses
are treated as empty results.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import TrackerConfig

logger = logging.getLogger("taskagent.common.tracker_client")


class TrackerAPIError(Exception):
    """Non-2xx response from the task tracker."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"ClickUp API error {status_code}: {body}")


class TrackerClient:
    """
    Read-only ClickUp API v2 client.

    Usage:
        client = TrackerClient(config.tracker)
        tasks = client.get_team_tasks("100636815", page=0)
        client.close()
    """

    def __init__(self, config: TrackerConfig, http_client: Optional[httpx.Client] = None):
        self.team_id = config.team_id
        self.app_url = config.app_url.rstrip("/")
        self._client = http_client or httpx.Client(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
        )
        self._headers = {
            "Authorization": config.api_key,
            "Content-Type": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: Optional[Any] = None) -> Dict[str, Any]:
        response = self._client.get(path, params=params, headers=self._headers)
        if response.status_code >= 300:
            raise TrackerAPIError(response.status_code, response.text)
        data = response.json()
        return data if isinstance(data, dict) else {}

    def get_team_tasks(self, assignee_id: str, page: int = 0) -> List[Dict[str, Any]]:
        """One page of open tasks (with subtasks) assigned to a person"""
        params = [
            ("assignees[]", str(assignee_id)),
            ("subtasks", "true"),
            ("archived", "false"),
            ("page", str(page)),
        ]
        data = self._get(f"/team/{self.team_id}/task", params=params)
        return data.get("tasks") or []

    def get_list_tasks(self, list_id: str) -> List[Dict[str, Any]]:
        """Open tasks (with subtasks) of a single list"""
        params = {"archived": "false", "subtasks": "true"}
        data = self._get(f"/list/{list_id}/task", params=params)
        return data.get("tasks") or []

    def get_time_entries(self, start_ms: int, end_ms: int, assignee_id: str) -> List[Dict[str, Any]]:
        """Time entries of a person inside [start_ms, end_ms]"""
        params = {
            "start_date": str(start_ms),
            "end_date": str(end_ms),
            "assignee": str(assignee_id),
        }
        data = self._get(f"/team/{self.team_id}/time_entries", params=params)
        return data.get("data") or []

    def people_url(self) -> str:
        return f"{self.app_url}/{self.team_id}/teams-pulse/people"

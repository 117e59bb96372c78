"""
JSON File Store

Conversation store persisted to a single JSON file
(default: ~/.taskagent/conversations.json).

File layout:
{
    "messages": {"<user_id>": [{"role", "content", "created_at"}, ...]},
    "states": {"<user_id>": {"department", "last_person_id", ...}}
}
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..common.config import STORE_PATH
from .base import ConversationStore, SessionState, StoredMessage

logger = logging.getLogger("taskagent.storage.json_store")


class JsonFileStore(ConversationStore):
    """
    File-backed store. Each user keeps at most `max_messages` messages;
    older ones are trimmed on write.
    """

    def __init__(self, path: Optional[Path] = None, max_messages: int = 100):
        self._path = Path(path) if path else STORE_PATH
        self._max_messages = max_messages
        self._data: Dict[str, Dict[str, Any]] = {"messages": {}, "states": {}}
        self._load()

    def _load(self) -> None:
        """Load store from disk"""
        if not self._path.exists():
            return

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            self._data = {
                "messages": data.get("messages", {}),
                "states": data.get("states", {}),
            }
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load conversation store %s: %s", self._path, e)

    def _save(self) -> None:
        """Save store to disk"""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    def get_recent_messages(self, user_id: int, limit: int) -> List[StoredMessage]:
        if limit <= 0:
            return []
        rows = self._data["messages"].get(str(user_id), [])[-limit:]
        return [
            StoredMessage(role=r["role"], content=r["content"], created_at=r.get("created_at"))
            for r in rows
        ]

    def save_message(self, user_id: int, role: str, content: str) -> None:
        logger.debug("Saving %s message for %s (%d chars)", role, user_id, len(content))
        rows = self._data["messages"].setdefault(str(user_id), [])
        rows.append({
            "role": role,
            "content": content,
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
        del rows[:-self._max_messages]
        self._save()

    def get_state(self, user_id: int) -> SessionState:
        return SessionState.from_dict(self._data["states"].get(str(user_id)))

    def update_state(self, user_id: int, update: SessionState) -> SessionState:
        state = self.get_state(user_id).merged(update)
        self._data["states"][str(user_id)] = state.to_dict()
        self._save()
        logger.info("Updated state for %s", user_id)
        return state

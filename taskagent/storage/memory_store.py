"""In-process conversation store (tests, local runs)."""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List

from .base import ConversationStore, SessionState, StoredMessage


class InMemoryStore(ConversationStore):

    def __init__(self, max_messages: int = 100):
        self._max_messages = max_messages
        self._messages: Dict[int, List[StoredMessage]] = defaultdict(list)
        self._states: Dict[int, SessionState] = {}

    def get_recent_messages(self, user_id: int, limit: int) -> List[StoredMessage]:
        if limit <= 0:
            return []
        return list(self._messages[user_id][-limit:])

    def save_message(self, user_id: int, role: str, content: str) -> None:
        messages = self._messages[user_id]
        messages.append(StoredMessage(
            role=role,
            content=content,
            created_at=datetime.now(timezone.utc).isoformat(),
        ))
        del messages[:-self._max_messages]

    def get_state(self, user_id: int) -> SessionState:
        return self._states.get(user_id, SessionState())

    def update_state(self, user_id: int, update: SessionState) -> SessionState:
        state = self.get_state(user_id).merged(update)
        self._states[user_id] = state
        return state

"""
Conversation Store

Abstract interface for short-term message history and per-user session
state, plus the records it exchanges.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional


@dataclass
class StoredMessage:
    """One message of a user's conversation"""
    role: str  # "user" or "assistant"
    content: str
    created_at: Optional[str] = None


@dataclass
class SessionState:
    """What the agent remembers about a user between messages"""
    department: Optional[str] = None
    last_report_type: Optional[str] = None
    last_days: Optional[int] = None
    last_person_id: Optional[str] = None
    last_person_name: Optional[str] = None

    def merged(self, update: "SessionState") -> "SessionState":
        """Copy with the non-None fields of `update` applied"""
        changes = {f.name: getattr(update, f.name) for f in fields(update)
                   if getattr(update, f.name) is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SessionState":
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class ConversationStore(ABC):
    """
    Durable store for conversation history and session state.

    Implementations must give per-user read-your-writes consistency;
    the agent does no locking of its own.
    """

    @abstractmethod
    def get_recent_messages(self, user_id: int, limit: int) -> List[StoredMessage]:
        """Most recent `limit` messages, oldest first"""
        pass

    @abstractmethod
    def save_message(self, user_id: int, role: str, content: str) -> None:
        pass

    @abstractmethod
    def get_state(self, user_id: int) -> SessionState:
        """Session state, empty for unknown users"""
        pass

    @abstractmethod
    def update_state(self, user_id: int, update: SessionState) -> SessionState:
        """Merge the non-None fields of `update` and return the result"""
        pass

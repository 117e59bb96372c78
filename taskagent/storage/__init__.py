"""
Conversation storage for the task agent.

Key Components:
- ConversationStore: interface the agent talks to
- InMemoryStore: process-local store
- JsonFileStore: JSON-file backed store
"""

from .base import ConversationStore, SessionState, StoredMessage
from .json_store import JsonFileStore
from .memory_store import InMemoryStore

__all__ = [
    "ConversationStore",
    "SessionState",
    "StoredMessage",
    "InMemoryStore",
    "JsonFileStore",
]

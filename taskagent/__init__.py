"""
Task Agent

Chat assistant that answers questions about a team's ClickUp tasks.

Design:
- Live data only: task answers always come from a tracker call made for
  the current message
- Deterministic rendering: task lists are built by code, not by the model
- Every "today" is evaluated in the configured timezone

Usage:
    from taskagent.common import load_config, load_directory, TrackerClient, LLMClient
    from taskagent.query import QueryProcessor, TimeTracker
    from taskagent.storage import JsonFileStore
    from taskagent.assistant import Agent
"""

__version__ = "0.1.0"

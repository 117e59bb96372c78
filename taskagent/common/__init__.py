"""
Task Agent Common Module

Shared infrastructure for the retrieval pipeline and the assistant.
"""

from .config import TaskAgentConfig, load_config
from .directory import Department, Member, TeamDirectory, load_directory
from .llm_client import CompletionFailure, LLMClient, classify_completion_error
from .tracker_client import TrackerAPIError, TrackerClient

__all__ = [
    "TaskAgentConfig",
    "load_config",
    "Department",
    "Member",
    "TeamDirectory",
    "load_directory",
    "CompletionFailure",
    "LLMClient",
    "classify_completion_error",
    "TrackerAPIError",
    "TrackerClient",
]

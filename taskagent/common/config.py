"""
Configuration Management for the task agent

Loads configuration from ~/.taskagent/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger("taskagent.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".taskagent"
CONFIG_PATH = CONFIG_DIR / "config.json"
STORE_PATH = CONFIG_DIR / "conversations.json"

DEFAULT_TIMEZONE = "Europe/Lisbon"


@dataclass
class TrackerConfig:
    """ClickUp REST API configuration"""
    api_key: str = ""
    team_id: str = ""
    base_url: str = "https://api.clickup.com/api/v2"
    app_url: str = "https://app.clickup.com"
    max_pages: int = 10
    timeout: float = 30.0


@dataclass
class LLMConfig:
    """Completion service configuration"""
    api_key: str = ""
    model: str = "gpt-4.1"
    base_url: str = ""


@dataclass
class AgentConfig:
    """Conversational agent configuration"""
    prompt_path: str = ""  # empty: built-in prompt
    history_limit: int = 10
    display_limit: int = 25


@dataclass
class StorageConfig:
    """Conversation store configuration"""
    path: str = str(STORE_PATH)
    max_messages: int = 100


@dataclass
class TaskAgentConfig:
    """Main task agent configuration"""
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    timezone: str = DEFAULT_TIMEZONE
    departments_path: str = str(CONFIG_DIR / "departments.json")
    members_path: str = str(CONFIG_DIR / "members.json")
    port: int = 8000

    def validate(self) -> List[str]:
        """Return the names of required settings that are missing."""
        missing = []
        if not self.tracker.api_key:
            missing.append("CLICKUP_API_KEY")
        if not self.tracker.team_id:
            missing.append("CLICKUP_TEAM_ID")
        if not self.llm.api_key:
            missing.append("OPENAI_API_KEY")
        return missing


def _parse_tracker_config(data: dict) -> TrackerConfig:
    """Parse tracker section from config dict"""
    tracker_data = data.get("tracker", {})
    return TrackerConfig(
        api_key=tracker_data.get("api_key") or tracker_data.get("api_token", ""),
        team_id=str(tracker_data.get("team_id", "")),
        base_url=tracker_data.get("base_url", "https://api.clickup.com/api/v2"),
        app_url=tracker_data.get("app_url", "https://app.clickup.com"),
        max_pages=tracker_data.get("max_pages", 10),
        timeout=tracker_data.get("timeout", 30.0),
    )


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    return LLMConfig(
        api_key=llm_data.get("api_key", ""),
        model=llm_data.get("model", "gpt-4.1"),
        base_url=llm_data.get("base_url", ""),
    )


def _parse_agent_config(data: dict) -> AgentConfig:
    """Parse agent section from config dict"""
    agent_data = data.get("agent", {})
    return AgentConfig(
        prompt_path=agent_data.get("prompt_path", ""),
        history_limit=agent_data.get("history_limit", 10),
        display_limit=agent_data.get("display_limit", 25),
    )


def _parse_storage_config(data: dict) -> StorageConfig:
    """Parse storage section from config dict"""
    storage_data = data.get("storage", {})
    return StorageConfig(
        path=storage_data.get("path", str(STORE_PATH)),
        max_messages=storage_data.get("max_messages", 100),
    )


def load_config(config_path: Optional[Path] = None) -> TaskAgentConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.taskagent/config.json)
    3. Default values
    """
    config = TaskAgentConfig()
    path = config_path or CONFIG_PATH

    # Load from config file if exists
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)

            config.tracker = _parse_tracker_config(data)
            config.llm = _parse_llm_config(data)
            config.agent = _parse_agent_config(data)
            config.storage = _parse_storage_config(data)
            config.timezone = data.get("timezone", DEFAULT_TIMEZONE)
            config.departments_path = data.get("departments_path", config.departments_path)
            config.members_path = data.get("members_path", config.members_path)
            config.port = data.get("port", config.port)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", path, e)

    # Environment variable overrides
    api_key = os.getenv("CLICKUP_API_KEY") or os.getenv("CLICKUP_API_TOKEN")
    if api_key:
        config.tracker.api_key = api_key
    if os.getenv("CLICKUP_TEAM_ID"):
        config.tracker.team_id = os.getenv("CLICKUP_TEAM_ID")
    if os.getenv("CLICKUP_BASE_URL"):
        config.tracker.base_url = os.getenv("CLICKUP_BASE_URL")
    if os.getenv("TASKAGENT_MAX_PAGES"):
        config.tracker.max_pages = int(os.getenv("TASKAGENT_MAX_PAGES"))

    if os.getenv("OPENAI_API_KEY"):
        config.llm.api_key = os.getenv("OPENAI_API_KEY")
    if os.getenv("OPENAI_MODEL"):
        config.llm.model = os.getenv("OPENAI_MODEL")
    if os.getenv("OPENAI_BASE_URL"):
        config.llm.base_url = os.getenv("OPENAI_BASE_URL")

    if os.getenv("AGENT_PROMPT_PATH"):
        config.agent.prompt_path = os.getenv("AGENT_PROMPT_PATH")
    if os.getenv("TASKAGENT_STORE_PATH"):
        config.storage.path = os.getenv("TASKAGENT_STORE_PATH")

    if os.getenv("TIMEZONE"):
        config.timezone = os.getenv("TIMEZONE")
    if os.getenv("TASKAGENT_DEPARTMENTS_PATH"):
        config.departments_path = os.getenv("TASKAGENT_DEPARTMENTS_PATH")
    if os.getenv("TASKAGENT_MEMBERS_PATH"):
        config.members_path = os.getenv("TASKAGENT_MEMBERS_PATH")
    if os.getenv("TASKAGENT_PORT"):
        config.port = int(os.getenv("TASKAGENT_PORT"))

    return config


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

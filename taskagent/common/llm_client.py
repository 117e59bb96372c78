"""
Completion client for the task agent.

Wraps the OpenAI chat-completions API with tool calling, and classifies
provider errors into the failures the agent reports to users.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from openai import OpenAI

logger = logging.getLogger("taskagent.common.llm_client")


class CompletionFailure(str, Enum):
    """Completion-service failures that end the current message"""
    QUOTA_EXHAUSTED = "quota_exhausted"
    RATE_LIMITED = "rate_limited"
    INVALID_CREDENTIALS = "invalid_credentials"
    MODEL_NOT_FOUND = "model_not_found"


def _error_field(error: BaseException, name: str) -> Optional[Any]:
    """Read a field from the exception or its provider `error` body."""
    value = getattr(error, name, None)
    if value:
        return value
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        nested = body.get("error") if isinstance(body.get("error"), dict) else body
        return nested.get(name)
    return None


def classify_completion_error(error: BaseException) -> Optional[CompletionFailure]:
    """
    Map a completion-service exception to a known failure.

    Returns None for anything unrecognized; callers re-raise those.
    """
    code = _error_field(error, "code")
    error_type = _error_field(error, "type")
    status = getattr(error, "status_code", None) or getattr(error, "status", None)

    if code == "insufficient_quota" or error_type == "insufficient_quota":
        return CompletionFailure.QUOTA_EXHAUSTED
    if status == 429 or code == "rate_limit_exceeded":
        return CompletionFailure.RATE_LIMITED
    if status == 401 or code == "invalid_api_key":
        return CompletionFailure.INVALID_CREDENTIALS
    if status == 404 or code == "model_not_found":
        return CompletionFailure.MODEL_NOT_FOUND
    return None


class LLMClient:
    """Chat-completion client with tool support."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4.1",
        base_url: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self._client = client

        if self._client is not None:
            return
        if not api_key:
            logger.info("OpenAI API key not provided, LLM client unavailable")
            return
        kwargs = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = OpenAI(**kwargs)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
        temperature: float = 0.0,
    ) -> Optional[Any]:
        """
        Run one completion and return the first choice's message.

        Returns None when the service answers without choices.
        Provider exceptions propagate unchanged.
        """
        if not self.is_available:
            raise RuntimeError("LLM client is not available")

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "temperature": temperature,
            "messages": messages,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice

        response = self._client.chat.completions.create(**kwargs)
        if not response.choices:
            return None
        return response.choices[0].message

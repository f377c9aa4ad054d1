"""LLM-specific error hierarchy.

All LLM errors inherit from MeetflowError for consistent exception handling.
"""

from __future__ import annotations

from meetflow.exceptions import MeetflowError


class LLMClientError(MeetflowError):
    """Base for all LLM client errors."""


class LLMConfigError(LLMClientError):
    """Missing or invalid LLM configuration (e.g., no API key)."""


class ChatCompletionError(LLMClientError):
    """The completion endpoint rejected the request or returned no content.

    Attributes:
        status_code: HTTP status of the final response, or None when the
            failure was in the response body.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class EmptyCompletionError(ChatCompletionError):
    """The completion succeeded but carried no text."""

"""Chat completion collaborator for AI-backed actions and templates."""

from meetflow.llm.client import OpenAIChatCompleter
from meetflow.llm.errors import (
    ChatCompletionError,
    EmptyCompletionError,
    LLMClientError,
    LLMConfigError,
)
from meetflow.llm.protocols import ChatCompleter, Message

__all__ = [
    "ChatCompleter",
    "ChatCompletionError",
    "EmptyCompletionError",
    "LLMClientError",
    "LLMConfigError",
    "Message",
    "OpenAIChatCompleter",
]

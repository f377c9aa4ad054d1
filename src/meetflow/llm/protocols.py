"""ChatCompleter protocol.

The automation engine never talks to an LLM vendor directly.  Anything
with a ``complete()`` method matching this signature can be injected; the
built-in OpenAIChatCompleter implements it.
"""

from __future__ import annotations

from typing import Protocol, TypedDict, runtime_checkable


class Message(TypedDict):
    role: str
    content: str


@runtime_checkable
class ChatCompleter(Protocol):
    """Protocol for pluggable text generation."""

    def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send messages, return the generated text."""
        ...

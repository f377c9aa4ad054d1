"""Built-in OpenAI-compatible chat completer.

Posts to ``{base_url}/chat/completions`` through a ResilientClient, so
transient failures are retried with the same backoff policy as every
other outbound call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from meetflow.http import ResilientClient
from meetflow.llm.errors import ChatCompletionError, EmptyCompletionError, LLMConfigError
from meetflow.llm.protocols import Message

logger = logging.getLogger(__name__)


class OpenAIChatCompleter:
    """ChatCompleter backed by an OpenAI-compatible HTTP API.

    Usage::

        with ResilientClient() as http:
            chat = OpenAIChatCompleter(http, api_key="sk-...")
            text = chat.complete([{"role": "user", "content": "Hello"}])
    """

    def __init__(
        self,
        http: ResilientClient,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        default_model: str = "gpt-4o-mini",
        default_temperature: float = 0.3,
        default_max_tokens: int = 1000,
    ) -> None:
        """Initialize the completer.

        Args:
            http: Client used for every request.
            api_key: API key.  Required; passed in explicitly rather than
                read from the process environment.
            base_url: API base URL.
            default_model: Model used when complete() is not given one.
            default_temperature: Sampling temperature default.
            default_max_tokens: Completion length default.

        Raises:
            LLMConfigError: If no API key is provided.
        """
        if not api_key:
            raise LLMConfigError(
                "No API key provided. Pass api_key= or set "
                "MEETFLOW_OPENAI_API_KEY in the engine configuration."
            )
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._default_model = default_model
        self._default_temperature = default_temperature
        self._default_max_tokens = default_max_tokens

    def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Run one chat completion and return the assistant text.

        Raises:
            ChatCompletionError: On a non-success status or a malformed body.
            EmptyCompletionError: If the response carries no text.
            httpx.TransportError: If the API could not be reached.
        """
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "messages": list(messages),
            "temperature": (
                self._default_temperature if temperature is None else temperature
            ),
            "max_tokens": self._default_max_tokens if max_tokens is None else max_tokens,
        }
        response = self._http.post(
            f"{self._base_url}/chat/completions",
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )
        if not response.is_success:
            raise ChatCompletionError(
                f"Chat completion failed: HTTP {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        return self.extract_content(response)

    @staticmethod
    def extract_content(response: httpx.Response) -> str:
        """Pull ``choices[0].message.content`` out of a completion response.

        Raises:
            ChatCompletionError: If the body is not JSON or has no content.
        """
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ChatCompletionError(
                f"Unexpected chat completion response: {exc}"
            ) from exc
        if not isinstance(content, str) or not content:
            raise EmptyCompletionError("Chat completion returned empty content")
        return content

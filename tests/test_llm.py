"""Tests for the OpenAI-compatible chat completer."""

from __future__ import annotations

import json

import httpx
import pytest

from meetflow.llm import (
    ChatCompleter,
    ChatCompletionError,
    EmptyCompletionError,
    LLMConfigError,
    OpenAIChatCompleter,
)
from tests.conftest import FakeChat, RecordingHandler, make_http


def _completion(content: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
    )


class TestConstruction:
    def test_missing_api_key(self, http):
        with pytest.raises(LLMConfigError, match="API key"):
            OpenAIChatCompleter(http, api_key=None)

    def test_empty_api_key(self, http):
        with pytest.raises(LLMConfigError):
            OpenAIChatCompleter(http, api_key="")

    def test_satisfies_protocol(self, http):
        assert isinstance(OpenAIChatCompleter(http, api_key="sk-test"), ChatCompleter)
        assert isinstance(FakeChat(), ChatCompleter)


class TestComplete:
    def test_request_shape(self):
        handler = RecordingHandler(_completion("Hello there"))
        with make_http(handler) as http:
            chat = OpenAIChatCompleter(
                http, api_key="sk-test", base_url="https://llm.test/v1/"
            )
            text = chat.complete([{"role": "user", "content": "Hi"}])

        assert text == "Hello there"
        request = handler.requests[0]
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "Hi"}],
            "temperature": 0.3,
            "max_tokens": 1000,
        }

    def test_overrides(self):
        handler = RecordingHandler(_completion("ok"))
        with make_http(handler) as http:
            chat = OpenAIChatCompleter(http, api_key="k")
            chat.complete([], model="gpt-4o", temperature=0.0, max_tokens=12)

        body = json.loads(handler.requests[0].content)
        assert body["model"] == "gpt-4o"
        assert body["temperature"] == 0.0
        assert body["max_tokens"] == 12

    def test_error_status(self):
        handler = RecordingHandler(httpx.Response(401, text="bad key"))
        with make_http(handler) as http:
            chat = OpenAIChatCompleter(http, api_key="k")
            with pytest.raises(ChatCompletionError, match="HTTP 401") as exc_info:
                chat.complete([{"role": "user", "content": "Hi"}])

        assert exc_info.value.status_code == 401
        assert len(handler.requests) == 1

    def test_retries_rate_limit(self):
        sleeps: list[float] = []
        handler = RecordingHandler(httpx.Response(429), _completion("finally"))
        with make_http(handler, sleeps=sleeps) as http:
            text = OpenAIChatCompleter(http, api_key="k").complete([])

        assert text == "finally"
        assert len(sleeps) == 1

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": []},
            {"nothing": True},
            {"choices": [{"message": {"content": ""}}]},
            {"choices": [{"message": {"content": None}}]},
        ],
    )
    def test_malformed_body(self, body):
        handler = RecordingHandler(httpx.Response(200, json=body))
        with make_http(handler) as http:
            chat = OpenAIChatCompleter(http, api_key="k")
            with pytest.raises(ChatCompletionError):
                chat.complete([])

    def test_non_json_body(self):
        handler = RecordingHandler(httpx.Response(200, text="<html>"))
        with make_http(handler) as http:
            with pytest.raises(ChatCompletionError, match="Unexpected"):
                OpenAIChatCompleter(http, api_key="k").complete([])

    @pytest.mark.parametrize("content", ["", None])
    def test_empty_content_is_distinguishable(self, content):
        handler = RecordingHandler(
            httpx.Response(200, json={"choices": [{"message": {"content": content}}]})
        )
        with make_http(handler) as http:
            with pytest.raises(EmptyCompletionError):
                OpenAIChatCompleter(http, api_key="k").complete([])

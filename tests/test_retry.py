"""Tests for the resilient call layer (call_with_retry, ResilientClient).

Covers:
- Immediate return of success and non-retryable responses
- Retry of retryable statuses, with the last response returned on exhaustion
- Retry of transport errors, with the original error re-raised on exhaustion
- Backoff schedule (exponential base plus bounded jitter)
- ResilientClient request shaping over httpx.MockTransport
"""

from __future__ import annotations

import json

import httpx
import pytest

from meetflow.http import ResilientClient
from meetflow.retry import (
    DEFAULT_POLICY,
    DEFAULT_RETRY_STATUSES,
    RetryPolicy,
    call_with_retry,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code


class Sequenced:
    """Callable returning (or raising) queued items in order."""

    def __init__(self, *items):
        self.items = list(items)
        self.calls = 0

    def __call__(self):
        item = self.items[min(self.calls, len(self.items) - 1)]
        self.calls += 1
        if isinstance(item, BaseException):
            raise item
        return item


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class TestRetryPolicy:
    def test_defaults(self):
        assert DEFAULT_POLICY.retries == 3
        assert DEFAULT_POLICY.backoff == 0.5
        assert DEFAULT_POLICY.retry_statuses == frozenset(
            {408, 409, 425, 429, 500, 502, 503, 504}
        )
        assert DEFAULT_RETRY_STATUSES is DEFAULT_POLICY.retry_statuses

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(retries=-1)

    def test_negative_backoff_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(backoff=-0.1)


# ---------------------------------------------------------------------------
# call_with_retry
# ---------------------------------------------------------------------------


class TestCallWithRetry:
    def test_success_returns_immediately(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(200))

        response = call_with_retry(send, sleep=sleeps.append)

        assert response.status_code == 200
        assert send.calls == 1
        assert sleeps == []

    def test_non_retryable_error_status_is_returned_not_raised(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(404))

        response = call_with_retry(send, sleep=sleeps.append)

        assert response.status_code == 404
        assert send.calls == 1
        assert sleeps == []

    def test_retryable_then_success(self):
        """Fails with 503 twice, succeeds on attempt 3 after exactly 2 delays."""
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(503), FakeResponse(503), FakeResponse(200))

        response = call_with_retry(send, RetryPolicy(retries=3), sleep=sleeps.append)

        assert response.status_code == 200
        assert send.calls == 3
        assert len(sleeps) == 2

    def test_retryable_status_exhausted_returns_last_response(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(500), FakeResponse(502), FakeResponse(429))

        response = call_with_retry(send, RetryPolicy(retries=2), sleep=sleeps.append)

        assert response.status_code == 429
        assert send.calls == 3
        assert len(sleeps) == 2

    def test_transport_error_exhausted_reraises_original(self):
        sleeps: list[float] = []
        error = httpx.ConnectError("connection refused")
        send = Sequenced(error)

        with pytest.raises(httpx.ConnectError) as exc_info:
            call_with_retry(send, RetryPolicy(retries=3), sleep=sleeps.append)

        assert exc_info.value is error
        assert send.calls == 4
        assert len(sleeps) == 3

    def test_transport_error_then_success(self):
        sleeps: list[float] = []
        send = Sequenced(httpx.ReadTimeout("slow"), FakeResponse(201))

        response = call_with_retry(send, sleep=sleeps.append)

        assert response.status_code == 201
        assert send.calls == 2
        assert len(sleeps) == 1

    def test_os_error_counts_as_transport_failure(self):
        send = Sequenced(ConnectionResetError("reset"), FakeResponse(200))

        response = call_with_retry(send, sleep=lambda _: None)

        assert response.status_code == 200
        assert send.calls == 2

    def test_other_exceptions_propagate_without_retry(self):
        sleeps: list[float] = []
        send = Sequenced(ValueError("bad payload"), FakeResponse(200))

        with pytest.raises(ValueError, match="bad payload"):
            call_with_retry(send, sleep=sleeps.append)

        assert send.calls == 1
        assert sleeps == []

    def test_zero_retries_means_single_attempt(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(503), FakeResponse(200))

        response = call_with_retry(send, RetryPolicy(retries=0), sleep=sleeps.append)

        assert response.status_code == 503
        assert send.calls == 1
        assert sleeps == []

    def test_custom_retry_statuses(self):
        send = Sequenced(FakeResponse(404), FakeResponse(200))
        policy = RetryPolicy(retry_statuses=frozenset({404}))

        response = call_with_retry(send, policy, sleep=lambda _: None)

        assert response.status_code == 200
        assert send.calls == 2

    def test_backoff_is_exponential_with_bounded_jitter(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(500))
        policy = RetryPolicy(retries=3, backoff=0.5, jitter=0.1)

        call_with_retry(send, policy, sleep=sleeps.append)

        assert len(sleeps) == 3
        for attempt, delay in enumerate(sleeps):
            base = 0.5 * 2**attempt
            assert base <= delay <= base + 0.1 + 1e-9

    def test_no_jitter_gives_exact_schedule(self):
        sleeps: list[float] = []
        send = Sequenced(FakeResponse(500))

        call_with_retry(
            send, RetryPolicy(retries=3, backoff=1.0, jitter=0.0), sleep=sleeps.append
        )

        assert sleeps == pytest.approx([1.0, 2.0, 4.0])


# ---------------------------------------------------------------------------
# ResilientClient
# ---------------------------------------------------------------------------


class TestResilientClient:
    def _client(self, handler, sleeps, **kwargs) -> ResilientClient:
        return ResilientClient(
            transport=httpx.MockTransport(handler),
            sleep=sleeps.append,
            **kwargs,
        )

    def test_post_sends_json_and_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with self._client(handler, [], headers={"User-Agent": "meetflow"}) as http:
            response = http.post(
                "http://hooks.test/in",
                json={"a": 1},
                headers={"X-Token": "abc"},
            )

        assert response.status_code == 200
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].headers["X-Token"] == "abc"
        assert seen[0].headers["User-Agent"] == "meetflow"
        assert json.loads(seen[0].content) == {"a": 1}

    def test_retries_retryable_status(self):
        statuses = iter([503, 503, 200])
        sleeps: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses))

        with self._client(handler, sleeps) as http:
            response = http.request("GET", "http://api.test/x")

        assert response.status_code == 200
        assert len(sleeps) == 2

    def test_exhausted_status_returned(self):
        sleeps: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        with self._client(handler, sleeps, policy=RetryPolicy(retries=1)) as http:
            response = http.post("http://api.test/x")

        assert response.status_code == 502
        assert not response.is_success
        assert len(sleeps) == 1

    def test_unreachable_raises_transport_error(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("no route", request=request)

        with self._client(handler, [], policy=RetryPolicy(retries=2)) as http:
            with pytest.raises(httpx.TransportError):
                http.post("http://down.test/")

        assert len(calls) == 3

    def test_per_request_policy_override(self):
        sleeps: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with self._client(handler, sleeps) as http:
            http.post("http://api.test/x", policy=RetryPolicy(retries=0))

        assert sleeps == []

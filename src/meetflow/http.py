"""HTTP client with retry.

ResilientClient wraps one ``httpx.Client`` and routes every request
through call_with_retry().  Timeouts are per request and independent of
the retry policy.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import httpx

from meetflow.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


class ResilientClient:
    """Sync HTTP client whose calls retry with exponential backoff.

    Usage::

        with ResilientClient(timeout=10.0) as http:
            response = http.post("https://hooks.example.com", json={"a": 1})
            if not response.is_success:
                ...

    A non-success response is returned, never raised; only transport
    failures that survive every retry raise (``httpx.TransportError``).
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        policy: RetryPolicy | None = None,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Default per-request timeout in seconds.
            policy: Default RetryPolicy for every request.
            headers: Headers sent with every request.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
            sleep: Optional sleep function passed to call_with_retry.
        """
        self._policy = policy or RetryPolicy()
        self._timeout = timeout
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=timeout,
            headers=dict(headers or {}),
            transport=transport,
        )

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        policy: RetryPolicy | None = None,
    ) -> httpx.Response:
        """Send a request, retrying per the policy.

        Args:
            method: HTTP method.
            url: Target URL.
            json: Optional JSON body.
            headers: Extra headers for this request.
            timeout: Per-request timeout; falls back to the client default.
            policy: Per-request RetryPolicy override.

        Returns:
            The final httpx.Response (possibly a non-success status).

        Raises:
            httpx.TransportError: If the target could not be reached.
        """
        request_timeout = self._timeout if timeout is None else timeout

        def send() -> httpx.Response:
            logger.debug("%s %s", method, url)
            return self._client.request(
                method,
                url,
                json=json,
                headers=dict(headers or {}),
                timeout=request_timeout,
            )

        kwargs: dict[str, Any] = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return call_with_retry(send, policy or self._policy, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """POST shorthand for request()."""
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> ResilientClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

"""Retry-with-backoff for outbound calls.

Provides call_with_retry() -- a tenacity-driven loop that retries
transport failures and retryable HTTP statuses with exponential backoff
plus jitter.

The two failure classes end differently once attempts run out:

- A transport failure (the call never reached its destination) on the
  last attempt re-raises the ORIGINAL exception.
- A retryable status on the last attempt is RETURNED as-is, so callers
  can branch on it.

Callers rely on this to tell "could not reach" from "reached but
rejected", so it must not be normalized away.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import httpx
import tenacity

logger = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_RETRY_STATUSES: frozenset[int] = frozenset(
    {408, 409, 425, 429, 500, 502, 503, 504}
)

TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (httpx.TransportError, OSError)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times and how patiently to retry a call.

    Attributes:
        retries: Retries after the first attempt (total attempts = retries + 1).
        backoff: Base delay in seconds.  Retry n (0-based) waits
            ``backoff * 2**n`` plus jitter.
        retry_statuses: Response status codes worth retrying.
        jitter: Upper bound, in seconds, of the uniform random delay added
            to every backoff.
    """

    retries: int = 3
    backoff: float = 0.5
    retry_statuses: frozenset[int] = field(default=DEFAULT_RETRY_STATUSES)
    jitter: float = 0.1

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")
        if self.backoff < 0 or self.jitter < 0:
            raise ValueError("backoff and jitter must be >= 0")


DEFAULT_POLICY = RetryPolicy()


def _status_of(response: object) -> int | None:
    return getattr(response, "status_code", None)


def _last_outcome(retry_state: tenacity.RetryCallState) -> object:
    """Return the final response, or re-raise the final transport error."""
    return retry_state.outcome.result()  # type: ignore[union-attr]


def call_with_retry(
    send: Callable[[], R],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> R:
    """Execute ``send`` with retry, exponential backoff, and jitter.

    Flow:
        1. response = send()
        2. Status not in policy.retry_statuses: return it (even 4xx/5xx)
        3. Retryable status or transport error with attempts left:
           wait ``backoff * 2**n + uniform(0, jitter)`` and goto 1
        4. Out of attempts: return the last response, or re-raise the
           last transport error

    Exceptions that are not transport errors propagate immediately.

    Args:
        send: Zero-argument callable performing one attempt.  Its result
            should expose ``status_code`` (httpx.Response does).
        policy: Retry settings.  Defaults to DEFAULT_POLICY.
        sleep: Sleep function, injectable for tests.

    Returns:
        The first non-retryable response, or the last response once
        attempts are exhausted.

    Raises:
        httpx.TransportError | OSError: The original error, when the final
            attempt fails at the transport level.
    """
    policy = policy or DEFAULT_POLICY
    statuses = policy.retry_statuses

    retryer = tenacity.Retrying(
        retry=(
            tenacity.retry_if_exception_type(TRANSPORT_ERRORS)
            | tenacity.retry_if_result(lambda r: _status_of(r) in statuses)
        ),
        wait=(
            tenacity.wait_exponential(multiplier=policy.backoff, exp_base=2)
            + tenacity.wait_random(0, policy.jitter)
        ),
        stop=tenacity.stop_after_attempt(policy.retries + 1),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
        retry_error_callback=_last_outcome,
        sleep=sleep,
    )
    return retryer(send)

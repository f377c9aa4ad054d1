"""Shared test fixtures for Meetflow.

Provides in-memory SQLite engine, session, repository and automation
engine fixtures, plus fakes for the HTTP and chat collaborators.
"""

from __future__ import annotations

from datetime import datetime

import httpx
import pytest
from sqlalchemy.orm import Session, sessionmaker

from meetflow.actions.dispatcher import ActionDispatcher
from meetflow.engine import AutomationEngine
from meetflow.http import ResilientClient
from meetflow.models.context import MeetingContext
from meetflow.retry import RetryPolicy
from meetflow.storage.engine import create_meetflow_engine, init_db
from meetflow.storage.sqlite import SqliteRuleRepository

FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0)


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_meetflow_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def rule_repo(session: Session) -> SqliteRuleRepository:
    return SqliteRuleRepository(session)


# ------------------------------------------------------------------
# Collaborator fakes
# ------------------------------------------------------------------


class FakeChat:
    """A ChatCompleter that records calls and returns canned text."""

    def __init__(self, reply: str = "Key insight: ship it.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def complete(self, messages, *, model=None, temperature=None, max_tokens=None):
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingHandler:
    """httpx.MockTransport handler returning queued responses or raising."""

    def __init__(self, *responses):
        self.responses = list(responses) or [httpx.Response(200, json={"ok": True})]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        idx = min(len(self.requests) - 1, len(self.responses) - 1)
        item = self.responses[idx]
        if isinstance(item, Exception):
            raise item
        return item


def make_http(handler, *, retries: int = 3, sleeps: list | None = None) -> ResilientClient:
    """ResilientClient over a mock transport that never really sleeps."""
    recorded = sleeps if sleeps is not None else []
    return ResilientClient(
        policy=RetryPolicy(retries=retries, backoff=0.5),
        transport=httpx.MockTransport(handler),
        sleep=recorded.append,
    )


@pytest.fixture
def fake_chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def http_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def http(http_handler) -> ResilientClient:
    client = make_http(http_handler)
    yield client
    client.close()


@pytest.fixture
def dispatcher(http, fake_chat) -> ActionDispatcher:
    return ActionDispatcher(http, fake_chat, clock=lambda: FIXED_NOW)


@pytest.fixture
def automation(session, rule_repo, dispatcher) -> AutomationEngine:
    """AutomationEngine over the in-memory session with fake collaborators."""
    return AutomationEngine(
        session=session,
        repo=rule_repo,
        dispatcher=dispatcher,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def long_meeting() -> MeetingContext:
    return MeetingContext(
        transcript="Alice: Let's review the budget. Bob: Agreed, the budget is tight.",
        summary="Budget review. Action: Bob to send revised numbers.",
        metadata={"duration": 45, "sentiment": "positive"},
    )


def rule_payload(
    name: str = "Long Meeting Email",
    *,
    triggers: list[dict] | None = None,
    actions: list[dict] | None = None,
    enabled: bool = True,
) -> dict:
    """Build a rule creation payload in the JSON wire shape."""
    return {
        "name": name,
        "description": f"{name} description",
        "enabled": enabled,
        "triggers": triggers
        if triggers is not None
        else [{"type": "duration", "condition": "greater_than", "value": 30}],
        "actions": actions
        if actions is not None
        else [{"type": "email", "config": {"recipient": "team@example.com"}}],
    }

"""Meetflow: rule-based automation for processed meetings.

Rules pair triggers (conditions on a meeting's transcript, summary and
metadata) with actions (notifications, webhooks, AI re-analysis).  After
each meeting the AutomationEngine runs every enabled rule whose triggers
match and reports a per-action outcome.
"""

from meetflow._version import __version__

# Core entry point
from meetflow.engine import AutomationEngine

# Rule and context types
from meetflow.models.context import MeetingContext
from meetflow.models.rule import (
    ActionInfo,
    ActionKind,
    ActionSpec,
    RuleInfo,
    RuleSpec,
    TriggerInfo,
    TriggerKind,
    TriggerSpec,
    validate_rule_spec,
)
from meetflow.models.outcome import ActionOutcome, ExecutionOutcome

# Configuration
from meetflow.models.config import EngineConfig

# Components
from meetflow.actions import ActionDispatcher
from meetflow.concurrency import concurrent_map
from meetflow.http import ResilientClient
from meetflow.retry import DEFAULT_RETRY_STATUSES, RetryPolicy, call_with_retry
from meetflow.triggers import TriggerEvaluator

# LLM collaborator
from meetflow.llm import ChatCompleter, OpenAIChatCompleter

# Smart templates
from meetflow.templates import SmartTemplate, SmartTemplateRequest, generate_smart_template

# Exceptions
from meetflow.exceptions import (
    ActionError,
    MeetflowError,
    PersistenceError,
    RuleNotFoundError,
    RuleValidationError,
    UnknownActionKindError,
)

__all__ = [
    "__version__",
    "AutomationEngine",
    "MeetingContext",
    "ActionInfo",
    "ActionKind",
    "ActionSpec",
    "RuleInfo",
    "RuleSpec",
    "TriggerInfo",
    "TriggerKind",
    "TriggerSpec",
    "validate_rule_spec",
    "ActionOutcome",
    "ExecutionOutcome",
    "EngineConfig",
    "ActionDispatcher",
    "concurrent_map",
    "ResilientClient",
    "DEFAULT_RETRY_STATUSES",
    "RetryPolicy",
    "call_with_retry",
    "TriggerEvaluator",
    "ChatCompleter",
    "OpenAIChatCompleter",
    "SmartTemplate",
    "SmartTemplateRequest",
    "generate_smart_template",
    "ActionError",
    "MeetflowError",
    "PersistenceError",
    "RuleNotFoundError",
    "RuleValidationError",
    "UnknownActionKindError",
]

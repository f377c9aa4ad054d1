"""Rule domain models.

TriggerKind and ActionKind are the closed sets of condition and side-effect
kinds.  TriggerSpec / ActionSpec / RuleSpec describe a rule creation request
and are validated before anything is persisted.  RuleInfo is the read model
returned from storage.
"""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from meetflow.exceptions import RuleValidationError


class TriggerKind(str, enum.Enum):
    """Kinds of condition a trigger can check."""

    KEYWORD = "keyword"
    SENTIMENT = "sentiment"
    SPEAKER = "speaker"
    DURATION = "duration"
    TOPIC = "topic"
    ACTION_ITEM = "action_item"

    def __str__(self) -> str:
        return self.value


class ActionKind(str, enum.Enum):
    """Kinds of side effect an action can perform."""

    EMAIL = "email"
    CHAT_MESSAGE = "chat_message"
    CALENDAR_EVENT = "calendar_event"
    TASK = "task"
    WEBHOOK = "webhook"
    AI_ANALYSIS = "ai_analysis"

    def __str__(self) -> str:
        return self.value


# Older rule definitions used these names.
_ACTION_ALIASES: dict[str, str] = {
    "slack": ActionKind.CHAT_MESSAGE.value,
    "calendar": ActionKind.CALENDAR_EVENT.value,
    "ai_reanalysis": ActionKind.AI_ANALYSIS.value,
}

DURATION_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "greater_than": operator.gt,
    "less_than": operator.lt,
    "equals": operator.eq,
}


def normalize_action_kind(kind: str) -> str:
    """Map legacy action names onto their current ActionKind value."""
    return _ACTION_ALIASES.get(kind, kind)


class TriggerSpec(BaseModel):
    """One matching condition in a rule creation request.

    ``condition`` may be omitted only for action_item triggers, which look
    for fixed markers in the summary.
    """

    kind: TriggerKind = Field(alias="type")
    condition: str = ""
    value: Optional[Union[float, str]] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _condition_needed(self) -> TriggerSpec:
        if self.kind is not TriggerKind.ACTION_ITEM and not self.condition:
            raise ValueError(f"{self.kind.value} triggers require a condition")
        return self

    @model_validator(mode="after")
    def _duration_needs_value(self) -> TriggerSpec:
        if self.kind is TriggerKind.DURATION:
            if self.value is None:
                raise ValueError("duration triggers require a numeric value")
            try:
                self.value = float(self.value)
            except (TypeError, ValueError):
                raise ValueError(
                    f"duration trigger value must be numeric, got {self.value!r}"
                ) from None
        return self


class ActionSpec(BaseModel):
    """One side effect in a rule creation request.

    The config mapping is opaque here; only the dispatcher interprets it.
    """

    kind: ActionKind = Field(alias="type")
    config: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @field_validator("kind", mode="before")
    @classmethod
    def _accept_legacy_names(cls, v: object) -> object:
        if isinstance(v, str):
            return normalize_action_kind(v)
        return v


class RuleSpec(BaseModel):
    """A rule creation request."""

    name: str
    description: str = ""
    enabled: bool = True
    triggers: list[TriggerSpec]
    actions: list[ActionSpec]

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rule name must not be blank")
        return v.strip()

    @field_validator("triggers")
    @classmethod
    def _at_least_one_trigger(cls, v: list[TriggerSpec]) -> list[TriggerSpec]:
        if not v:
            raise ValueError("a rule needs at least one trigger")
        return v

    @field_validator("actions")
    @classmethod
    def _at_least_one_action(cls, v: list[ActionSpec]) -> list[ActionSpec]:
        if not v:
            raise ValueError("a rule needs at least one action")
        return v


def validate_rule_spec(data: RuleSpec | Mapping[str, Any]) -> RuleSpec:
    """Validate a rule creation request.

    Args:
        data: A RuleSpec (re-validated, since pydantic models are mutable)
            or a plain mapping such as parsed JSON.

    Returns:
        Validated RuleSpec.

    Raises:
        RuleValidationError: If the name is blank, there are no triggers or
            no actions, or any trigger/action is malformed.
    """
    if isinstance(data, RuleSpec):
        data = data.model_dump(by_alias=True)
    try:
        return RuleSpec.model_validate(data)
    except ValidationError as e:
        raise RuleValidationError(f"Invalid rule: {e}") from e


@dataclass(frozen=True)
class TriggerInfo:
    """A stored trigger.

    ``kind`` is kept as the raw stored text so that rows written with a kind
    outside TriggerKind still load (and simply never match).
    """

    trigger_id: int
    kind: str
    condition: str
    value_text: str | None = None
    value_number: float | None = None

    @property
    def value(self) -> float | str | None:
        if self.value_number is not None:
            return self.value_number
        return self.value_text


@dataclass(frozen=True)
class ActionInfo:
    """A stored action. ``kind`` is raw stored text, see TriggerInfo."""

    action_id: int
    kind: str
    config: dict


@dataclass(frozen=True)
class RuleInfo:
    """A stored rule with its triggers and actions in declaration order."""

    rule_id: str
    name: str
    description: str
    enabled: bool
    execution_count: int
    last_triggered: datetime | None
    created_at: datetime
    updated_at: datetime
    triggers: tuple[TriggerInfo, ...] = ()
    actions: tuple[ActionInfo, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.rule_id,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "execution_count": self.execution_count,
            "last_triggered": (
                self.last_triggered.isoformat() if self.last_triggered else None
            ),
            "created_at": self.created_at.isoformat(),
            "triggers": [
                {"type": t.kind, "condition": t.condition, "value": t.value}
                for t in self.triggers
            ],
            "actions": [{"type": a.kind, "config": a.config} for a in self.actions],
        }

"""TriggerEvaluator -- matches a rule's triggers against a meeting.

A rule fires when ANY of its triggers matches (OR across triggers).
Triggers are never AND-composed.

Per-kind matching:

- keyword / speaker: case-insensitive substring of the transcript.
  ``speaker`` has no per-speaker attribution to work with, so it matches
  the transcript text like ``keyword`` does.
- topic: case-insensitive substring of the summary.
- sentiment: exact equality with ``metadata["sentiment"]``.
- duration: ``metadata["duration"]`` (default 0) compared to the
  trigger value with ``greater_than`` / ``less_than`` / ``equals``.
- action_item: the summary mentions "action", "todo" or "follow up".

Unknown kinds and unknown duration operators never match; they are not
errors.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from meetflow.models.context import MeetingContext
from meetflow.models.rule import DURATION_OPERATORS, TriggerKind

logger = logging.getLogger(__name__)

ACTION_ITEM_MARKERS: tuple[str, ...] = ("action", "todo", "follow up")


class TriggerLike(Protocol):
    """Anything with a kind, a condition and an optional value."""

    @property
    def kind(self) -> object: ...

    @property
    def condition(self) -> str: ...

    @property
    def value(self) -> float | str | None: ...


Matcher = Callable[[TriggerLike, MeetingContext], bool]


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _match_keyword(trigger: TriggerLike, context: MeetingContext) -> bool:
    return _contains(context.transcript, trigger.condition)


def _match_speaker(trigger: TriggerLike, context: MeetingContext) -> bool:
    return _contains(context.transcript, trigger.condition)


def _match_topic(trigger: TriggerLike, context: MeetingContext) -> bool:
    return _contains(context.summary, trigger.condition)


def _match_sentiment(trigger: TriggerLike, context: MeetingContext) -> bool:
    return context.sentiment == trigger.condition


def _match_duration(trigger: TriggerLike, context: MeetingContext) -> bool:
    try:
        threshold = float(trigger.value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    compare = DURATION_OPERATORS.get(trigger.condition)
    if compare is None:
        return False
    return compare(context.duration, threshold)


def _match_action_item(trigger: TriggerLike, context: MeetingContext) -> bool:
    summary = (context.summary or "").lower()
    return any(marker in summary for marker in ACTION_ITEM_MARKERS)


MATCHERS: dict[TriggerKind, Matcher] = {
    TriggerKind.KEYWORD: _match_keyword,
    TriggerKind.SPEAKER: _match_speaker,
    TriggerKind.TOPIC: _match_topic,
    TriggerKind.SENTIMENT: _match_sentiment,
    TriggerKind.DURATION: _match_duration,
    TriggerKind.ACTION_ITEM: _match_action_item,
}


class TriggerEvaluator:
    """Evaluates trigger lists against a MeetingContext.

    Stateless; one instance can be shared across engine passes.
    """

    def __init__(self, matchers: dict[TriggerKind, Matcher] | None = None) -> None:
        self._matchers = dict(MATCHERS if matchers is None else matchers)

    def matches_one(self, trigger: TriggerLike, context: MeetingContext) -> bool:
        """Whether a single trigger matches. Unknown kinds never match."""
        try:
            kind = TriggerKind(getattr(trigger.kind, "value", trigger.kind))
        except ValueError:
            logger.debug("Ignoring trigger with unknown kind %r", trigger.kind)
            return False
        matcher = self._matchers.get(kind)
        if matcher is None:
            return False
        return matcher(trigger, context)

    def matches(self, triggers: Sequence[TriggerLike], context: MeetingContext) -> bool:
        """Whether any trigger in the list matches (OR semantics).

        An empty list never matches.
        """
        return any(self.matches_one(t, context) for t in triggers)

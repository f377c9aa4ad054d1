"""ActionDispatcher -- executes one action for a meeting.

Each ActionKind has a handler taking the action's config mapping and the
MeetingContext and returning a small result dict.  Email, chat message,
calendar event and task handlers produce a descriptive preview rather
than delivering anything; webhook and ai_analysis make real external
calls.

Failures raise ActionError (with the cause chained); the engine turns
them into per-action outcomes.  A webhook that was reached but answered
with an error status is NOT a failure here: it is reported through the
``success`` field of the result.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Protocol

import httpx

from meetflow.exceptions import ActionError, UnknownActionKindError
from meetflow.http import ResilientClient
from meetflow.llm.errors import EmptyCompletionError, LLMClientError
from meetflow.llm.protocols import ChatCompleter
from meetflow.models.context import MeetingContext
from meetflow.models.rule import ActionKind, normalize_action_kind

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_PROMPT = "Analyze this meeting content and provide insights."
WEBHOOK_EVENT = "meeting_processed"

ActionHandler = Callable[[Mapping[str, Any], MeetingContext], dict]


class ActionLike(Protocol):
    """Anything with a kind and a config mapping."""

    @property
    def kind(self) -> object: ...

    @property
    def config(self) -> Mapping[str, Any] | None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionDispatcher:
    """Dispatches actions to their per-kind handlers.

    Args:
        http: Client used by the webhook action.
        chat: Text generation capability used by ai_analysis.  Optional;
            without it ai_analysis actions fail with ActionError.
        analysis_model: Model name passed to ``chat.complete()``.
        clock: Returns the current time (webhook timestamps).
    """

    def __init__(
        self,
        http: ResilientClient,
        chat: ChatCompleter | None = None,
        *,
        analysis_model: str | None = "gpt-4o-mini",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._http = http
        self._chat = chat
        self._analysis_model = analysis_model
        self._clock = clock
        self._handlers: dict[ActionKind, ActionHandler] = {
            ActionKind.EMAIL: self._send_email,
            ActionKind.CHAT_MESSAGE: self._send_chat_message,
            ActionKind.CALENDAR_EVENT: self._create_calendar_event,
            ActionKind.TASK: self._create_task,
            ActionKind.WEBHOOK: self._call_webhook,
            ActionKind.AI_ANALYSIS: self._run_ai_analysis,
        }

    @property
    def handlers(self) -> dict[ActionKind, ActionHandler]:
        return dict(self._handlers)

    def dispatch(self, action: ActionLike, context: MeetingContext) -> dict:
        """Run the handler for ``action.kind`` with ``action.config``.

        Args:
            action: An ActionSpec or stored ActionInfo.  Its kind may be an
                ActionKind or stored text (legacy names accepted).
            context: The meeting being processed.

        Returns:
            The handler's result payload.

        Raises:
            UnknownActionKindError: If the kind is not a known ActionKind.
            ActionError: If the handler fails.
        """
        raw = str(getattr(action.kind, "value", action.kind))
        try:
            action_kind = ActionKind(normalize_action_kind(raw))
        except ValueError:
            raise UnknownActionKindError(raw) from None
        handler = self._handlers.get(action_kind)
        if handler is None:
            raise UnknownActionKindError(action_kind.value)
        return handler(action.config or {}, context)

    # ------------------------------------------------------------------
    # Preview-only notifications
    # ------------------------------------------------------------------

    def _send_email(self, config: Mapping[str, Any], context: MeetingContext) -> dict:
        recipient = config.get("recipient")
        return {
            "action": "email_sent",
            "recipient": recipient,
            "subject": config.get("subject") or "Meeting Follow-up",
            "preview": f"Email would be sent to {recipient} with meeting summary",
        }

    def _send_chat_message(
        self, config: Mapping[str, Any], context: MeetingContext
    ) -> dict:
        channel = config.get("channel")
        return {
            "action": "slack_message_sent",
            "channel": channel,
            "preview": f"Message would be sent to {channel} with meeting highlights",
        }

    def _create_calendar_event(
        self, config: Mapping[str, Any], context: MeetingContext
    ) -> dict:
        return {
            "action": "calendar_event_created",
            "title": config.get("title") or "Follow-up Meeting",
            "preview": "Follow-up meeting would be scheduled based on action items",
        }

    def _create_task(self, config: Mapping[str, Any], context: MeetingContext) -> dict:
        assignee = config.get("assignee")
        return {
            "action": "task_created",
            "title": config.get("title") or "Meeting Follow-up",
            "assignee": assignee,
            "preview": f"Task would be created and assigned to {assignee}",
        }

    # ------------------------------------------------------------------
    # External calls
    # ------------------------------------------------------------------

    def _call_webhook(self, config: Mapping[str, Any], context: MeetingContext) -> dict:
        url = config.get("url")
        if not url or not isinstance(url, str):
            raise ActionError(ActionKind.WEBHOOK.value, "Webhook action requires a 'url'")
        extra_headers = config.get("headers") or {}
        if not isinstance(extra_headers, Mapping):
            raise ActionError(
                ActionKind.WEBHOOK.value, "Webhook 'headers' must be a mapping"
            )
        headers = {"Content-Type": "application/json"}
        headers.update({str(k): str(v) for k, v in extra_headers.items()})
        body = {
            "event": WEBHOOK_EVENT,
            "context": context.model_dump(mode="json"),
            "timestamp": self._clock().isoformat(),
        }
        try:
            response = self._http.post(url, json=body, headers=headers)
        except (httpx.HTTPError, OSError) as exc:
            raise ActionError(
                ActionKind.WEBHOOK.value, f"Webhook failed: {exc}"
            ) from exc

        if not response.is_success:
            logger.warning("Webhook %s answered HTTP %d", url, response.status_code)
        return {
            "action": "webhook_called",
            "status": response.status_code,
            "success": response.is_success,
        }

    def _run_ai_analysis(
        self, config: Mapping[str, Any], context: MeetingContext
    ) -> dict:
        if self._chat is None:
            raise ActionError(
                ActionKind.AI_ANALYSIS.value,
                "AI analysis failed: no chat completer configured",
            )
        messages = [
            {
                "role": "system",
                "content": config.get("analysis_prompt") or DEFAULT_ANALYSIS_PROMPT,
            },
            {
                "role": "user",
                "content": f"Summary: {context.summary}\n\nTranscript: {context.transcript}",
            },
        ]
        try:
            text = self._chat.complete(
                messages,  # type: ignore[arg-type]
                model=config.get("model") or self._analysis_model,
                temperature=0.3,
                max_tokens=500,
            )
        except EmptyCompletionError:
            text = ""
        except (LLMClientError, httpx.HTTPError, OSError) as exc:
            raise ActionError(
                ActionKind.AI_ANALYSIS.value, f"AI analysis failed: {exc}"
            ) from exc
        return {
            "action": "ai_analysis_completed",
            "analysis": text or "No analysis generated",
        }

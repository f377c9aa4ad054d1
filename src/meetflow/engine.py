"""AutomationEngine -- the public entry point for Meetflow.

Ties together rule storage, trigger evaluation and action dispatch.
Callers (typically the pipeline that has just finished processing a
meeting) use ``AutomationEngine.open()``, ``engine.create_rule()`` and
``engine.run_workflows()``.

Not thread-safe.  Each thread should open its own engine; separate
engines share nothing but the persisted rule rows.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Mapping

from sqlalchemy.exc import SQLAlchemyError

from meetflow.actions.dispatcher import ActionDispatcher
from meetflow.exceptions import PersistenceError, RuleNotFoundError
from meetflow.http import ResilientClient
from meetflow.models.config import EngineConfig
from meetflow.models.context import MeetingContext
from meetflow.models.outcome import ActionOutcome, ExecutionOutcome
from meetflow.models.rule import RuleInfo, RuleSpec, validate_rule_spec
from meetflow.storage.engine import create_meetflow_engine, create_session_factory, init_db
from meetflow.storage.sqlite import SqliteRuleRepository
from meetflow.triggers.evaluator import TriggerEvaluator

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from meetflow.llm.protocols import ChatCompleter
    from meetflow.storage.repositories import RuleRepository

logger = logging.getLogger(__name__)

ALL_RULES = "all"


def _utcnow() -> datetime:
    """Naive UTC timestamp for SQLite storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AutomationEngine:
    """Evaluates stored rules against a meeting and runs their actions.

    Build one with :meth:`open` for the full stack, or pass collaborators
    directly (tests do this to inject fakes).
    """

    def __init__(
        self,
        *,
        session: Session,
        repo: RuleRepository,
        dispatcher: ActionDispatcher,
        evaluator: TriggerEvaluator | None = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._session = session
        self._repo = repo
        self._dispatcher = dispatcher
        self._evaluator = evaluator or TriggerEvaluator()
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._owned: list[Callable[[], None]] = []
        self._closed = False

    @classmethod
    def open(
        cls,
        path: str | None = None,
        *,
        config: EngineConfig | None = None,
        chat: ChatCompleter | None = None,
        http: ResilientClient | None = None,
        engine: Engine | None = None,
    ) -> AutomationEngine:
        """Open (or create) a rule store and build the automation stack.

        Args:
            path: SQLite path.  Overrides ``config.db_path``.
            config: Engine configuration.  Field defaults if *None*; the
                environment is only read through EngineConfig.from_env().
            chat: Text generation capability for ai_analysis actions.
                When omitted and the config carries an OpenAI key, the
                built-in OpenAIChatCompleter is used.
            http: Resilient HTTP client.  Built from the config if *None*.
            engine: Pre-built SQLAlchemy engine (takes precedence over
                path and config).

        Returns:
            A ready-to-use ``AutomationEngine``.
        """
        if config is None:
            config = EngineConfig.defaults()
        if path is not None:
            config = config.model_copy(update={"db_path": path})

        owns_engine = engine is None
        if engine is None:
            engine = create_meetflow_engine(config.db_path, url=config.db_url)
        init_db(engine)
        session = create_session_factory(engine)()

        owns_http = http is None
        if http is None:
            http = ResilientClient(
                timeout=config.http_timeout,
                policy=config.retry_policy(),
            )

        if chat is None and config.openai_api_key:
            from meetflow.llm.client import OpenAIChatCompleter

            chat = OpenAIChatCompleter(
                http,
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
                default_model=config.analysis_model,
            )

        dispatcher = ActionDispatcher(
            http, chat, analysis_model=config.analysis_model
        )
        automation = cls(
            session=session,
            repo=SqliteRuleRepository(session),
            dispatcher=dispatcher,
        )
        automation._owned.append(session.close)
        if owns_http:
            automation._owned.append(http.close)
        if owns_engine:
            automation._owned.append(engine.dispose)
        return automation

    # ------------------------------------------------------------------
    # Rule management
    # ------------------------------------------------------------------

    def create_rule(self, spec: RuleSpec | Mapping[str, Any]) -> RuleInfo:
        """Validate and persist a rule with its triggers and actions.

        The rule, its triggers and its actions are written in one
        transaction: either all rows exist afterwards or none do.

        Raises:
            RuleValidationError: If the name is blank or the rule has no
                triggers or no actions.  Nothing is written.
            PersistenceError: If the write fails.  Nothing is written.
        """
        validated = validate_rule_spec(spec)
        rule_id = self._id_factory()
        try:
            info = self._repo.create(rule_id, validated, self._clock())
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to create rule '{validated.name}': {exc}") from exc
        logger.info("Created rule %s (%s)", info.name, info.rule_id)
        return info

    def list_rules(self) -> list[RuleInfo]:
        """All rules in creation order."""
        return self._repo.load_rules(None)

    def get_rule(self, rule_id: str) -> RuleInfo:
        """Get one rule.

        Raises:
            RuleNotFoundError: If no rule has this id.
        """
        info = self._repo.get(rule_id)
        if info is None:
            raise RuleNotFoundError(rule_id)
        return info

    def set_enabled(self, rule_id: str, enabled: bool) -> RuleInfo:
        """Enable or disable a rule. Disabled rules are skipped by every pass.

        Raises:
            RuleNotFoundError: If no rule has this id.
        """
        self._write(lambda: self._repo.set_enabled(rule_id, enabled, self._clock()), rule_id)
        return self.get_rule(rule_id)

    def delete_rule(self, rule_id: str) -> None:
        """Delete a rule with its triggers and actions.

        Raises:
            RuleNotFoundError: If no rule has this id.
        """
        self._write(lambda: self._repo.delete(rule_id), rule_id)

    def _write(self, op: Callable[[], bool], rule_id: str) -> None:
        try:
            found = op()
            if not found:
                self._session.rollback()
                raise RuleNotFoundError(rule_id)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to update rule {rule_id}: {exc}") from exc

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run_workflows(
        self,
        context: MeetingContext | Mapping[str, Any],
        scope: str | None = None,
    ) -> ExecutionOutcome:
        """Run every enabled rule (or one rule) against a meeting.

        For each enabled rule in load order whose triggers match, every
        action runs in declaration order.  An action failure is recorded
        as ``success=False`` on that action and never stops its siblings
        or later rules.  After a fired rule's actions, its execution
        count is bumped by exactly one and last_triggered set.  Disabled
        rules are neither evaluated nor counted.

        Args:
            context: The meeting, as a MeetingContext or plain mapping.
            scope: A rule id to run just that rule; None or ``"all"``
                runs every rule.

        Returns:
            ExecutionOutcome with ``success=True``; per-action failures
            are in ``actions_executed``.

        Raises:
            pydantic.ValidationError: If a mapping context is malformed.
            sqlalchemy.exc.SQLAlchemyError: If loading rules fails.
        """
        if not isinstance(context, MeetingContext):
            context = MeetingContext.model_validate(context)
        rule_id = None if scope in (None, ALL_RULES) else scope

        rules = self._repo.load_rules(rule_id)
        triggered: list[str] = []
        outcomes: list[ActionOutcome] = []

        for rule in rules:
            if not rule.enabled:
                continue
            if not self._evaluator.matches(rule.triggers, context):
                continue

            logger.info("Rule '%s' fired", rule.name)
            triggered.append(rule.name)
            for action in rule.actions:
                outcomes.append(self._run_action(rule, action, context))
            self._record_firing(rule)

        return ExecutionOutcome(
            triggered_workflows=triggered,
            actions_executed=outcomes,
            success=True,
        )

    def run(
        self,
        scope: str | None,
        context: MeetingContext | Mapping[str, Any],
    ) -> ExecutionOutcome:
        """Same as run_workflows() with the scope first."""
        return self.run_workflows(context, scope)

    def _run_action(self, rule: RuleInfo, action: Any, context: MeetingContext) -> ActionOutcome:
        try:
            result = self._dispatcher.dispatch(action, context)
        except Exception as exc:
            logger.warning(
                "Action %s of rule '%s' failed: %s", action.kind, rule.name, exc
            )
            return ActionOutcome(
                action_type=action.kind,
                success=False,
                error=str(exc) or type(exc).__name__,
                rule_name=rule.name,
            )
        return ActionOutcome(
            action_type=action.kind,
            success=True,
            result=result,
            rule_name=rule.name,
        )

    def _record_firing(self, rule: RuleInfo) -> None:
        """Best-effort stats bump; failures are logged, never raised."""
        try:
            self._repo.increment_stats(rule.rule_id, self._clock())
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("Failed to update stats for rule '%s'", rule.name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the session and anything open() created."""
        if self._closed:
            return
        self._closed = True
        for release in self._owned:
            release()
        self._owned.clear()

    def __enter__(self) -> AutomationEngine:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

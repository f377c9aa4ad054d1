"""SQLite implementation of the rule repository.

Uses SQLAlchemy 2.0-style queries (select() / update() + session.execute()).
The repository takes a Session in its constructor and only flushes;
the AutomationEngine owns commit and rollback.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from meetflow.models.rule import ActionInfo, RuleInfo, RuleSpec, TriggerInfo
from meetflow.storage.repositories import RuleRepository
from meetflow.storage.schema import ActionRow, RuleRow, TriggerRow


class SqliteRuleRepository(RuleRepository):
    """SQLite implementation of rule storage.

    load_rules() issues exactly three queries regardless of rule count:
    rules, then triggers and actions batched by the loaded rule ids.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def load_rules(self, rule_id: str | None = None) -> list[RuleInfo]:
        stmt = (
            select(RuleRow)
            .order_by(RuleRow.id)
            .execution_options(populate_existing=True)
        )
        if rule_id is not None:
            stmt = stmt.where(RuleRow.rule_id == rule_id)
        rows = list(self._session.execute(stmt).scalars().all())
        return self._attach(rows)

    def get(self, rule_id: str) -> RuleInfo | None:
        rules = self.load_rules(rule_id)
        return rules[0] if rules else None

    def create(self, rule_id: str, spec: RuleSpec, now: datetime) -> RuleInfo:
        """Stage the rule row plus one row per trigger and action.

        Everything is flushed in the caller's transaction, so a later
        rollback removes all of it.
        """
        self._session.add(
            RuleRow(
                rule_id=rule_id,
                name=spec.name,
                description=spec.description,
                enabled=spec.enabled,
                execution_count=0,
                last_triggered=None,
                created_at=now,
                updated_at=now,
            )
        )
        # Parent row first so the foreign keys resolve.
        self._session.flush()
        for position, trigger in enumerate(spec.triggers):
            value_number = trigger.value if isinstance(trigger.value, float) else None
            value_text = trigger.value if isinstance(trigger.value, str) else None
            self._session.add(
                TriggerRow(
                    rule_id=rule_id,
                    position=position,
                    kind=trigger.kind.value,
                    condition=trigger.condition,
                    value_text=value_text,
                    value_number=value_number,
                )
            )
        for position, action in enumerate(spec.actions):
            self._session.add(
                ActionRow(
                    rule_id=rule_id,
                    position=position,
                    kind=action.kind.value,
                    config_json=dict(action.config),
                )
            )
        self._session.flush()
        created = self.get(rule_id)
        assert created is not None
        return created

    def increment_stats(self, rule_id: str, now: datetime) -> bool:
        stmt = (
            update(RuleRow)
            .where(RuleRow.rule_id == rule_id)
            .values(
                execution_count=RuleRow.execution_count + 1,
                last_triggered=now,
                updated_at=now,
            )
        )
        result = self._session.execute(stmt)
        self._session.flush()
        return result.rowcount > 0

    def set_enabled(self, rule_id: str, enabled: bool, now: datetime) -> bool:
        stmt = (
            update(RuleRow)
            .where(RuleRow.rule_id == rule_id)
            .values(enabled=enabled, updated_at=now)
        )
        result = self._session.execute(stmt)
        self._session.flush()
        return result.rowcount > 0

    def delete(self, rule_id: str) -> bool:
        self._session.execute(delete(TriggerRow).where(TriggerRow.rule_id == rule_id))
        self._session.execute(delete(ActionRow).where(ActionRow.rule_id == rule_id))
        result = self._session.execute(
            delete(RuleRow)
            .where(RuleRow.rule_id == rule_id)
        )
        self._session.flush()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _attach(self, rows: Sequence[RuleRow]) -> list[RuleInfo]:
        """Batch-load triggers and actions for the given rule rows."""
        if not rows:
            return []
        ids = [row.rule_id for row in rows]

        triggers: dict[str, list[TriggerInfo]] = defaultdict(list)
        trigger_stmt = (
            select(TriggerRow)
            .where(TriggerRow.rule_id.in_(ids))
            .order_by(TriggerRow.rule_id, TriggerRow.position)
        )
        for t in self._session.execute(trigger_stmt).scalars():
            triggers[t.rule_id].append(
                TriggerInfo(
                    trigger_id=t.id,
                    kind=t.kind,
                    condition=t.condition,
                    value_text=t.value_text,
                    value_number=t.value_number,
                )
            )

        actions: dict[str, list[ActionInfo]] = defaultdict(list)
        action_stmt = (
            select(ActionRow)
            .where(ActionRow.rule_id.in_(ids))
            .order_by(ActionRow.rule_id, ActionRow.position)
        )
        for a in self._session.execute(action_stmt).scalars():
            actions[a.rule_id].append(
                ActionInfo(action_id=a.id, kind=a.kind, config=dict(a.config_json or {}))
            )

        return [
            RuleInfo(
                rule_id=row.rule_id,
                name=row.name,
                description=row.description,
                enabled=row.enabled,
                execution_count=row.execution_count,
                last_triggered=row.last_triggered,
                created_at=row.created_at,
                updated_at=row.updated_at,
                triggers=tuple(triggers.get(row.rule_id, ())),
                actions=tuple(actions.get(row.rule_id, ())),
            )
            for row in rows
        ]

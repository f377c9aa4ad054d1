"""Result types produced by one automation pass.

Never persisted: an ExecutionOutcome is the direct return value of
``AutomationEngine.run_workflows()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionOutcome:
    """Result of dispatching a single action.

    Exactly one of ``result`` / ``error`` is set.
    """

    action_type: str
    success: bool
    result: Any = None
    error: str | None = None
    rule_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action_type": self.action_type, "success": self.success}
        if self.error is not None:
            data["error"] = self.error
        else:
            data["result"] = self.result
        return data


@dataclass(frozen=True)
class ExecutionOutcome:
    """Aggregate result of one engine pass.

    ``success`` is True whenever the pass completes; individual action
    failures are reported per action in ``actions_executed``.
    """

    triggered_workflows: list[str] = field(default_factory=list)
    actions_executed: list[ActionOutcome] = field(default_factory=list)
    success: bool = True

    @property
    def failed_actions(self) -> list[ActionOutcome]:
        return [a for a in self.actions_executed if not a.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "triggered_workflows": list(self.triggered_workflows),
            "actions_executed": [a.to_dict() for a in self.actions_executed],
        }

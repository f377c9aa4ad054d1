"""Abstract repository interface for rule storage.

No SQLAlchemy imports here -- pure abstract contract.
The concrete implementation is in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from meetflow.models.rule import RuleInfo, RuleSpec


class RuleRepository(ABC):
    """Abstract interface for rule storage operations.

    Implementations write within the caller's transaction; committing or
    rolling back is the caller's job.
    """

    @abstractmethod
    def load_rules(self, rule_id: str | None = None) -> list[RuleInfo]:
        """Load rules with their triggers and actions attached.

        Args:
            rule_id: Restrict to one rule.  None loads every rule.

        Returns rules in creation order; triggers and actions in
        declaration order.
        """
        ...

    @abstractmethod
    def get(self, rule_id: str) -> RuleInfo | None:
        """Get one rule. Returns None if not found."""
        ...

    @abstractmethod
    def create(self, rule_id: str, spec: RuleSpec, now: datetime) -> RuleInfo:
        """Stage a rule with its triggers and actions in the current transaction."""
        ...

    @abstractmethod
    def increment_stats(self, rule_id: str, now: datetime) -> bool:
        """Bump execution_count by one and set last_triggered, in one UPDATE.

        Returns False if the rule does not exist.
        """
        ...

    @abstractmethod
    def set_enabled(self, rule_id: str, enabled: bool, now: datetime) -> bool:
        """Enable or disable a rule. Returns False if the rule does not exist."""
        ...

    @abstractmethod
    def delete(self, rule_id: str) -> bool:
        """Delete a rule with its triggers and actions. Returns False if absent."""
        ...

"""Meetflow exception hierarchy.

All Meetflow-specific exceptions inherit from MeetflowError.
"""


class MeetflowError(Exception):
    """Base exception for all Meetflow errors."""


class RuleValidationError(MeetflowError):
    """Raised when a rule creation request is invalid.

    Named RuleValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """


class RuleNotFoundError(MeetflowError):
    """Raised when a rule id lookup fails."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule not found: {rule_id}")


class ActionError(MeetflowError):
    """Raised when an action fails to execute.

    The underlying cause, if any, is chained via ``__cause__``.
    """

    def __init__(self, action_type: str, message: str) -> None:
        self.action_type = action_type
        super().__init__(message)


class UnknownActionKindError(ActionError):
    """Raised when an action kind is outside the supported set."""

    def __init__(self, action_type: str) -> None:
        super().__init__(action_type, f"Unknown action type: {action_type}")


class PersistenceError(MeetflowError):
    """Raised when writing rule data fails. Partial writes are rolled back."""

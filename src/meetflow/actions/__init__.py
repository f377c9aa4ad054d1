"""Action dispatch -- performs the side effects of a fired rule."""

from meetflow.actions.dispatcher import (
    DEFAULT_ANALYSIS_PROMPT,
    ActionDispatcher,
    ActionHandler,
)

__all__ = [
    "ActionDispatcher",
    "ActionHandler",
    "DEFAULT_ANALYSIS_PROMPT",
]

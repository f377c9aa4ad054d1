"""Trigger evaluation -- decides whether a rule fires for a meeting.

Provides TriggerEvaluator and the per-kind matcher registry.
"""

from meetflow.triggers.evaluator import MATCHERS, TriggerEvaluator

__all__ = [
    "MATCHERS",
    "TriggerEvaluator",
]

"""Errors raised by the goal-progress engine.

All of them derive from :class:`ValueError` so callers validating form
input can catch them the same way they catch a failed ``float()``.
"""

from __future__ import annotations

from typing import Any


class FinanceGoalsError(ValueError):
    """Base class for engine errors."""


class InvalidDateFormat(FinanceGoalsError):
    """A date string is empty or not a valid ``YYYY-MM-DD`` calendar date."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid date (expected YYYY-MM-DD): {value!r}")


class InvalidGoalDefinition(FinanceGoalsError):
    """A goal has a non-positive target, an inverted window or an unknown period."""


class AmortizationUnknownFrequency(FinanceGoalsError):
    """A frequency or period outside the recognized set reached the amortizer."""

    def __init__(self, frequency: Any):
        self.frequency = frequency
        super().__init__(f"Unknown frequency: {frequency!r}")


class InvalidTransaction(FinanceGoalsError):
    """A transaction has a negative amount, bad deduction, type or frequency."""


class InvalidRecurrence(FinanceGoalsError):
    """A recurrence rule cannot be projected (one-time or non-positive amount)."""

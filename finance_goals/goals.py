"""Goal progress evaluation.

Progress is always recomputed from the live transaction set; nothing
computed here is stored on the goal except through an explicit
:func:`close_period` / :func:`roll_over` call.

Daily goals are measured as an amortized daily rate: each in-window
income with a recurring frequency contributes its daily equivalent
(a monthly salary of 3000 counts as 100 per day), while a one-time
income counts in full only on the day it was received. The number of
effective days (days elapsed minus off days) is reported alongside but
is not used as a divisor, since every contribution is already a rate.

Weekly, monthly and yearly goals accumulate the plain net amounts
collected inside the window.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .amortization import ONE_TIME, amortize_series
from .dates import DateLike, add_days, count_dates_in_range, days_between_inclusive, parse_date, today
from .exceptions import InvalidGoalDefinition
from .ledger import select_in_window, sub_period_mask, transactions_frame
from .models import GOAL_PERIODS, Goal, GoalProgress, Transaction

logger = logging.getLogger(__name__)


def validate_goal(goal: Goal) -> None:
    """Reject goals that cannot be evaluated.

    Raises:
        InvalidGoalDefinition: If the period is unknown, the target is not
            positive, the carried deficit is negative or the window ends
            before it starts.
    """
    if goal.period not in GOAL_PERIODS:
        raise InvalidGoalDefinition(f"Unknown goal period: {goal.period!r}")
    if not goal.target_amount > 0:
        raise InvalidGoalDefinition("Target amount must be positive.")
    if (goal.accumulated_deficit or 0) < 0:
        raise InvalidGoalDefinition("Accumulated deficit cannot be negative.")
    if goal.end_date is not None and goal.end_date < goal.start_date:
        raise InvalidGoalDefinition("End date cannot be earlier than start date.")


def _reference(reference_date: Optional[DateLike]) -> date:
    return parse_date(reference_date) if reference_date is not None else today()


def effective_days(goal: Goal, reference_date: Optional[DateLike] = None) -> Tuple[int, int, int]:
    """Return ``(effective, excluded, total)`` day counts for the goal.

    Days are counted from the start date through the reference date, or
    through the end date when the window has already closed. Off days in
    that span are excluded; the result never drops below one so that a
    goal evaluated on its first day still has a day to measure.
    """
    horizon = _reference(reference_date)
    if goal.end_date is not None and goal.end_date < horizon:
        horizon = goal.end_date

    total = days_between_inclusive(goal.start_date, horizon)
    excluded = count_dates_in_range(goal.off_days, goal.start_date, horizon) if total else 0
    return max(1, total - excluded), excluded, total


def _daily_metric(frame: pd.DataFrame, reference: date) -> float:
    # one-time income only counts on the day it was received
    one_time = frame['Frequency'] == ONE_TIME
    on_reference_day = frame['Transaction Date'] == pd.Timestamp(reference)
    counted = frame[~one_time | on_reference_day]
    if counted.empty:
        return 0.0
    return float(amortize_series(counted['Net Amount'], counted['Frequency'], 'daily').sum())


def evaluate(
    goal: Goal,
    transactions: Sequence[Transaction],
    reference_date: Optional[DateLike] = None,
) -> GoalProgress:
    """Measure a goal against the ledger as of ``reference_date`` (default: today).

    Args:
        goal: The goal to evaluate. It is validated first.
        transactions: The owner's full ledger; it is never modified.
        reference_date: The day progress is measured on.

    Returns:
        A :class:`GoalProgress` with the metric, percentage of the
        effective target (target plus carried deficit), on-track flag and
        remaining deficit.

    Example:
        >>> progress = evaluate(goal, ledger, '2024-01-31')
        >>> progress.on_track
        False
    """
    validate_goal(goal)
    reference = _reference(reference_date)

    in_window = transactions_frame(select_in_window(transactions, goal))
    if goal.period == 'daily':
        metric = _daily_metric(in_window, reference)
    else:
        metric = float(in_window['Net Amount'].sum())

    current_period = in_window[sub_period_mask(in_window, goal.period, reference)]
    effective, excluded, _ = effective_days(goal, reference)

    target = goal.effective_target
    progress_percent = (metric / target) * 100 if target > 0 else 0.0
    deficit = max(0.0, target - metric)

    logger.debug(
        "goal %s (%s): metric=%.2f target=%.2f on %s",
        goal.id, goal.period, metric, target, reference,
    )
    return GoalProgress(
        goal_id=goal.id,
        metric_value=metric,
        effective_target=target,
        progress_percent=progress_percent,
        on_track=metric >= target,
        deficit=deficit,
        effective_days=effective,
        excluded_days=excluded,
        current_period_amount=float(current_period['Net Amount'].sum()),
        transaction_count=len(in_window),
    )


def evaluate_all(
    goals: Sequence[Goal],
    transactions: Sequence[Transaction],
    reference_date: Optional[DateLike] = None,
) -> List[GoalProgress]:
    reference = _reference(reference_date)
    return [evaluate(goal, transactions, reference) for goal in goals]


def close_period(goal: Goal, metric_value_at_close: float) -> float:
    """Deficit to carry into the next period when the current one is closed."""
    return max(0.0, goal.effective_target - metric_value_at_close)


def roll_over(
    goal: Goal,
    transactions: Sequence[Transaction],
    reference_date: Optional[DateLike] = None,
    next_start: Optional[DateLike] = None,
    next_end: Optional[DateLike] = None,
) -> Goal:
    """Close the goal's current period and return the goal for the next one.

    The shortfall measured on ``reference_date`` becomes the new
    accumulated deficit and the window moves to ``[next_start, next_end]``.
    ``next_start`` defaults to the day after the reference date; ``next_end``
    defaults to a window of the same length when the goal had an end date,
    and to an open window otherwise. The input goal is left untouched.

    A goal whose window opens after ``reference_date`` has no period to
    close yet and is returned unchanged, so closing twice on the same day
    does not charge the same shortfall again.
    """
    reference = _reference(reference_date)
    validate_goal(goal)
    if reference < goal.start_date:
        logger.info("goal %s: period starting %s not open on %s", goal.id, goal.start_date, reference)
        return goal

    progress = evaluate(goal, transactions, reference)
    start = parse_date(next_start) if next_start is not None else add_days(reference, 1)
    if next_end is not None:
        end = parse_date(next_end)
    elif goal.end_date is not None:
        end = add_days(start, (goal.end_date - goal.start_date).days)
    else:
        end = None

    updated = replace(
        goal,
        accumulated_deficit=close_period(goal, progress.metric_value),
        start_date=start,
        end_date=end,
    )
    validate_goal(updated)
    logger.info(
        "closed period for goal %s: carrying deficit %.2f", goal.id, updated.accumulated_deficit
    )
    return updated


def toggle_off_day(goal: Goal, day: DateLike) -> Goal:
    """Mark ``day`` as an off day, or unmark it if it already is one."""
    day = parse_date(day)
    return replace(goal, off_days=goal.off_days ^ frozenset([day]))


def progress_frame(
    goals: Sequence[Goal],
    transactions: Sequence[Transaction],
    reference_date: Optional[DateLike] = None,
    progress: Optional[Sequence[GoalProgress]] = None,
) -> pd.DataFrame:
    """One row per goal with its live progress, for tables and charts.

    Pass ``progress`` when the goals were already evaluated to reuse
    those results instead of evaluating again.
    """
    if progress is None:
        progress = evaluate_all(goals, transactions, reference_date)
    rows = []
    for goal, result in zip(goals, progress):
        row = {'name': goal.name, 'period': goal.period, 'target_amount': goal.target_amount}
        row.update(result.to_dict())
        rows.append(row)
    return pd.DataFrame(rows)

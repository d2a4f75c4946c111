"""Spread recurring amounts across goal periods.

A monthly salary recorded once should count as a steady per-day income
for a daily goal instead of satisfying it only on pay day. Amounts are
first reduced to a daily-equivalent rate using fixed divisors and then
scaled to the target period's day count. One-time amounts are already
realized on their date and are never divided.
"""

from __future__ import annotations

from typing import Dict, Iterable

import numpy as np
import pandas as pd

from .exceptions import AmortizationUnknownFrequency

ONE_TIME = 'one-time'

FREQUENCY_DIVISORS: Dict[str, int] = {
    'daily': 1,
    'weekly': 7,
    'bi-weekly': 15,
    'monthly': 30,
    'yearly': 365,
}

PERIOD_DAYS: Dict[str, int] = {
    'daily': 1,
    'weekly': 7,
    'monthly': 30,
    'yearly': 365,
}


def _check_target(target_period: str) -> int:
    try:
        return PERIOD_DAYS[target_period]
    except (KeyError, TypeError):
        raise AmortizationUnknownFrequency(target_period) from None


def amortize(amount: float, source_frequency: str, target_period: str) -> float:
    """Convert ``amount`` tagged with ``source_frequency`` to ``target_period``.

    Args:
        amount: Net amount of the transaction.
        source_frequency: Recurrence class of the record (``'one-time'``,
            ``'daily'``, ``'weekly'``, ``'bi-weekly'``, ``'monthly'``, ``'yearly'``).
        target_period: Goal period (``'daily'``, ``'weekly'``, ``'monthly'``, ``'yearly'``).

    Returns:
        The equivalent amount for one ``target_period``. One-time amounts
        are returned unscaled.

    Raises:
        AmortizationUnknownFrequency: If either frequency is not recognized.

    Example:
        >>> amortize(3000, 'monthly', 'daily')
        100.0
    """
    target_days = _check_target(target_period)
    if source_frequency == ONE_TIME:
        return float(amount)
    divisor = FREQUENCY_DIVISORS.get(source_frequency)
    if divisor is None:
        raise AmortizationUnknownFrequency(source_frequency)
    return float(amount) / divisor * target_days


def daily_rate(amount: float, frequency: str) -> float:
    return amortize(amount, frequency, 'daily')


def amortize_series(amounts: Iterable[float], frequencies: Iterable[str], target_period: str) -> pd.Series:
    """Vectorised :func:`amortize` over aligned amount/frequency columns."""
    target_days = _check_target(target_period)
    amounts = pd.Series(amounts, dtype=float)
    frequencies = pd.Series(list(frequencies), index=amounts.index, dtype=object)

    known = frequencies.isin(FREQUENCY_DIVISORS.keys()) | (frequencies == ONE_TIME)
    if not known.all():
        raise AmortizationUnknownFrequency(frequencies[~known].iloc[0])

    divisors = frequencies.map(FREQUENCY_DIVISORS).astype(float)
    scaled = amounts / divisors * target_days
    return pd.Series(
        np.where(frequencies == ONE_TIME, amounts, scaled),
        index=amounts.index,
        dtype=float,
    )

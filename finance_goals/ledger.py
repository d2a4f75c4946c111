"""Ledger selection and aggregation.

The ledger is handed over as a sequence of :class:`~finance_goals.models.Transaction`
records. Selection is done on a pandas frame built from that sequence
whose index is the position of each record, so results map straight back
to the caller's objects without copying or mutating them.

Only ``income`` transactions count toward goals: goals model "earn at
least X", not spending caps. Expenses still feed the dashboard summaries.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import pandas as pd

from .dates import DateLike, parse_date
from .exceptions import AmortizationUnknownFrequency
from .models import Goal, Transaction

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    'id',
    'Transaction Date',
    'Type',
    'Category',
    'Color',
    'Description',
    'Gross Amount',
    'Net Amount',
    'Frequency',
]

_PERIOD_FREQ = {
    'daily': 'D',
    'weekly': 'W',   # Monday-Sunday, same as the ISO week
    'monthly': 'M',
    'yearly': 'Y',
}


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Build a frame with one row per transaction, indexed by position."""
    rows = [
        {
            'id': t.id,
            'Transaction Date': t.date,
            'Type': t.type,
            'Category': t.category,
            'Color': t.color,
            'Description': t.description,
            'Gross Amount': t.gross_amount,
            'Net Amount': t.net_amount,
            'Frequency': t.frequency,
        }
        for t in transactions
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame['Transaction Date'] = pd.to_datetime(frame['Transaction Date'])
    frame['Net Amount'] = pd.to_numeric(frame['Net Amount']).astype(float)
    frame['Gross Amount'] = pd.to_numeric(frame['Gross Amount']).astype(float)
    return frame


def _pick(transactions: Sequence[Transaction], index: pd.Index) -> List[Transaction]:
    return [transactions[i] for i in index]


def window_mask(frame: pd.DataFrame, goal: Goal) -> pd.Series:
    """Boolean mask of income rows dated inside the goal's window."""
    dates = frame['Transaction Date']
    mask = (frame['Type'] == 'income') & (dates >= pd.Timestamp(goal.start_date))
    if goal.end_date is not None:
        mask &= dates <= pd.Timestamp(goal.end_date)
    return mask


def select_in_window(transactions: Sequence[Transaction], goal: Goal) -> List[Transaction]:
    """Income transactions dated within ``[goal.start_date, goal.end_date]``.

    An unset end date leaves the window open. The result keeps the input
    order but callers that need chronological order must sort it.
    """
    transactions = list(transactions)
    if not transactions:
        return []
    frame = transactions_frame(transactions)
    selected = frame[window_mask(frame, goal)]
    logger.debug("goal %s: %d of %d transactions in window", goal.id, len(selected), len(frame))
    return _pick(transactions, selected.index)


def sub_period_mask(frame: pd.DataFrame, period: str, reference_date: DateLike) -> pd.Series:
    freq = _PERIOD_FREQ.get(period)
    if freq is None:
        raise AmortizationUnknownFrequency(period)
    reference = pd.Period(pd.Timestamp(parse_date(reference_date)), freq=freq)
    if frame.empty:
        return pd.Series(False, index=frame.index, dtype=bool)
    return frame['Transaction Date'].dt.to_period(freq) == reference


def select_current_sub_period(
    transactions: Sequence[Transaction],
    period: str,
    reference_date: DateLike,
) -> List[Transaction]:
    """Transactions in the same day / ISO week / month / year as ``reference_date``."""
    transactions = list(transactions)
    if not transactions:
        return []
    frame = transactions_frame(transactions)
    return _pick(transactions, frame[sub_period_mask(frame, period, reference_date)].index)


def ledger_summary(transactions: Sequence[Transaction]) -> Dict[str, float]:
    """Totals shown on the dashboard KPI cards."""
    frame = transactions_frame(list(transactions))
    income = float(frame.loc[frame['Type'] == 'income', 'Net Amount'].sum())
    expenses = float(frame.loc[frame['Type'] == 'expense', 'Net Amount'].sum())
    net_balance = income - expenses
    savings_rate = (net_balance / income * 100) if income > 0 else 0.0

    return {
        'total_income': income,
        'total_expenses': expenses,
        'net_balance': net_balance,
        'savings_rate': savings_rate,
        'transaction_count': len(frame),
    }


def expenses_by_category(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Expense totals per category with the colour of its first record."""
    frame = transactions_frame(list(transactions))
    expenses = frame[frame['Type'] == 'expense']
    if expenses.empty:
        return pd.DataFrame(columns=['Category', 'Amount', 'Color'])

    grouped = expenses.groupby('Category', sort=False).agg(
        Amount=('Net Amount', 'sum'),
        Color=('Color', 'first'),
    )
    return grouped.reset_index().sort_values('Amount', ascending=False).reset_index(drop=True)


def category_colors(transactions: Sequence[Transaction]) -> Dict[str, str]:
    """Most used colour per category; ties go to the colour seen first."""
    frame = transactions_frame(list(transactions))
    if frame.empty:
        return {}
    counts = frame.groupby(['Category', 'Color'], sort=False).size()
    result: Dict[str, str] = {}
    for category, group in counts.groupby(level=0, sort=False):
        result[category] = group.idxmax()[1]
    return result


def monthly_breakdown(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Income, expenses and net flow per calendar month."""
    frame = transactions_frame(list(transactions))
    if frame.empty:
        return pd.DataFrame(columns=['Month', 'Income', 'Expenses', 'Net'])

    frame['Month'] = frame['Transaction Date'].dt.to_period('M').astype(str)
    pivot = frame.pivot_table(
        index='Month', columns='Type', values='Net Amount', aggfunc='sum', fill_value=0.0
    )
    monthly = pd.DataFrame({
        'Income': pivot.get('income', pd.Series(0.0, index=pivot.index)),
        'Expenses': pivot.get('expense', pd.Series(0.0, index=pivot.index)),
    })
    monthly['Net'] = monthly['Income'] - monthly['Expenses']
    monthly.index.name = 'Month'
    return monthly.sort_index().reset_index()


def recent_transactions(transactions: Sequence[Transaction], limit: int = 5) -> List[Transaction]:
    return sorted(transactions, key=lambda t: (t.date, t.created_at), reverse=True)[:limit]

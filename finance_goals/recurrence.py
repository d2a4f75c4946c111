"""Recurrence rule projection and materialization.

Everything here is a pure computation: the storage collaborator is
responsible for persisting the transactions produced by :func:`check_due`
and the advanced ``next_payment_date`` values, and for making sure the
same rule is not checked and persisted twice concurrently.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from .config import RECURRING_TRANSACTION_COLOR
from .dates import DateLike, add_months, add_years, format_date, parse_date, today
from .exceptions import InvalidRecurrence
from .models import (
    RECURRING_FREQUENCIES,
    DueCheck,
    Recurrence,
    Transaction,
    validate_transaction,
)

logger = logging.getLogger(__name__)

DAY_INTERVALS = {
    'daily': 1,
    'weekly': 7,
    'bi-weekly': 15,
}

# a rule checked after a long gap never produces more than this many rows
MAX_CATCH_UP_OCCURRENCES = 400


def next_occurrence(d: DateLike, frequency: str) -> date:
    """Return the occurrence following ``d`` for a recurring ``frequency``.

    Monthly and yearly steps keep the day of month and clamp it to the
    last day of a shorter month: ``2024-01-31`` is followed by
    ``2024-02-29``, and ``2024-02-29`` yearly by ``2025-02-28``.

    Raises:
        InvalidRecurrence: For ``'one-time'`` or any unknown frequency.
    """
    d = parse_date(d)
    if frequency in DAY_INTERVALS:
        return d + timedelta(days=DAY_INTERVALS[frequency])
    if frequency == 'monthly':
        return add_months(d, 1)
    if frequency == 'yearly':
        return add_years(d, 1)
    raise InvalidRecurrence(f"Cannot project frequency {frequency!r}")


def validate_recurrence(recurrence: Recurrence) -> None:
    """Reject rules that cannot be projected or stored without clashing.

    The id keys both the advanced next dates and the ids of materialized
    transactions, so a rule without one is rejected.
    """
    if not recurrence.id:
        raise InvalidRecurrence("Recurrence rule must have an id.")
    if recurrence.frequency not in RECURRING_FREQUENCIES:
        raise InvalidRecurrence(f"Frequency must be one of {RECURRING_FREQUENCIES}: {recurrence.frequency!r}")
    if recurrence.amount <= 0:
        raise InvalidRecurrence("Amount must be positive.")


def _default_description(recurrence: Recurrence) -> str:
    return f"Recurring: {recurrence.name}" if recurrence.name else "Recurring"


def _materialize_on(recurrence: Recurrence, on: date) -> Transaction:
    txn = Transaction(
        id=f"{recurrence.id}:{format_date(on)}",
        owner_id=recurrence.owner_id,
        type=recurrence.type,
        category=recurrence.category,
        gross_amount=float(recurrence.amount),
        net_amount=float(recurrence.amount),
        date=on,
        frequency=recurrence.frequency,
        deduction_percentage=0.0,
        description=recurrence.description or _default_description(recurrence),
        color=RECURRING_TRANSACTION_COLOR,
        is_recurring_rule=False,
        recurrence_id=recurrence.id,
    )
    validate_transaction(txn)
    return txn


def materialize(recurrence: Recurrence) -> Transaction:
    """Build the transaction for the rule's pending ``next_payment_date``.

    The id combines the rule id and the date so that storing the same
    occurrence twice can be rejected by a uniqueness constraint.
    """
    validate_recurrence(recurrence)
    return _materialize_on(recurrence, recurrence.next_payment_date)


def check_due(
    recurrences: Iterable[Recurrence],
    reference_date: Optional[DateLike] = None,
    catch_up: bool = False,
) -> DueCheck:
    """Select active rules whose next payment date is on or before ``reference_date``.

    By default each due rule produces one transaction and advances by one
    step. With ``catch_up`` every missed occurrence up to the reference
    date is materialized and the rule advances past it.
    """
    ref = parse_date(reference_date) if reference_date is not None else today()
    result = DueCheck()

    for rule in recurrences:
        if not rule.active or rule.next_payment_date > ref:
            continue
        validate_recurrence(rule)

        pending = rule.next_payment_date
        occurrences = [pending]
        pending = next_occurrence(pending, rule.frequency)
        while catch_up and pending <= ref and len(occurrences) < MAX_CATCH_UP_OCCURRENCES:
            occurrences.append(pending)
            pending = next_occurrence(pending, rule.frequency)

        result.to_materialize.append(rule)
        result.transactions.extend(_materialize_on(rule, d) for d in occurrences)
        result.updated_next_dates[rule.id] = pending

    logger.debug(
        "%d recurrences due on %s (%d transactions)",
        len(result.to_materialize), ref, len(result.transactions),
    )
    return result


def recurrence_from_transaction(
    transaction: Transaction,
    name: str = '',
    rule_id: Optional[str] = None,
) -> Tuple[Transaction, Recurrence]:
    """Create the recurrence rule a transaction spawns when recurrence is enabled.

    Returns the transaction flagged as the rule's origin together with the
    new rule, whose first pending date is the occurrence after the
    transaction's own date (that one is already recorded). A random id is
    assigned when ``rule_id`` is not given.
    """
    if transaction.frequency not in RECURRING_FREQUENCIES:
        raise InvalidRecurrence("Only transactions with a recurring frequency can spawn a rule.")

    rule = Recurrence(
        id=rule_id or uuid.uuid4().hex,
        owner_id=transaction.owner_id,
        type=transaction.type,
        category=transaction.category,
        amount=transaction.gross_amount,
        frequency=transaction.frequency,
        next_payment_date=next_occurrence(transaction.date, transaction.frequency),
        active=True,
        description=transaction.description,
        name=name or transaction.category,
    )
    validate_recurrence(rule)
    return replace(transaction, is_recurring_rule=True), rule


def upcoming(recurrences: Iterable[Recurrence], start: DateLike, end: DateLike) -> List[Tuple[date, Recurrence]]:
    """Projected ``(date, rule)`` pairs for active rules within ``[start, end]``, by date."""
    start, end = parse_date(start), parse_date(end)
    result: List[Tuple[date, Recurrence]] = []
    for rule in recurrences:
        if not rule.active:
            continue
        validate_recurrence(rule)
        current = rule.next_payment_date
        while current <= end:
            if current >= start:
                result.append((current, rule))
            current = next_occurrence(current, rule.frequency)
    result.sort(key=lambda pair: pair[0])
    return result

"""Plain data records for transactions, goals and recurrence rules.

The records mirror the documents kept by the storage collaborator. Field
names are snake_case in Python; :meth:`to_dict` / :meth:`from_dict` use
the camelCase keys of the persisted documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, List, Optional

from .dates import format_date, parse_date, parse_optional_date
from .exceptions import InvalidTransaction

TRANSACTION_TYPES = ('income', 'expense')
FREQUENCIES = ('one-time', 'daily', 'weekly', 'bi-weekly', 'monthly', 'yearly')
RECURRING_FREQUENCIES = ('daily', 'weekly', 'bi-weekly', 'monthly', 'yearly')
GOAL_PERIODS = ('daily', 'weekly', 'monthly', 'yearly')

DEFAULT_COLOR = '#888888'


@dataclass
class Transaction:
    id: Optional[str]
    owner_id: str
    type: str               # 'income' | 'expense'
    category: str
    gross_amount: float
    net_amount: float       # the only amount used in goal math
    date: date
    frequency: str = 'one-time'
    deduction_percentage: float = 0.0
    description: str = ''
    color: str = DEFAULT_COLOR
    is_recurring_rule: bool = False
    recurrence_id: Optional[str] = None
    created_at: str = ''
    updated_at: str = ''

    @property
    def deduction_amount(self) -> float:
        return self.gross_amount - self.net_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.owner_id,
            'type': self.type,
            'category': self.category,
            'description': self.description,
            'grossAmount': self.gross_amount,
            'deductionPercentage': self.deduction_percentage,
            'netAmount': self.net_amount,
            'color': self.color,
            'date': format_date(self.date),
            'frequency': self.frequency,
            'isRecurringRule': self.is_recurring_rule,
            'recurrenceId': self.recurrence_id,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        gross = float(data.get('grossAmount', 0.0))
        deduction = float(data.get('deductionPercentage') or 0.0)
        net = data.get('netAmount')
        txn = cls(
            id=data.get('id'),
            owner_id=data.get('userId', ''),
            type=data.get('type', ''),
            category=data.get('category', ''),
            gross_amount=gross,
            net_amount=float(net) if net is not None else net_from_gross(gross, deduction),
            date=parse_date(data.get('date', '')),
            frequency=data.get('frequency') or 'one-time',
            deduction_percentage=deduction,
            description=data.get('description', ''),
            color=data.get('color') or DEFAULT_COLOR,
            is_recurring_rule=bool(data.get('isRecurringRule', False)),
            recurrence_id=data.get('recurrenceId'),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )
        validate_transaction(txn)
        return txn


@dataclass
class Goal:
    id: Optional[str]
    owner_id: str
    name: str
    target_amount: float
    period: str             # 'daily' | 'weekly' | 'monthly' | 'yearly'
    start_date: date
    end_date: Optional[date] = None
    accumulated_deficit: float = 0.0
    off_days: FrozenSet[date] = field(default_factory=frozenset)
    icon: str = ''

    @property
    def effective_target(self) -> float:
        return self.target_amount + (self.accumulated_deficit or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.owner_id,
            'name': self.name,
            'targetAmount': self.target_amount,
            'period': self.period,
            'startDate': format_date(self.start_date),
            'endDate': format_date(self.end_date) if self.end_date else None,
            'accumulatedDeficit': self.accumulated_deficit,
            'offDays': sorted(format_date(d) for d in self.off_days),
            'icon': self.icon,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Goal':
        return cls(
            id=data.get('id'),
            owner_id=data.get('userId', ''),
            name=data.get('name', ''),
            target_amount=float(data.get('targetAmount', 0.0)),
            period=data.get('period', ''),
            start_date=parse_date(data.get('startDate', '')),
            end_date=parse_optional_date(data.get('endDate')),
            accumulated_deficit=float(data.get('accumulatedDeficit') or 0.0),
            off_days=frozenset(parse_date(d) for d in data.get('offDays') or []),
            icon=data.get('icon', ''),
        )


@dataclass
class Recurrence:
    id: Optional[str]
    owner_id: str
    type: str               # 'income' | 'expense'
    category: str
    amount: float           # gross base amount
    frequency: str          # never 'one-time'
    next_payment_date: date
    active: bool = True
    description: str = ''
    name: str = ''
    created_at: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.owner_id,
            'type': self.type,
            'name': self.name,
            'category': self.category,
            'description': self.description,
            'amount': self.amount,
            'frequency': self.frequency,
            'nextPaymentDate': format_date(self.next_payment_date),
            'active': self.active,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recurrence':
        return cls(
            id=data.get('id'),
            owner_id=data.get('userId', ''),
            type=data.get('type', ''),
            category=data.get('category', ''),
            amount=float(data.get('amount', 0.0)),
            frequency=data.get('frequency', ''),
            next_payment_date=parse_date(data.get('nextPaymentDate', '')),
            active=bool(data.get('active', True)),
            description=data.get('description') or '',
            name=data.get('name', ''),
            created_at=data.get('createdAt', ''),
        )


@dataclass
class GoalProgress:
    """Live progress of one goal; recomputed on every evaluation, never stored."""

    goal_id: Optional[str]
    metric_value: float
    effective_target: float
    progress_percent: float
    on_track: bool
    deficit: float
    effective_days: int
    excluded_days: int
    current_period_amount: float = 0.0
    transaction_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'goal_id': self.goal_id,
            'metric_value': self.metric_value,
            'effective_target': self.effective_target,
            'progress_percent': self.progress_percent,
            'on_track': self.on_track,
            'deficit': self.deficit,
            'effective_days': self.effective_days,
            'excluded_days': self.excluded_days,
            'current_period_amount': self.current_period_amount,
            'transaction_count': self.transaction_count,
        }


@dataclass
class DueCheck:
    """Result of checking recurrence rules against a reference date."""

    to_materialize: List[Recurrence] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    updated_next_dates: Dict[str, date] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.to_materialize


def net_from_gross(gross_amount: float, deduction_percentage: float = 0.0) -> float:
    """Net amount after a percentage deduction (e.g. withheld tax)."""
    if not deduction_percentage:
        return float(gross_amount)
    return float(gross_amount) * (1 - float(deduction_percentage) / 100)


def validate_transaction(txn: Transaction) -> None:
    if txn.type not in TRANSACTION_TYPES:
        raise InvalidTransaction(f"Type must be one of {TRANSACTION_TYPES}: {txn.type!r}")
    if txn.frequency not in FREQUENCIES:
        raise InvalidTransaction(f"Unknown frequency: {txn.frequency!r}")
    if txn.gross_amount < 0 or txn.net_amount < 0:
        raise InvalidTransaction("Amounts must be non-negative.")
    if not 0 <= txn.deduction_percentage <= 100:
        raise InvalidTransaction("Deduction percentage must be between 0 and 100.")


def build_transaction(
    *,
    owner_id: str,
    type_: str,
    category: str,
    gross_amount: float,
    date: Any,
    deduction_percentage: float = 0.0,
    frequency: str = 'one-time',
    description: str = '',
    color: str = DEFAULT_COLOR,
    id: Optional[str] = None,
) -> Transaction:
    """Create a validated transaction, deriving the net amount from the deduction."""
    txn = Transaction(
        id=id,
        owner_id=owner_id,
        type=type_,
        category=category,
        gross_amount=float(gross_amount),
        net_amount=net_from_gross(gross_amount, deduction_percentage),
        date=parse_date(date),
        frequency=frequency,
        deduction_percentage=float(deduction_percentage or 0.0),
        description=description,
        color=color,
    )
    validate_transaction(txn)
    return txn

from datetime import date

import pytest

from finance_goals.exceptions import InvalidDateFormat, InvalidTransaction
from finance_goals.models import (
    DEFAULT_COLOR,
    Goal,
    Recurrence,
    Transaction,
    build_transaction,
    net_from_gross,
)


def _build_kwargs(**overrides):
    kwargs = dict(
        owner_id='u1',
        type_='income',
        category='Salary',
        gross_amount=1000,
        date='2024-01-15',
    )
    kwargs.update(overrides)
    return kwargs


def test_net_from_gross():
    assert net_from_gross(1000) == 1000.0
    assert net_from_gross(1000, 20) == pytest.approx(800.0)
    assert net_from_gross(1000, 100) == 0.0


def test_build_transaction_applies_deduction():
    txn = build_transaction(**_build_kwargs(deduction_percentage=12.5))
    assert txn.net_amount == pytest.approx(875.0)
    assert txn.deduction_amount == pytest.approx(125.0)
    assert txn.date == date(2024, 1, 15)
    assert txn.frequency == 'one-time'
    assert txn.is_recurring_rule is False


@pytest.mark.parametrize('overrides', [
    {'gross_amount': -1},
    {'deduction_percentage': 120},
    {'deduction_percentage': -5},
    {'type_': 'transfer'},
    {'frequency': 'hourly'},
])
def test_build_transaction_rejects_invalid_input(overrides):
    with pytest.raises(InvalidTransaction):
        build_transaction(**_build_kwargs(**overrides))


def test_build_transaction_rejects_bad_date():
    with pytest.raises(InvalidDateFormat):
        build_transaction(**_build_kwargs(date='15/01/2024'))


def test_transaction_from_dict_derives_missing_net_amount():
    txn = Transaction.from_dict({
        'id': 't1',
        'userId': 'u1',
        'type': 'income',
        'category': 'Freelance',
        'grossAmount': 500,
        'deductionPercentage': 10,
        'date': '2024-02-01',
        'frequency': 'weekly',
    })
    assert txn.net_amount == pytest.approx(450.0)
    assert txn.color == DEFAULT_COLOR
    assert txn.frequency == 'weekly'


def test_transaction_from_dict_rejects_malformed_date():
    with pytest.raises(InvalidDateFormat):
        Transaction.from_dict({'type': 'income', 'grossAmount': 1, 'date': ''})


def test_transaction_dict_round_trip():
    txn = build_transaction(**_build_kwargs(id='t9', frequency='monthly', description='Pay'))
    data = txn.to_dict()
    assert data['date'] == '2024-01-15'
    assert data['netAmount'] == 1000.0
    assert Transaction.from_dict(data) == txn


def test_goal_dict_uses_sorted_off_day_strings():
    goal = Goal(
        id='g1',
        owner_id='u1',
        name='Daily grind',
        target_amount=100,
        period='daily',
        start_date=date(2024, 1, 1),
        off_days=frozenset({date(2024, 1, 7), date(2024, 1, 6)}),
        icon='💪',
    )
    data = goal.to_dict()
    assert data['offDays'] == ['2024-01-06', '2024-01-07']
    assert data['endDate'] is None
    assert Goal.from_dict(data) == goal


def test_goal_effective_target():
    goal = Goal(id=None, owner_id='u1', name='x', target_amount=100, period='weekly',
                start_date=date(2024, 1, 1), accumulated_deficit=25)
    assert goal.effective_target == 125


def test_recurrence_from_dict():
    rule = Recurrence.from_dict({
        'id': 'r1',
        'userId': 'u1',
        'type': 'expense',
        'category': 'Housing',
        'amount': 1200,
        'frequency': 'monthly',
        'nextPaymentDate': '2024-03-01',
    })
    assert rule.active is True
    assert rule.next_payment_date == date(2024, 3, 1)
    assert rule.to_dict()['nextPaymentDate'] == '2024-03-01'

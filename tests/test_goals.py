from datetime import date, timedelta

import pytest

from finance_goals.exceptions import InvalidGoalDefinition
from finance_goals.goals import (
    close_period,
    effective_days,
    evaluate,
    evaluate_all,
    progress_frame,
    roll_over,
    toggle_off_day,
    validate_goal,
)
from finance_goals.models import Goal, Transaction


def _build_txn(tx_id, day, amount, type_='income', frequency='one-time'):
    return Transaction(
        id=tx_id,
        owner_id='u1',
        type=type_,
        category='Salary' if type_ == 'income' else 'Food',
        gross_amount=amount,
        net_amount=amount,
        date=date.fromisoformat(day),
        frequency=frequency,
    )


def _build_goal(period='monthly', target=1000.0, start='2024-01-01', end=None, deficit=0.0, off_days=()):
    return Goal(
        id=f'{period}-goal',
        owner_id='u1',
        name=f'{period.title()} goal',
        target_amount=target,
        period=period,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end) if end else None,
        accumulated_deficit=deficit,
        off_days=frozenset(date.fromisoformat(d) for d in off_days),
    )


def test_monthly_goal_accumulates_net_income():
    ledger = [
        _build_txn('a', '2024-01-05', 400),
        _build_txn('b', '2024-01-20', 300),
        _build_txn('rent', '2024-01-02', 900, type_='expense'),
        _build_txn('old', '2023-12-31', 5000),
    ]
    progress = evaluate(_build_goal(), ledger, '2024-01-31')
    assert progress.metric_value == pytest.approx(700)
    assert progress.progress_percent == pytest.approx(70)
    assert progress.on_track is False
    assert progress.deficit == pytest.approx(300)
    assert progress.transaction_count == 2


def test_daily_goal_uses_amortized_monthly_salary():
    ledger = [_build_txn('salary', '2024-01-01', 3000, frequency='monthly')]
    progress = evaluate(_build_goal('daily', target=100), ledger, '2024-01-15')
    assert progress.metric_value == pytest.approx(100)
    assert progress.on_track is True
    assert progress.deficit == 0
    assert progress.effective_days == 15


def test_daily_goal_counts_one_time_income_only_on_its_day():
    ledger = [_build_txn('gig', '2024-01-10', 80)]
    goal = _build_goal('daily', target=50)
    assert evaluate(goal, ledger, '2024-01-10').metric_value == pytest.approx(80)
    assert evaluate(goal, ledger, '2024-01-11').metric_value == 0


def test_daily_goal_mixes_recurring_and_one_time():
    ledger = [
        _build_txn('salary', '2024-01-01', 3000, frequency='monthly'),
        _build_txn('side', '2024-01-03', 70, frequency='weekly'),
        _build_txn('tip', '2024-01-04', 25),
    ]
    progress = evaluate(_build_goal('daily', target=150), ledger, '2024-01-04')
    assert progress.metric_value == pytest.approx(100 + 10 + 25)
    assert progress.progress_percent == pytest.approx(90)


def test_accumulated_deficit_raises_effective_target():
    ledger = [_build_txn('a', '2024-01-05', 700)]
    progress = evaluate(_build_goal(deficit=200), ledger, '2024-01-31')
    assert progress.effective_target == pytest.approx(1200)
    assert progress.progress_percent == pytest.approx(700 / 1200 * 100)
    assert progress.deficit == pytest.approx(500)


def test_transactions_outside_window_never_change_the_result():
    goal = _build_goal('weekly', target=500, start='2024-01-01', end='2024-01-31')
    ledger = [_build_txn('a', '2024-01-10', 200), _build_txn('b', '2024-01-20', 150, frequency='monthly')]
    baseline = evaluate(goal, ledger, '2024-01-25')

    outside = [
        _build_txn('before', '2023-12-31', 999, frequency='monthly'),
        _build_txn('after', '2024-02-01', 999),
    ]
    assert evaluate(goal, ledger + outside, '2024-01-25') == baseline


def test_window_excludes_outside_transactions_for_daily_goal():
    goal = _build_goal('daily', target=10, start='2024-01-05')
    ledger = [_build_txn('early', '2024-01-04', 3000, frequency='monthly')]
    assert evaluate(goal, ledger, '2024-01-10').metric_value == 0


@pytest.mark.parametrize('amounts', [[], [100], [999, 1], [5000]])
def test_deficit_is_never_negative(amounts):
    ledger = [_build_txn(str(i), '2024-01-10', a) for i, a in enumerate(amounts)]
    progress = evaluate(_build_goal(), ledger, '2024-01-31')
    assert progress.deficit >= 0
    assert progress.on_track == (progress.deficit == 0)
    assert progress.on_track == (progress.metric_value >= progress.effective_target)


def test_effective_days_excludes_off_days_in_range():
    goal = _build_goal('daily', off_days=['2024-01-03', '2024-01-05', '2024-02-01', '2023-12-25'])
    assert effective_days(goal, '2024-01-10') == (8, 2, 10)


def test_effective_days_floor_on_start_day():
    goal = _build_goal('daily', start='2024-03-01', off_days=['2024-03-01'])
    effective, excluded, total = effective_days(goal, '2024-03-01')
    assert effective == 1
    assert total == 1

    progress = evaluate(goal, [], '2024-03-01')
    assert progress.effective_days == 1


def test_effective_days_before_start():
    goal = _build_goal('daily', start='2024-03-10')
    assert effective_days(goal, '2024-03-01') == (1, 0, 0)


def test_effective_days_stop_at_end_date():
    goal = _build_goal('daily', start='2024-01-01', end='2024-01-10', off_days=['2024-01-15'])
    assert effective_days(goal, '2024-02-01') == (10, 0, 10)


def test_effective_days_default_to_today():
    start = date.today() - timedelta(days=4)
    goal = _build_goal('daily', start=start.isoformat())
    assert effective_days(goal)[2] == 5


def test_current_period_amount_tracks_reference_month():
    ledger = [_build_txn('jan', '2024-01-15', 400), _build_txn('feb', '2024-02-03', 250)]
    progress = evaluate(_build_goal(), ledger, '2024-02-10')
    assert progress.metric_value == pytest.approx(650)
    assert progress.current_period_amount == pytest.approx(250)


@pytest.mark.parametrize('changes', [
    {'target': 0},
    {'target': -5},
    {'period': 'hourly'},
    {'start': '2024-02-01', 'end': '2024-01-01'},
    {'deficit': -1},
])
def test_invalid_goal_definitions(changes):
    goal = _build_goal(**changes)
    with pytest.raises(InvalidGoalDefinition):
        validate_goal(goal)
    with pytest.raises(InvalidGoalDefinition):
        evaluate(goal, [], '2024-01-15')


def test_evaluate_does_not_mutate_inputs():
    goal = _build_goal(deficit=50)
    ledger = [_build_txn('a', '2024-01-05', 10)]
    snapshot = list(ledger)
    evaluate(goal, ledger, '2024-01-31')
    assert ledger == snapshot
    assert goal.accumulated_deficit == 50


def test_close_period_returns_shortfall():
    goal = _build_goal(target=1000)
    assert close_period(goal, 700) == pytest.approx(300)
    assert close_period(goal, 1200) == 0
    assert close_period(_build_goal(target=1000, deficit=100), 700) == pytest.approx(400)


def test_roll_over_carries_deficit_into_new_goal():
    goal = _build_goal(start='2024-01-01', end='2024-01-31')
    ledger = [_build_txn('a', '2024-01-05', 600)]

    rolled = roll_over(goal, ledger, '2024-01-31', next_start='2024-02-01', next_end='2024-02-29')

    assert rolled.accumulated_deficit == pytest.approx(400)
    assert rolled.start_date == date(2024, 2, 1)
    assert rolled.end_date == date(2024, 2, 29)
    assert goal.accumulated_deficit == 0
    assert goal.start_date == date(2024, 1, 1)
    assert evaluate(rolled, ledger, '2024-02-10').effective_target == pytest.approx(1400)


def test_roll_over_met_goal_clears_deficit():
    goal = _build_goal(deficit=100)
    rolled = roll_over(goal, [_build_txn('a', '2024-01-05', 2000)], '2024-01-31')
    assert rolled.accumulated_deficit == 0
    assert rolled.start_date == date(2024, 2, 1)
    assert rolled.end_date is None


def test_closing_twice_without_new_income_keeps_the_deficit():
    goal = _build_goal(target=1000)
    ledger = [_build_txn('jan', '2024-01-10', 700)]

    first = roll_over(goal, ledger, '2024-01-31')
    second = roll_over(first, ledger, '2024-01-31')

    assert first.accumulated_deficit == pytest.approx(300)
    assert second.accumulated_deficit == pytest.approx(300)
    assert second.start_date == date(2024, 2, 1)
    assert evaluate(second, ledger, '2024-02-15').metric_value == 0


def test_roll_over_keeps_window_length_by_default():
    goal = _build_goal('weekly', target=500, start='2024-01-01', end='2024-01-07')
    ledger = [_build_txn('a', '2024-01-03', 200), _build_txn('b', '2024-01-09', 650)]

    rolled = roll_over(goal, ledger, '2024-01-07')
    assert (rolled.start_date, rolled.end_date) == (date(2024, 1, 8), date(2024, 1, 14))
    assert rolled.accumulated_deficit == pytest.approx(300)

    progress = evaluate(rolled, ledger, '2024-01-14')
    assert progress.metric_value == pytest.approx(650)
    assert progress.on_track is False
    assert progress.deficit == pytest.approx(150)


def test_toggle_off_day_is_reversible():
    goal = _build_goal('daily')
    marked = toggle_off_day(goal, '2024-01-03')
    assert marked.off_days == frozenset({date(2024, 1, 3)})
    assert goal.off_days == frozenset()
    assert toggle_off_day(marked, date(2024, 1, 3)).off_days == frozenset()


def test_off_days_do_not_filter_transactions():
    ledger = [_build_txn('a', '2024-01-03', 300)]
    goal = _build_goal(off_days=['2024-01-03'])
    assert evaluate(goal, ledger, '2024-01-31').metric_value == pytest.approx(300)


def test_evaluate_all_and_progress_frame():
    goals = [_build_goal('monthly', target=1000), _build_goal('daily', target=100)]
    ledger = [_build_txn('salary', '2024-01-01', 3000, frequency='monthly')]

    results = evaluate_all(goals, ledger, '2024-01-20')
    assert [r.goal_id for r in results] == ['monthly-goal', 'daily-goal']
    assert results[0].on_track and results[1].on_track

    frame = progress_frame(goals, ledger, '2024-01-20')
    assert frame['name'].tolist() == ['Monthly goal', 'Daily goal']
    assert {'progress_percent', 'deficit', 'on_track', 'effective_days'} <= set(frame.columns)
    assert frame['metric_value'].tolist() == pytest.approx([3000, 100])


def test_progress_frame_reuses_given_results():
    goals = [_build_goal('monthly', target=1000)]
    ledger = [_build_txn('a', '2024-01-05', 250)]
    results = evaluate_all(goals, ledger, '2024-01-20')

    frame = progress_frame(goals, [], progress=results)

    assert frame['metric_value'].tolist() == [250]
    assert frame['progress_percent'].tolist() == pytest.approx([25])

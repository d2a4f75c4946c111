"""Streamlit app for the finance goals engine.

The page loads the owner's snapshot, materializes any recurrence rules
that are due, and renders the KPI cards, the live progress of every
goal and the income/expense charts.  All numbers come from the engine
modules; this file only arranges them on screen.

To run the dashboard from the command line::

    streamlit run finance_goals/dashboard.py
"""

from __future__ import annotations

import os
import sys
import uuid
from dataclasses import replace
from datetime import date
from typing import List, Sequence

import streamlit as st

# Support both ``streamlit run finance_goals/dashboard.py`` and package imports.
if __package__:
    from . import config
    from . import goals as goal_engine
    from . import ledger
    from . import visualization as viz
    from .dates import add_days, display_format, today
    from .formatting import escape_dollar_for_markdown, format_currency, format_percent
    from .logging_config import setup_logging
    from .models import FREQUENCIES, GOAL_PERIODS, TRANSACTION_TYPES, Goal, GoalProgress, Transaction, build_transaction
    from .recurrence import check_due, recurrence_from_transaction, upcoming
    from .storage import Snapshot, apply_due_check, load_snapshot, save_snapshot
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from finance_goals import config  # type: ignore
    from finance_goals import goals as goal_engine  # type: ignore
    from finance_goals import ledger  # type: ignore
    from finance_goals import visualization as viz  # type: ignore
    from finance_goals.dates import add_days, display_format, today  # type: ignore
    from finance_goals.formatting import escape_dollar_for_markdown, format_currency, format_percent  # type: ignore
    from finance_goals.logging_config import setup_logging  # type: ignore
    from finance_goals.models import FREQUENCIES, GOAL_PERIODS, TRANSACTION_TYPES, Goal, GoalProgress, Transaction, build_transaction  # type: ignore
    from finance_goals.recurrence import check_due, recurrence_from_transaction, upcoming  # type: ignore
    from finance_goals.storage import Snapshot, apply_due_check, load_snapshot, save_snapshot  # type: ignore

PERIOD_LABELS = {
    'daily': 'Daily average',
    'weekly': 'Weekly',
    'monthly': 'Monthly',
    'yearly': 'Yearly',
}


def load_data(reference: date) -> Snapshot:
    """Load the snapshot and persist any recurrence occurrences that are due."""
    snapshot = load_snapshot(config.SNAPSHOT_PATH)
    due = check_due(snapshot.recurrences, reference)
    if due.is_empty:
        return snapshot
    updated = apply_due_check(snapshot, due)
    save_snapshot(updated, config.SNAPSHOT_PATH)
    return updated


def _persist(snapshot: Snapshot) -> None:
    save_snapshot(snapshot, config.SNAPSHOT_PATH)
    st.rerun()


def _categories_for(type_: str, transactions: Sequence[Transaction]) -> List[str]:
    """Preset categories for the type followed by custom ones already in use."""
    categories = list(config.DEFAULT_CATEGORIES.get(type_, []))
    for txn in transactions:
        if txn.type == type_ and txn.category not in categories:
            categories.append(txn.category)
    return categories


def _default_color(category: str, transactions: Sequence[Transaction]) -> str:
    return ledger.category_colors(transactions).get(category, config.PRESET_COLORS[0])


def _add_goal(snapshot: Snapshot, goal: Goal) -> Snapshot:
    goal_engine.validate_goal(goal)
    return replace(snapshot, goals=snapshot.goals + [goal])


def _replace_goal(snapshot: Snapshot, updated: Goal) -> Snapshot:
    goals = [updated if g.id == updated.id else g for g in snapshot.goals]
    return replace(snapshot, goals=goals)


def _remove_goal(snapshot: Snapshot, goal_id: str) -> Snapshot:
    return replace(snapshot, goals=[g for g in snapshot.goals if g.id != goal_id])


def _remove_transaction(snapshot: Snapshot, transaction_id: str) -> Snapshot:
    return replace(snapshot, transactions=[t for t in snapshot.transactions if t.id != transaction_id])


def render_transaction_form(snapshot: Snapshot, reference: date) -> None:
    """Sidebar form for recording a transaction, optionally as a recurrence rule."""
    st.sidebar.header("Add transaction")
    # outside the form so the category list follows the chosen type
    type_ = st.sidebar.selectbox("Type", TRANSACTION_TYPES)
    category = st.sidebar.selectbox("Category", _categories_for(type_, snapshot.transactions))
    suggested = _default_color(category, snapshot.transactions)
    colors = list(config.PRESET_COLORS)
    if suggested not in colors:
        colors.insert(0, suggested)

    with st.sidebar.form("add_transaction", clear_on_submit=True):
        gross = st.number_input("Gross amount", min_value=0.0, step=10.0)
        deduction = st.number_input("Deduction (%)", min_value=0.0, max_value=100.0, step=1.0)
        frequency = st.selectbox("Frequency", FREQUENCIES)
        tx_date = st.date_input("Date", value=reference)
        color = st.selectbox("Colour", colors, index=colors.index(suggested))
        description = st.text_input("Description")
        make_recurring = st.checkbox("Repeat automatically")
        submitted = st.form_submit_button("Save")

    if not submitted:
        return
    try:
        txn = build_transaction(
            owner_id='local',
            type_=type_,
            category=category,
            gross_amount=gross,
            date=tx_date,
            deduction_percentage=deduction,
            frequency=frequency,
            description=description,
            color=color,
            id=uuid.uuid4().hex,
        )
        recurrences = list(snapshot.recurrences)
        if make_recurring:
            txn, rule = recurrence_from_transaction(txn, rule_id=uuid.uuid4().hex)
            recurrences.append(rule)
    except ValueError as exc:
        st.sidebar.error(str(exc))
        return
    _persist(replace(snapshot, transactions=snapshot.transactions + [txn], recurrences=recurrences))


def render_goal_form(snapshot: Snapshot, reference: date) -> None:
    """Sidebar form for creating a goal; the goal is validated before saving."""
    st.sidebar.header("New goal")
    with st.sidebar.form("add_goal", clear_on_submit=True):
        name = st.text_input("Name")
        target = st.number_input("Target amount", min_value=0.0, step=50.0)
        period = st.selectbox("Period", GOAL_PERIODS, format_func=lambda p: PERIOD_LABELS[p])
        start = st.date_input("Start date", value=reference)
        has_end = st.checkbox("Set an end date")
        end = st.date_input("End date", value=reference)
        icon = st.text_input("Icon", value="🎯")
        submitted = st.form_submit_button("Create goal")

    if not submitted:
        return
    if not name.strip():
        st.sidebar.error("Enter a name for the goal.")
        return
    goal = Goal(
        id=uuid.uuid4().hex,
        owner_id='local',
        name=name.strip(),
        target_amount=float(target),
        period=period,
        start_date=start,
        end_date=end if has_end else None,
        icon=icon,
    )
    try:
        updated = _add_goal(snapshot, goal)
    except ValueError as exc:
        st.sidebar.error(str(exc))
        return
    _persist(updated)


def render_kpis(snapshot: Snapshot) -> None:
    summary = ledger.ledger_summary(snapshot.transactions)
    cols = st.columns(4)
    cols[0].metric("Net income", format_currency(summary['total_income']))
    cols[1].metric("Expenses", format_currency(summary['total_expenses']))
    cols[2].metric("Net balance", format_currency(summary['net_balance']))
    cols[3].metric("Savings rate", format_percent(summary['savings_rate'], 1))


def render_goal(goal: Goal, progress: GoalProgress, snapshot: Snapshot, reference: date) -> None:
    label = PERIOD_LABELS.get(goal.period, goal.period)
    title = f"{goal.icon} {goal.name}".strip()
    with st.expander(f"{title} · {label} · since {display_format(goal.start_date)}", expanded=True):
        col1, col2, col3 = st.columns(3)
        col1.metric("Target", format_currency(progress.effective_target))
        col2.metric("Current", format_currency(progress.metric_value))
        col3.metric("Progress", format_percent(progress.progress_percent))
        st.progress(min(max(progress.progress_percent, 0.0), 100.0) / 100)

        if goal.period == 'daily':
            st.caption(
                f"{progress.effective_days} effective days "
                f"({progress.excluded_days} off days excluded)"
            )
        if progress.on_track:
            st.success("On track")
        else:
            prefix = "Improve your daily rate by" if goal.period == 'daily' else "Still missing"
            st.warning(escape_dollar_for_markdown(f"{prefix} {format_currency(progress.deficit)}"))

        action1, action2, action3 = st.columns(3)
        if goal.period == 'daily':
            off_label = "Count this day" if reference in goal.off_days else "Mark as off day"
            if action1.button(off_label, key=f"off_{goal.id}"):
                _persist(_replace_goal(snapshot, goal_engine.toggle_off_day(goal, reference)))
        if action2.button("Close period", key=f"close_{goal.id}"):
            _persist(_replace_goal(
                snapshot, goal_engine.roll_over(goal, snapshot.transactions, reference)
            ))
        if action3.button("Delete goal", key=f"delete_{goal.id}"):
            _persist(_remove_goal(snapshot, goal.id))


def render_goals(goals: List[Goal], snapshot: Snapshot, reference: date) -> None:
    st.subheader("Goals")
    if not goals:
        st.info("No goals yet. Create one from the sidebar to start tracking progress.")
        return
    progress_list = goal_engine.evaluate_all(goals, snapshot.transactions, reference)
    for goal, progress in zip(goals, progress_list):
        render_goal(goal, progress, snapshot, reference)
    st.plotly_chart(viz.create_goal_progress_chart(
        goal_engine.progress_frame(goals, snapshot.transactions, progress=progress_list)
    ))


def render_recent_transactions(recent: List[Transaction], snapshot: Snapshot) -> None:
    for txn in recent:
        info, action = st.columns([5, 1])
        sign = '+' if txn.type == 'income' else '-'
        info.write(escape_dollar_for_markdown(
            f"{display_format(txn.date)} · {txn.category} · {sign}{format_currency(txn.net_amount, decimals=2)}"
            + (f" · {txn.description}" if txn.description else "")
        ))
        if action.button("Delete", key=f"delete_txn_{txn.id}"):
            _persist(_remove_transaction(snapshot, txn.id))


def main() -> None:
    """Entry point for the Streamlit app."""
    setup_logging(config.LOG_LEVEL)
    st.set_page_config(page_title="Finance Goals", page_icon="🎯", layout="wide")
    st.title("Finance Goals")

    config.ensure_data_directories()
    reference = st.sidebar.date_input("Evaluate as of", value=today())
    snapshot = load_data(reference)
    render_transaction_form(snapshot, reference)
    render_goal_form(snapshot, reference)

    render_kpis(snapshot)
    render_goals(snapshot.goals, snapshot, reference)

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(viz.create_income_expense_chart(ledger.monthly_breakdown(snapshot.transactions)))
    with col2:
        st.plotly_chart(viz.create_expense_pie_chart(ledger.expenses_by_category(snapshot.transactions)))

    st.subheader("Upcoming recurring payments")
    pending = upcoming(snapshot.recurrences, reference, add_days(reference, 30))
    if pending:
        for when, rule in pending:
            sign = '+' if rule.type == 'income' else '-'
            st.write(escape_dollar_for_markdown(
                f"{display_format(when)} · {rule.name or rule.category} · {sign}{format_currency(rule.amount)}"
            ))
    else:
        st.caption("Nothing due in the next 30 days.")

    st.subheader("Recent transactions")
    recent = ledger.recent_transactions(snapshot.transactions)
    if recent:
        render_recent_transactions(recent, snapshot)
    else:
        st.info("No transactions recorded.")


if __name__ == "__main__":  # pragma: no cover
    main()

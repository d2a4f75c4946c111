"""Plotly visualisation helpers for the goals dashboard.

Each function accepts the frames produced by :mod:`finance_goals.ledger`
or :mod:`finance_goals.goals` and returns a
`plotly.graph_objects.Figure` that Streamlit can render via
``st.plotly_chart``.  Empty input produces a blank figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

ON_TRACK_COLOR = '#10b981'
WARNING_COLOR = '#f59e0b'
BEHIND_COLOR = '#ef4444'


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def progress_color(progress_percent: float, on_track: bool) -> str:
    """Bar colour: green when on track, amber from 80%, red otherwise."""
    if on_track:
        return ON_TRACK_COLOR
    return WARNING_COLOR if progress_percent >= 80 else BEHIND_COLOR


def create_goal_progress_chart(progress: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal bar chart of each goal's progress towards its target.

    Parameters
    ----------
    progress : pandas.DataFrame
        Output of :func:`finance_goals.goals.progress_frame`; needs the
        ``name``, ``progress_percent`` and ``on_track`` columns.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bars capped at 100% so a far exceeded goal does not squash the rest.
    """
    if progress.empty:
        return _empty_figure()
    capped = progress['progress_percent'].clip(upper=100)
    colors = [
        progress_color(pct, on_track)
        for pct, on_track in zip(progress['progress_percent'], progress['on_track'])
    ]
    fig = go.Figure(
        go.Bar(
            x=capped,
            y=progress['name'],
            orientation='h',
            marker_color=colors,
            text=[f"{pct:.0f}%" for pct in progress['progress_percent']],
            textposition='auto',
        )
    )
    fig.update_layout(
        title=title or "Goal progress",
        xaxis=dict(title="Progress (%)", range=[0, 100]),
        yaxis_title="Goal",
    )
    return fig


def create_expense_pie_chart(expenses: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Donut chart of expenses by category, coloured with each category's colour.

    Parameters
    ----------
    expenses : pandas.DataFrame
        Output of :func:`finance_goals.ledger.expenses_by_category`.
    title : str, optional
        Chart title.
    """
    if expenses.empty:
        return _empty_figure()
    color_map = dict(zip(expenses['Category'], expenses['Color']))
    fig = px.pie(
        expenses,
        names='Category',
        values='Amount',
        color='Category',
        color_discrete_map=color_map,
        hole=0.4,
    )
    fig.update_layout(title=title or "Expenses by category")
    return fig


def create_income_expense_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Area chart of monthly income against expenses.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Output of :func:`finance_goals.ledger.monthly_breakdown`.
    title : str, optional
        Chart title.
    """
    if monthly.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=monthly['Month'], y=monthly['Income'], name='Income',
        fill='tozeroy', line=dict(color=ON_TRACK_COLOR),
    ))
    fig.add_trace(go.Scatter(
        x=monthly['Month'], y=monthly['Expenses'], name='Expenses',
        fill='tozeroy', line=dict(color=BEHIND_COLOR),
    ))
    fig.update_layout(
        title=title or "Income vs expenses",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig

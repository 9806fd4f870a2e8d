# dashboard.py: chart builders and KPI strip for the Streamlit dashboard

import os
from typing import Iterable, List

import plotly.graph_objects as go
import pandas as pd
import streamlit as st

from aggregation import CategoryShare, FinancialSummary, MonthlySeries
from goals import goal_progress

CURRENCY = os.getenv("FINANCE_CURRENCY", "PKR")

INCOME_COLOR = "#10B981"
EXPENSE_COLOR = "#F43F5E"
NET_COLOR = "#6366F1"
SAVINGS_COLOR = "#3B82F6"
EXTRA_COLOR = "#8B5CF6"


def format_currency(amount) -> str:
    """PKR 45,000 or PKR 1,234.5 (trailing zero decimals are dropped)."""
    text = f"{float(amount):,.2f}".rstrip("0").rstrip(".")
    return f"{CURRENCY} {text}"


def render_kpis(summary: FinancialSummary):
    """
    Displays the top-level summary metrics.

    An all-zero summary is the normal empty-ledger state, not an error.
    """
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("💰 Balance", format_currency(summary.balance))
    col2.metric("📈 Income", format_currency(summary.income))
    col3.metric("💸 Expenses", format_currency(summary.expense))
    col4.metric("🏦 Savings", format_currency(summary.savings))
    col5.metric("🎁 Extra Cash", format_currency(summary.extra_cash))

    if not any((summary.income, summary.expense, summary.savings, summary.extra_cash)):
        st.caption("No transactions yet. Add one to see your summary.")


def breakdown_chart(shares: List[CategoryShare], title: str = "Expense Breakdown"):
    """
    Donut chart of a category breakdown.
    """
    if not shares:
        return go.Figure(layout=dict(title=f"{title} (no data)"))

    by_cat = pd.DataFrame(
        {
            "Category": [s.name for s in shares],
            "Percentage": [s.percentage for s in shares],
            "Color": [s.color for s in shares],
        }
    )
    fig = go.Figure(
        go.Pie(
            labels=by_cat["Category"],
            values=by_cat["Percentage"],
            marker=dict(colors=by_cat["Color"]),
            hole=0.7,
            sort=False,
        )
    )
    fig.update_traces(textposition="inside", textinfo="percent+label")
    fig.update_layout(title=title, showlegend=False)
    return fig


def trend_chart(series: MonthlySeries):
    """
    Line chart of income, expenses and net cash flow per month.
    """
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=series.months, y=series.income, name="Income",
                             line=dict(color=INCOME_COLOR), fill="tozeroy"))
    fig.add_trace(go.Scatter(x=series.months, y=series.expense, name="Expense",
                             line=dict(color=EXPENSE_COLOR), fill="tozeroy"))
    fig.add_trace(go.Scatter(x=series.months, y=series.net_cash_flow, name="Net Cashflow",
                             line=dict(color=NET_COLOR, dash="dash")))
    fig.update_layout(title="Income vs Expenses Trend", height=400)
    return fig


def savings_chart(series: MonthlySeries):
    """
    Grouped bars of savings and extra cash per month.
    """
    fig = go.Figure()
    fig.add_trace(go.Bar(x=series.months, y=series.savings, name="Savings", marker_color=SAVINGS_COLOR))
    fig.add_trace(go.Bar(x=series.months, y=series.extra, name="Extra Cash", marker_color=EXTRA_COLOR))
    fig.update_layout(barmode="group", title="Savings & Extra Cash", height=350)
    return fig


def goals_chart(goals: Iterable):
    """
    Horizontal bars of goal completion; bars may run past 100%.
    """
    rows = [
        {"Goal": g.name, "Progress": goal_progress(g).percentage, "Color": g.color}
        for g in goals
    ]
    if not rows:
        return go.Figure(layout=dict(title="Savings Goals (none yet)"))

    df = pd.DataFrame(rows)
    fig = go.Figure(
        go.Bar(
            x=df["Progress"],
            y=df["Goal"],
            orientation="h",
            marker_color=df["Color"],
            text=[f"{p}%" for p in df["Progress"]],
        )
    )
    fig.add_vline(x=100, line_dash="dot")
    fig.update_layout(title="Savings Goals", xaxis_title="% of target", height=300)
    return fig

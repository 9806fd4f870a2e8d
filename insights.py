from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd

from aggregation import transactions_to_df
from categories import CategoryDirectory
from database import TransactionType
from goals import compute_progress

INCOME_LIFT = 1.10          # this month vs. average of earlier months
GOAL_ON_TRACK_PCT = 60
DEFAULT_WATCH_CATEGORY = "Shopping"
DEFAULT_WATCH_LIMIT = 5000.0


@dataclass(frozen=True)
class Insight:
    kind: str  # "income", "spending", "goal" or "ok"
    title: str
    message: str


def _with_month(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["Month"] = df["Date"].dt.to_period("M")
    return df


def income_lift(df: pd.DataFrame, now: datetime) -> Optional[float]:
    """
    Ratio of this month's income to the average monthly income before it.

    None when there is no earlier income to compare against.
    """
    if df.empty:
        return None

    current_month = pd.Period(now, freq="M")
    income = _with_month(df[df["Type"] == TransactionType.INCOME.value])
    monthly = income.groupby("Month")["Amount"].sum()
    earlier = monthly[monthly.index < current_month]
    if earlier.empty or earlier.mean() <= 0:
        return None
    return float(monthly.get(current_month, 0.0)) / float(earlier.mean())


def month_spend_in_category(df: pd.DataFrame, category_ids: List[int], now: datetime) -> float:
    if df.empty or not category_ids:
        return 0.0

    current_month = pd.Period(now, freq="M")
    expenses = _with_month(df[df["Type"] == TransactionType.EXPENSE.value])
    mask = (expenses["Month"] == current_month) & expenses["CategoryId"].isin(category_ids)
    return float(expenses.loc[mask, "Amount"].sum())


def generate_insights(
    transactions: Iterable,
    goals: Iterable,
    categories,
    now: Optional[datetime] = None,
    watch_category: str = DEFAULT_WATCH_CATEGORY,
    watch_limit: float = DEFAULT_WATCH_LIMIT,
) -> List[Insight]:
    """Rule-based nudges on income, spending in a watched category and goal progress."""

    now = now or datetime.now()
    directory = categories if isinstance(categories, CategoryDirectory) else CategoryDirectory(categories)
    df = transactions_to_df(transactions)
    insights = []

    lift = income_lift(df, now)
    if lift is not None and lift > INCOME_LIFT:
        insights.append(
            Insight(
                kind="income",
                title="Income is higher than usual",
                message=f"Your income this month is {(lift - 1) * 100:.0f}% higher than your average monthly income.",
            )
        )

    watched_ids = [c.id for c in directory.by_type(TransactionType.EXPENSE) if c.name == watch_category]
    spent = month_spend_in_category(df, watched_ids, now)
    if spent > watch_limit:
        insights.append(
            Insight(
                kind="spending",
                title="Spending Alert",
                message=f"You've spent {spent:,.0f} on {watch_category} this month, above your {watch_limit:,.0f} limit.",
            )
        )

    goals = list(goals)
    if goals:
        goal = goals[0]
        progress = compute_progress(goal.current, goal.target)
        if progress > GOAL_ON_TRACK_PCT:
            insights.append(
                Insight(
                    kind="goal",
                    title="Savings Goal Progress",
                    message=f"You're {progress}% of the way to your \"{goal.name}\" savings goal.",
                )
            )

    if not insights:
        insights.append(
            Insight(
                kind="ok",
                title="All is well",
                message="You're staying within budget and on track with your financial goals.",
            )
        )
    return insights

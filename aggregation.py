"""
aggregation.py
--------------
Derives the financial summary, per-category breakdowns and per-month series
from the raw ledger. Everything here is recomputed from the full set of
transactions on each call; nothing is cached between calls.

Amounts are stored as decimals and only become floats once they are loaded
into the working DataFrame.
"""

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd

from categories import CategoryDirectory
from database import TransactionType

COLUMNS = ["Id", "Date", "Amount", "Type", "CategoryId", "Description"]

SUMMARY_FIELDS = {
    TransactionType.INCOME: "income",
    TransactionType.EXPENSE: "expense",
    TransactionType.SAVING: "savings",
    TransactionType.EXTRA: "extra_cash",
}

SERIES_FIELDS = {
    TransactionType.INCOME: "income",
    TransactionType.EXPENSE: "expense",
    TransactionType.SAVING: "savings",
    TransactionType.EXTRA: "extra",
}


def _require_every_type(mapping: dict, name: str):
    missing = set(TransactionType) - set(mapping)
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(sorted(t.value for t in missing))}")


_require_every_type(SUMMARY_FIELDS, "SUMMARY_FIELDS")
_require_every_type(SERIES_FIELDS, "SERIES_FIELDS")


@dataclass(frozen=True)
class FinancialSummary:
    balance: float = 0.0
    income: float = 0.0
    expense: float = 0.0
    savings: float = 0.0
    extra_cash: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class KeyMetrics:
    income_to_expense: Optional[float]
    savings_rate: int
    discretionary_share: int


@dataclass(frozen=True)
class CategoryShare:
    category_id: Optional[int]
    name: str
    amount: float
    percentage: int
    color: str


@dataclass(frozen=True)
class MonthlySeries:
    months: List[str]
    income: List[float]
    expense: List[float]
    savings: List[float]
    extra: List[float]

    @property
    def net_cash_flow(self) -> List[float]:
        return net_cash_flow(self.income, self.expense)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent_of(part: float, whole: float) -> int:
    """Whole-number percentage; 0 when there is nothing to divide by."""
    if not whole or whole <= 0:
        return 0
    return round_half_up(float(part) / float(whole) * 100)


def transactions_to_df(transactions: Iterable) -> pd.DataFrame:
    rows = [
        {
            "Id": t.id,
            "Date": t.date,
            "Amount": float(t.amount),
            "Type": TransactionType(t.type).value,
            "CategoryId": t.category_id,
            "Description": t.description or "",
        }
        for t in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=COLUMNS)

    df = pd.DataFrame(rows, columns=COLUMNS)
    # naive dates are taken as-is; aware ones are converted to UTC wall time
    df["Date"] = pd.to_datetime(df["Date"], utc=True).dt.tz_localize(None)
    df["CategoryId"] = df["CategoryId"].astype("Int64")
    return df


def compute_summary(transactions: Iterable) -> FinancialSummary:
    """Sum each transaction type; balance is income minus expense."""
    df = transactions_to_df(transactions)
    if df.empty:
        return FinancialSummary()

    totals = df.groupby("Type")["Amount"].sum()
    sums = {field: float(totals.get(tx_type.value, 0.0)) for tx_type, field in SUMMARY_FIELDS.items()}
    return FinancialSummary(balance=sums["income"] - sums["expense"], **sums)


def compute_key_metrics(summary: FinancialSummary) -> KeyMetrics:
    """
    Ratios shown beside the reports.

    The income-to-expense ratio is None when nothing has been spent; the
    two rates are 0 when there is no income.
    """
    ratio = round(summary.income / summary.expense, 2) if summary.expense > 0 else None
    return KeyMetrics(
        income_to_expense=ratio,
        savings_rate=percent_of(summary.savings, summary.income),
        discretionary_share=percent_of(summary.extra_cash, summary.income),
    )


def _balanced_percentages(amounts: List[float], total: float) -> List[int]:
    """Half-up percentages, nudged until their sum is within 1 of 100."""
    if total <= 0:
        return [0] * len(amounts)
    exact = [amount / total * 100 for amount in amounts]
    rounded = [round_half_up(x) for x in exact]
    drift = sum(rounded) - 100
    while abs(drift) > 1:
        step = 1 if drift > 0 else -1
        worst = max(range(len(exact)), key=lambda i: (rounded[i] - exact[i]) * step)
        rounded[worst] -= step
        drift -= step
    return rounded


def compute_category_breakdown(
    transactions: Iterable,
    categories,
    tx_type=TransactionType.EXPENSE,
) -> List[CategoryShare]:
    """
    Share of one transaction type per category, highest percentage first.

    Transactions without a category, or pointing at an unknown one, are
    labelled with the directory's fallback name and color. Categories with
    equal percentages keep the order in which they first appear.
    """
    tx_type = TransactionType(tx_type)
    directory = categories if isinstance(categories, CategoryDirectory) else CategoryDirectory(categories)

    df = transactions_to_df(transactions)
    df = df[df["Type"] == tx_type.value]
    if df.empty:
        return []

    by_cat = df.groupby("CategoryId", dropna=False, sort=False)["Amount"].sum()
    amounts = [float(amount) for amount in by_cat]
    percentages = _balanced_percentages(amounts, sum(amounts))

    shares = []
    for category_id, amount, percentage in zip(by_cat.index, amounts, percentages):
        category_id = None if pd.isna(category_id) else int(category_id)
        shares.append(
            CategoryShare(
                category_id=category_id,
                name=directory.name_for(category_id),
                amount=amount,
                percentage=percentage,
                color=directory.color_for(category_id),
            )
        )
    return sorted(shares, key=lambda s: s.percentage, reverse=True)


def month_labels(month_count: int, now: datetime) -> List[str]:
    """YYYY-MM labels for the window ending at ``now``, oldest first."""
    current = pd.Period(now, freq="M")
    return [str(current - offset) for offset in range(month_count - 1, -1, -1)]


def compute_monthly_series(
    transactions: Iterable,
    month_count: int = 6,
    now: Optional[datetime] = None,
) -> MonthlySeries:
    """
    Bucket amounts per type into the last ``month_count`` calendar months.

    A transaction lands in bucket ``month_count - 1 - month_diff`` where
    month_diff is the calendar-month distance back from ``now``. Anything
    dated in the future or before the window is dropped.
    """
    if month_count < 0:
        raise ValueError("month_count must not be negative")
    now = now or datetime.now()

    buckets = {field: [0.0] * month_count for field in SERIES_FIELDS.values()}
    df = transactions_to_df(transactions)

    if not df.empty and month_count:
        month_diff = (now.year - df["Date"].dt.year) * 12 + (now.month - df["Date"].dt.month)
        in_window = df[(month_diff >= 0) & (month_diff < month_count)].copy()
        in_window["Bucket"] = month_count - 1 - month_diff[in_window.index]

        totals = in_window.groupby(["Type", "Bucket"])["Amount"].sum()
        for (tx_type, bucket), amount in totals.items():
            buckets[SERIES_FIELDS[TransactionType(tx_type)]][int(bucket)] += float(amount)

    return MonthlySeries(months=month_labels(month_count, now), **buckets)


def net_cash_flow(income: List[float], expense: List[float]) -> List[float]:
    return [i - e for i, e in zip(income, expense)]

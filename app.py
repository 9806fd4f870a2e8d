import streamlit as st
import pandas as pd
from datetime import datetime

from aggregation import compute_category_breakdown, compute_key_metrics, compute_monthly_series, compute_summary
from categories import CategoryDirectory
from dashboard import (
    breakdown_chart,
    format_currency,
    goals_chart,
    render_kpis,
    savings_chart,
    trend_chart,
)
from database import SessionLocal, TransactionType, init_db
from errors import FinanceTrackerError
from goals import goal_progress, goal_savings_plan
from insights import generate_insights
from ledger import LedgerStore
from seed_db import seed

# --- Configuration ---
st.set_page_config(page_title="Finance Tracker", layout="wide", page_icon="💰")

TIMEFRAMES = {"Last 3 Months": 3, "Last 6 Months": 6, "Last 12 Months": 12}
INSIGHT_ICONS = {"income": "📈", "spending": "⚠️", "goal": "✅", "ok": "👍"}

# --- Database Session ---
init_db()

if "db" not in st.session_state:
    st.session_state.db = SessionLocal()
    seed(st.session_state.db)

store = LedgerStore(st.session_state.db)


def ledger_df(transactions, directory: CategoryDirectory) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "ID": t.id,
                "Date": t.date,
                "Type": t.type.value.title(),
                "Category": directory.name_for(t.category_id),
                "Description": t.description or "",
                "Amount": format_currency(t.amount),
            }
            for t in transactions
        ]
    )


# --- Load Data ---
transactions = store.list_transactions()
goals = store.list_goals()
directory = CategoryDirectory(store.list_categories())

st.title("💰 Finance Tracker")

# Sidebar: add a transaction
with st.sidebar:
    st.header("Add Transaction")
    tx_type = st.selectbox("Type", list(TransactionType), format_func=lambda t: t.value.title())
    with st.form("add_transaction", clear_on_submit=True):
        options = directory.by_type(tx_type)
        category = st.selectbox("Category", options, format_func=lambda c: c.name) if options else None
        amount = st.number_input("Amount", min_value=0.0, step=100.0)
        description = st.text_input("Description")
        when = st.date_input("Date", value=datetime.now().date())
        if st.form_submit_button("Save", use_container_width=True):
            try:
                store.create_transaction(
                    amount=amount,
                    type=tx_type,
                    category_id=category.id if category else None,
                    description=description or None,
                    date=datetime.combine(when, datetime.now().time()),
                )
                st.success("Transaction saved.")
                st.rerun()
            except FinanceTrackerError as e:
                st.error(str(e))

tab1, tab2, tab3, tab4 = st.tabs(["📊 Dashboard", "💳 Transactions", "🎯 Savings Goals", "📈 Reports"])

with tab1:
    render_kpis(compute_summary(transactions))

    col_left, col_right = st.columns(2)
    with col_left:
        shares = compute_category_breakdown(transactions, directory)
        st.plotly_chart(breakdown_chart(shares), use_container_width=True)
        for share in shares:
            st.markdown(f"**{share.name}**: {share.percentage}%")
    with col_right:
        st.plotly_chart(trend_chart(compute_monthly_series(transactions, 6)), use_container_width=True)

    st.subheader("🧠 Insights")
    for insight in generate_insights(transactions, goals, directory):
        st.info(f"{INSIGHT_ICONS.get(insight.kind, '')} **{insight.title}**: {insight.message}")

    st.subheader("Recent Transactions")
    recent = store.recent_transactions(5)
    if recent:
        st.dataframe(ledger_df(recent, directory), use_container_width=True, hide_index=True)
    else:
        st.caption("No transactions yet.")

with tab2:
    st.header("💳 Transactions")
    type_filter = st.selectbox("Show", ["All"] + [t.value.title() for t in TransactionType])
    shown = transactions if type_filter == "All" else store.list_transactions(type_filter.lower())
    if shown:
        st.dataframe(ledger_df(shown, directory), use_container_width=True, hide_index=True)
        to_delete = st.selectbox("Delete transaction", [t.id for t in shown], index=None)
        if to_delete is not None and st.button("🗑️ Delete"):
            store.delete_transaction(to_delete)
            st.rerun()
    else:
        st.caption("Nothing recorded for this type.")

with tab3:
    st.header("🎯 Savings Goals")
    st.plotly_chart(goals_chart(goals), use_container_width=True)

    for goal in goals:
        progress = goal_progress(goal)
        with st.expander(f"{goal.name} ({progress.percentage}%)"):
            st.progress(min(progress.percentage, 100) / 100)
            st.write(f"{format_currency(goal.current)} / {format_currency(goal.target)}")
            plan = goal_savings_plan(goal)
            if plan:
                st.caption(
                    f"Due by {goal.deadline:%B %d, %Y}: save {format_currency(plan['required_monthly'])}/mo "
                    f"for {plan['months_remaining']} months."
                )
            new_current = st.number_input("Saved so far", min_value=0.0, value=float(goal.current), key=f"cur_{goal.id}")
            if st.button("Update", key=f"upd_{goal.id}"):
                store.update_goal(goal.id, current=new_current)
                st.rerun()

    with st.form("add_goal", clear_on_submit=True):
        st.subheader("New Goal")
        name = st.text_input("Name")
        target = st.number_input("Target", min_value=0.0, step=1000.0)
        deadline = st.date_input("Deadline", value=None)
        if st.form_submit_button("Add Goal"):
            try:
                store.create_goal(
                    name=name,
                    target=target,
                    icon="smartphone",
                    color="#3B82F6",
                    deadline=datetime.combine(deadline, datetime.min.time()) if deadline else None,
                )
                st.rerun()
            except FinanceTrackerError as e:
                st.error(str(e))

with tab4:
    st.header("📈 Reports")
    label = st.radio("Period", list(TIMEFRAMES), index=1, horizontal=True)
    series = compute_monthly_series(transactions, TIMEFRAMES[label])
    st.plotly_chart(trend_chart(series), use_container_width=True)
    st.plotly_chart(savings_chart(series), use_container_width=True)

    st.subheader("Key Financial Metrics")
    metrics = compute_key_metrics(compute_summary(transactions))
    m1, m2, m3 = st.columns(3)
    ratio = "N/A" if metrics.income_to_expense is None else f"{metrics.income_to_expense:.2f}"
    m1.metric("Income to Expense Ratio", ratio, help="Higher is better (aim for > 1.5)")
    m2.metric("Savings Rate", f"{metrics.savings_rate}%", help="Aim for at least 20% of income")
    m3.metric("Discretionary Spending", f"{metrics.discretionary_share}%", help="Keep under 10% for optimal saving")

    report_type = st.selectbox("Breakdown of", list(TransactionType), format_func=lambda t: t.value.title())
    st.plotly_chart(
        breakdown_chart(
            compute_category_breakdown(transactions, directory, report_type),
            title=f"{report_type.value.title()} Breakdown",
        ),
        use_container_width=True,
    )

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import atexit
import json
from datetime import datetime, time as dtime

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from pettycash.config import configure_logging
from pettycash.domain import Category, PaymentMode
from pettycash.errors import PersistenceError
from pettycash.formatting import format_rupees, relative_day
from pettycash.functional import safe_record
from pettycash.services import ExpenseService
from pettycash.storage import open_store
from pettycash.transforms import record_to_dict, stats_to_dict, summary_to_dict
from pettycash.views import ListQuery, SortKey
from pettycash.windows import Period


configure_logging()

st.set_page_config(page_title="Petty Cash", layout="wide")

CATEGORY_COLORS = {
    Category.FOOD.value: "#6366F1",
    Category.TRAVEL.value: "#F59E0B",
    Category.FUN.value: "#8B5CF6",
    Category.STUDY.value: "#10B981",
    Category.OTHER.value: "#6B7280",
}

DATE_FILTERS = {
    "All Time": Period.ALL,
    "Today": Period.TODAY,
    "This Week": Period.WEEK,
    "This Month": Period.MONTH,
    "Custom Range": Period.CUSTOM,
}

SORT_OPTIONS = {
    "Date (Newest)": SortKey.DATE_DESC,
    "Date (Oldest)": SortKey.DATE_ASC,
    "Amount (High-Low)": SortKey.AMOUNT_DESC,
    "Amount (Low-High)": SortKey.AMOUNT_ASC,
}

STAT_PERIODS = {
    "This Week": Period.WEEK,
    "This Month": Period.MONTH,
    "Last Month": Period.LAST_MONTH,
    "Last 3 Months": Period.THREE_MONTHS,
    "Custom": Period.CUSTOM,
}


@st.cache_resource
def get_service() -> ExpenseService:
    store = open_store()
    atexit.register(store.close)
    return ExpenseService(store)


try:
    service = get_service()
except PersistenceError as e:
    st.error(f"Could not open the expense file: {e}")
    st.stop()


def records_to_df(records):
    rows = [record_to_dict(r) for r in records]
    df = pd.DataFrame(rows, columns=["id", "date", "description", "category", "paymentMode", "amount", "notes"])
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"])
        df["amount (₹)"] = df["amount"] / 100
    return df


def distribution_df(dist, label):
    return pd.DataFrame([{label: k.value, "Amount": v / 100} for k, v in dist.items()])


def delta_text(pct, baseline):
    if pct < 0:
        return f"{abs(pct)}% less than {baseline}"
    return f"{pct}% more than {baseline}"


if "list_query" not in st.session_state:
    st.session_state.list_query = ListQuery()

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Expenses", "📊 Statistics"]
)

now = datetime.now()

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    summary = service.summary(now)

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric(
            "Today",
            format_rupees(summary.today.total),
            delta_text(summary.today.percent_change, "average"),
            delta_color="inverse",
        )
    with k2:
        st.metric(
            "This Week",
            format_rupees(summary.week.total),
            delta_text(summary.week.percent_change, "last week"),
            delta_color="inverse",
        )
    with k3:
        st.metric(
            "This Month",
            format_rupees(summary.month.total),
            delta_text(summary.month.percent_change, "last month"),
            delta_color="inverse",
        )

    col_left, col_right = st.columns(2)
    with col_left:
        df_cat = distribution_df(summary.week.category_distribution, "Category")
        if df_cat["Amount"].sum() > 0:
            fig_cat = px.pie(
                df_cat,
                values="Amount",
                names="Category",
                title="This Week by Category",
                color="Category",
                color_discrete_map=CATEGORY_COLORS,
                hole=0.5,
            )
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses this week yet.")
    with col_right:
        days = [p.date.strftime("%b %d") for p in summary.daily_totals]
        totals = [p.total / 100 for p in summary.daily_totals]
        fig_days = go.Figure()
        fig_days.add_trace(go.Bar(x=days, y=totals, name="Spent", marker_color="#6366F1"))
        fig_days.update_layout(title="Last 7 Days", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_days, use_container_width=True)

    df_pay = distribution_df(summary.week.payment_distribution, "Mode")
    fig_pay = px.bar(df_pay, x="Amount", y="Mode", orientation="h", title="This Week by Payment Mode", template="plotly_dark")
    st.plotly_chart(fig_pay, use_container_width=True)

    st.subheader("🕒 Recent Expenses")
    recent = service.list_records()[:5]
    if recent:
        for r in recent:
            st.write(
                f"**{r.description}** · {format_rupees(r.amount)} · "
                f"{relative_day(r.date, now)} · {r.category.value} · {r.payment_mode.value}"
            )
    else:
        st.info("No expenses recorded yet.")

    st.download_button(
        "⬇ Download Summary JSON",
        json.dumps(summary_to_dict(summary), indent=2),
        file_name="summary.json",
        mime="application/json",
    )

elif menu == "🧾 Expenses":
    st.title("🧾 Expenses")

    st.subheader("➕ Add Expense")
    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount (₹)", min_value=0.0, step=10.0, format="%.2f")
            description = st.text_input("Description")
            spent_on = st.date_input("Date", value=now.date())
        with col2:
            category = st.selectbox("Category", [c.value for c in Category])
            payment_mode = st.radio("Payment Mode", [m.value for m in PaymentMode], horizontal=True)
            notes = st.text_input("Notes (optional)")
        submitted = st.form_submit_button("Add Expense")

    if submitted:
        # the form collects rupees; whole numbers would otherwise be read as paise
        when = datetime.combine(spent_on, now.time() if spent_on == now.date() else dtime(12, 0))
        payload = {
            "amount": round(amount * 100),
            "description": description,
            "category": category,
            "paymentMode": payment_mode,
            "notes": notes or None,
            "date": when,
        }
        try:
            result = service.create_record(payload)
        except PersistenceError as e:
            st.error(f"Failed to save expense: {e}")
        else:
            if result.is_right():
                st.success("✅ Expense added!")
            else:
                st.error(f"❌ {result.get_error()['message']}")

    st.divider()

    query = st.session_state.list_query
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        date_labels = list(DATE_FILTERS)
        date_label = st.selectbox(
            "Date",
            date_labels,
            index=list(DATE_FILTERS.values()).index(query.date_filter),
        )
    with c2:
        cat_options = ["All Categories"] + [c.value for c in Category]
        cat_label = st.selectbox(
            "Category",
            cat_options,
            index=cat_options.index(query.category.value) if query.category else 0,
        )
    with c3:
        mode_options = ["All Modes"] + [m.value for m in PaymentMode]
        mode_label = st.selectbox(
            "Payment Mode",
            mode_options,
            index=mode_options.index(query.payment_mode.value) if query.payment_mode else 0,
        )
    with c4:
        sort_label = st.selectbox(
            "Sort By",
            list(SORT_OPTIONS),
            index=list(SORT_OPTIONS.values()).index(query.sort),
        )

    start = end = None
    if DATE_FILTERS[date_label] is Period.CUSTOM:
        rng = st.date_input("Custom Range", value=(now.date(), now.date()), key="list_range")
        if len(rng) == 2:
            start, end = rng

    filters = dict(
        date_filter=DATE_FILTERS[date_label],
        category=None if cat_label == cat_options[0] else Category(cat_label),
        payment_mode=None if mode_label == mode_options[0] else PaymentMode(mode_label),
        start=start,
        end=end,
    )
    if any(getattr(query, k) != v for k, v in filters.items()):
        query = query.with_filters(**filters)
    if SORT_OPTIONS[sort_label] != query.sort:
        query = query.with_sort(SORT_OPTIONS[sort_label])

    page = service.list_page(query, now)
    if page.total_pages and page.page > page.total_pages:
        query = query.with_page(page.total_pages)
        page = service.list_page(query, now)
    st.session_state.list_query = query

    if page.total_count == 0:
        st.info("No expenses found matching your filters.")
    else:
        df_page = records_to_df(page.items)
        disp = df_page[["id", "date", "description", "category", "paymentMode", "amount", "notes"]].copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d %H:%M")
        disp["amount"] = disp["amount"].map(format_rupees)
        st.dataframe(disp, use_container_width=True, hide_index=True)

        first = (page.page - 1) * page.page_size + 1
        last = min(page.page * page.page_size, page.total_count)
        st.caption(f"Showing {first} to {last} of {page.total_count} expenses")

        p1, p2, p3 = st.columns([1, 2, 1])
        with p1:
            if st.button("◀ Previous", disabled=page.page <= 1):
                st.session_state.list_query = query.with_page(page.page - 1)
                st.rerun()
        with p2:
            st.write(f"Page {page.page} of {page.total_pages}")
        with p3:
            if st.button("Next ▶", disabled=page.page >= page.total_pages):
                st.session_state.list_query = query.with_page(page.page + 1)
                st.rerun()

        with st.expander("🗑 Delete an expense"):
            del_id = st.selectbox(
                "Expense",
                [r.id for r in page.items],
                format_func=lambda i: safe_record(page.items, i)
                .map(lambda r: f"#{r.id} {r.description} ({format_rupees(r.amount)})")
                .get_or_else(f"#{i}"),
            )
            if st.button("Delete", key="btn_delete"):
                try:
                    deleted = service.delete_record(del_id)
                except PersistenceError as e:
                    st.error(f"Failed to delete expense: {e}")
                else:
                    if deleted:
                        st.success("Expense deleted")
                        st.rerun()
                    else:
                        st.warning("Expense not found")

        csv = records_to_df(service.list_records()).drop(columns=["amount (₹)"], errors="ignore").to_csv(index=False)
        st.download_button("⬇ Download CSV", csv, file_name="expenses.csv", mime="text/csv")

elif menu == "📊 Statistics":
    st.title("📊 Statistics")

    period_label = st.radio("Period", list(STAT_PERIODS), horizontal=True)
    period = STAT_PERIODS[period_label]
    start = end = None
    if period is Period.CUSTOM:
        rng = st.date_input("Range", value=(now.date(), now.date()), key="stats_range")
        if len(rng) == 2:
            start, end = rng

    stats = service.period_stats(period, now, start, end)
    trend = service.daily_trend(period, now, start, end)

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Spending", format_rupees(stats.total_spending))
    with k2:
        st.metric("Average Daily", format_rupees(stats.average_daily))
    with k3:
        h = stats.highest_expense
        st.metric("Highest Expense", format_rupees(h.amount), h.description, delta_color="off")

    col_left, col_right = st.columns(2)
    with col_left:
        df_cat = distribution_df(stats.category_distribution, "Category")
        if df_cat["Amount"].sum() > 0:
            fig_cat = px.pie(
                df_cat,
                values="Amount",
                names="Category",
                title="Category Distribution",
                color="Category",
                color_discrete_map=CATEGORY_COLORS,
            )
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses in this period")
    with col_right:
        df_pay = distribution_df(stats.payment_distribution, "Mode")
        fig_pay = px.bar(df_pay, x="Mode", y="Amount", title="Payment Methods", template="plotly_dark")
        st.plotly_chart(fig_pay, use_container_width=True)

    if trend:
        fig_trend = go.Figure()
        fig_trend.add_trace(go.Scatter(
            x=[p.date.strftime("%b %d") for p in trend],
            y=[p.total / 100 for p in trend],
            mode="lines+markers",
            name="Daily spend",
        ))
        fig_trend.update_layout(title="Daily Trend", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_trend, use_container_width=True)

    st.subheader("💸 Top Expenses")
    if stats.top_expenses:
        df_top = records_to_df(stats.top_expenses)
        disp = df_top[["date", "description", "category", "paymentMode", "amount"]].copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d")
        disp["amount"] = disp["amount"].map(format_rupees)
        st.table(disp.reset_index(drop=True))
    else:
        st.info("No expenses to display.")

    st.download_button(
        "⬇ Download Statistics JSON",
        json.dumps(stats_to_dict(stats), indent=2),
        file_name="statistics.json",
        mime="application/json",
    )

"""
Expense Dashboard page.
Spending totals by period and category, with monthly trends.
"""

import streamlit as st
import plotly.express as px
import pandas as pd
import logging
import sys
from pathlib import Path

# Add src directory to path
src_path = Path(__file__).parent.parent
sys.path.insert(0, str(src_path))

from receipt_directory.algorithms import ExpenseAnalytics
from receipt_directory.formatting import format_currency, CATEGORY_COLORS

logger = logging.getLogger(__name__)

PERIOD_LABELS = {
    "month": "This Month",
    "quarter": "This Quarter",
    "year": "This Year",
    "all": "All Time",
}


def main():
    """Main function for the Expense Dashboard page."""
    st.title("📊 Expense Dashboard")
    st.markdown("Where the money goes, by category and month")

    if 'expense_store' not in st.session_state:
        st.error("Expense store not initialized. Please return to the main page.")
        return

    expense_store = st.session_state.expense_store

    if 'analytics' not in st.session_state:
        st.session_state.analytics = ExpenseAnalytics()

    analytics = st.session_state.analytics

    try:
        expenses = expense_store.get_all_expenses()

        if not expenses:
            st.info("📝 No expenses recorded yet.")
            return

        period = st.radio(
            "Period",
            options=list(PERIOD_LABELS),
            format_func=PERIOD_LABELS.get,
            horizontal=True
        )

        stats = analytics.calculate_stats(expenses, period)

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Total Expenses", format_currency(stats.total, whole_dollars=False))
        with col2:
            st.metric("Entries", stats.count)
        with col3:
            top_category = max(stats.by_category.items(), key=lambda item: item[1])
            st.metric("Top Category", top_category[0] if top_category[1] > 0 else "N/A")

        st.markdown("---")

        col1, col2 = st.columns(2)

        with col1:
            categories_df = pd.DataFrame([
                {"Category": category, "Amount": float(amount)}
                for category, amount in stats.by_category.items()
                if amount > 0
            ])

            if categories_df.empty:
                st.info(f"No expenses for {PERIOD_LABELS[period].lower()}")
            else:
                fig_pie = px.pie(
                    categories_df,
                    values="Amount",
                    names="Category",
                    title="Spending by Category",
                    color="Category",
                    color_discrete_map=CATEGORY_COLORS
                )
                st.plotly_chart(fig_pie, use_container_width=True)

        with col2:
            monthly_df = analytics.monthly_totals(expenses)
            if not monthly_df.empty:
                fig_bar = px.bar(
                    monthly_df,
                    x="month",
                    y="total",
                    title="Monthly Spending",
                    labels={"month": "Month", "total": "Amount ($)"},
                    hover_data=["count"]
                )
                st.plotly_chart(fig_bar, use_container_width=True)

    except Exception as e:
        logger.error(f"Dashboard error: {str(e)}")
        st.error(f"Error loading dashboard: {str(e)}")

if __name__ == "__main__":
    main()

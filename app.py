"""
Predictive Inventory Dashboard

A Streamlit dashboard for restock forecasts and sales rankings.
Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from forecasting import (
    check_data_sufficiency,
    filter_predictions,
    generate_inventory_predictions,
    get_best_sellers,
    get_slow_movers,
    predictions_to_frame,
    settings,
    sort_predictions,
    summarize_urgency,
)
from forecasting.logger import setup_logger
from forecasting.sufficiency import MIN_DATA_AGE_DAYS
from forecasting.views import SORT_OPTIONS, TIME_FILTERS
from stores.warehouse_export import WarehouseExportLoader

setup_logger()

# Page config
st.set_page_config(
    page_title="Predictive Inventory",
    page_icon="📦",
    layout="wide",
)

st.title("📦 Inventory Forecasting")
st.caption("Restock predictions from weekly usage trends")


@st.cache_data
def load_data(data_dir: str):
    """Load exports and compute predictions (cached for performance)."""
    data = WarehouseExportLoader(Path(data_dir)).load_all()

    sufficiency = check_data_sufficiency(data.transactions)
    predictions = generate_inventory_predictions(
        data.items,
        data.transactions,
        window_days=settings.FORECAST_WINDOW_DAYS,
        min_transactions_required=settings.MIN_TRANSACTIONS_REQUIRED,
    )

    # Rankings don't depend on the sufficiency gate
    best_sellers = get_best_sellers(data.transactions, data.items, predictions)
    slow_movers = get_slow_movers(data.transactions, data.items, predictions)

    return data, sufficiency, predictions, best_sellers, slow_movers


with st.spinner("Loading data..."):
    data, sufficiency, predictions, best_sellers, slow_movers = load_data(str(settings.DATA_DIR))

if st.button("🔄 Refresh Analysis"):
    load_data.clear()
    st.rerun()

# --- Sufficiency ---
if not sufficiency.has_sufficient_data:
    st.warning(sufficiency.message)
    st.progress(
        min(sufficiency.data_age / MIN_DATA_AGE_DAYS, 1.0),
        text=f"{sufficiency.data_age} of {MIN_DATA_AGE_DAYS} days collected, {sufficiency.days_until_ready} to go",
    )
else:
    st.success(sufficiency.message)

    # --- Urgency Summary ---
    counts = summarize_urgency(predictions)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("🔴 Critical", counts["critical"], delta="Restock within a week", delta_color="off")
    with col2:
        st.metric("🟠 Replenish Soon", counts["warning"], delta="Within two weeks", delta_color="off")
    with col3:
        st.metric("🟢 Optimal", counts["normal"], delta="Balanced inventory", delta_color="off")

    st.divider()

    # --- Prediction Table ---
    st.subheader("🚨 Restock Queue")

    filter_col1, filter_col2, filter_col3 = st.columns([2, 1, 1])
    with filter_col1:
        search_term = st.text_input("Search by product or SKU")
    with filter_col2:
        time_filter = st.selectbox("Show", TIME_FILTERS)
    with filter_col3:
        sort_by = st.selectbox("Sort by", SORT_OPTIONS)

    shown = sort_predictions(filter_predictions(predictions, search_term, time_filter), sort_by)

    if shown:
        display_df = predictions_to_frame(shown)[
            [
                "sku",
                "name",
                "current_stock",
                "weekly_usage_rate",
                "days_until_restock",
                "predicted_restock_date",
                "restock_urgency",
                "confidence",
                "suggested_order_quantity",
            ]
        ]
        display_df.columns = [
            "SKU",
            "Product",
            "Stock",
            "Weekly Usage",
            "Days Left",
            "Restock By",
            "Urgency",
            "Confidence",
            "Reorder Qty",
        ]
        display_df["Restock By"] = pd.to_datetime(display_df["Restock By"]).dt.strftime("%Y-%m-%d")

        urgency_emoji = {"critical": "🔴", "warning": "🟠", "normal": "🟢"}
        display_df["Urgency"] = display_df["Urgency"].apply(lambda x: f"{urgency_emoji[x]} {x.upper()}")

        st.dataframe(
            display_df,
            use_container_width=True,
            hide_index=True,
            column_config={
                "Stock": st.column_config.NumberColumn(format="%d"),
                "Weekly Usage": st.column_config.NumberColumn(format="%.1f"),
                "Confidence": st.column_config.ProgressColumn(format="%d%%", min_value=0, max_value=100),
            },
        )
        st.caption(f"Showing {len(shown)} of {len(predictions)} products")
    else:
        st.info("No predictions match the current filters")

st.divider()

# --- Rankings ---
left_col, right_col = st.columns(2)


def ranking_chart(ranked, title: str, color: str) -> go.Figure:
    fig = go.Figure(
        data=[
            go.Bar(
                x=[r.total_sold for r in ranked],
                y=[r.name or r.sku for r in ranked],
                orientation="h",
                marker_color=color,
                text=[f"{r.current_stock} in stock" for r in ranked],
                textposition="auto",
            )
        ]
    )
    fig.update_layout(
        title=title,
        height=300,
        margin=dict(t=40, b=20, l=20, r=20),
        xaxis_title="Units sold",
        yaxis=dict(autorange="reversed"),
    )
    return fig


with left_col:
    st.subheader("📈 Best Selling Items")
    if best_sellers:
        st.plotly_chart(ranking_chart(best_sellers, "Top 5 by units sold", "#2ecc71"), use_container_width=True)
    else:
        st.info("No sales data available")

with right_col:
    st.subheader("🐌 Slow Moving Items")
    if slow_movers:
        st.plotly_chart(ranking_chart(slow_movers, "Lowest sold-to-stock ratio", "#e74c3c"), use_container_width=True)
    else:
        st.info("No slow movers identified")

# --- Data Quality ---
with st.expander("📋 View Data Quality Report"):
    report = data.quality_reports["transactions"]
    if report.issues:
        for issue in report.issues:
            icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
            st.markdown(f"{icon} {issue.column}: {issue.description}")
    else:
        st.markdown("✅ No issues found")

# --- Footer ---
st.divider()
st.caption(
    f"Products: {len(data.items):,} | "
    f"Transactions: {len(data.transactions):,} usable of {len(data.raw_transactions):,} | "
    f"Window: {settings.FORECAST_WINDOW_DAYS} days"
)

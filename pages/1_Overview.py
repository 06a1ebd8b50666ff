"""
Overview Dashboard - Streamlit Page
Filename: pages/1_Overview.py
"""
import sys
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from plotly.subplots import make_subplots

# Add parent directory to path for imports
ROOT = Path(__file__).parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gamestats.config import DEFAULT_GROUPS, DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, configure_logging
from gamestats.csv_codec import encode_daily_statistics, is_money_key, is_rate_key
from gamestats.metrics import check_identities, daily_totals
from gamestats.state import get_state
from gamestats.statistics import (
    COLUMN_LABELS,
    INTEGER_COLUMNS,
    METRIC_GROUPS,
    TOTAL_LABEL,
    date_sort_key,
    statistics_frame,
    visible_columns,
)
from gamestats.ui.components import apply_styles, date_range_filter, kpi_row, paginate, render_data_menu
from gamestats.utils import fmt_currency, fmt_number, fmt_percent, filter_by_date_range

configure_logging()

st.set_page_config(page_title="数据概览", page_icon="📊", layout="wide")

# Chart colors
REVENUE = "#4f46e5"
USERS = "#94a3b8"


def column_title(key: str) -> str:
    """'新用户分析 · 付费人数' for grouped metrics, the plain label otherwise."""
    for name, group in METRIC_GROUPS.items():
        if key in group["columns"] and name != "overview":
            return f"{group['label']} · {COLUMN_LABELS[key]}"
    return COLUMN_LABELS[key]


def format_table(df: pd.DataFrame) -> pd.DataFrame:
    """Render numeric columns as display text ('¥12.00', '3.45%', '1,024')."""
    out = pd.DataFrame({"date": df["date"]})
    for col in df.columns:
        if col == "date":
            continue
        if is_rate_key(col):
            out[col] = df[col].map(fmt_percent)
        elif is_money_key(col):
            out[col] = df[col].map(fmt_currency)
        elif col in INTEGER_COLUMNS:
            out[col] = df[col].map(fmt_number)
        else:
            out[col] = df[col]
    return out.rename(columns={c: column_title(c) for c in out.columns})


def highlight_totals(row: pd.Series):
    is_total = row.iloc[0] == TOTAL_LABEL
    return ["font-weight: 600; background-color: #f1f5f9" if is_total else "" for _ in row]


def render_column_picker() -> tuple:
    """Sidebar '筛选数据': metric groups, then individual metrics per group."""
    with st.sidebar:
        st.header("🔎 筛选数据")
        groups = st.multiselect(
            "选择分组",
            options=list(METRIC_GROUPS),
            default=DEFAULT_GROUPS,
            format_func=lambda g: METRIC_GROUPS[g]["label"],
            key="overview_groups",
        )
        picked = []
        for name in groups:
            group = METRIC_GROUPS[name]
            picked += st.multiselect(
                group["label"],
                options=group["columns"],
                default=group["columns"],
                format_func=lambda c: COLUMN_LABELS[c],
                key=f"overview_cols_{name}",
            )
        page_size = st.selectbox(
            "每页条数",
            PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(DEFAULT_PAGE_SIZE),
            key="overview_page_size",
        )
    return visible_columns(groups, picked), page_size


def render_trend(records):
    """Daily revenue (line) against active users (bars)."""
    if not records:
        return
    ordered = sorted(records, key=lambda r: date_sort_key(r.date))
    dates = [r.date for r in ordered]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(
        go.Bar(x=dates, y=[r.active_users for r in ordered], name="活跃用户", marker_color=USERS, opacity=0.6),
        secondary_y=False,
    )
    fig.add_trace(
        go.Scatter(x=dates, y=[r.total_revenue for r in ordered], name="总充值金额", mode="lines+markers",
                   line=dict(color=REVENUE, width=2)),
        secondary_y=True,
    )
    fig.update_layout(
        height=320,
        margin=dict(l=10, r=10, t=30, b=10),
        legend=dict(orientation="h", y=1.12),
        plot_bgcolor="rgba(0,0,0,0)",
    )
    fig.update_yaxes(title_text="活跃用户", secondary_y=False)
    fig.update_yaxes(title_text="¥", secondary_y=True)
    st.plotly_chart(fig, use_container_width=True)


def main():
    apply_styles()
    state = get_state()

    st.title("📊 数据概览")

    columns, page_size = render_column_picker()

    col_filter, col_menu = st.columns([3, 1])
    with col_filter:
        start, end = date_range_filter("overview_range")

    filtered = filter_by_date_range(state.statistics, start, end)
    rows = sorted(filtered, key=lambda r: date_sort_key(r.date), reverse=True)
    totals = daily_totals(rows)
    table = statistics_frame([totals] + rows, columns)

    with col_menu:
        render_data_menu(state, encode_daily_statistics(state.statistics), table, kind="daily")

    if not rows:
        st.info("所选时间范围内没有数据。")
        return

    kpi_row([
        ("活跃用户", fmt_number(totals.active_users)),
        ("付费人数", fmt_number(totals.paying_users)),
        ("总充值金额", fmt_currency(totals.total_revenue)),
        ("ARPU", fmt_currency(totals.arpu)),
        ("付费ARPU", fmt_currency(totals.paying_arpu)),
        ("活跃付费率", fmt_percent(totals.active_pay_rate)),
    ])

    inconsistent = [r.date for r in rows if check_identities(r)]
    if inconsistent:
        st.warning(
            f"⚠️ {len(inconsistent)} 条记录的派生字段与基础字段不一致 "
            f"(活跃用户 / 老用户付费人数 / 老用户付费金额): {', '.join(inconsistent[:5])}"
            + (" ..." if len(inconsistent) > 5 else "")
        )

    render_trend(rows)

    # Totals row stays on top of every page
    page = paginate(table.iloc[1:], page_size, key="overview_page")
    display = format_table(pd.concat([table.iloc[:1], page]))
    st.dataframe(
        display.style.apply(highlight_totals, axis=1),
        hide_index=True,
        use_container_width=True,
    )


if __name__ == "__main__":
    main()

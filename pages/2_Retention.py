"""
Retention Dashboard - Streamlit Page
Filename: pages/2_Retention.py
"""
import sys
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# Add parent directory to path for imports
ROOT = Path(__file__).parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gamestats.config import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, RetentionViewConfig, configure_logging
from gamestats.csv_codec import encode_retention
from gamestats.mock_data import RetentionConfig, generate_retention
from gamestats.retention import build_retention_rows, parse_horizons, retention_export_rows, retention_totals
from gamestats.state import AppState, get_state
from gamestats.statistics import TOTAL_LABEL, is_numeric, retention_frame
from gamestats.ui.components import apply_styles, date_range_filter, kpi_row, paginate, render_data_menu
from gamestats.utils import fmt_number, fmt_retention, filter_by_date_range

configure_logging()

st.set_page_config(page_title="留存分析", page_icon="🔁", layout="wide")

VIEW = RetentionViewConfig()
CURVE = "#16a34a"


def render_parameters() -> tuple:
    """Sidebar '参数展示': retention horizons and number of days shown."""
    with st.sidebar:
        st.header("⚙️ 参数设置")
        text = st.text_input(
            "留存天数（用逗号分隔）",
            value=",".join(str(h) for h in VIEW.horizons),
            key="retention_horizons",
        )
        horizons = parse_horizons(text)
        if not horizons:
            st.warning("未识别到有效的留存天数，已使用默认值")
            horizons = list(VIEW.horizons)

        display_days = st.number_input(
            "展示天数",
            min_value=VIEW.min_display_days,
            max_value=VIEW.max_display_days,
            value=VIEW.display_days,
            key="retention_display_days",
        )
        page_size = st.selectbox(
            "每页条数",
            PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(DEFAULT_PAGE_SIZE),
            key="retention_page_size",
        )
    return horizons, int(display_days), page_size


def format_table(rows, horizons) -> pd.DataFrame:
    """Display text per cell; '-' for missing horizons."""
    records = []
    for row in rows:
        rec = {"日期": row.date, "新增用户": fmt_number(row.new_users)}
        for h in horizons:
            rec[f"{h}日留存"] = fmt_retention(row.retention.get(h))
        records.append(rec)
    return pd.DataFrame(records)


def highlight_totals(row: pd.Series):
    is_total = row.iloc[0] == TOTAL_LABEL
    return ["font-weight: 600; background-color: #f1f5f9" if is_total else "" for _ in row]


def render_curve(totals, horizons):
    """Weighted average retention by horizon."""
    points = [(h, totals.retention[h]) for h in horizons if is_numeric(totals.retention.get(h))]
    if not points:
        return
    fig = go.Figure(go.Scatter(
        x=[f"{h}日" for h, _ in points],
        y=[v for _, v in points],
        mode="lines+markers",
        line=dict(color=CURVE, width=2),
        hovertemplate="%{x}: %{y:.2f}%<extra></extra>",
    ))
    fig.update_layout(
        height=300,
        margin=dict(l=10, r=10, t=30, b=10),
        yaxis=dict(title="留存率 (%)", rangemode="tozero"),
        plot_bgcolor="rgba(0,0,0,0)",
    )
    st.plotly_chart(fig, use_container_width=True)


def retention_actions(horizons):
    def _generate(state: AppState):
        if st.button("🔁 生成留存数据", key="retention_generate", use_container_width=True):
            try:
                records = generate_retention(state.statistics, RetentionConfig(horizons=horizons))
            except ValueError as e:
                st.error(f"无法生成留存数据: {e}")
                return
            state.replace(records, source="retention")
            st.toast("已为当前数据生成留存曲线")
            st.rerun()
    return _generate


def main():
    apply_styles()
    state = get_state()

    st.title("🔁 留存分析")

    horizons, display_days, page_size = render_parameters()

    col_filter, col_menu = st.columns([3, 1])
    with col_filter:
        start, end = date_range_filter("retention_range")

    filtered = filter_by_date_range(state.statistics, start, end)
    rows = build_retention_rows(filtered, horizons, display_days)
    totals = retention_totals(rows, horizons)

    with col_menu:
        render_data_menu(
            state,
            encode_retention(retention_export_rows(state.statistics)),
            retention_frame([totals] + rows, horizons),
            kind="retention",
            extra_actions=retention_actions(horizons),
        )

    if not rows:
        st.info("所选时间范围内没有数据。")
        return

    kpi_row([
        ("新增用户", fmt_number(totals.new_users)),
        (f"{horizons[0]}日留存", fmt_retention(totals.retention.get(horizons[0]))),
        (f"{horizons[-1]}日留存", fmt_retention(totals.retention.get(horizons[-1]))),
        ("展示天数", str(len(rows))),
    ])

    render_curve(totals, horizons)

    # Totals row stays on top of every page
    table = format_table([totals] + rows, horizons)
    page = paginate(table.iloc[1:], page_size, key="retention_page")
    display = pd.concat([table.iloc[:1], page])
    st.dataframe(
        display.style.apply(highlight_totals, axis=1),
        hide_index=True,
        use_container_width=True,
    )

    st.caption("“-” 表示暂无数据")


if __name__ == "__main__":
    main()

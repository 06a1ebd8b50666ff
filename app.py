"""
Game Statistics Dashboard - Main Entry Point
Daily operations metrics & cohort retention
"""
import logging
from pathlib import Path

import pandas as pd
import streamlit as st

from gamestats.config import APP_TITLE, PAGE_ICON, configure_logging
from gamestats.metrics import daily_totals
from gamestats.state import get_state
from gamestats.statistics import date_sort_key
from gamestats.ui.components import apply_styles, kpi_row
from gamestats.utils import calculate_trend, fmt_currency, fmt_number, fmt_percent

configure_logging()
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title=APP_TITLE,
    page_icon=PAGE_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #0F172A;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #6B7280;
        margin-bottom: 2rem;
    }
    div[data-testid="stButton"] > button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def find_page(keyword):
    """Find a page file containing the keyword."""
    pages_dir = Path(__file__).parent / "pages"
    if pages_dir.exists():
        for f in pages_dir.iterdir():
            if f.suffix == '.py' and keyword.lower() in f.name.lower():
                return f"pages/{f.name}"
    return None


def main():
    apply_styles()
    st.markdown(f'<p class="main-header">{PAGE_ICON} {APP_TITLE}</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">每日运营数据 · 付费分析 · 留存分析</p>',
        unsafe_allow_html=True
    )

    state = get_state()

    # Data status in sidebar
    with st.sidebar:
        st.header("📁 数据状态")
        if state.statistics:
            st.success(f"已加载 {len(state)} 条记录")
        else:
            st.warning("暂无数据")
        st.caption(f"来源: {state.source}")
        if state.updated_at is not None:
            st.caption(f"更新时间: {state.updated_at:%Y-%m-%d %H:%M:%S}")

    st.markdown("---")

    if state.statistics:
        records = sorted(state.statistics, key=lambda r: date_sort_key(r.date))
        totals = daily_totals(records)
        revenue = pd.Series([r.total_revenue for r in records], dtype="float64")
        direction, delta = calculate_trend(revenue)

        kpi_row([
            ("日期范围", f"{records[0].date} ~ {records[-1].date}"),
            ("活跃用户(合计)", fmt_number(totals.active_users)),
            ("总充值金额", fmt_currency(totals.total_revenue)),
            ("ARPU", fmt_currency(totals.arpu)),
            ("活跃付费率", fmt_percent(totals.active_pay_rate)),
            ("近7日收入趋势", f"{direction} {delta:+.1%}"),
        ])

    st.markdown("### 🚀 选择看板")

    overview_page = find_page("overview")
    retention_page = find_page("retention")

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("#### 📊 数据概览")
        st.markdown("""
        每日运营指标:
        - **新增 / 老用户 / 活跃用户**
        - **付费人数、充值金额、ARPU、付费率**
        - 新用户与老用户的付费拆分

        支持时间筛选、指标分组、CSV 导入导出与模拟数据。
        """)
        if overview_page:
            if st.button("📊 打开数据概览", key="btn_overview", use_container_width=True):
                st.switch_page(overview_page)
        else:
            st.info("Page: 1_Overview")

    with col2:
        st.markdown("#### 🔁 留存分析")
        st.markdown("""
        按新增日期的留存曲线:
        - 自定义留存天数 (2日、7日、30日 ...)
        - 按新增用户加权的合计留存
        - 留存 CSV 导入导出
        """)
        if retention_page:
            if st.button("🔁 打开留存分析", key="btn_retention", use_container_width=True):
                st.switch_page(retention_page)
        else:
            st.info("Page: 2_Retention")


if __name__ == "__main__":
    main()

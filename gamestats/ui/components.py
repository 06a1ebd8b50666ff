from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

import pandas as pd
import streamlit as st

from gamestats.csv_codec import export_filename
from gamestats.data_loader import load_daily_statistics, load_retention
from gamestats.io.export import export_csv, export_to_excel
from gamestats.mock_data import TargetConfig, generate_random_statistics, generate_target_statistics
from gamestats.state import AppState
from gamestats.utils import clamp_page, page_count

logger = logging.getLogger(__name__)


STYLES = """
<style>
    .kpi-row { display: flex; gap: 0.75rem; margin: 0.5rem 0 1rem 0; }
    .kpi {
        flex: 1;
        background: #F9FAFB;
        border: 1px solid #E5E7EB;
        border-radius: 12px;
        padding: 0.75rem 0.9rem;
    }
    .kpi-label { font-size: 0.75rem; color: #6B7280; }
    .kpi-value { font-size: 1.25rem; font-weight: 600; color: #0F172A; }
</style>
"""


def apply_styles():
    st.markdown(STYLES, unsafe_allow_html=True)


def kpi_row(items: list[tuple[str, str]]):
    cells = "".join(
        f"<div class='kpi'><div class='kpi-label'>{label}</div><div class='kpi-value'>{value}</div></div>"
        for label, value in items
    )
    st.markdown(f"<div class='kpi-row'>{cells}</div>", unsafe_allow_html=True)


def date_range_filter(key: str) -> tuple[Optional[date], Optional[date]]:
    """'时间范围' picker; returns (None, None) until a full range is chosen."""
    picked = st.date_input("时间范围", value=(), key=key)
    if isinstance(picked, (list, tuple)) and len(picked) == 2:
        return picked[0], picked[1]
    return None, None


def _import_once(state: AppState, uploaded, loader: Callable, key: str, source: str):
    # The uploader keeps its file across reruns; import each upload only once.
    marker = f"{uploaded.name}:{uploaded.size}"
    if st.session_state.get(key) == marker:
        return
    st.session_state[key] = marker

    records = loader(uploaded.getvalue())
    if records is None:
        return
    state.replace(records, source=f"{source}:{uploaded.name}")
    st.toast("数据导入成功")
    st.rerun()


def _target_form(state: AppState, key: str):
    defaults = TargetConfig()
    with st.form(key=f"{key}_target_form"):
        st.markdown("**生成指定收入数据**")
        period = st.date_input("时间范围", value=(defaults.start, defaults.end))
        target = st.number_input("总收入目标 (¥)", min_value=0.0, value=defaults.target_revenue, step=1000.0)
        fluctuation = st.number_input("日收入波动范围 (%)", min_value=0.0, max_value=100.0, value=defaults.fluctuation)
        c1, c2 = st.columns(2)
        arpu_lo = c1.number_input("ARPU 下限", min_value=0.01, value=defaults.arpu_range[0])
        arpu_hi = c2.number_input("ARPU 上限", min_value=0.01, value=defaults.arpu_range[1])
        c3, c4 = st.columns(2)
        parpu_lo = c3.number_input("付费ARPU 下限", min_value=0.01, value=defaults.paying_arpu_range[0])
        parpu_hi = c4.number_input("付费ARPU 上限", min_value=0.01, value=defaults.paying_arpu_range[1])
        submitted = st.form_submit_button("生成")

    if not submitted:
        return
    if not isinstance(period, (list, tuple)) or len(period) != 2:
        st.error("请选择完整的时间范围")
        return

    cfg = TargetConfig(
        start=period[0],
        end=period[1],
        target_revenue=target,
        fluctuation=fluctuation,
        arpu_range=(arpu_lo, arpu_hi),
        paying_arpu_range=(parpu_lo, parpu_hi),
    )
    try:
        records = generate_target_statistics(cfg)
    except ValueError as e:
        logger.warning("Target generation rejected: %s", e)
        st.error(f"参数错误: {e}")
        return

    state.replace(records, source="target")
    st.toast(f"已生成 {cfg.start:%Y-%m-%d} 至 {cfg.end:%Y-%m-%d} 的模拟数据")
    st.rerun()


def render_data_menu(
    state: AppState,
    export_text: str,
    table: pd.DataFrame,
    kind: str = "daily",
    extra_actions: Optional[Callable[[AppState], None]] = None,
):
    """
    Import / export / generate menu shared by both dashboards.

    `kind` selects the CSV encoding used on import ('daily' or 'retention');
    `export_text` is the already-encoded CSV for the download button.
    """
    key = f"menu_{kind}"
    with st.popover("⋯ 数据操作", use_container_width=True):
        if st.button("🎲 生成模拟数据", key=f"{key}_random", use_container_width=True):
            state.replace(generate_random_statistics(days=30), source="random")
            st.toast("已生成30天的模拟数据")
            st.rerun()

        if extra_actions is not None:
            extra_actions(state)

        with st.expander("📈 生成总计数据"):
            _target_form(state, key)

        st.divider()
        uploaded = st.file_uploader("📥 导入数据", type=["csv"], key=f"{key}_upload")
        if uploaded is not None:
            loader = load_retention if kind == "retention" else load_daily_statistics
            _import_once(state, uploaded, loader, key=f"{key}_imported", source=kind)

        st.divider()
        if export_text:
            st.download_button(
                "📤 导出数据 (CSV)",
                export_csv(export_text),
                file_name=export_filename(),
                mime="text/csv",
                key=f"{key}_csv",
                use_container_width=True,
            )
            st.download_button(
                "📊 导出当前表格 (Excel)",
                export_to_excel(table, sheet_name=kind),
                file_name=export_filename().replace(".csv", ".xlsx"),
                key=f"{key}_xlsx",
                use_container_width=True,
            )
        else:
            st.caption("暂无可导出的数据")


def paginate(df: pd.DataFrame, page_size: int, key: str) -> pd.DataFrame:
    """Slice `df` to one page and show '共 N 条数据' with a page picker."""
    n_pages = page_count(len(df), page_size)
    # A filter or import can leave fewer pages than the picker remembers.
    st.session_state[key] = clamp_page(st.session_state.get(key, 1), n_pages)
    c1, c2 = st.columns([3, 1])
    page = c2.number_input("页码", min_value=1, max_value=n_pages, key=key)
    c1.caption(f"共 {len(df)} 条数据")
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size]

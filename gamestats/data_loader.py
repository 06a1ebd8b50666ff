"""
Data loading utilities for uploaded CSV files
"""
from __future__ import annotations

import logging
from typing import List, Optional

import streamlit as st

from .csv_codec import CsvFormatError, decode_daily_statistics, decode_retention, retention_to_daily
from .statistics import DailyStatistics

logger = logging.getLogger(__name__)


def read_text(data: bytes) -> str:
    """Decode uploaded bytes as UTF-8, dropping a leading BOM."""
    return data.decode("utf-8-sig")


def parse_daily_statistics(data: bytes) -> List[DailyStatistics]:
    """Uploaded bytes -> daily records. Raises CsvFormatError / UnicodeDecodeError."""
    return decode_daily_statistics(read_text(data))


def parse_retention(data: bytes) -> List[DailyStatistics]:
    """Uploaded retention bytes -> daily-shaped records, newest first."""
    return retention_to_daily(decode_retention(read_text(data)))


def _load(parse, data: bytes, kind: str) -> Optional[List[DailyStatistics]]:
    if data is None:
        return None

    try:
        records = parse(data)
    except (CsvFormatError, UnicodeDecodeError) as e:
        logger.warning("Rejected %s import: %s", kind, e)
        st.error(f"文件解析失败: {e}")
        return None

    if not records:
        logger.warning("Rejected %s import: no data rows", kind)
        st.error("文件格式错误")
        return None

    logger.info("Parsed %d %s record(s)", len(records), kind)
    return records


@st.cache_data(show_spinner="正在解析数据...")
def load_daily_statistics(data: bytes) -> Optional[List[DailyStatistics]]:
    """Load a daily-statistics CSV upload; None (with an error shown) if rejected."""
    return _load(parse_daily_statistics, data, "daily statistics")


@st.cache_data(show_spinner="正在解析留存数据...")
def load_retention(data: bytes) -> Optional[List[DailyStatistics]]:
    """Load a retention CSV upload; None (with an error shown) if rejected."""
    return _load(parse_retention, data, "retention")

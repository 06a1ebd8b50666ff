"""
Shared display and filtering helpers for the statistics dashboards
"""
from __future__ import annotations

import math
from datetime import date
from typing import List, Optional, Sequence, TypeVar

import pandas as pd

from .statistics import MISSING, is_numeric, is_total_label

T = TypeVar("T")


def _is_blank(x) -> bool:
    return x is None or x is MISSING or pd.isna(x) or (isinstance(x, float) and math.isinf(x))


def fmt_currency(x, prefix="¥", decimals=2):
    """Format number as currency; NaN/Infinity render as '-'."""
    if _is_blank(x):
        return "-"
    return f"{prefix}{x:,.{decimals}f}"


def fmt_percent(x, decimals=2):
    """Format a value that is already a percentage (12.3 -> '12.30%')."""
    if _is_blank(x):
        return "-"
    return f"{x:,.{decimals}f}%"


def fmt_number(x, decimals=0):
    """Format number with commas."""
    if _is_blank(x):
        return "-"
    return f"{x:,.{decimals}f}"


def fmt_retention(value):
    """Retention cell: '-' for MISSING, else a percentage."""
    if not is_numeric(value):
        return "-"
    return f"{float(value):.2f}%"


def calculate_trend(values: pd.Series, periods: int = 7) -> tuple:
    """
    Compare the latest `periods` values with the `periods` before them.

    Returns (direction, delta_pct) where direction is '↑', '↓', or '→'
    """
    values = values.dropna()
    if len(values) < 2:
        return "→", 0.0

    n = min(periods, len(values) // 2)
    if n < 1:
        return "→", 0.0

    recent = values.iloc[-n:].sum()
    prior = values.iloc[-2*n:-n].sum()

    if prior == 0:
        return "→", 0.0

    delta_pct = (recent - prior) / abs(prior)

    if delta_pct > 0.05:
        direction = "↑"
    elif delta_pct < -0.05:
        direction = "↓"
    else:
        direction = "→"

    return direction, delta_pct


def filter_by_date_range(records: Sequence[T], start: Optional[date] = None, end: Optional[date] = None) -> List[T]:
    """
    Records whose date falls in [start, end], both ends inclusive.

    Either bound may be None. Totals rows and unparseable dates are dropped
    once any bound is set.
    """
    if start is None and end is None:
        return list(records)

    result = []
    for record in records:
        if is_total_label(record.date):
            continue
        ts = pd.to_datetime(record.date, errors="coerce")
        if pd.isna(ts):
            continue
        day = ts.date()
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        result.append(record)
    return result


def page_count(n_rows: int, page_size: int) -> int:
    """Number of table pages; an empty table still has one."""
    return max(1, -(-n_rows // page_size))


def clamp_page(page, n_pages: int) -> int:
    """Pull a remembered page number back into 1..n_pages."""
    return min(max(1, int(page)), n_pages)

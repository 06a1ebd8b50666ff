"""
Record model for daily game statistics and cohort retention
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd


class Missing(Enum):
    """No data for a retention horizon (shown as '-'), distinct from zero."""
    MISSING = "-"

    def __str__(self):
        return self.value


MISSING = Missing.MISSING

TOTAL_LABEL = "合计"
TOTAL_ALIASES = (TOTAL_LABEL, "Total")

RetentionValue = Union[float, Missing]


# =============================================================================
# Column schema
# =============================================================================

# Wire keys of the fixed 17-column export, in order.
DAILY_COLUMNS = [
    "date",
    "newUsers",
    "oldUsers",
    "activeUsers",
    "payingUsers",
    "totalRevenue",
    "arpu",
    "payingArpu",
    "activePayRate",
    "newUserPaying",
    "newUserRevenue",
    "newUserArpu",
    "newUserPayRate",
    "oldUserPaying",
    "oldUserRevenue",
    "oldUserArpu",
    "oldUserPayRate",
]

DAILY_HEADERS = [
    "日期",
    "新增用户",
    "老用户",
    "活跃用户",
    "付费人数",
    "总充值金额",
    "ARPU",
    "付费ARPU",
    "活跃付费率",
    "新用户付费人数",
    "新用户付费金额",
    "新用户ARPU",
    "新用户付费率",
    "老用户付费人数",
    "老用户付费金额",
    "老用户ARPU",
    "老用户付费率",
]

INTEGER_COLUMNS = [
    "newUsers", "oldUsers", "activeUsers", "payingUsers",
    "newUserPaying", "oldUserPaying",
]

# Short labels used under a group header in the overview table.
COLUMN_LABELS = {
    "date": "日期",
    "newUsers": "新增用户",
    "oldUsers": "老用户",
    "activeUsers": "活跃用户",
    "payingUsers": "付费人数",
    "totalRevenue": "总充值金额",
    "arpu": "ARPU",
    "payingArpu": "付费ARPU",
    "activePayRate": "付费率",
    "newUserPaying": "付费人数",
    "newUserRevenue": "付费金额",
    "newUserArpu": "ARPU",
    "newUserPayRate": "付费率",
    "oldUserPaying": "付费人数",
    "oldUserRevenue": "付费金额",
    "oldUserArpu": "ARPU",
    "oldUserPayRate": "付费率",
}

METRIC_GROUPS = {
    "overview": {
        "label": "数据概览",
        "columns": [
            "newUsers", "oldUsers", "activeUsers", "payingUsers",
            "totalRevenue", "arpu", "payingArpu", "activePayRate",
        ],
    },
    "newUser": {
        "label": "新用户分析",
        "columns": ["newUserPaying", "newUserRevenue", "newUserArpu", "newUserPayRate"],
    },
    "oldUser": {
        "label": "老用户分析",
        "columns": ["oldUserPaying", "oldUserRevenue", "oldUserArpu", "oldUserPayRate"],
    },
}


def day_key(horizon: int) -> str:
    return f"day{horizon}"


def parse_day_key(key: str) -> Optional[int]:
    """Return N for a 'dayN' key, or None if the key is not a horizon."""
    if not key.startswith("day"):
        return None
    suffix = key[3:]
    if not suffix.isdigit():
        return None
    horizon = int(suffix)
    return horizon if horizon > 0 else None


def is_total_label(date: str) -> bool:
    return date in TOTAL_ALIASES


def is_numeric(value) -> bool:
    """True for a real retention percentage (MISSING and NaN are not)."""
    if value is MISSING or isinstance(value, bool):
        return False
    if not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


# =============================================================================
# Records
# =============================================================================

_ATTR_TO_KEY = {
    "date": "date",
    "new_users": "newUsers",
    "old_users": "oldUsers",
    "active_users": "activeUsers",
    "paying_users": "payingUsers",
    "total_revenue": "totalRevenue",
    "arpu": "arpu",
    "paying_arpu": "payingArpu",
    "active_pay_rate": "activePayRate",
    "new_user_paying": "newUserPaying",
    "new_user_revenue": "newUserRevenue",
    "new_user_arpu": "newUserArpu",
    "new_user_pay_rate": "newUserPayRate",
    "old_user_paying": "oldUserPaying",
    "old_user_revenue": "oldUserRevenue",
    "old_user_arpu": "oldUserArpu",
    "old_user_pay_rate": "oldUserPayRate",
}
_KEY_TO_ATTR = {v: k for k, v in _ATTR_TO_KEY.items()}

NAN = float("nan")


@dataclass
class DailyStatistics:
    """
    One row of daily statistics.

    Counts are ints except where an import produced NaN. Fields that were
    never supplied (e.g. rows converted from a retention import) stay NaN.
    `retention` maps horizon N to a percentage or MISSING; an absent key
    means the horizon was never computed for this row.
    """
    date: str
    new_users: float = NAN
    old_users: float = NAN
    active_users: float = NAN
    paying_users: float = NAN
    total_revenue: float = NAN
    arpu: float = NAN
    paying_arpu: float = NAN
    active_pay_rate: float = NAN
    new_user_paying: float = NAN
    new_user_revenue: float = NAN
    new_user_arpu: float = NAN
    new_user_pay_rate: float = NAN
    old_user_paying: float = NAN
    old_user_revenue: float = NAN
    old_user_arpu: float = NAN
    old_user_pay_rate: float = NAN
    retention: Dict[int, RetentionValue] = field(default_factory=dict)

    def get(self, key: str):
        """Look up a value by its wire key ('totalRevenue', 'day7', ...)."""
        attr = _KEY_TO_ATTR.get(key)
        if attr is not None:
            return getattr(self, attr)
        horizon = parse_day_key(key)
        if horizon is None:
            raise KeyError(key)
        return self.retention.get(horizon)

    def to_dict(self) -> dict:
        row = {key: getattr(self, attr) for attr, key in _ATTR_TO_KEY.items()}
        for horizon, value in self.retention.items():
            row[day_key(horizon)] = value
        return row

    @classmethod
    def from_dict(cls, row: dict) -> "DailyStatistics":
        kwargs = {}
        retention = {}
        for key, value in row.items():
            if key in _KEY_TO_ATTR:
                kwargs[_KEY_TO_ATTR[key]] = value
                continue
            horizon = parse_day_key(key)
            if horizon is not None:
                retention[horizon] = value
        return cls(retention=retention, **kwargs)

    def with_retention(self, retention: Dict[int, RetentionValue]) -> "DailyStatistics":
        return replace(self, retention=dict(retention))


@dataclass
class RetentionData:
    """One cohort row: new users acquired on `date` and their retention curve."""
    date: str
    new_users: int = 0
    retention: Dict[int, RetentionValue] = field(default_factory=dict)

    def to_dict(self) -> dict:
        row = {"date": self.date, "newUsers": self.new_users}
        for horizon, value in self.retention.items():
            row[day_key(horizon)] = value
        return row


# =============================================================================
# Column visibility
# =============================================================================

def visible_columns(groups: Iterable[str], columns: Optional[Iterable[str]] = None) -> List[str]:
    """
    Ordered column keys shown for a group selection.

    `columns`, when given, narrows the result to that explicit pick (the
    per-metric checkboxes); unknown groups raise KeyError.
    """
    selected = set(groups)
    picked = set(columns) if columns is not None else None
    result = []
    for name, group in METRIC_GROUPS.items():
        if name not in selected:
            continue
        for col in group["columns"]:
            if picked is None or col in picked:
                result.append(col)
    unknown = selected - set(METRIC_GROUPS)
    if unknown:
        raise KeyError(f"Unknown metric group(s): {', '.join(sorted(unknown))}")
    return result


# =============================================================================
# DataFrames
# =============================================================================

def statistics_frame(records: List[DailyStatistics], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """DataFrame of daily statistics keyed by wire column names."""
    if columns is None:
        columns = DAILY_COLUMNS[1:]
    cols = ["date"] + [c for c in columns if c != "date"]
    if not records:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([{c: r.get(c) for c in cols} for r in records], columns=cols)


def retention_frame(rows: List[RetentionData], horizons: List[int]) -> pd.DataFrame:
    """DataFrame of retention rows; MISSING cells become NaN."""
    cols = ["date", "newUsers"] + [day_key(h) for h in horizons]
    records = []
    for row in rows:
        rec = {"date": row.date, "newUsers": row.new_users}
        for h in horizons:
            value = row.retention.get(h, MISSING)
            rec[day_key(h)] = float(value) if is_numeric(value) else NAN
        records.append(rec)
    return pd.DataFrame(records, columns=cols)


def date_sort_key(date: str) -> pd.Timestamp:
    """
    Sort key for a record date; unparseable dates sort as oldest.

    Dates with a UTC offset are compared as naive UTC times.
    """
    ts = pd.to_datetime(date, errors="coerce")
    if pd.isna(ts):
        return pd.Timestamp.min
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts

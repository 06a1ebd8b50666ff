"""
Derived metrics for daily statistics: ARPU, paying ARPU and pay rates.

Division by zero is not guarded. x/0 gives +/-inf and 0/0 gives nan, and
both flow through to the CSV export as 'Infinity' / 'NaN'.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

import numpy as np

from .statistics import DailyStatistics, RetentionValue, TOTAL_LABEL


SUMMED_FIELDS = [
    "new_users",
    "old_users",
    "active_users",
    "paying_users",
    "total_revenue",
    "new_user_paying",
    "new_user_revenue",
    "old_user_paying",
    "old_user_revenue",
]


def _ratio(numerator, denominator, scale: float = 1.0) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator) * scale)


def compute_ratios(record: DailyStatistics) -> DailyStatistics:
    """Return a copy of `record` with the seven ratios recomputed from its counts."""
    return replace(
        record,
        arpu=_ratio(record.total_revenue, record.active_users),
        paying_arpu=_ratio(record.total_revenue, record.paying_users),
        active_pay_rate=_ratio(record.paying_users, record.active_users, 100.0),
        new_user_arpu=_ratio(record.new_user_revenue, record.new_users),
        new_user_pay_rate=_ratio(record.new_user_paying, record.new_users, 100.0),
        old_user_arpu=_ratio(record.old_user_revenue, record.old_users),
        old_user_pay_rate=_ratio(record.old_user_paying, record.old_users, 100.0),
        retention=dict(record.retention),
    )


def derive_metrics(
    date: str,
    new_users: int,
    old_users: int,
    paying_users: int,
    new_user_paying: int,
    total_revenue: float,
    new_user_revenue: float,
    retention: Optional[Dict[int, RetentionValue]] = None,
) -> DailyStatistics:
    """
    Build a full daily record from base counts and revenue.

    activeUsers, oldUserPaying and oldUserRevenue are derived by addition /
    subtraction so the record identities always hold.
    """
    base = DailyStatistics(
        date=date,
        new_users=new_users,
        old_users=old_users,
        active_users=new_users + old_users,
        paying_users=paying_users,
        total_revenue=total_revenue,
        new_user_paying=new_user_paying,
        new_user_revenue=new_user_revenue,
        old_user_paying=paying_users - new_user_paying,
        old_user_revenue=total_revenue - new_user_revenue,
        retention=dict(retention or {}),
    )
    return compute_ratios(base)


def daily_totals(records: Iterable[DailyStatistics], label: str = TOTAL_LABEL) -> DailyStatistics:
    """
    Totals row for a set of daily records.

    Counts and revenue are summed as stored (activeUsers is summed, not
    rebuilt from new + old), then the ratios are recomputed from the sums.
    Retention is not aggregated here; see retention.retention_totals.
    """
    sums = {name: 0 for name in SUMMED_FIELDS}
    for record in records:
        for name in SUMMED_FIELDS:
            sums[name] = sums[name] + getattr(record, name)
    return compute_ratios(DailyStatistics(date=label, **sums))


def check_identities(record: DailyStatistics, tol: float = 1e-6) -> List[str]:
    """
    Wire keys of the derived fields that disagree with their base fields.

    Records from the calculator always pass; imported rows may not. A check
    whose both sides are NaN (fields never supplied) is not reported.
    """
    checks = [
        ("activeUsers", record.active_users, record.new_users + record.old_users),
        ("oldUserPaying", record.old_user_paying, record.paying_users - record.new_user_paying),
        ("oldUserRevenue", record.old_user_revenue, record.total_revenue - record.new_user_revenue),
    ]
    broken = []
    for key, actual, expected in checks:
        if not np.isclose(actual, expected, rtol=0.0, atol=tol, equal_nan=True):
            broken.append(key)
    return broken

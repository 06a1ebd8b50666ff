"""
Cohort retention: weighted totals row and retention-table rows.

The totals row weights each cohort's day-N percentage by its new users;
metrics.daily_totals instead sums counts and recomputes ratios.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Union

from .statistics import (
    MISSING,
    TOTAL_LABEL,
    DailyStatistics,
    RetentionData,
    date_sort_key,
    is_numeric,
)

Cohort = Union[DailyStatistics, RetentionData]


def _weight(record: Cohort) -> float:
    return record.new_users if is_numeric(record.new_users) else 0


def retention_totals(
    records: Iterable[Cohort],
    horizons: Sequence[int],
    label: str = TOTAL_LABEL,
) -> RetentionData:
    """
    Totals row for a set of cohorts.

    For each horizon N the result is sum(value * newUsers) / sum(newUsers)
    over the cohorts with a numeric day-N value. A horizon with no numeric
    value anywhere (or only zero-weight cohorts) is MISSING.
    newUsers is the plain sum over all cohorts.
    """
    records = list(records)
    totals = RetentionData(
        date=label,
        new_users=sum(_weight(r) for r in records),
    )

    for horizon in horizons:
        weighted_sum = 0.0
        weight_sum = 0.0
        for record in records:
            value = record.retention.get(horizon, MISSING)
            if not is_numeric(value):
                continue
            weight = _weight(record)
            weighted_sum += value * weight
            weight_sum += weight
        totals.retention[horizon] = weighted_sum / weight_sum if weight_sum else MISSING

    return totals


def build_retention_rows(
    statistics: Sequence[DailyStatistics],
    horizons: Sequence[int],
    display_days: int,
) -> List[RetentionData]:
    """
    Rows for the retention table.

    Takes the last `display_days` records (in collection order), gives every
    row all requested horizons (MISSING where the record has none) and
    returns them newest first.
    """
    recent = list(statistics)[-display_days:] if display_days > 0 else []
    rows = [
        RetentionData(
            date=stat.date,
            new_users=stat.new_users,
            retention={h: stat.retention.get(h, MISSING) for h in horizons},
        )
        for stat in recent
    ]
    return sorted(rows, key=lambda r: date_sort_key(r.date), reverse=True)


def retention_export_rows(statistics: Sequence[DailyStatistics]) -> List[RetentionData]:
    """Rows for CSV export: each record with whatever horizons it carries."""
    return [
        RetentionData(date=stat.date, new_users=stat.new_users, retention=dict(stat.retention))
        for stat in statistics
    ]


def parse_horizons(text: str) -> List[int]:
    """
    Parse a comma-separated horizon list: '2, 3,x,7' -> [2, 3, 7].

    Entries that are not positive integers are dropped; duplicates keep
    their first position.
    """
    horizons = []
    for part in text.split(","):
        part = part.strip()
        if not part.isdigit():
            continue
        horizon = int(part)
        if horizon > 0 and horizon not in horizons:
            horizons.append(horizon)
    return horizons

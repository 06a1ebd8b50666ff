"""
Synthetic daily statistics and retention curves for exercising the dashboards
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Tuple

import numpy as np

from .metrics import derive_metrics
from .statistics import MISSING, DailyStatistics


logger = logging.getLogger(__name__)


# =============================================================================
# Config
# =============================================================================

def _yesterday() -> date:
    return date.today() - timedelta(days=1)


@dataclass
class TargetConfig:
    """Generate a date range whose revenue adds up to roughly `target_revenue`."""
    start: date = field(default_factory=lambda: date.today() - timedelta(days=30))
    end: date = field(default_factory=_yesterday)
    target_revenue: float = 10_000.0
    fluctuation: float = 20.0                        # +/- % around the daily average
    arpu_range: Tuple[float, float] = (20.0, 50.0)
    paying_arpu_range: Tuple[float, float] = (80.0, 150.0)

    # Fixed splits
    new_user_share: float = 0.3
    new_user_pay_share: float = 0.15
    new_user_revenue_share: float = 0.3

    def validate(self) -> None:
        if self.end < self.start:
            raise ValueError("end date must not be before start date.")
        if self.target_revenue < 0:
            raise ValueError("target_revenue must be non-negative.")
        if not 0 <= self.fluctuation <= 100:
            raise ValueError("fluctuation must be between 0 and 100.")
        for name in ("arpu_range", "paying_arpu_range"):
            lo, hi = getattr(self, name)
            if lo <= 0 or hi < lo:
                raise ValueError(f"{name} must be a positive (low, high) pair.")


@dataclass
class RetentionConfig:
    horizons: List[int] = field(default_factory=lambda: [2, 3, 4, 5, 6, 7, 10, 15, 20, 25, 30])
    day1_range: Tuple[float, float] = (30.0, 55.0)   # % retained on the first horizon
    decay: float = 0.08                              # exp(-decay * (N - 1))

    def validate(self) -> None:
        if not self.horizons or any(h <= 0 for h in self.horizons):
            raise ValueError("horizons must be a non-empty list of positive integers.")
        lo, hi = self.day1_range
        if not 0 <= lo <= hi <= 100:
            raise ValueError("day1_range must satisfy 0 <= low <= high <= 100.")
        if self.decay < 0:
            raise ValueError("decay must be non-negative.")


# =============================================================================
# Daily statistics
# =============================================================================

def generate_random_statistics(
    days: int = 30,
    end: Optional[date] = None,
    seed: Optional[int] = None,
) -> List[DailyStatistics]:
    """
    `days` consecutive days of random statistics ending the day before `end`
    (default: today), oldest first.
    """
    if days < 0:
        raise ValueError("days must be non-negative.")
    rng = np.random.default_rng(seed)
    end = end or date.today()
    start = end - timedelta(days=days)

    records = []
    for i in range(days):
        day = start + timedelta(days=i)
        old_users = int(rng.integers(100, 600))
        new_users = int(rng.integers(50, 250))
        active_users = new_users + old_users
        paying_users = int(np.floor(active_users * rng.uniform(0.1, 0.4)))
        total_revenue = paying_users * float(rng.uniform(50, 150))
        new_user_paying = int(np.floor(new_users * rng.uniform(0.1, 0.4)))
        new_user_revenue = float(np.floor(total_revenue * rng.uniform(0.1, 0.4)))

        records.append(derive_metrics(
            date=day.isoformat(),
            new_users=new_users,
            old_users=old_users,
            paying_users=paying_users,
            new_user_paying=new_user_paying,
            total_revenue=total_revenue,
            new_user_revenue=new_user_revenue,
        ))

    logger.info("Generated %d day(s) of random statistics", len(records))
    return records


def generate_target_statistics(cfg: Optional[TargetConfig] = None, seed: Optional[int] = None) -> List[DailyStatistics]:
    """
    Daily statistics over [cfg.start, cfg.end] whose revenue averages
    target / days, each day moved by up to +/- cfg.fluctuation percent.
    """
    cfg = cfg or TargetConfig()
    cfg.validate()
    rng = np.random.default_rng(seed)

    n_days = (cfg.end - cfg.start).days + 1
    avg_daily_revenue = cfg.target_revenue / n_days
    swing = avg_daily_revenue * (cfg.fluctuation / 100.0)

    records = []
    for i in range(n_days):
        day = cfg.start + timedelta(days=i)
        daily_revenue = avg_daily_revenue + float(rng.uniform(-1.0, 1.0)) * swing

        arpu = float(rng.uniform(*cfg.arpu_range))
        active_users = int(np.floor(daily_revenue / arpu))
        paying_arpu = float(rng.uniform(*cfg.paying_arpu_range))
        paying_users = int(np.floor(daily_revenue / paying_arpu))

        new_users = int(np.floor(active_users * cfg.new_user_share))
        records.append(derive_metrics(
            date=day.isoformat(),
            new_users=new_users,
            old_users=active_users - new_users,
            paying_users=paying_users,
            new_user_paying=int(np.floor(new_users * cfg.new_user_pay_share)),
            total_revenue=daily_revenue,
            new_user_revenue=daily_revenue * cfg.new_user_revenue_share,
        ))

    logger.info(
        "Generated %d day(s) from %s to %s targeting revenue %.2f",
        n_days, cfg.start, cfg.end, cfg.target_revenue,
    )
    return records


# =============================================================================
# Retention
# =============================================================================

def generate_retention(
    records: List[DailyStatistics],
    cfg: Optional[RetentionConfig] = None,
    as_of: Optional[date] = None,
    seed: Optional[int] = None,
) -> List[DailyStatistics]:
    """
    Copies of `records` carrying a synthetic retention curve.

    Day N = first * exp(-decay * (N - 1)) with `first` drawn from
    cfg.day1_range per cohort. Horizons that cannot have been observed yet
    (cohort date + N days after `as_of`, default today) are MISSING.
    """
    cfg = cfg or RetentionConfig()
    cfg.validate()
    rng = np.random.default_rng(seed)
    as_of = as_of or date.today()

    out = []
    for record in records:
        cohort = date.fromisoformat(record.date)
        first = float(rng.uniform(*cfg.day1_range))
        curve = {}
        for horizon in cfg.horizons:
            if cohort + timedelta(days=horizon) > as_of:
                curve[horizon] = MISSING
            else:
                value = first * np.exp(-cfg.decay * (horizon - 1))
                curve[horizon] = float(np.clip(value, 0.0, 100.0))
        out.append(record.with_retention(curve))

    return out

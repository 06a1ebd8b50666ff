from datetime import date, timedelta

import pytest

from gamestats.metrics import check_identities
from gamestats.mock_data import (
    RetentionConfig,
    TargetConfig,
    generate_random_statistics,
    generate_retention,
    generate_target_statistics,
)
from gamestats.statistics import MISSING, is_numeric


def test_random_statistics_dates_and_ranges():
    records = generate_random_statistics(days=30, end=date(2024, 4, 1), seed=7)

    assert len(records) == 30
    assert records[0].date == "2024-03-02"
    assert records[-1].date == "2024-03-31"
    for r in records:
        assert 100 <= r.old_users < 600
        assert 50 <= r.new_users < 250
        assert r.active_users == r.new_users + r.old_users
        assert 0.1 * r.active_users - 1 <= r.paying_users <= 0.4 * r.active_users
        assert check_identities(r) == []


def test_random_statistics_seeded():
    a = generate_random_statistics(days=5, end=date(2024, 4, 1), seed=42)
    b = generate_random_statistics(days=5, end=date(2024, 4, 1), seed=42)
    assert [r.to_dict() for r in a] == [r.to_dict() for r in b]


def test_random_statistics_rejects_negative_days():
    with pytest.raises(ValueError):
        generate_random_statistics(days=-1)


def test_target_statistics_hits_target():
    cfg = TargetConfig(start=date(2024, 1, 1), end=date(2024, 1, 10), target_revenue=10_000.0, fluctuation=20.0)
    records = generate_target_statistics(cfg, seed=3)

    assert len(records) == 10
    assert records[0].date == "2024-01-01"
    assert records[-1].date == "2024-01-10"

    total = sum(r.total_revenue for r in records)
    assert 8_000.0 <= total <= 12_000.0
    for r in records:
        assert 800.0 <= r.total_revenue <= 1_200.0
        assert r.new_users == int(r.active_users * 0.3)
        assert r.new_user_revenue == pytest.approx(r.total_revenue * 0.3)
        assert check_identities(r) == []


def test_target_statistics_without_fluctuation():
    cfg = TargetConfig(start=date(2024, 1, 1), end=date(2024, 1, 4), target_revenue=400.0, fluctuation=0.0)
    records = generate_target_statistics(cfg, seed=1)
    assert [r.total_revenue for r in records] == pytest.approx([100.0] * 4)


@pytest.mark.parametrize("changes", [
    {"start": date(2024, 1, 5), "end": date(2024, 1, 1)},
    {"target_revenue": -1.0},
    {"fluctuation": 150.0},
    {"arpu_range": (50.0, 20.0)},
    {"paying_arpu_range": (0.0, 10.0)},
])
def test_target_config_validation(changes):
    cfg = TargetConfig(start=date(2024, 1, 1), end=date(2024, 1, 10))
    for name, value in changes.items():
        setattr(cfg, name, value)
    with pytest.raises(ValueError):
        generate_target_statistics(cfg)


def test_generate_retention_respects_as_of():
    records = generate_random_statistics(days=1, end=date(2024, 1, 2), seed=5)
    cfg = RetentionConfig(horizons=[2, 3, 4, 7], day1_range=(40.0, 50.0), decay=0.1)
    out = generate_retention(records, cfg, as_of=date(2024, 1, 5), seed=5)[0]

    assert out.date == "2024-01-01"
    assert list(out.retention) == [2, 3, 4, 7]
    assert all(is_numeric(out.retention[h]) for h in (2, 3, 4))
    assert out.retention[7] is MISSING
    assert out.retention[2] > out.retention[3] > out.retention[4]
    assert out.retention[2] <= 50.0


def test_generate_retention_leaves_input_alone():
    records = generate_random_statistics(days=3, end=date(2024, 1, 10), seed=2)
    generate_retention(records, as_of=date(2024, 3, 1), seed=2)
    assert all(r.retention == {} for r in records)


def test_retention_config_validation():
    with pytest.raises(ValueError):
        generate_retention([], RetentionConfig(horizons=[]))
    with pytest.raises(ValueError):
        generate_retention([], RetentionConfig(day1_range=(60.0, 40.0)))


def test_generated_dates_are_consecutive():
    records = generate_random_statistics(days=4, end=date(2024, 3, 1), seed=0)
    days = [date.fromisoformat(r.date) for r in records]
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))

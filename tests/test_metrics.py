import math
from dataclasses import replace

import pytest

from gamestats.metrics import check_identities, compute_ratios, daily_totals, derive_metrics
from gamestats.statistics import TOTAL_LABEL, DailyStatistics


def test_derive_metrics_fills_derived_counts(round_record):
    assert round_record.active_users == 400
    assert round_record.old_user_paying == 30
    assert round_record.old_user_revenue == pytest.approx(1500.0)


def test_derive_metrics_ratios(round_record):
    assert round_record.arpu == pytest.approx(5.0)
    assert round_record.paying_arpu == pytest.approx(50.0)
    assert round_record.active_pay_rate == pytest.approx(10.0)
    assert round_record.new_user_arpu == pytest.approx(5.0)
    assert round_record.new_user_pay_rate == pytest.approx(10.0)
    assert round_record.old_user_arpu == pytest.approx(5.0)
    assert round_record.old_user_pay_rate == pytest.approx(10.0)


def test_identities_hold_for_calculator_output(round_record, uneven_record):
    assert check_identities(round_record) == []
    assert check_identities(uneven_record) == []


def test_division_by_zero_is_not_guarded():
    record = derive_metrics(
        date="2024-03-03",
        new_users=0,
        old_users=0,
        paying_users=0,
        new_user_paying=0,
        total_revenue=120.0,
        new_user_revenue=0.0,
    )
    assert record.arpu == math.inf
    assert record.paying_arpu == math.inf
    assert math.isnan(record.active_pay_rate)
    assert math.isnan(record.new_user_arpu)
    assert record.old_user_arpu == math.inf


def test_derive_metrics_keeps_retention():
    record = derive_metrics("2024-03-01", 10, 10, 1, 1, 10.0, 5.0, retention={7: 12.5})
    assert record.retention == {7: 12.5}


def test_compute_ratios_returns_copy(round_record):
    changed = replace(round_record, total_revenue=4000.0)
    recomputed = compute_ratios(changed)
    assert recomputed.arpu == pytest.approx(10.0)
    assert round_record.arpu == pytest.approx(5.0)


def test_daily_totals_sums_then_recomputes(round_record, uneven_record):
    totals = daily_totals([round_record, uneven_record])

    assert totals.date == TOTAL_LABEL
    assert totals.new_users == 237
    assert totals.old_users == 721
    assert totals.active_users == 958
    assert totals.paying_users == 117
    assert totals.total_revenue == pytest.approx(6321.987)
    assert totals.arpu == pytest.approx(6321.987 / 958)
    assert totals.paying_arpu == pytest.approx(6321.987 / 117)
    assert totals.active_pay_rate == pytest.approx(117 / 958 * 100)
    assert totals.new_user_arpu == pytest.approx((500.0 + 987.654) / 237)
    assert totals.old_user_pay_rate == pytest.approx((30 + 58) / 721 * 100)


def test_daily_totals_uses_stored_active_users(round_record):
    # Imported rows may break activeUsers = new + old; totals sum what is stored.
    odd = replace(round_record, active_users=1000)
    totals = daily_totals([odd])
    assert totals.active_users == 1000
    assert totals.arpu == pytest.approx(2.0)


def test_daily_totals_of_nothing():
    totals = daily_totals([])
    assert totals.new_users == 0
    assert totals.total_revenue == 0
    assert math.isnan(totals.arpu)
    assert math.isnan(totals.old_user_pay_rate)


def test_check_identities_reports_broken_fields(round_record):
    broken = replace(round_record, active_users=401, old_user_revenue=1.0)
    assert check_identities(broken) == ["activeUsers", "oldUserRevenue"]


def test_check_identities_ignores_unset_fields():
    record = DailyStatistics(date="2024-03-01", new_users=120, retention={2: 40.0})
    assert check_identities(record) == []


def test_segment_arpu_divides_by_user_count(uneven_record):
    assert uneven_record.new_user_arpu == pytest.approx(987.654 / 137)
    assert uneven_record.old_user_arpu == pytest.approx((4321.987 - 987.654) / 421)

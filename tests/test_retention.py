import pytest

from gamestats.retention import build_retention_rows, parse_horizons, retention_export_rows, retention_totals
from gamestats.statistics import MISSING, TOTAL_LABEL, DailyStatistics, RetentionData


def _cohort(day, new_users, retention):
    return DailyStatistics(date=f"2024-01-{day:02d}", new_users=new_users, retention=retention)


def test_weighted_mean():
    records = [
        _cohort(1, 100, {7: 10.0}),
        _cohort(2, 200, {7: 20.0}),
        _cohort(3, 300, {7: 30.0}),
    ]
    totals = retention_totals(records, [7])

    assert totals.date == TOTAL_LABEL
    assert totals.new_users == 600
    assert totals.retention[7] == pytest.approx(23.33, abs=0.01)


def test_horizon_without_data_is_missing():
    records = [_cohort(1, 100, {7: 10.0}), _cohort(2, 200, {7: MISSING})]
    totals = retention_totals(records, [7, 30])

    assert totals.retention[30] is MISSING


def test_missing_values_do_not_weigh_in():
    records = [
        _cohort(1, 100, {2: 40.0}),
        _cohort(2, 1000, {2: MISSING}),
        _cohort(3, 300, {}),
    ]
    totals = retention_totals(records, [2])

    assert totals.retention[2] == pytest.approx(40.0)
    # newUsers is summed over every cohort regardless of horizons
    assert totals.new_users == 1400


def test_true_zero_is_kept():
    totals = retention_totals([_cohort(1, 50, {2: 0.0})], [2])
    assert totals.retention[2] == 0.0


def test_zero_weight_cohorts_give_missing():
    totals = retention_totals([_cohort(1, 0, {2: 15.0})], [2])
    assert totals.retention[2] is MISSING


def test_totals_over_retention_rows():
    rows = [
        RetentionData("2024-01-01", 10, {1: 50.0}),
        RetentionData("2024-01-02", 30, {1: 30.0}),
    ]
    totals = retention_totals(rows, [1])
    assert totals.retention[1] == pytest.approx(35.0)


def test_totals_of_nothing():
    totals = retention_totals([], [2, 7])
    assert totals.new_users == 0
    assert totals.retention == {2: MISSING, 7: MISSING}


def test_build_retention_rows():
    stats = [_cohort(d, 100 + d, {2: float(d)}) for d in range(1, 6)]
    rows = build_retention_rows(stats, [2, 7], display_days=3)

    assert [r.date for r in rows] == ["2024-01-05", "2024-01-04", "2024-01-03"]
    assert rows[0].new_users == 105
    assert rows[0].retention == {2: 5.0, 7: MISSING}


def test_build_retention_rows_nothing_to_show():
    stats = [_cohort(1, 100, {})]
    assert build_retention_rows(stats, [2], display_days=0) == []


def test_retention_export_rows_keep_every_horizon():
    stats = [_cohort(1, 100, {2: 40.0, 30: MISSING})]
    rows = retention_export_rows(stats)

    assert rows[0].to_dict() == {"date": "2024-01-01", "newUsers": 100, "day2": 40.0, "day30": MISSING}
    rows[0].retention[2] = 1.0
    assert stats[0].retention[2] == 40.0


def test_parse_horizons():
    assert parse_horizons("2, 3,x,7") == [2, 3, 7]
    assert parse_horizons("0,-1,3,3") == [3]
    assert parse_horizons("") == []

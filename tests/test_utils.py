import math
from datetime import date

import pandas as pd

from gamestats.statistics import MISSING, TOTAL_LABEL, DailyStatistics
from gamestats.utils import (
    calculate_trend,
    clamp_page,
    filter_by_date_range,
    fmt_currency,
    fmt_number,
    fmt_percent,
    fmt_retention,
    page_count,
)


def test_formatters():
    assert fmt_currency(1234.5) == "¥1,234.50"
    assert fmt_currency(math.nan) == "-"
    assert fmt_currency(math.inf) == "-"
    assert fmt_percent(12.5) == "12.50%"
    assert fmt_number(12345) == "12,345"
    assert fmt_retention(45.678) == "45.68%"
    assert fmt_retention(0.0) == "0.00%"
    assert fmt_retention(MISSING) == "-"


def test_calculate_trend():
    values = pd.Series([1.0] * 7 + [2.0] * 7)
    direction, delta = calculate_trend(values)
    assert direction == "↑"
    assert delta == 1.0

    assert calculate_trend(pd.Series([5.0])) == ("→", 0.0)
    assert calculate_trend(pd.Series([0.0, 0.0, 3.0, 3.0]))[0] == "→"


def _records():
    return [
        DailyStatistics(date="2024-01-01"),
        DailyStatistics(date="2024-01-05"),
        DailyStatistics(date="2024-01-10"),
        DailyStatistics(date=TOTAL_LABEL),
    ]


def test_filter_by_date_range_inclusive():
    kept = filter_by_date_range(_records(), date(2024, 1, 1), date(2024, 1, 5))
    assert [r.date for r in kept] == ["2024-01-01", "2024-01-05"]


def test_filter_by_date_range_open_ended():
    kept = filter_by_date_range(_records(), start=date(2024, 1, 5))
    assert [r.date for r in kept] == ["2024-01-05", "2024-01-10"]


def test_filter_by_date_range_without_bounds():
    assert len(filter_by_date_range(_records())) == 4


def test_page_count():
    assert page_count(0, 31) == 1
    assert page_count(31, 31) == 1
    assert page_count(32, 31) == 2


def test_clamp_page_after_the_table_shrinks():
    # Page 3 was picked, then a filter left a single page
    assert clamp_page(3, page_count(10, 31)) == 1
    assert clamp_page(2, 4) == 2
    assert clamp_page(0, 4) == 1

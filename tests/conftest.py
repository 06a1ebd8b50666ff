import pytest

from gamestats.metrics import derive_metrics


@pytest.fixture
def round_record():
    """A day whose ratios are all exact."""
    return derive_metrics(
        date="2024-03-01",
        new_users=100,
        old_users=300,
        paying_users=40,
        new_user_paying=10,
        total_revenue=2000.0,
        new_user_revenue=500.0,
    )


@pytest.fixture
def uneven_record():
    """A day whose ratios need rounding to two decimals."""
    return derive_metrics(
        date="2024-03-02",
        new_users=137,
        old_users=421,
        paying_users=77,
        new_user_paying=19,
        total_revenue=4321.987,
        new_user_revenue=987.654,
    )

from gamestats.state import AppState, initial_state
from gamestats.statistics import DailyStatistics


def test_replace_swaps_collection_wholesale():
    state = AppState()
    records = [DailyStatistics(date="2024-01-01", new_users=5)]
    state.replace(records, source="import")

    assert len(state) == 1
    assert state.source == "import"
    assert state.updated_at is not None

    # The caller's list is not shared with the state
    records.append(DailyStatistics(date="2024-01-02"))
    assert len(state) == 1


def test_replace_again_discards_previous():
    state = AppState()
    state.replace([DailyStatistics(date="2024-01-01")], source="random")
    state.replace([], source="import")
    assert state.statistics == []
    assert state.source == "import"


def test_initial_state_is_seeded_with_retention():
    state = initial_state(days=10, seed=1)

    assert len(state) == 10
    assert state.source == "initial"
    assert all(r.retention for r in state.statistics)

"""
Application state for a dashboard session.

The record collection is owned by one AppState object kept in Streamlit's
session state. Imports and generators never edit it in place; they hand a
new collection to AppState.replace.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import streamlit as st

from .config import INITIAL_DAYS
from .mock_data import generate_random_statistics, generate_retention
from .statistics import DailyStatistics

logger = logging.getLogger(__name__)

STATE_KEY = "app_state"


@dataclass
class AppState:
    statistics: List[DailyStatistics] = field(default_factory=list)
    source: str = "empty"
    updated_at: Optional[datetime] = None

    def replace(self, records: List[DailyStatistics], source: str) -> None:
        """Swap in a new collection wholesale."""
        self.statistics = list(records)
        self.source = source
        self.updated_at = datetime.now()
        logger.info("Statistics replaced from %s: %d record(s)", source, len(self.statistics))

    def __len__(self):
        return len(self.statistics)


def initial_state(days: int = INITIAL_DAYS, seed: Optional[int] = None) -> AppState:
    """A state seeded with random statistics and retention curves."""
    state = AppState()
    records = generate_random_statistics(days=days, seed=seed)
    state.replace(generate_retention(records, seed=seed), source="initial")
    return state


def get_state() -> AppState:
    """Fetch this session's state, seeding it on first use."""
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = initial_state()
    return st.session_state[STATE_KEY]

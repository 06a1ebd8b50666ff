"""
View defaults for the statistics dashboards
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List


APP_TITLE = "游戏后台统计分析"
PAGE_ICON = "🎮"

# Seed data for a fresh session
INITIAL_DAYS = 90

# Tables
DEFAULT_PAGE_SIZE = 31
PAGE_SIZE_OPTIONS = [31, 50, 100]
DEFAULT_GROUPS = ["overview", "newUser", "oldUser"]


@dataclass
class RetentionViewConfig:
    horizons: List[int] = field(default_factory=lambda: [2, 3, 4, 5, 6, 7, 10, 15, 20, 25, 30])
    display_days: int = 30
    min_display_days: int = 1
    max_display_days: int = 365


# Logging
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level=logging.INFO):
    # basicConfig is a no-op once handlers exist, so every page can call this.
    logging.basicConfig(level=level, format=LOG_FORMAT)

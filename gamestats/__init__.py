"""
Game Statistics Dashboard - Core Modules
"""
from .statistics import DailyStatistics, RetentionData, MISSING, TOTAL_LABEL
from .metrics import derive_metrics, compute_ratios, daily_totals, check_identities
from .csv_codec import (
    CsvFormatError,
    encode_daily_statistics, decode_daily_statistics,
    encode_retention, decode_retention, retention_to_daily,
    export_filename,
)
from .retention import retention_totals, build_retention_rows, retention_export_rows
from .mock_data import generate_random_statistics, generate_target_statistics, generate_retention
from .utils import fmt_currency, fmt_percent, fmt_number, fmt_retention

__all__ = [
    'DailyStatistics', 'RetentionData', 'MISSING', 'TOTAL_LABEL',
    'derive_metrics', 'compute_ratios', 'daily_totals', 'check_identities',
    'CsvFormatError',
    'encode_daily_statistics', 'decode_daily_statistics',
    'encode_retention', 'decode_retention', 'retention_to_daily',
    'export_filename',
    'retention_totals', 'build_retention_rows', 'retention_export_rows',
    'generate_random_statistics', 'generate_target_statistics', 'generate_retention',
    'fmt_currency', 'fmt_percent', 'fmt_number', 'fmt_retention'
]

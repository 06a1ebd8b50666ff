"""
CSV import/export for daily statistics and retention data.

Two encodings share the same conventions: UTF-8 text with a leading BOM,
comma-delimited, no quoting or escaping (values never contain commas).

* Daily statistics use a fixed 17-column schema with a Chinese header row.
  Money columns are written as '¥1234.50', rate columns as '12.35%'.
* Retention data takes its columns from the keys of the first row
  (date, newUsers, day2, day3, ...). Percentages are written as '45.10%',
  missing values as '-'.

Structural problems (too few lines, wrong field count) raise CsvFormatError.
Bad individual cells never raise: they become NaN (daily) or MISSING
(retention).
"""
from __future__ import annotations

import logging
import math
import numbers
import re
from datetime import date as date_cls
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union

import pandas as pd

from .statistics import (
    DAILY_COLUMNS,
    DAILY_HEADERS,
    INTEGER_COLUMNS,
    MISSING,
    DailyStatistics,
    RetentionData,
    date_sort_key,
    is_numeric,
    is_total_label,
    parse_day_key,
)

logger = logging.getLogger(__name__)

BOM = "\ufeff"
DELIMITER = ","
EXPORT_PREFIX = "game_statistics"

_DECORATION = re.compile(r"[¥%]")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_LINE_BREAK = re.compile(r"\r\n|\n|\r")
_CN_HORIZON = re.compile(r"^(\d+)日留存$")

# Room for the integer digits of any finite float.
_DECIMAL_CONTEXT = Context(prec=400)


class CsvFormatError(ValueError):
    """The CSV document does not have the expected shape."""


# =============================================================================
# Number formatting / parsing
# =============================================================================

def to_fixed(value, digits: int = 2) -> str:
    """
    Fixed-point text rounded from the exact binary value of `value`, ties
    away from zero: 12.345 -> '12.35', 1.005 -> '1.00', 0.125 -> '0.13'.

    Non-finite values are written as 'NaN', 'Infinity' and '-Infinity'.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT)
    return f"{rounded:f}"


def number_text(value) -> str:
    """Plain decimal text; integral floats drop the '.0'."""
    if isinstance(value, numbers.Integral):
        return str(int(value))
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def parse_int(text: str) -> Union[int, float]:
    """Truncating integer parse of the leading digits ('12.7' -> 12); NaN if none."""
    m = _LEADING_INT.match(text)
    if m is None:
        return float("nan")
    return int(m.group(1))


def parse_float(text: str) -> float:
    """Float parse of the leading number ('45.1abc' -> 45.1); NaN if none."""
    m = _LEADING_FLOAT.match(text)
    if m is None:
        return float("nan")
    token = m.group(1)
    if token.lstrip("+-") == "Infinity":
        return float("-inf") if token.startswith("-") else float("inf")
    return float(token)


def is_rate_key(key: str) -> bool:
    return "Rate" in key


def is_money_key(key: str) -> bool:
    return "Revenue" in key or "arpu" in key or "Arpu" in key


def format_cell(key: str, value) -> str:
    """Render one daily-statistics cell."""
    if value is MISSING:
        return str(MISSING)
    if isinstance(value, str):
        return value
    if is_rate_key(key):
        return to_fixed(value) + "%"
    if is_money_key(key):
        return "¥" + to_fixed(value)
    return number_text(value)


# =============================================================================
# Daily statistics (fixed schema)
# =============================================================================

def encode_daily_statistics(records: List[DailyStatistics]) -> str:
    """Serialize daily statistics to the 17-column CSV format."""
    if not records:
        return ""

    lines = [DELIMITER.join(DAILY_HEADERS)]
    for record in records:
        lines.append(DELIMITER.join(format_cell(key, record.get(key)) for key in DAILY_COLUMNS))

    return BOM + "\n".join(lines)


def decode_daily_statistics(text: str) -> List[DailyStatistics]:
    """
    Parse the 17-column CSV format.

    The first line is the header and is discarded; blank lines are ignored.
    Raises CsvFormatError if there is no data line or any data line does not
    have exactly 17 fields, in which case nothing is returned.
    """
    lines = text.split("\n")
    if len(lines) < 2:
        raise CsvFormatError("CSV格式错误: expected a header row and at least one data row")

    n_cols = len(DAILY_COLUMNS)
    records = []
    for lineno, line in enumerate(lines[1:], start=2):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        values = line.split(DELIMITER)
        if len(values) != n_cols:
            raise CsvFormatError(
                f"CSV数据格式错误: line {lineno} has {len(values)} fields, expected {n_cols}"
            )

        row = {}
        for key, raw in zip(DAILY_COLUMNS, values):
            if key == "date":
                row[key] = raw
            elif key in INTEGER_COLUMNS:
                row[key] = parse_int(raw)
            else:
                row[key] = parse_float(_DECORATION.sub("", raw))
        records.append(DailyStatistics.from_dict(row))

    return records


# =============================================================================
# Retention (dynamic schema)
# =============================================================================

def _format_retention_cell(key: str, value) -> str:
    if value is MISSING:
        return str(MISSING)
    if key == "date" or isinstance(value, str):
        return str(value)
    if parse_day_key(key) is not None:
        return to_fixed(value) + "%"
    return number_text(value)


def encode_retention(rows: List[RetentionData]) -> str:
    """
    Serialize retention rows.

    The header is the key list of the first row; later rows are written
    against that header, with '-' for any horizon they lack.
    """
    if not rows:
        return ""

    header = list(rows[0].to_dict().keys())
    lines = [DELIMITER.join(header)]
    for row in rows:
        values = row.to_dict()
        lines.append(DELIMITER.join(_format_retention_cell(key, values.get(key, MISSING)) for key in header))

    return BOM + "\n".join(lines)


def _retention_columns(header: List[str]) -> Dict[int, Union[str, int]]:
    """Map header positions to 'date', 'newUsers' or a horizon."""
    columns = {}
    for idx, name in enumerate(header):
        name = name.strip()
        if name in ("date", "日期"):
            columns[idx] = "date"
        elif name in ("newUsers", "新增用户"):
            columns[idx] = "newUsers"
        else:
            horizon = parse_day_key(name)
            if horizon is None:
                m = _CN_HORIZON.match(name)
                horizon = int(m.group(1)) if m else None
            if horizon is not None:
                columns[idx] = horizon
    return columns


def _parse_retention_value(text: str):
    text = text.strip()
    if text in ("", str(MISSING)):
        return MISSING
    try:
        value = float(text[:-1] if text.endswith("%") else text)
    except ValueError:
        return MISSING
    return value if is_numeric(value) else MISSING


def _is_calendar_date(text: str) -> bool:
    return not pd.isna(pd.to_datetime(text, errors="coerce"))


def decode_retention(text: str) -> List[RetentionData]:
    """
    Parse retention CSV.

    Accepts CRLF, LF or CR line breaks, skips blank and '#' comment lines, and
    drops rows whose date is empty or not a calendar date (the totals label
    is kept as-is).
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = [
        line for line in _LINE_BREAK.split(text)
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if len(lines) < 2:
        raise CsvFormatError("CSV格式错误: expected a header row and at least one data row")

    columns = _retention_columns(lines[0].split(DELIMITER))
    if "date" not in columns.values():
        raise CsvFormatError("CSV格式错误: header has no date column")

    rows = []
    skipped = 0
    for line in lines[1:]:
        cells = line.split(DELIMITER)
        row = RetentionData(date="")
        for idx, target in columns.items():
            raw = cells[idx] if idx < len(cells) else ""
            if target == "date":
                row.date = raw.strip()
            elif target == "newUsers":
                value = parse_int(raw)
                row.new_users = 0 if isinstance(value, float) else value
            else:
                row.retention[target] = _parse_retention_value(raw)

        if not row.date or not (is_total_label(row.date) or _is_calendar_date(row.date)):
            skipped += 1
            continue
        rows.append(row)

    if skipped:
        logger.debug("Skipped %d retention row(s) without a valid date", skipped)
    return rows


def retention_to_daily(rows: List[RetentionData]) -> List[DailyStatistics]:
    """
    Turn decoded retention rows into daily records, newest first.

    Only date, newUsers and the horizons are copied; the other daily fields
    are left unset (NaN) rather than recomputed. Totals rows are dropped.
    """
    records = [
        DailyStatistics(date=row.date, new_users=row.new_users, retention=dict(row.retention))
        for row in rows
        if not is_total_label(row.date)
    ]
    return sorted(records, key=lambda r: date_sort_key(r.date), reverse=True)


def export_filename(today: Optional[date_cls] = None) -> str:
    """'game_statistics_<YYYY-MM-DD>.csv' for today (or the given date)."""
    today = today or date_cls.today()
    return f"{EXPORT_PREFIX}_{today:%Y-%m-%d}.csv"

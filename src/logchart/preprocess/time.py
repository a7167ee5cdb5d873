from __future__ import annotations

import math
import re
import warnings
from typing import Any

import pandas as pd

from logchart.preprocess.values import is_number, js_string

INVALID_TIMESTAMP = 0
DEFAULT_TIME_FIELD = "_timeslice"

_EPOCH_MILLIS = re.compile(r"[0-9]{13}")
_EPOCH_SECONDS = re.compile(r"[0-9]{10}")


def _parse_datetime_millis(text: str) -> int:
    # pandas resolves digit-free words such as "now" and "today" to the wall clock
    if not any(char.isdigit() for char in text):
        return INVALID_TIMESTAMP
    with warnings.catch_warnings():
        # Single-value parsing falls back to dateutil and warns about inferred formats.
        warnings.simplefilter("ignore", UserWarning)
        try:
            timestamp = pd.to_datetime(text, errors="coerce", utc=True)
        except (ValueError, OverflowError, TypeError):
            return INVALID_TIMESTAMP
    if pd.isna(timestamp):
        return INVALID_TIMESTAMP
    return int(timestamp.value // 1_000_000)


def parse_timestamp(value: Any) -> int | float:
    """Normalize a cell to epoch milliseconds, or ``INVALID_TIMESTAMP`` when unusable.

    Numbers are assumed to already be epoch milliseconds. Strings of exactly 13
    digits are epoch milliseconds, exactly 10 digits are epoch seconds, and
    anything else goes through generic datetime parsing (naive values are UTC).
    """
    if is_number(value):
        return value if math.isfinite(value) else INVALID_TIMESTAMP
    if value is None:
        return INVALID_TIMESTAMP

    text = js_string(value)
    if _EPOCH_MILLIS.fullmatch(text):
        return int(text)
    if _EPOCH_SECONDS.fullmatch(text):
        return int(text) * 1000
    return _parse_datetime_millis(text)


def has_valid_time(timestamp: int | float) -> bool:
    return timestamp != INVALID_TIMESTAMP

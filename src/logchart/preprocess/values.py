from __future__ import annotations

import math
import re
from typing import Any

EMPTY_LABEL = "(empty)"

_NUMERIC_PREFIX = re.compile(
    r"\s*([+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))"
)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Parse a cell the way ``parseFloat`` does: leading numeric prefix or NaN."""
    if is_number(value):
        return float(value)
    if value is None or isinstance(value, bool):
        return math.nan
    match = _NUMERIC_PREFIX.match(str(value))
    if match is None:
        return math.nan
    return float(match.group(1).replace("Infinity", "inf"))


def coerce_number(value: Any) -> float:
    number = to_number(value)
    return 0.0 if math.isnan(number) else number


def js_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return str(value)


def category_label(value: Any) -> str:
    if value is None:
        return EMPTY_LABEL
    return js_string(value)

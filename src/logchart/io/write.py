from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from logchart.contracts import ChartSpec


def _finite(value: Any) -> Any:
    # JSON has no NaN or Infinity literals
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    return value


def dump_chart_spec(spec: ChartSpec, indent: int | None = 2, sort_keys: bool = False) -> str:
    return json.dumps(_finite(spec), indent=indent, sort_keys=sort_keys, allow_nan=False)


def write_chart_spec(
    spec: ChartSpec,
    path: Path,
    indent: int | None = 2,
    sort_keys: bool = False,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_chart_spec(spec, indent=indent, sort_keys=sort_keys), encoding="utf-8")
    return path

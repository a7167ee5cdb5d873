from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np

from logchart.config import AnalyzerConfig
from logchart.contracts import FieldDataType, FieldMetadata
from logchart.preprocess.values import is_number, js_string, to_number

DetectedType = Literal["string", "number", "timestamp", "boolean", "mixed"]

_EPOCH_MILLIS = re.compile(r"[0-9]{13}")
_ISO_PREFIX = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}[T\s]")

_METADATA_TYPES: dict[str, FieldDataType] = {
    "number": "number",
    "string": "string",
    "timestamp": "string",
    "boolean": "any",
    "mixed": "any",
}


@dataclass(slots=True, frozen=True)
class NumericStats:
    min: float
    max: float
    avg: float
    sum: float


@dataclass(slots=True, frozen=True)
class FieldProfile:
    name: str
    data_type: DetectedType
    non_null_count: int
    distinct_count: int
    total_count: int
    fill_percentage: float
    sample_values: tuple[str, ...] = ()
    is_time_field: bool = False
    is_numeric_string: bool = False
    numeric_stats: NumericStats | None = None

    @property
    def metadata(self) -> FieldMetadata:
        data_type = self.data_type
        if data_type == "string" and self.is_numeric_string:
            return FieldMetadata(self.name, "number", self.is_time_field)
        return FieldMetadata(self.name, _METADATA_TYPES[data_type], self.is_time_field)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dataType": self.data_type,
            "nonNullCount": self.non_null_count,
            "distinctCount": self.distinct_count,
            "totalCount": self.total_count,
            "fillPercentage": self.fill_percentage,
            "sampleValues": list(self.sample_values),
            "isTimeField": self.is_time_field,
            "isNumericString": self.is_numeric_string,
            "numericStats": (
                {
                    "min": self.numeric_stats.min,
                    "max": self.numeric_stats.max,
                    "avg": self.numeric_stats.avg,
                    "sum": self.numeric_stats.sum,
                }
                if self.numeric_stats is not None
                else None
            ),
        }


def record_fields(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Search job records wrap their cells in a ``map`` entry."""
    inner = record.get("map")
    if isinstance(inner, Mapping):
        return inner
    return record


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


def detect_value_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        number = to_number(value)
        if not math.isnan(number) and js_string(number) == value.strip():
            return "number"
        if _EPOCH_MILLIS.fullmatch(value) or _ISO_PREFIX.match(value):
            return "timestamp"
    return "string"


def determine_data_type(observed: set[str]) -> DetectedType:
    observed = observed - {"null"}
    if not observed:
        return "string"
    if len(observed) == 1:
        return next(iter(observed))  # type: ignore[return-value]
    if "number" in observed and "string" in observed:
        return "number"
    if "timestamp" in observed:
        return "timestamp"
    return "mixed"


def looks_like_time_field(
    name: str,
    data_type: str,
    sample_values: Sequence[str],
    time_field_names: Sequence[str],
) -> bool:
    lower_name = name.lower()
    if any(candidate in lower_name for candidate in time_field_names):
        return True
    if data_type == "timestamp":
        return True
    if sample_values:
        first = sample_values[0]
        return bool(_EPOCH_MILLIS.fullmatch(first) or _ISO_PREFIX.match(first))
    return False


def _numeric_stats(numbers: list[float]) -> NumericStats | None:
    if not numbers:
        return None
    values = np.asarray(numbers, dtype=float)
    return NumericStats(
        min=float(values.min()),
        max=float(values.max()),
        avg=float(values.mean()),
        sum=float(values.sum()),
    )


def analyze_field(
    name: str,
    records: Sequence[Mapping[str, Any]],
    config: AnalyzerConfig,
) -> FieldProfile:
    total_count = len(records)
    present: list[Any] = []
    distinct: dict[str, None] = {}
    observed: set[str] = set()
    numbers: list[float] = []

    for record in records:
        value = record.get(name)
        if not _is_present(value):
            continue
        present.append(value)
        distinct.setdefault(js_string(value), None)
        value_type = detect_value_type(value)
        observed.add(value_type)
        if value_type == "number":
            number = to_number(value)
            if not math.isnan(number):
                numbers.append(number)

    data_type = determine_data_type(observed)
    sample_values = tuple(list(distinct)[: config.sample_size])

    is_numeric_string = False
    if data_type == "string" and present:
        parsed = [to_number(value) for value in present if js_string(value).strip()]
        parseable = [number for number in parsed if not math.isnan(number)]
        is_numeric_string = len(parseable) / len(present) > config.numeric_string_threshold
        numbers.extend(parseable)

    numeric_stats = None
    if data_type == "number" or is_numeric_string:
        numeric_stats = _numeric_stats(numbers)

    return FieldProfile(
        name=name,
        data_type=data_type,
        non_null_count=len(present),
        distinct_count=len(distinct),
        total_count=total_count,
        fill_percentage=(len(present) / total_count) * 100 if total_count else 0.0,
        sample_values=sample_values,
        is_time_field=looks_like_time_field(
            name, data_type, sample_values, config.time_field_names
        ),
        is_numeric_string=is_numeric_string,
        numeric_stats=numeric_stats,
    )


def analyze_fields(
    rows: Sequence[Mapping[str, Any]],
    config: AnalyzerConfig | None = None,
) -> list[FieldProfile]:
    """Profile every field seen in ``rows``, sorted by name."""
    config = config or AnalyzerConfig()
    records = [record_fields(row) for row in rows]
    names: dict[str, None] = {}
    for record in records:
        names.update(dict.fromkeys(record))
    profiles = [analyze_field(name, records, config) for name in names]
    return sorted(profiles, key=lambda profile: profile.name)


def infer_field_metadata(
    rows: Sequence[Mapping[str, Any]],
    config: AnalyzerConfig | None = None,
) -> list[FieldMetadata]:
    return [profile.metadata for profile in analyze_fields(rows, config)]


@dataclass(slots=True, frozen=True)
class ValueCount:
    value: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "count": self.count, "percentage": self.percentage}


def value_distribution(
    name: str,
    rows: Sequence[Mapping[str, Any]],
    limit: int = 100,
) -> list[ValueCount]:
    total = len(rows)
    counts: dict[str, int] = {}
    for row in rows:
        value = record_fields(row).get(name)
        if _is_present(value):
            key = js_string(value)
            counts[key] = counts.get(key, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        ValueCount(value=value, count=count, percentage=(count / total) * 100)
        for value, count in ranked
    ]


def describe_fields(profiles: Sequence[FieldProfile]) -> list[dict[str, Any]]:
    return [profile.to_dict() for profile in profiles]

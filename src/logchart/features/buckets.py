from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from logchart.features.aggregates import DEFAULT_AGGREGATION, aggregate

BucketUnit = Literal["millisecond", "second", "minute", "hour", "day", "week", "month", "year"]

_DAY_MS = 24 * 60 * 60 * 1000

# month and year are calendar approximations
BUCKET_UNIT_MS: dict[str, int] = {
    "millisecond": 1,
    "second": 1000,
    "minute": 60 * 1000,
    "hour": 60 * 60 * 1000,
    "day": _DAY_MS,
    "week": 7 * _DAY_MS,
    "month": 30 * _DAY_MS,
    "year": 365 * _DAY_MS,
}


@dataclass(slots=True)
class TimedValues:
    time: int | float
    values: dict[str, float] = field(default_factory=dict)


def bucket_size_ms(unit: str, size: int | float) -> int | float:
    return BUCKET_UNIT_MS.get(unit, 1) * size


def bucket_start(time: int | float, bucket_ms: int | float) -> int | float:
    return (time // bucket_ms) * bucket_ms


def bucket_time_values(
    timed_values: Iterable[TimedValues],
    unit: str,
    size: int | float,
    aggregations: Mapping[str, str] | None = None,
) -> list[TimedValues]:
    """Group values into fixed-width buckets and reduce each field with its own aggregation.

    Output has one entry per occupied bucket, ascending by bucket start. Fields without
    an entry in ``aggregations`` are summed.
    """
    bucket_ms = bucket_size_ms(unit, size)
    if bucket_ms <= 0:
        raise ValueError(f"Bucket size must be positive, got {size!r} {unit}.")
    aggregations = aggregations or {}

    buckets: dict[int | float, list[dict[str, float]]] = {}
    for item in timed_values:
        buckets.setdefault(bucket_start(item.time, bucket_ms), []).append(item.values)

    result: list[TimedValues] = []
    for start, members in buckets.items():
        field_names: dict[str, None] = {}
        for values in members:
            field_names.update(dict.fromkeys(values))
        reduced = {
            name: aggregate(
                (values[name] for values in members if name in values),
                aggregations.get(name, DEFAULT_AGGREGATION),
            )
            for name in field_names
        }
        result.append(TimedValues(time=start, values=reduced))

    result.sort(key=lambda item: item.time)
    return result

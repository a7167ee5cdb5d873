from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from logchart.preprocess.values import coerce_number

Aggregation = Literal["count", "sum", "avg", "min", "max"]

AGGREGATIONS: tuple[Aggregation, ...] = ("count", "sum", "avg", "min", "max")
DEFAULT_AGGREGATION: Aggregation = "sum"
COUNT_TOKEN = "__count__"

_AGGREGATED_FIELD = re.compile(r"(\w+)\((.+)\)")


def normalize_aggregation(op: str | None) -> Aggregation:
    if op in AGGREGATIONS:
        return op  # type: ignore[return-value]
    return DEFAULT_AGGREGATION


def aggregate(values: Iterable[Any], op: str | None) -> float:
    """Reduce values under ``op``; empty input yields 0 and unknown ops fall back to sum."""
    numbers = [coerce_number(value) for value in values]
    aggregation = normalize_aggregation(op)
    if aggregation == "count":
        return len(numbers)
    if not numbers:
        return 0
    if aggregation == "avg":
        return sum(numbers) / len(numbers)
    if aggregation == "min":
        return min(numbers)
    if aggregation == "max":
        return max(numbers)
    return sum(numbers)


@dataclass(slots=True, frozen=True)
class ValueFieldSpec:
    key: str
    field: str
    aggregation: str
    display_name: str

    @property
    def is_count(self) -> bool:
        return self.field == COUNT_TOKEN


def parse_value_field(token: str) -> ValueFieldSpec:
    """Split ``agg(field)`` tokens; bare names aggregate with sum."""
    if token == COUNT_TOKEN:
        return ValueFieldSpec(
            key=COUNT_TOKEN,
            field=COUNT_TOKEN,
            aggregation="count",
            display_name="count",
        )
    match = _AGGREGATED_FIELD.fullmatch(token)
    if match:
        return ValueFieldSpec(
            key=token,
            field=match.group(2),
            aggregation=match.group(1),
            display_name=token,
        )
    return ValueFieldSpec(
        key=token,
        field=token,
        aggregation=DEFAULT_AGGREGATION,
        display_name=token,
    )

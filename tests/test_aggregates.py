from __future__ import annotations

import pytest

from logchart.features.aggregates import (
    COUNT_TOKEN,
    aggregate,
    normalize_aggregation,
    parse_value_field,
)


@pytest.mark.parametrize("op", ["sum", "avg", "min", "max", "count"])
def test_aggregate_returns_zero_for_empty_input(op: str) -> None:
    assert aggregate([], op) == 0


def test_aggregate_applies_each_operation() -> None:
    values = [4, "6", None, "x"]

    assert aggregate(values, "count") == 4
    assert aggregate(values, "sum") == 10
    assert aggregate(values, "avg") == 2.5
    assert aggregate(values, "min") == 0
    assert aggregate(values, "max") == 6


def test_aggregate_falls_back_to_sum_for_unknown_operations() -> None:
    assert normalize_aggregation("median") == "sum"
    assert normalize_aggregation(None) == "sum"
    assert aggregate([1, 2, 3], "median") == 6


def test_parse_value_field_splits_aggregated_tokens() -> None:
    spec = parse_value_field("avg(response_time)")

    assert spec.key == "avg(response_time)"
    assert spec.field == "response_time"
    assert spec.aggregation == "avg"
    assert spec.display_name == "avg(response_time)"
    assert not spec.is_count


def test_parse_value_field_handles_count_and_bare_names() -> None:
    count = parse_value_field(COUNT_TOKEN)
    bare = parse_value_field("bytes")

    assert count.is_count
    assert count.aggregation == "count"
    assert count.display_name == "count"
    assert bare.field == "bytes"
    assert bare.aggregation == "sum"

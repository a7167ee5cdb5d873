from __future__ import annotations

import pytest

from logchart.config import AnalyzerConfig
from logchart.preprocess.fields import (
    analyze_fields,
    detect_value_type,
    determine_data_type,
    infer_field_metadata,
    record_fields,
    value_distribution,
)


def _rows() -> list[dict[str, object]]:
    return [
        {
            "_messagetime": "1696723858832",
            "status": "200",
            "host": "web-1",
            "size": "12 MB",
            "created": "2023-10-08T00:10:58Z",
        },
        {
            "_messagetime": "1696723859832",
            "status": "404",
            "host": "web-2",
            "size": "3 MB",
            "created": "2023-10-08T00:11:58Z",
        },
        {
            "_messagetime": "1696723860832",
            "status": "200",
            "host": None,
            "size": "7 MB",
            "created": "2023-10-08T00:12:58Z",
        },
    ]


def test_detect_value_type() -> None:
    assert detect_value_type(None) == "null"
    assert detect_value_type(True) == "boolean"
    assert detect_value_type(3.5) == "number"
    assert detect_value_type("42") == "number"
    assert detect_value_type("2023-10-08T00:10:58Z") == "timestamp"
    assert detect_value_type("web-1") == "string"


def test_determine_data_type_resolves_mixtures() -> None:
    assert determine_data_type(set()) == "string"
    assert determine_data_type({"null", "number"}) == "number"
    assert determine_data_type({"number", "string"}) == "number"
    assert determine_data_type({"timestamp", "boolean"}) == "timestamp"
    assert determine_data_type({"boolean", "string"}) == "mixed"


def test_analyze_fields_profiles_each_field_sorted_by_name() -> None:
    profiles = {profile.name: profile for profile in analyze_fields(_rows())}

    assert list(profiles) == sorted(profiles)
    assert profiles["status"].data_type == "number"
    assert profiles["status"].distinct_count == 2
    assert profiles["status"].numeric_stats is not None
    assert profiles["status"].numeric_stats.max == 404
    assert profiles["host"].non_null_count == 2
    assert profiles["host"].fill_percentage == pytest.approx(200 / 3)
    assert profiles["host"].sample_values == ("web-1", "web-2")


def test_analyze_fields_flags_time_fields_by_name_and_value() -> None:
    profiles = {profile.name: profile for profile in analyze_fields(_rows())}

    assert profiles["_messagetime"].is_time_field
    assert profiles["created"].data_type == "timestamp"
    assert profiles["created"].is_time_field
    assert not profiles["host"].is_time_field


def test_numeric_strings_become_number_metadata() -> None:
    metadata = {entry.name: entry for entry in infer_field_metadata(_rows())}

    assert metadata["size"].data_type == "number"
    assert metadata["host"].data_type == "string"
    assert metadata["created"].data_type == "string"
    assert metadata["created"].is_time_field


def test_analyzer_config_controls_time_names_and_samples() -> None:
    config = AnalyzerConfig(time_field_names=["host"], sample_size=1)

    profiles = {profile.name: profile for profile in analyze_fields(_rows(), config)}

    assert profiles["host"].sample_values == ("web-1",)
    assert profiles["host"].is_time_field
    assert not profiles["status"].is_time_field


def test_record_fields_unwraps_search_job_records() -> None:
    assert record_fields({"map": {"a": "1"}}) == {"a": "1"}
    assert record_fields({"a": "1"}) == {"a": "1"}


def test_value_distribution_ranks_values() -> None:
    distribution = value_distribution("status", _rows())

    assert [(item.value, item.count) for item in distribution] == [("200", 2), ("404", 1)]
    assert distribution[0].percentage == pytest.approx(200 / 3)

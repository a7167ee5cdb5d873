from __future__ import annotations

import pytest

from logchart.charts.base import NO_TIME_FIELD_ERROR, resolve_time_field, series_entry
from logchart.charts.category import CATEGORY_CHART, CATEGORY_FIELD_REQUIRED
from logchart.charts.options import ChartConfig
from logchart.charts.timeseries import TIMESERIES_CHART
from logchart.charts.timeseries_series import SERIES_FIELD_REQUIRED, TIMESERIES_SERIES_CHART
from logchart.charts.timeslice_transpose import (
    NO_TIMESLICE_ERROR,
    TIMESLICE_TRANSPOSE_CHART,
    TOO_FEW_FIELDS_ERROR,
)
from logchart.contracts import FieldMetadata
from logchart.errors import ChartConfigError

T0 = 1696723800000

TIME_METADATA = [
    FieldMetadata("_timeslice", "string", is_time_field=True),
    FieldMetadata("bytes", "number"),
    FieldMetadata("status", "string"),
]


def _log_rows() -> list[dict[str, object]]:
    return [
        {"_timeslice": str(T0), "bytes": "10", "status": "200"},
        {"_timeslice": str(T0 + 1_000), "bytes": "20", "status": "404"},
        {"_timeslice": str(T0 + 60_000), "bytes": "5", "status": "200"},
        {"_timeslice": "garbage", "bytes": "99", "status": "500"},
    ]


def test_series_entry_maps_area_to_filled_line_and_stacks() -> None:
    entry = series_entry("a", [[1, 2]], "area", stacked=True, smooth=True)

    assert entry == {
        "name": "a",
        "type": "line",
        "data": [[1, 2]],
        "smooth": True,
        "stack": "total",
        "areaStyle": {},
    }
    assert "stack" not in series_entry("b", [], "bar")


def test_resolve_time_field_precedence() -> None:
    metadata = [FieldMetadata("host"), FieldMetadata("_messagetime", is_time_field=True)]

    assert resolve_time_field("ts", ["host"], metadata, "x") == "ts"
    assert resolve_time_field(None, ["host"], metadata, "x") == "_messagetime"
    assert resolve_time_field(None, ["host"], [FieldMetadata("host")], "x") == "x"


def test_category_bar_chart_counts_by_field() -> None:
    config = ChartConfig("category", fields=["status"])

    spec = CATEGORY_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"]["text"] == "status by count"
    assert spec["xAxis"]["data"] == ["200", "404", "500"]
    assert spec["xAxis"]["axisLabel"]["rotate"] == 0
    assert spec["series"][0]["name"] == "Count"
    assert spec["series"][0]["type"] == "bar"
    assert spec["series"][0]["data"] == [2, 1, 1]
    assert spec["tooltip"]["axisPointer"]["type"] == "shadow"
    assert "dataZoom" not in spec


def test_category_chart_uses_second_field_as_value() -> None:
    config = ChartConfig(
        "category",
        fields=["status", "bytes"],
        options={"aggregation": "sum", "chartType": "line", "areaStyle": True},
    )

    spec = CATEGORY_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"]["text"] == "status by sum of bytes"
    assert spec["xAxis"]["data"] == ["500", "404", "200"]
    assert spec["series"][0]["data"] == [99, 20, 15]
    assert spec["series"][0]["areaStyle"] == {}
    assert spec["series"][0]["smooth"] is False


def test_category_chart_rotates_and_zooms_many_labels() -> None:
    rows = [{"host": f"host-{index:02d}"} for index in range(25)]

    spec = CATEGORY_CHART.transform(rows, ChartConfig("category", fields=["host"]), [])

    assert spec["xAxis"]["axisLabel"]["rotate"] == 45
    assert len(spec["dataZoom"]) == 2


def test_category_pie_chart_applies_top_n_and_other() -> None:
    config = ChartConfig(
        "category",
        fields=["status"],
        options={"chartType": "pie", "topN": 1, "includeOther": True},
    )

    spec = CATEGORY_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"]["text"] == "status Distribution"
    assert spec["legend"] == {"orient": "vertical", "left": "left", "type": "scroll"}
    assert spec["series"][0]["type"] == "pie"
    assert spec["series"][0]["data"] == [
        {"name": "200", "value": 2},
        {"name": "Other", "value": 2},
    ]


def test_category_chart_applies_advanced_settings() -> None:
    config = ChartConfig(
        "category",
        fields=["status"],
        options={"advancedSettings": {"title": {"text": "Status codes"}}},
    )

    spec = CATEGORY_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"] == {"text": "Status codes", "left": "center"}


def test_category_validator_requires_a_category_field() -> None:
    result = CATEGORY_CHART.validate(ChartConfig("category"), TIME_METADATA)

    assert not result.valid
    assert result.error == CATEGORY_FIELD_REQUIRED
    assert CATEGORY_CHART.validate(
        ChartConfig("category", options={"seriesField": "status"}), []
    ).valid
    with pytest.raises(ChartConfigError):
        CATEGORY_CHART.transform(_log_rows(), ChartConfig("category"), [])


def test_timeseries_chart_counts_and_sums_per_row_time() -> None:
    config = ChartConfig(
        "timeseries",
        fields=["_timeslice"],
        options={"valueFields": ["sum(bytes)", "__count__"], "chartType": "bar"},
    )

    spec = TIMESERIES_CHART.transform(_log_rows(), config, TIME_METADATA)

    names = [entry["name"] for entry in spec["series"]]
    assert names == ["count", "sum(bytes)"]
    assert spec["title"]["text"] == "count, sum(bytes) over Time"
    assert spec["legend"]["data"] == names
    assert spec["legend"]["right"] == 10
    assert spec["grid"]["right"] == "15%"
    assert spec["xAxis"] == {"type": "time"}
    assert spec["series"][0]["data"] == [[T0, 1], [T0 + 1_000, 1], [T0 + 60_000, 1]]
    assert spec["series"][1]["data"] == [[T0, 10], [T0 + 1_000, 20], [T0 + 60_000, 5]]
    assert spec["series"][1]["type"] == "bar"


def test_timeseries_chart_buckets_with_each_fields_aggregation() -> None:
    config = ChartConfig(
        "timeseries",
        fields=["_timeslice"],
        options={
            "valueFields": ["__count__", "avg(bytes)"],
            "timeBucket": {"enabled": True, "unit": "minute", "value": 1},
        },
    )

    spec = TIMESERIES_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["series"][0]["data"] == [[T0, 2], [T0 + 60_000, 1]]
    assert spec["series"][1]["data"] == [[T0, 15], [T0 + 60_000, 5]]


def test_timeseries_chart_prefers_pre_aggregated_columns() -> None:
    rows = [
        {"_timeslice": T0, "sum(bytes)": 500, "bytes": 1},
        {"_timeslice": T0 + 60_000, "bytes": 7},
    ]
    config = ChartConfig("timeseries", options={"valueFields": ["sum(bytes)"]})

    spec = TIMESERIES_CHART.transform(rows, config, TIME_METADATA)

    assert spec["series"][0]["data"] == [[T0, 500], [T0 + 60_000, 7]]


def test_timeseries_chart_defaults_value_fields_to_non_time_config_fields() -> None:
    config = ChartConfig("timeseries", fields=["_timeslice", "bytes"])

    spec = TIMESERIES_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert [entry["name"] for entry in spec["series"]] == ["bytes"]


def test_timeseries_validator_requires_time_metadata() -> None:
    result = TIMESERIES_CHART.validate(
        ChartConfig("timeseries", fields=["bytes"]),
        [FieldMetadata("bytes", "number")],
    )

    assert not result.valid
    assert result.error == NO_TIME_FIELD_ERROR


def test_timeseries_series_chart_groups_by_series_field() -> None:
    config = ChartConfig(
        "timeseries-series",
        options={"seriesField": "status", "chartType": "area", "stacked": True},
    )

    spec = TIMESERIES_SERIES_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"]["text"] == "count by status over Time"
    assert spec["legend"] == {"data": ["200", "404"], "bottom": 0, "type": "scroll"}
    assert spec["yAxis"] == {"type": "value", "name": "count"}
    first = spec["series"][0]
    assert first["name"] == "200"
    assert first["type"] == "line"
    assert first["areaStyle"] == {}
    assert first["stack"] == "total"
    assert first["data"] == [[T0, 1], [T0 + 1_000, 0], [T0 + 60_000, 1]]


def test_timeseries_series_chart_top_n_and_value_aggregation() -> None:
    config = ChartConfig(
        "timeseries-series",
        options={
            "seriesField": "status",
            "valueField": "bytes",
            "aggregation": "sum",
            "topN": 1,
            "includeOther": True,
        },
    )

    spec = TIMESERIES_SERIES_CHART.transform(_log_rows(), config, TIME_METADATA)

    assert spec["title"]["text"] == "sum of bytes by status over Time"
    assert [entry["name"] for entry in spec["series"]] == ["200", "Other"]
    assert spec["series"][1]["data"] == [[T0, 0], [T0 + 1_000, 20], [T0 + 60_000, 0]]


def test_timeseries_series_chart_drops_rows_with_relative_date_words() -> None:
    rows = [
        {"t": str(T0), "status": "200"},
        {"t": "now", "status": "200"},
        {"t": "today", "status": "404"},
    ]
    config = ChartConfig("timeseries-series", options={"timeField": "t", "seriesField": "status"})

    spec = TIMESERIES_SERIES_CHART.transform(rows, config, [])

    assert [entry["name"] for entry in spec["series"]] == ["200"]
    assert spec["series"][0]["data"] == [[T0, 1]]


def test_timeseries_series_validator_checks_time_then_series_field() -> None:
    no_time = TIMESERIES_SERIES_CHART.validate(
        ChartConfig("timeseries-series", options={"seriesField": "status"}),
        [FieldMetadata("status")],
    )
    no_series = TIMESERIES_SERIES_CHART.validate(
        ChartConfig("timeseries-series"),
        TIME_METADATA,
    )

    assert no_time.error == NO_TIME_FIELD_ERROR
    assert no_series.error == SERIES_FIELD_REQUIRED


def test_timeslice_transpose_chart_plots_each_column() -> None:
    rows = [
        {"_timeslice": str(T0 + 60_000), "web": "4", "db": "1"},
        {"_timeslice": str(T0), "web": "2", "db": "3"},
    ]
    config = ChartConfig("timeslice-transpose", options={"stacked": True})

    spec = TIMESLICE_TRANSPOSE_CHART.transform(rows, config, [])

    assert spec["title"]["text"] == "Timeslice Transpose: 2 Series"
    assert spec["xAxis"] == {"type": "time", "name": "Time"}
    assert spec["yAxis"] == {"type": "value", "name": "sum"}
    assert spec["legend"]["data"] == ["web", "db"]
    assert spec["series"][0]["data"] == [[T0, 2], [T0 + 60_000, 4]]
    assert spec["series"][1]["stack"] == "total"


def test_timeslice_transpose_validator_messages() -> None:
    missing_time = TIMESLICE_TRANSPOSE_CHART.validate(
        ChartConfig("timeslice-transpose"),
        [FieldMetadata("web"), FieldMetadata("db")],
    )
    too_few = TIMESLICE_TRANSPOSE_CHART.validate(
        ChartConfig("timeslice-transpose"),
        [FieldMetadata("_timeslice")],
    )
    ok = TIMESLICE_TRANSPOSE_CHART.validate(
        ChartConfig("timeslice-transpose"),
        [FieldMetadata("_timeslice"), FieldMetadata("web")],
    )

    assert missing_time.error == NO_TIMESLICE_ERROR
    assert too_few.error == TOO_FEW_FIELDS_ERROR
    assert ok.valid

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from logchart.charts.base import (
    ADVANCED_SETTINGS_OPTION,
    CHART_STYLE_CHOICES,
    NO_TIME_FIELD_ERROR,
    SIDE_LEGEND_GRID,
    SMOOTH_OPTION,
    STACKED_OPTION,
    ChartTypeDefinition,
    resolve_time_field,
    series_entry,
    side_legend,
    time_axis_spec,
)
from logchart.charts.options import ChartConfig, TimeseriesOptions
from logchart.charts.overrides import apply_overrides
from logchart.contracts import (
    ChartSpec,
    ConfigOption,
    FieldMetadata,
    Row,
    ValidationResult,
    has_time_field,
)
from logchart.features.aggregates import ValueFieldSpec, parse_value_field
from logchart.features.buckets import TimedValues, bucket_time_values
from logchart.preprocess.time import DEFAULT_TIME_FIELD, has_valid_time, parse_timestamp
from logchart.preprocess.values import coerce_number

LOGGER = logging.getLogger(__name__)

COUNT_SERIES_NAME = "count"


def _cell(row: Row, spec: ValueFieldSpec) -> Any:
    # pre-aggregated results carry the full "agg(field)" column
    if spec.key in row:
        return row[spec.key]
    return row.get(spec.field)


def _count_points(
    times: Sequence[int | float],
    options: TimeseriesOptions,
) -> list[list[int | float]]:
    counts: dict[int | float, int] = {}
    for time in times:
        counts[time] = counts.get(time, 0) + 1
    timed = [
        TimedValues(time=time, values={COUNT_SERIES_NAME: count})
        for time, count in counts.items()
    ]
    bucket = options.time_bucket
    if bucket.active:
        timed = bucket_time_values(timed, bucket.unit, bucket.value)
    else:
        timed.sort(key=lambda item: item.time)
    return [[item.time, item.values[COUNT_SERIES_NAME]] for item in timed]


def transform_timeseries(
    rows: Sequence[Row],
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ChartSpec:
    options = TimeseriesOptions.coerce(config.options)
    time_field = (
        resolve_time_field(
            options.time_field,
            config.fields,
            field_metadata,
            fallback=config.fields[0] if config.fields else None,
        )
        or DEFAULT_TIME_FIELD
    )
    value_fields = options.value_fields or [name for name in config.fields if name != time_field]
    specs = [parse_value_field(token) for token in value_fields]
    data_specs = [spec for spec in specs if not spec.is_count]

    timed: list[TimedValues] = []
    for row in rows:
        time = parse_timestamp(row.get(time_field))
        if not has_valid_time(time):
            continue
        timed.append(
            TimedValues(
                time=time,
                values={spec.key: coerce_number(_cell(row, spec)) for spec in data_specs},
            )
        )
    row_times = [item.time for item in timed]
    dropped = len(rows) - len(timed)
    if dropped:
        LOGGER.debug("Dropped %d rows with unparseable %s", dropped, time_field)
    timed.sort(key=lambda item: item.time)

    bucket = options.time_bucket
    if bucket.active:
        timed = bucket_time_values(
            timed,
            bucket.unit,
            bucket.value,
            aggregations={spec.key: spec.aggregation for spec in data_specs},
        )

    series: list[dict[str, Any]] = []
    if any(spec.is_count for spec in specs):
        series.append(
            series_entry(
                COUNT_SERIES_NAME,
                _count_points(row_times, options),
                options.chart_type,
                stacked=options.stacked,
                smooth=options.smooth,
            )
        )
    for spec in data_specs:
        series.append(
            series_entry(
                spec.display_name,
                [[item.time, item.values.get(spec.key, 0)] for item in timed],
                options.chart_type,
                stacked=options.stacked,
                smooth=options.smooth,
            )
        )

    names = [entry["name"] for entry in series]
    chart_spec = time_axis_spec(
        title=f"{', '.join(names)} over Time",
        legend=side_legend(names),
        grid=SIDE_LEGEND_GRID,
        series=series,
    )
    return apply_overrides(chart_spec, options.advanced_settings)


def validate_timeseries(
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ValidationResult:
    if not has_time_field(field_metadata):
        return ValidationResult.failure(NO_TIME_FIELD_ERROR)
    return ValidationResult.ok()


TIMESERIES_OPTIONS = (
    ConfigOption(
        id="timeField",
        label="Time Field",
        type="field-select",
        description="Field to use as time axis (auto-detected if not specified)",
    ),
    ConfigOption(
        id="valueFields",
        label="Value Fields",
        type="multi-field-select",
        default_value=[],
        description=(
            "Select one or more numeric fields to display as series. "
            "Leave empty to use all non-time fields."
        ),
    ),
    ConfigOption(
        id="chartType",
        label="Chart Type",
        type="select",
        default_value="line",
        choices=CHART_STYLE_CHOICES,
        required=True,
    ),
    STACKED_OPTION,
    SMOOTH_OPTION,
    ConfigOption(
        id="timeBucket",
        label="Time Bucket",
        type="time-bucket",
        default_value={"enabled": False, "unit": "minute", "value": 1},
        description="Re-bucket time series data to a different time interval",
    ),
    ADVANCED_SETTINGS_OPTION,
)

TIMESERIES_CHART = ChartTypeDefinition(
    id="timeseries",
    name="Timeseries Chart",
    description="Visualize data over time with line, area, or bar charts",
    category="timeseries",
    min_fields=1,
    max_fields=10,
    supported_data_types=frozenset({"number", "string", "any"}),
    requires_time_field=True,
    config_options=TIMESERIES_OPTIONS,
    transformer=transform_timeseries,
    validator=validate_timeseries,
    options_model=TimeseriesOptions,
)

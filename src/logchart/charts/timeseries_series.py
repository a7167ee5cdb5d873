from __future__ import annotations

from collections.abc import Sequence

from logchart.charts.base import (
    ADVANCED_SETTINGS_OPTION,
    AGGREGATION_CHOICES,
    CHART_STYLE_CHOICES,
    NO_TIME_FIELD_ERROR,
    SMOOTH_OPTION,
    STACKED_OPTION,
    ChartTypeDefinition,
    resolve_time_field,
    series_entry,
    time_axis_spec,
)
from logchart.charts.options import ChartConfig, TimeseriesSeriesOptions
from logchart.charts.overrides import apply_overrides
from logchart.contracts import (
    ChartSpec,
    ConfigOption,
    FieldMetadata,
    Row,
    ValidationResult,
    has_time_field,
)
from logchart.errors import ChartConfigError
from logchart.features.series import reduce_series
from logchart.preprocess.time import DEFAULT_TIME_FIELD

SERIES_FIELD_REQUIRED = (
    "Series field is required. Please select a categorical field to group by."
)

BOTTOM_LEGEND_GRID = {
    "left": "3%",
    "right": "4%",
    "bottom": "15%",
    "top": "15%",
    "containLabel": True,
}


def _title(aggregation: str, value_field: str | None, series_field: str) -> str:
    measure = f"{aggregation} of {value_field}" if value_field else aggregation
    return f"{measure} by {series_field} over Time"


def transform_timeseries_series(
    rows: Sequence[Row],
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ChartSpec:
    options = TimeseriesSeriesOptions.coerce(config.options)
    if not options.series_field:
        raise ChartConfigError(SERIES_FIELD_REQUIRED)
    time_field = resolve_time_field(
        options.time_field,
        config.fields,
        field_metadata,
        fallback=DEFAULT_TIME_FIELD,
    )
    reduction = reduce_series(
        rows,
        time_field=time_field or DEFAULT_TIME_FIELD,
        series_field=options.series_field,
        value_field=options.value_field,
        aggregation=options.aggregation,
        top_n=10 if options.top_n is None else options.top_n,
        include_other=options.include_other,
    )
    series = [
        series_entry(
            name,
            points,
            options.chart_type,
            stacked=options.stacked,
            smooth=options.smooth,
        )
        for name, points in reduction.series.items()
    ]
    chart_spec = time_axis_spec(
        title=_title(options.aggregation, options.value_field, options.series_field),
        legend={"data": reduction.names, "bottom": 0, "type": "scroll"},
        grid=BOTTOM_LEGEND_GRID,
        series=series,
        y_axis={"type": "value", "name": options.aggregation},
    )
    return apply_overrides(chart_spec, options.advanced_settings)


def validate_timeseries_series(
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ValidationResult:
    if not has_time_field(field_metadata):
        return ValidationResult.failure(NO_TIME_FIELD_ERROR)
    options = TimeseriesSeriesOptions.coerce(config.options)
    if not options.series_field:
        return ValidationResult.failure(SERIES_FIELD_REQUIRED)
    return ValidationResult.ok()


TIMESERIES_SERIES_OPTIONS = (
    ConfigOption(
        id="timeField",
        label="Time Field",
        type="field-select",
        description="Field to use as time axis (auto-detected if not specified)",
    ),
    ConfigOption(
        id="seriesField",
        label="Series Field",
        type="field-select",
        description="Categorical field to group by (e.g., collector, status_code, tier)",
        required=True,
    ),
    ConfigOption(
        id="valueField",
        label="Value Field",
        type="field-select",
        description=(
            "Numeric field to aggregate (e.g., bytes, response_time). Leave empty for count."
        ),
    ),
    ConfigOption(
        id="aggregation",
        label="Aggregation",
        type="select",
        default_value="count",
        choices=AGGREGATION_CHOICES,
        description="How to aggregate values for each series over time",
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
        id="topN",
        label="Top N Series",
        type="number",
        default_value=10,
        description="Show only the top N series by total count (leave 0 or blank for all)",
    ),
    ConfigOption(
        id="includeOther",
        label='Include "Other" Series',
        type="checkbox",
        default_value=False,
        description='Group series outside Top N into an "Other" series',
    ),
    ADVANCED_SETTINGS_OPTION,
)

TIMESERIES_SERIES_CHART = ChartTypeDefinition(
    id="timeseries-series",
    name="Timeseries by Series",
    description=(
        "Aggregate data over time, grouped by a categorical field "
        "(e.g., sum(bytes) by collector over time)"
    ),
    category="timeseries",
    min_fields=0,
    max_fields=1,
    supported_data_types=frozenset({"number", "string", "any"}),
    requires_time_field=True,
    config_options=TIMESERIES_SERIES_OPTIONS,
    transformer=transform_timeseries_series,
    validator=validate_timeseries_series,
    options_model=TimeseriesSeriesOptions,
)

from __future__ import annotations

from collections.abc import Sequence

from logchart.charts.base import (
    ADVANCED_SETTINGS_OPTION,
    CHART_STYLE_CHOICES,
    SIDE_LEGEND_GRID,
    SMOOTH_OPTION,
    STACKED_OPTION,
    ChartTypeDefinition,
    series_entry,
    side_legend,
    time_axis_spec,
)
from logchart.charts.options import ChartConfig, TimesliceTransposeOptions
from logchart.charts.overrides import apply_overrides
from logchart.contracts import ChartSpec, ConfigOption, FieldMetadata, Row, ValidationResult
from logchart.features.transpose import reduce_transpose
from logchart.preprocess.time import DEFAULT_TIME_FIELD

NO_TIMESLICE_ERROR = (
    'No _timeslice field found. This chart type requires data transposed with "_timeslice" '
    "as the row field (e.g., | transpose row _timeslice column _sourceCategory)"
)
TOO_FEW_FIELDS_ERROR = (
    "At least 2 fields required: _timeslice and at least one series column from transpose"
)


def transform_timeslice_transpose(
    rows: Sequence[Row],
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ChartSpec:
    """Chart rows produced by ``transpose row _timeslice``, one series per column."""
    options = TimesliceTransposeOptions.coerce(config.options)
    reduction = reduce_transpose(
        rows,
        time_field=options.time_field,
        exclude_field=options.value_field,
        top_n=options.top_n,
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
        title=f"Timeslice Transpose: {len(series)} Series",
        legend=side_legend(reduction.names),
        grid=SIDE_LEGEND_GRID,
        series=series,
        x_axis={"type": "time", "name": "Time"},
        y_axis={"type": "value", "name": options.aggregation or "Value"},
    )
    return apply_overrides(chart_spec, options.advanced_settings)


def validate_timeslice_transpose(
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ValidationResult:
    if not any(
        entry.name == DEFAULT_TIME_FIELD or entry.is_time_field for entry in field_metadata
    ):
        return ValidationResult.failure(NO_TIMESLICE_ERROR)
    if len(field_metadata) < 2:
        return ValidationResult.failure(TOO_FEW_FIELDS_ERROR)
    return ValidationResult.ok()


TIMESLICE_TRANSPOSE_OPTIONS = (
    ConfigOption(
        id="timeField",
        label="Time Field",
        type="field-select",
        default_value=DEFAULT_TIME_FIELD,
        description="Field to use as time axis (typically _timeslice for transposed data)",
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
        default_value=0,
        description="Show only the top N series by total value (0 = show all)",
    ),
    ConfigOption(
        id="includeOther",
        label='Include "Other" Series',
        type="checkbox",
        default_value=False,
        description='Sum series outside Top N into an "Other" series',
    ),
    ADVANCED_SETTINGS_OPTION,
)

TIMESLICE_TRANSPOSE_CHART = ChartTypeDefinition(
    id="timeslice-transpose",
    name="Timeslice Transpose",
    description=(
        "Chart data that has been transposed with _timeslice as rows and other fields "
        "as series (e.g., | transpose row _timeslice column _sourceCategory)"
    ),
    category="timeseries",
    min_fields=0,
    max_fields=1,
    supported_data_types=frozenset({"any"}),
    requires_time_field=True,
    config_options=TIMESLICE_TRANSPOSE_OPTIONS,
    transformer=transform_timeslice_transpose,
    validator=validate_timeslice_transpose,
    options_model=TimesliceTransposeOptions,
)

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from logchart.charts.base import (
    ADVANCED_SETTINGS_OPTION,
    AGGREGATION_CHOICES,
    ChartTypeDefinition,
    zoom_controls,
)
from logchart.charts.options import CategoryOptions, ChartConfig
from logchart.charts.overrides import apply_overrides
from logchart.contracts import ChartSpec, ConfigOption, FieldMetadata, Row, ValidationResult
from logchart.errors import ChartConfigError
from logchart.features.category import CategoryValue, reduce_category

CATEGORY_FIELD_REQUIRED = "Category field is required. Select a field or set seriesField."

ROTATE_LABELS_ABOVE = 10
ZOOM_ABOVE = 20


def _category_field(config: ChartConfig, options: CategoryOptions) -> str | None:
    return options.series_field or (config.fields[0] if config.fields else None)


def _value_field(config: ChartConfig, options: CategoryOptions) -> str | None:
    return options.value_field or (config.fields[1] if len(config.fields) > 1 else None)


def _pie_spec(category_field: str, categories: Sequence[CategoryValue]) -> ChartSpec:
    return {
        "title": {"text": f"{category_field} Distribution", "left": "center"},
        "tooltip": {"trigger": "item", "formatter": "{b}: {c} ({d}%)"},
        "legend": {"orient": "vertical", "left": "left", "type": "scroll"},
        "series": [
            {
                "name": category_field,
                "type": "pie",
                "radius": "50%",
                "data": [{"name": item.label, "value": item.value} for item in categories],
                "emphasis": {
                    "itemStyle": {
                        "shadowBlur": 10,
                        "shadowOffsetX": 0,
                        "shadowColor": "rgba(0, 0, 0, 0.5)",
                    }
                },
            }
        ],
    }


def _axis_spec(
    category_field: str,
    value_field: str | None,
    categories: Sequence[CategoryValue],
    options: CategoryOptions,
) -> ChartSpec:
    labels = [item.label for item in categories]
    title = f"{category_field} by {options.aggregation}"
    if value_field:
        title = f"{title} of {value_field}"

    series: dict[str, Any] = {
        "name": value_field or "Count",
        "type": "line" if options.chart_type == "line" else "bar",
        "data": [item.value for item in categories],
    }
    if options.chart_type == "line":
        series["smooth"] = options.smooth
        if options.area_style:
            series["areaStyle"] = {}

    spec: ChartSpec = {
        "title": {"text": title, "left": "center"},
        "tooltip": {
            "trigger": "axis",
            "axisPointer": {"type": "shadow" if options.chart_type == "bar" else "cross"},
        },
        "grid": {"left": "3%", "right": "4%", "bottom": "3%", "containLabel": True},
        "xAxis": {
            "type": "category",
            "data": labels,
            "axisLabel": {
                "rotate": 45 if len(labels) > ROTATE_LABELS_ABOVE else 0,
                "interval": 0,
            },
        },
        "yAxis": {"type": "value"},
        "series": [series],
    }
    if len(labels) > ZOOM_ABOVE:
        spec["dataZoom"] = zoom_controls()
    return spec


def transform_category(
    rows: Sequence[Row],
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ChartSpec:
    """Aggregate rows per category value into a bar, line or pie chart."""
    options = CategoryOptions.coerce(config.options)
    category_field = _category_field(config, options)
    if not category_field:
        raise ChartConfigError(CATEGORY_FIELD_REQUIRED)
    value_field = _value_field(config, options)

    categories = reduce_category(
        rows,
        category_field=category_field,
        value_field=value_field,
        aggregation=options.aggregation,
        sort_order=options.sort_order,
        top_n=options.top_n,
        include_other=options.include_other,
    )
    if options.chart_type == "pie":
        chart_spec = _pie_spec(category_field, categories)
    else:
        chart_spec = _axis_spec(category_field, value_field, categories, options)
    return apply_overrides(chart_spec, options.advanced_settings)


def validate_category(
    config: ChartConfig,
    field_metadata: Sequence[FieldMetadata],
) -> ValidationResult:
    options = CategoryOptions.coerce(config.options)
    if not _category_field(config, options):
        return ValidationResult.failure(CATEGORY_FIELD_REQUIRED)
    return ValidationResult.ok()


CATEGORY_OPTIONS = (
    ConfigOption(
        id="seriesField",
        label="Category Field",
        type="field-select",
        description="Field to use for categories (e.g., collector, status_code, tier)",
    ),
    ConfigOption(
        id="valueField",
        label="Value Field",
        type="field-select",
        description="Numeric field to aggregate (e.g., bytes). Leave empty for count.",
    ),
    ConfigOption(
        id="chartType",
        label="Chart Type",
        type="select",
        default_value="bar",
        choices=(("bar", "Bar Chart"), ("line", "Line Chart"), ("pie", "Pie Chart")),
        required=True,
    ),
    ConfigOption(
        id="aggregation",
        label="Aggregation",
        type="select",
        default_value="count",
        choices=AGGREGATION_CHOICES,
        description="How to aggregate values",
    ),
    ConfigOption(
        id="sortOrder",
        label="Sort Order",
        type="select",
        default_value="desc",
        choices=(
            ("desc", "Descending (Highest First)"),
            ("asc", "Ascending (Lowest First)"),
            ("alpha", "Alphabetical"),
        ),
    ),
    ConfigOption(
        id="topN",
        label="Top N Values",
        type="number",
        default_value=20,
        description="Show only the top N categories (leave 0 or blank for all)",
    ),
    ConfigOption(
        id="includeOther",
        label='Include "Other" Category',
        type="checkbox",
        default_value=False,
        description='Group values outside Top N into an "Other" category',
    ),
    ConfigOption(
        id="smooth",
        label="Smooth Line",
        type="checkbox",
        default_value=False,
        description="Apply smoothing to line charts",
    ),
    ConfigOption(
        id="areaStyle",
        label="Area Fill",
        type="checkbox",
        default_value=False,
        description="Fill area under line chart",
    ),
    ADVANCED_SETTINGS_OPTION,
)

CATEGORY_CHART = ChartTypeDefinition(
    id="category",
    name="Category Chart",
    description="Visualize distribution of categorical data with bar, line, or pie charts",
    category="category",
    min_fields=1,
    max_fields=2,
    supported_data_types=frozenset({"string", "number", "any"}),
    config_options=CATEGORY_OPTIONS,
    transformer=transform_category,
    validator=validate_category,
    options_model=CategoryOptions,
)

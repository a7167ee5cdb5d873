from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from logchart.charts.options import ChartConfig, ChartOptionsBase, GenericOptions
from logchart.contracts import (
    ALLOWED_CHART_CATEGORIES,
    ChartCategory,
    ChartSpec,
    ConfigOption,
    FieldMetadata,
    Row,
    ValidationResult,
    metadata_by_name,
)

Transformer = Callable[[Sequence[Row], ChartConfig, Sequence[FieldMetadata]], ChartSpec]
Validator = Callable[[ChartConfig, Sequence[FieldMetadata]], ValidationResult]

NO_TIME_FIELD_ERROR = (
    "No time field available in the data. Timeseries charts require a time field "
    "like _timeslice, _messagetime, or _receipttime."
)


@dataclass(slots=True, frozen=True)
class ChartTypeDefinition:
    id: str
    name: str
    description: str
    category: ChartCategory
    min_fields: int
    max_fields: int
    supported_data_types: frozenset[str]
    transformer: Transformer
    config_options: tuple[ConfigOption, ...] = ()
    requires_time_field: bool = False
    validator: Validator | None = None
    options_model: type[ChartOptionsBase] = GenericOptions

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("id must be non-empty.")
        if self.category not in ALLOWED_CHART_CATEGORIES:
            raise ValueError(f"Unsupported category: {self.category!r}.")
        if self.min_fields < 0 or self.max_fields < self.min_fields:
            raise ValueError(
                f"Invalid field bounds for {self.id!r}: {self.min_fields}..{self.max_fields}."
            )
        object.__setattr__(self, "supported_data_types", frozenset(self.supported_data_types))
        object.__setattr__(self, "config_options", tuple(self.config_options))

    def accepts_data_type(self, data_type: str) -> bool:
        return data_type in self.supported_data_types or "any" in self.supported_data_types

    def validate(
        self,
        config: ChartConfig,
        field_metadata: Sequence[FieldMetadata] | None = None,
    ) -> ValidationResult:
        if self.validator is None:
            return ValidationResult.ok()
        return self.validator(config, list(field_metadata or ()))

    def transform(
        self,
        rows: Sequence[Row],
        config: ChartConfig,
        field_metadata: Sequence[FieldMetadata] | None = None,
    ) -> ChartSpec:
        return self.transformer(rows, config, list(field_metadata or ()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "minFields": self.min_fields,
            "maxFields": self.max_fields,
            "supportedDataTypes": sorted(self.supported_data_types),
            "requiresTimeField": self.requires_time_field,
            "configOptions": [option.to_dict() for option in self.config_options],
        }


def resolve_time_field(
    explicit: str | None,
    fields: Sequence[str],
    field_metadata: Sequence[FieldMetadata],
    fallback: str | None,
) -> str | None:
    """Pick the time column: explicit option, then a flagged config field, then any flagged field."""
    if explicit:
        return explicit
    lookup = metadata_by_name(field_metadata)
    for name in fields:
        entry = lookup.get(name)
        if entry is not None and entry.is_time_field:
            return name
    for entry in field_metadata:
        if entry.is_time_field:
            return entry.name
    return fallback


def series_entry(
    name: str,
    data: list[Any],
    chart_type: str,
    *,
    stacked: bool = False,
    smooth: bool = False,
) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "name": name,
        "type": "line" if chart_type == "area" else chart_type,
        "data": data,
        "smooth": smooth,
    }
    if stacked:
        entry["stack"] = "total"
    if chart_type == "area":
        entry["areaStyle"] = {}
    return entry


def zoom_controls() -> list[dict[str, Any]]:
    return [
        {"type": "inside", "start": 0, "end": 100},
        {"start": 0, "end": 100},
    ]


def time_axis_spec(
    title: str,
    legend: Mapping[str, Any],
    grid: Mapping[str, Any],
    series: list[dict[str, Any]],
    *,
    x_axis: Mapping[str, Any] | None = None,
    y_axis: Mapping[str, Any] | None = None,
) -> ChartSpec:
    return {
        "title": {"text": title, "left": "center"},
        "tooltip": {"trigger": "axis", "axisPointer": {"type": "cross"}},
        "legend": dict(legend),
        "grid": dict(grid),
        "toolbox": {
            "feature": {
                "dataZoom": {"yAxisIndex": "none"},
                "restore": {},
                "saveAsImage": {},
            }
        },
        "xAxis": dict(x_axis or {"type": "time"}),
        "yAxis": dict(y_axis or {"type": "value"}),
        "dataZoom": zoom_controls(),
        "series": series,
    }


def side_legend(names: Sequence[str]) -> dict[str, Any]:
    return {
        "data": list(names),
        "right": 10,
        "top": "middle",
        "orient": "vertical",
        "type": "scroll",
    }


SIDE_LEGEND_GRID = {
    "left": "3%",
    "right": "15%",
    "bottom": "12%",
    "top": "80px",
    "containLabel": True,
}

CHART_STYLE_CHOICES = (("line", "Line Chart"), ("area", "Area Chart"), ("bar", "Bar Chart"))
AGGREGATION_CHOICES = (
    ("count", "Count"),
    ("sum", "Sum"),
    ("avg", "Average"),
    ("min", "Minimum"),
    ("max", "Maximum"),
)

ADVANCED_SETTINGS_OPTION = ConfigOption(
    id="advancedSettings",
    label="Advanced Settings",
    type="advanced-settings",
    default_value={},
    description="Configure title, legend, axes, and other display settings",
)
STACKED_OPTION = ConfigOption(
    id="stacked",
    label="Stack Series",
    type="checkbox",
    default_value=False,
    description="Stack multiple series on top of each other",
)
SMOOTH_OPTION = ConfigOption(
    id="smooth",
    label="Smooth Lines",
    type="checkbox",
    default_value=False,
    description="Apply smoothing to line/area charts",
)

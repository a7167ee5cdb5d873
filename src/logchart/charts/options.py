from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from logchart.errors import ChartConfigError
from logchart.preprocess.time import DEFAULT_TIME_FIELD

if TYPE_CHECKING:
    from logchart.charts.registry import ChartRegistry

TimeChartStyle = Literal["line", "area", "bar"]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TimeBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    unit: str = "minute"
    value: int | float = 1

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.unit) and self.value > 0


class ChartOptionsBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    kind: ClassVar[str] = ""

    advanced_settings: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, options: Any) -> ChartOptionsBase:
        """Return ``options`` as this model, re-validating foreign option bags."""
        if isinstance(options, cls):
            return options
        if isinstance(options, BaseModel):
            data = {
                **options.model_dump(by_alias=True, exclude_unset=True),
                **(options.model_extra or {}),
            }
        else:
            data = dict(options or {})
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ChartConfigError(
                f"Invalid options for chart type {cls.kind or 'generic'!r}: {exc}"
            ) from exc

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GenericOptions(ChartOptionsBase):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )


class CategoryOptions(ChartOptionsBase):
    kind: ClassVar[str] = "category"

    series_field: str | None = None
    value_field: str | None = None
    chart_type: Literal["bar", "line", "pie"] = "bar"
    aggregation: str = "count"
    sort_order: Literal["desc", "asc", "alpha"] = "desc"
    top_n: int | None = None
    include_other: bool = False
    smooth: bool = False
    area_style: bool = False

    @field_validator("series_field", "value_field", "top_n", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TimeseriesOptions(ChartOptionsBase):
    kind: ClassVar[str] = "timeseries"

    time_field: str | None = None
    value_fields: list[str] = Field(default_factory=list)
    chart_type: TimeChartStyle = "line"
    stacked: bool = False
    smooth: bool = False
    time_bucket: TimeBucket = Field(default_factory=TimeBucket)

    @field_validator("time_field", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TimeseriesSeriesOptions(ChartOptionsBase):
    kind: ClassVar[str] = "timeseries-series"

    time_field: str | None = None
    series_field: str | None = None
    value_field: str | None = None
    aggregation: str = "count"
    chart_type: TimeChartStyle = "line"
    stacked: bool = False
    smooth: bool = False
    top_n: int | None = 10
    include_other: bool = False

    @field_validator("time_field", "series_field", "value_field", "top_n", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TimesliceTransposeOptions(ChartOptionsBase):
    kind: ClassVar[str] = "timeslice-transpose"

    time_field: str = DEFAULT_TIME_FIELD
    value_field: str | None = None
    aggregation: str = "sum"
    chart_type: TimeChartStyle = "line"
    stacked: bool = False
    smooth: bool = False
    top_n: int | None = 0
    include_other: bool = False

    @field_validator("time_field", mode="before")
    @classmethod
    def default_time_field(cls, value: Any) -> Any:
        return _blank_to_none(value) or DEFAULT_TIME_FIELD

    @field_validator("value_field", "top_n", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


ChartOptions = Union[
    CategoryOptions,
    TimeseriesOptions,
    TimeseriesSeriesOptions,
    TimesliceTransposeOptions,
    GenericOptions,
]

BUILTIN_OPTIONS_MODELS: dict[str, type[ChartOptionsBase]] = {
    model.kind: model
    for model in (
        CategoryOptions,
        TimeseriesOptions,
        TimeseriesSeriesOptions,
        TimesliceTransposeOptions,
    )
}


@dataclass(slots=True, frozen=True)
class ChartConfig:
    chart_type_id: str
    fields: tuple[str, ...] = ()
    options: ChartOptions = field(default_factory=GenericOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if not isinstance(self.options, ChartOptionsBase):
            model = BUILTIN_OPTIONS_MODELS.get(self.chart_type_id, GenericOptions)
            object.__setattr__(self, "options", model.coerce(self.options))

    def to_dict(self) -> dict[str, Any]:
        return {
            "chartTypeId": self.chart_type_id,
            "fields": list(self.fields),
            "options": self.options.to_dict(),
        }


def parse_chart_config(
    data: Mapping[str, Any],
    registry: ChartRegistry | None = None,
) -> ChartConfig:
    """Build a typed config from the camelCase boundary shape."""
    chart_type_id = str(data.get("chartTypeId") or data.get("chart_type_id") or "")
    model: type[ChartOptionsBase] = BUILTIN_OPTIONS_MODELS.get(chart_type_id, GenericOptions)
    if registry is not None:
        definition = registry.get(chart_type_id)
        if definition is not None:
            model = definition.options_model
    fields = data.get("fields") or ()
    if isinstance(fields, str):
        fields = (fields,)
    return ChartConfig(
        chart_type_id=chart_type_id,
        fields=tuple(str(name) for name in fields),
        options=model.coerce(data.get("options") or {}),
    )

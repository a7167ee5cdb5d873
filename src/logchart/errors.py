from __future__ import annotations


class ChartError(Exception):
    """Base class for chart engine failures surfaced to the caller."""


class UnknownChartTypeError(ChartError, KeyError):
    def __init__(self, chart_type_id: str) -> None:
        super().__init__(chart_type_id)
        self.chart_type_id = chart_type_id

    def __str__(self) -> str:
        return f"Unknown chart type: {self.chart_type_id!r}"


class ChartConfigError(ChartError, ValueError):
    """Chart options could not be parsed into the chart type's options model."""


class ChartValidationError(ChartError, ValueError):
    """A chart type's validator rejected the config for the available fields."""


class MissingTimeFieldError(ChartError, ValueError):
    """A structural time column is absent from every row."""

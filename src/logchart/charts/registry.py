from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence

from logchart.charts.base import ChartTypeDefinition
from logchart.charts.category import CATEGORY_CHART
from logchart.charts.timeseries import TIMESERIES_CHART
from logchart.charts.timeseries_series import TIMESERIES_SERIES_CHART
from logchart.charts.timeslice_transpose import TIMESLICE_TRANSPOSE_CHART
from logchart.contracts import FieldMetadata, has_time_field

LOGGER = logging.getLogger(__name__)

BUILTIN_CHART_TYPES: tuple[ChartTypeDefinition, ...] = (
    CATEGORY_CHART,
    TIMESERIES_CHART,
    TIMESERIES_SERIES_CHART,
    TIMESLICE_TRANSPOSE_CHART,
)


class ChartRegistry:
    """Chart type definitions keyed by id, in registration order."""

    def __init__(self, definitions: Iterable[ChartTypeDefinition] = ()) -> None:
        self._definitions: dict[str, ChartTypeDefinition] = {}
        self._lock = threading.Lock()
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ChartTypeDefinition) -> None:
        with self._lock:
            if definition.id in self._definitions:
                raise ValueError(f"Chart type already registered: {definition.id!r}.")
            self._definitions[definition.id] = definition
        LOGGER.debug("Registered chart type %s", definition.id)

    def get(self, chart_type_id: str) -> ChartTypeDefinition | None:
        return self._definitions.get(chart_type_id)

    def all(self) -> list[ChartTypeDefinition]:
        with self._lock:
            return list(self._definitions.values())

    def by_category(self, category: str) -> list[ChartTypeDefinition]:
        return [definition for definition in self.all() if definition.category == category]

    def compatible_with(self, fields: Sequence[FieldMetadata]) -> list[ChartTypeDefinition]:
        """Chart types that can plot exactly ``fields``."""
        compatible: list[ChartTypeDefinition] = []
        for definition in self.all():
            if not definition.min_fields <= len(fields) <= definition.max_fields:
                continue
            if definition.requires_time_field and not has_time_field(fields):
                continue
            if any(definition.accepts_data_type(entry.data_type) for entry in fields):
                compatible.append(definition)
        return compatible

    def compatible_with_field(
        self,
        field: FieldMetadata,
        all_fields: Sequence[FieldMetadata],
    ) -> list[ChartTypeDefinition]:
        """Chart types that could start from ``field`` given the rest of the result's fields."""
        compatible: list[ChartTypeDefinition] = []
        for definition in self.all():
            if not definition.accepts_data_type(field.data_type):
                continue
            if definition.requires_time_field and not has_time_field(all_fields):
                continue
            if definition.min_fields > 1:
                usable = [
                    entry for entry in all_fields if definition.accepts_data_type(entry.data_type)
                ]
                if len(usable) < definition.min_fields:
                    continue
            compatible.append(definition)
        return compatible

    def __contains__(self, chart_type_id: object) -> bool:
        return chart_type_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def build_default_registry() -> ChartRegistry:
    return ChartRegistry(BUILTIN_CHART_TYPES)

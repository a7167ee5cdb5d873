from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from logchart.charts.options import ChartConfig, parse_chart_config
from logchart.charts.registry import ChartRegistry
from logchart.config import AnalyzerConfig
from logchart.contracts import ChartSpec, FieldMetadata, Row
from logchart.errors import ChartValidationError, UnknownChartTypeError
from logchart.preprocess.fields import infer_field_metadata, record_fields

LOGGER = logging.getLogger(__name__)


def build_chart(
    registry: ChartRegistry,
    rows: Sequence[Row],
    field_metadata: Sequence[FieldMetadata] | None,
    config: ChartConfig | Mapping[str, Any],
    *,
    analyzer: AnalyzerConfig | None = None,
) -> ChartSpec:
    """Resolve, validate and run one chart type over a result set.

    Metadata is inferred from ``rows`` when the caller has none. The transformer is
    never invoked for a config its validator rejects.
    """
    if not isinstance(config, ChartConfig):
        config = parse_chart_config(config, registry)
    definition = registry.get(config.chart_type_id)
    if definition is None:
        raise UnknownChartTypeError(config.chart_type_id)

    records = [record_fields(row) for row in rows]
    if field_metadata is None:
        field_metadata = infer_field_metadata(records, analyzer)

    result = definition.validate(config, field_metadata)
    if not result.valid:
        raise ChartValidationError(result.error or f"Invalid config for {definition.id}.")

    LOGGER.debug(
        "Building %s chart from %d rows and %d fields",
        definition.id,
        len(records),
        len(field_metadata),
    )
    return definition.transform(records, config, field_metadata)

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from logchart.contracts import Row
from logchart.errors import MissingTimeFieldError
from logchart.features.category import OTHER_LABEL
from logchart.features.series import SeriesReduction
from logchart.preprocess.time import has_valid_time, parse_timestamp
from logchart.preprocess.values import coerce_number, to_number

LOGGER = logging.getLogger(__name__)


def series_columns(rows: Sequence[Row], time_field: str, exclude_field: str | None) -> list[str]:
    columns: dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    return [name for name in columns if name != time_field and name != exclude_field]


def column_totals(rows: Sequence[Row], columns: Sequence[str]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for column in columns:
        total = 0.0
        for row in rows:
            value = to_number(row.get(column))
            if not math.isnan(value):
                total += value
        totals[column] = total
    return totals


def reduce_transpose(
    rows: Sequence[Row],
    time_field: str,
    exclude_field: str | None = None,
    top_n: int | None = None,
    include_other: bool = False,
) -> SeriesReduction:
    """Read pre-pivoted rows (one per time slice, one column per series) into named series.

    Top N selection ranks columns by their summed cell values.
    """
    if not any(time_field in row for row in rows):
        raise MissingTimeFieldError(
            f'Time field "{time_field}" not found in data. '
            f'Make sure your query uses "transpose row {time_field}"'
        )

    columns = series_columns(rows, time_field=time_field, exclude_field=exclude_field)
    selected, remainder = columns, []
    if top_n and top_n > 0 and len(columns) > top_n:
        totals = column_totals(rows, columns)
        ranked = sorted(columns, key=lambda column: totals[column], reverse=True)
        selected, remainder = ranked[:top_n], ranked[top_n:]

    timed_rows = [(parse_timestamp(row.get(time_field)), row) for row in rows]
    valid_rows = [(time, row) for time, row in timed_rows if has_valid_time(time)]
    dropped = len(timed_rows) - len(valid_rows)
    if dropped:
        LOGGER.debug("Dropped %d rows with unparseable %s", dropped, time_field)
    valid_rows.sort(key=lambda item: item[0])

    series: dict[str, list[list[int | float]]] = {
        column: [[time, coerce_number(row.get(column))] for time, row in valid_rows]
        for column in selected
    }
    if include_other and remainder:
        series[OTHER_LABEL] = [
            [time, sum(coerce_number(row.get(column)) for column in remainder)]
            for time, row in valid_rows
        ]
    return SeriesReduction(
        times=[time for time, _row in valid_rows],
        series=series,
        dropped_rows=dropped,
    )

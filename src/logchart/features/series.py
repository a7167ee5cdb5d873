from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd

from logchart.contracts import Row
from logchart.features.aggregates import aggregate
from logchart.features.category import OTHER_LABEL
from logchart.preprocess.time import has_valid_time, parse_timestamp
from logchart.preprocess.values import category_label, coerce_number

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SeriesReduction:
    """Named series over a shared, ascending time axis."""

    times: list[int | float] = field(default_factory=list)
    series: dict[str, list[list[int | float]]] = field(default_factory=dict)
    dropped_rows: int = 0

    @property
    def names(self) -> list[str]:
        return list(self.series)


def rank_series_by_volume(
    row_counts: pd.Series,
    top_n: int | None,
) -> tuple[list[str], list[str]]:
    """Split labels into (selected, remainder) by row count, keeping discovery order on ties."""
    ranked = sorted(row_counts.items(), key=lambda item: item[1], reverse=True)
    labels = [str(label) for label, _count in ranked]
    if not top_n or top_n <= 0:
        return [str(label) for label in row_counts.index], []
    return labels[:top_n], labels[top_n:]


def reduce_series(
    rows: Sequence[Row],
    time_field: str,
    series_field: str,
    value_field: str | None,
    aggregation: str,
    top_n: int | None = None,
    include_other: bool = False,
) -> SeriesReduction:
    """Cross-tabulate rows by time point and series label into a dense grid.

    Series are ranked by how many rows they contribute, not by aggregated value.
    Every selected series carries exactly one point per distinct time, 0 where no
    rows matched.
    """
    records: list[tuple[int | float, str, float]] = []
    dropped = 0
    for row in rows:
        time = parse_timestamp(row.get(time_field))
        if not has_valid_time(time):
            dropped += 1
            continue
        value = coerce_number(row.get(value_field)) if value_field else 1.0
        records.append((time, category_label(row.get(series_field)), value))
    if dropped:
        LOGGER.debug("Dropped %d rows with unparseable %s", dropped, time_field)

    frame = pd.DataFrame.from_records(records, columns=["time", "label", "value"])
    if frame.empty:
        return SeriesReduction(dropped_rows=dropped)

    cells = frame.groupby(["time", "label"], sort=False)["value"].agg(list).to_dict()
    row_counts = frame.groupby("label", sort=False).size()
    selected, remainder = rank_series_by_volume(row_counts, top_n)
    # the frame upcasts mixed int/float times, so take the axis from the parsed values
    times = sorted({time for time, _label, _value in records})

    series: dict[str, list[list[int | float]]] = {
        label: [[time, aggregate(cells.get((time, label), []), aggregation)] for time in times]
        for label in selected
    }
    if include_other and remainder:
        series[OTHER_LABEL] = [
            [
                time,
                sum(
                    aggregate(cells[(time, label)], aggregation)
                    for label in remainder
                    if (time, label) in cells
                ),
            ]
            for time in times
        ]
    return SeriesReduction(times=times, series=series, dropped_rows=dropped)

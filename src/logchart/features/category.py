from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import pandas as pd

from logchart.contracts import Row
from logchart.features.aggregates import aggregate
from logchart.preprocess.values import category_label, coerce_number

SortOrder = Literal["desc", "asc", "alpha"]

OTHER_LABEL = "Other"


@dataclass(slots=True, frozen=True)
class CategoryValue:
    label: str
    value: float


def sort_categories(categories: Sequence[CategoryValue], sort_order: str) -> list[CategoryValue]:
    """Stable sort; ties keep their incoming order."""
    if sort_order == "asc":
        return sorted(categories, key=lambda item: item.value)
    if sort_order == "alpha":
        return sorted(categories, key=lambda item: item.label)
    return sorted(categories, key=lambda item: item.value, reverse=True)


def limit_categories(
    categories: Sequence[CategoryValue],
    top_n: int | None,
    include_other: bool,
) -> list[CategoryValue]:
    if not top_n or top_n <= 0 or len(categories) <= top_n:
        return list(categories)
    limited = list(categories[:top_n])
    if include_other:
        remainder = categories[top_n:]
        limited.append(
            CategoryValue(label=OTHER_LABEL, value=sum(item.value for item in remainder))
        )
    return limited


def reduce_category(
    rows: Sequence[Row],
    category_field: str,
    value_field: str | None,
    aggregation: str,
    sort_order: str = "desc",
    top_n: int | None = None,
    include_other: bool = False,
) -> list[CategoryValue]:
    """Group rows by category label, aggregate, sort and collapse beyond top N into Other."""
    frame = pd.DataFrame(
        {
            "label": [category_label(row.get(category_field)) for row in rows],
            "value": [
                coerce_number(row.get(value_field)) if value_field else 1.0 for row in rows
            ],
        },
        columns=["label", "value"],
    )
    if frame.empty:
        return []

    grouped = frame.groupby("label", sort=False)["value"].agg(list)
    categories = [
        CategoryValue(label=str(label), value=aggregate(values, aggregation))
        for label, values in grouped.items()
    ]
    return limit_categories(
        sort_categories(categories, sort_order),
        top_n=top_n,
        include_other=include_other,
    )

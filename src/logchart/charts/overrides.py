from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from logchart.contracts import ChartSpec

MERGED_SECTIONS = ("title", "legend", "xAxis", "yAxis", "grid")

_OPPOSITE_KEYS = {"top": "bottom", "bottom": "top", "left": "right", "right": "left"}
_LEGEND_GRID_SPACING = {
    "top": "120px",
    "bottom": "22%",
    "left": "15%",
    "right": "15%",
}
TITLE_TOP_WITH_LEGEND = 40


def _merged(base: Any, overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base) if isinstance(base, Mapping) else {}
    merged.update(overrides)
    return merged


def _at_edge(value: Any, edge: str) -> bool:
    return value == edge or (value == 0 and not isinstance(value, bool))


def apply_overrides(base_spec: ChartSpec, overrides: Mapping[str, Any] | None) -> ChartSpec:
    """Layer display overrides onto a chart spec without mutating it.

    Title, legend, axes and grid are shallow-merged. Pinning the legend to an edge
    clears the opposite edge and widens the grid margin on that side; explicit grid
    overrides are applied last.
    """
    if not overrides:
        return base_spec

    result = copy.deepcopy(base_spec)

    title = overrides.get("title")
    if isinstance(title, Mapping):
        result["title"] = _merged(result.get("title"), title)

    legend = overrides.get("legend")
    if isinstance(legend, Mapping):
        merged_legend = _merged(result.get("legend"), legend)
        for key, opposite in _OPPOSITE_KEYS.items():
            if legend.get(key) is not None:
                merged_legend.pop(opposite, None)
        result["legend"] = merged_legend

        if _at_edge(legend.get("top"), "top"):
            result["title"] = _merged(result.get("title"), {"top": TITLE_TOP_WITH_LEGEND})

        grid = result.get("grid")
        if isinstance(grid, Mapping):
            grid = dict(grid)
            for edge, spacing in _LEGEND_GRID_SPACING.items():
                if _at_edge(legend.get(edge), edge):
                    grid[edge] = spacing
            result["grid"] = grid

    for section in ("xAxis", "yAxis", "grid"):
        section_overrides = overrides.get(section)
        if isinstance(section_overrides, Mapping):
            result[section] = _merged(result.get(section), section_overrides)

    return result

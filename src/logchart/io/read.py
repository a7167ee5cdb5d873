from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from logchart.contracts import FieldMetadata
from logchart.preprocess.fields import record_fields


def _csv_rows(path: Path) -> list[dict[str, Any]]:
    # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
    frame = pd.read_csv(path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
    return [
        {column: (value if value != "" else None) for column, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]


def _json_rows(payload: Any, path: Path) -> list[dict[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("records", payload.get("rows"))
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of rows or a records payload in {path}")
    rows: list[dict[str, Any]] = []
    for item in payload:
        if not isinstance(item, Mapping):
            raise ValueError(f"Row entries must be objects in {path}, got {type(item).__name__}")
        rows.append(dict(record_fields(item)))
    return rows


def load_rows(path: Path) -> list[dict[str, Any]]:
    """Load result rows from a CSV export or a JSON search-job payload."""
    if path.suffix == ".csv":
        return _csv_rows(path)
    if path.suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        return _json_rows(payload, path)
    raise ValueError(f"Unsupported rows file type: {path.suffix}")


def load_field_metadata(path: Path) -> list[FieldMetadata]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, Mapping):
        payload = payload.get("fields", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of field metadata entries in {path}")
    return [FieldMetadata.from_dict(entry) for entry in payload]


def load_options(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Chart options in {path} must be a mapping")
    return dict(data)

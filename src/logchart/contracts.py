from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

FieldDataType = Literal["string", "number", "any"]
ChartCategory = Literal["category", "timeseries", "statistical"]
ConfigOptionType = Literal[
    "select",
    "checkbox",
    "number",
    "field-select",
    "multi-field-select",
    "time-bucket",
    "advanced-settings",
]

ALLOWED_FIELD_DATA_TYPES = frozenset({"string", "number", "any"})
ALLOWED_CHART_CATEGORIES = frozenset({"category", "timeseries", "statistical"})
ALLOWED_CONFIG_OPTION_TYPES = frozenset(
    {
        "select",
        "checkbox",
        "number",
        "field-select",
        "multi-field-select",
        "time-bucket",
        "advanced-settings",
    }
)

Row = Mapping[str, Any]
ChartSpec = dict[str, Any]


@dataclass(slots=True, frozen=True)
class FieldMetadata:
    name: str
    data_type: FieldDataType = "any"
    is_time_field: bool = False

    def __post_init__(self) -> None:
        if self.data_type not in ALLOWED_FIELD_DATA_TYPES:
            raise ValueError(f"Unsupported data_type: {self.data_type!r}.")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldMetadata:
        data_type = data.get("dataType", data.get("data_type", "any"))
        if data_type not in ALLOWED_FIELD_DATA_TYPES:
            data_type = "any"
        return cls(
            name=str(data["name"]),
            data_type=data_type,
            is_time_field=bool(data.get("isTimeField", data.get("is_time_field", False))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dataType": self.data_type,
            "isTimeField": self.is_time_field,
        }


def metadata_by_name(field_metadata: Iterable[FieldMetadata] | None) -> dict[str, FieldMetadata]:
    lookup: dict[str, FieldMetadata] = {}
    for entry in field_metadata or ():
        lookup.setdefault(entry.name, entry)
    return lookup


def has_time_field(field_metadata: Iterable[FieldMetadata] | None) -> bool:
    return any(entry.is_time_field for entry in field_metadata or ())


@dataclass(slots=True, frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failure(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(slots=True, frozen=True)
class ConfigOption:
    id: str
    label: str
    type: ConfigOptionType
    default_value: Any = None
    choices: tuple[tuple[Any, str], ...] = ()
    description: str | None = None
    required: bool = False

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("id must be non-empty.")
        if self.type not in ALLOWED_CONFIG_OPTION_TYPES:
            raise ValueError(f"Unsupported option type: {self.type!r}.")
        if self.type == "select" and not self.choices:
            raise ValueError(f"select option {self.id!r} requires choices.")
        object.__setattr__(self, "choices", tuple(self.choices))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "defaultValue": self.default_value,
            "required": self.required,
        }
        if self.choices:
            payload["options"] = [
                {"value": value, "label": label} for value, label in self.choices
            ]
        if self.description:
            payload["description"] = self.description
        return payload

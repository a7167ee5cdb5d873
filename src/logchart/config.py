from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIME_FIELD_NAMES = [
    "_messagetime",
    "_timeslice",
    "_receipttime",
    "__timeslice_end",
    "_searchabletime",
    "timestamp",
    "time",
    "datetime",
    "created_at",
    "updated_at",
]


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AnalyzerConfig(BaseModel):
    time_field_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TIME_FIELD_NAMES)
    )
    numeric_string_threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    sample_size: int = Field(default=5, ge=1)


class OutputConfig(BaseModel):
    indent: int | None = Field(default=2, ge=0)
    sort_keys: bool = False


class DefaultsConfig(BaseModel):
    chart_type: str = "category"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path | None = None) -> AppConfig:
    data: dict = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    config.logging.level = os.getenv("LOGCHART_LOG_LEVEL") or config.logging.level
    return config

from __future__ import annotations

import json
from pathlib import Path

import typer

from logchart.charts.options import parse_chart_config
from logchart.charts.registry import ChartRegistry, build_default_registry
from logchart.config import AppConfig, load_config
from logchart.contracts import FieldMetadata
from logchart.errors import ChartConfigError, ChartValidationError, MissingTimeFieldError
from logchart.io.read import load_field_metadata, load_options, load_rows
from logchart.io.write import dump_chart_spec, write_chart_spec
from logchart.logging import configure_logging
from logchart.pipeline.build_chart import build_chart
from logchart.preprocess.fields import analyze_fields, describe_fields, value_distribution

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    cfg = load_config(config_path)
    configure_logging(cfg.logging.level)
    return cfg


def _metadata(rows: list[dict], metadata: Path | None, cfg: AppConfig) -> list[FieldMetadata]:
    if metadata is not None:
        return load_field_metadata(metadata)
    return [profile.metadata for profile in analyze_fields(rows, cfg.analyzer)]


def _registry() -> ChartRegistry:
    return build_default_registry()


@app.command("types")
def list_types(
    category: str | None = typer.Option(None, help="Only list chart types in this category."),
    as_json: bool = typer.Option(False, "--json", help="Emit full chart type descriptors."),
) -> None:
    """List registered chart types."""
    registry = _registry()
    definitions = registry.by_category(category) if category else registry.all()
    if as_json:
        typer.echo(json.dumps([definition.to_dict() for definition in definitions], indent=2))
        return
    for definition in definitions:
        typer.echo(f"{definition.id}\t{definition.category}\t{definition.name}")


@app.command()
def fields(
    rows: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    distribution: str | None = typer.Option(
        None,
        "--distribution",
        help="Print the most frequent values of this field instead of profiles.",
    ),
    limit: int = typer.Option(100, min=1, help="Maximum values listed by --distribution."),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Profile every field in a result file."""
    cfg = _load_app_config(config)
    loaded_rows = load_rows(rows)
    if distribution is not None:
        counts = value_distribution(distribution, loaded_rows, limit=limit)
        typer.echo(json.dumps([entry.to_dict() for entry in counts], indent=cfg.output.indent))
        return
    profiles = analyze_fields(loaded_rows, cfg.analyzer)
    typer.echo(json.dumps(describe_fields(profiles), indent=cfg.output.indent))


@app.command()
def compatible(
    rows: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    field: list[str] = typer.Option(
        [],
        "--field",
        help="Field(s) to chart. One field matches chart types that can start from it.",
    ),
    metadata: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """List chart types that can plot the selected fields."""
    cfg = _load_app_config(config)
    all_fields = _metadata(load_rows(rows), metadata, cfg)
    by_name = {entry.name: entry for entry in all_fields}
    unknown = [name for name in field if name not in by_name]
    if unknown:
        raise typer.BadParameter(f"Unknown field(s): {', '.join(unknown)}")

    registry = _registry()
    if len(field) == 1:
        matches = registry.compatible_with_field(by_name[field[0]], all_fields)
    else:
        selected = [by_name[name] for name in field] if field else all_fields
        matches = registry.compatible_with(selected)
    for definition in matches:
        typer.echo(definition.id)


@app.command()
def render(
    rows: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    chart_type: str | None = typer.Option(None, "--chart-type", "-t"),
    field: list[str] = typer.Option([], "--field", help="Config field, repeatable."),
    options: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="YAML or JSON file with chart options (camelCase keys).",
    ),
    metadata: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="JSON field metadata; inferred from the rows when omitted.",
    ),
    out: Path | None = typer.Option(None, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Transform a result file into a chart spec."""
    cfg = _load_app_config(config)
    registry = _registry()
    chart_type_id = chart_type or cfg.defaults.chart_type
    if registry.get(chart_type_id) is None:
        raise typer.BadParameter(f"Unknown chart type: {chart_type_id}")

    loaded_rows = load_rows(rows)
    field_metadata = _metadata(loaded_rows, metadata, cfg)
    try:
        chart_config = parse_chart_config(
            {
                "chartTypeId": chart_type_id,
                "fields": field,
                "options": load_options(options) if options is not None else {},
            },
            registry,
        )
    except ChartConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        spec = build_chart(registry, loaded_rows, field_metadata, chart_config)
    except (ChartValidationError, ChartConfigError, MissingTimeFieldError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if out is None:
        typer.echo(dump_chart_spec(spec, indent=cfg.output.indent, sort_keys=cfg.output.sort_keys))
        return
    write_chart_spec(spec, out, indent=cfg.output.indent, sort_keys=cfg.output.sort_keys)
    typer.echo(f"Chart spec written to: {out}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

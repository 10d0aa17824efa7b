from __future__ import annotations

import json
from pathlib import Path

import typer

from widget_engine.builders.registry import chart_types as registered_chart_types
from widget_engine.config import (
    DEFAULT_SETTINGS_PATH,
    BaseChartConfig,
    EngineSettings,
    load_chart_config,
    load_settings,
)
from widget_engine.logging import configure_logging
from widget_engine.models import load_query_result
from widget_engine.render import render_chart

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_engine_settings(settings: Path | None) -> EngineSettings:
    if settings is None and DEFAULT_SETTINGS_PATH.exists():
        settings = DEFAULT_SETTINGS_PATH
    return load_settings(settings)


def _resolve_config(
    config: Path | None, chart_type: str | None
) -> tuple[str, BaseChartConfig | None]:
    if chart_type is not None and chart_type not in registered_chart_types():
        raise typer.BadParameter(f"Unknown chart type: {chart_type}", param_hint="--chart-type")
    if config is None:
        if chart_type is None:
            raise typer.BadParameter("Provide --chart-type when no --config is given")
        return chart_type, None
    try:
        chart_config = load_chart_config(config, chart_type)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0]), param_hint="--config") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    return chart_config.chart_type, chart_config


@app.command()
def render(
    data: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Widget chart config (YAML or JSON).",
    ),
    chart_type: str | None = typer.Option(
        None,
        help="Chart type; defaults to the chart_type declared in --config.",
    ),
    out: Path | None = typer.Option(None, resolve_path=True),
    settings: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Transform a query result JSON file into chart-ready JSON."""
    configure_logging()
    resolved_type, chart_config = _resolve_config(config, chart_type)
    engine_settings = _load_engine_settings(settings)
    result = load_query_result(data)
    chart = render_chart(result, chart_config, resolved_type, settings=engine_settings)
    payload = json.dumps(chart.to_dict(), indent=2)
    if out is None:
        typer.echo(payload)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(payload + "\n", encoding="utf-8")
    typer.echo(f"Chart data written to: {out}")


@app.command("chart-types")
def chart_types() -> None:
    """List the chart types the engine can build."""
    for name in registered_chart_types():
        typer.echo(name)


if __name__ == "__main__":
    app()

"""CLI entry point for the journal analytics engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from .core.config import Settings, load_settings
from .core.errors import ConfigError, SnapshotError
from .observability.logger import get_logger, new_run_id, set_run_id, setup_logging

log = get_logger(__name__)


def load_snapshot(path: str | Path) -> list[dict[str, Any]]:
    """Read journal entries from a JSON snapshot.

    The file holds either a list of entries or an object with an
    ``entries`` list.

    Raises:
        SnapshotError: If the file cannot be read or has another shape.
    """
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise SnapshotError(f"Cannot read snapshot {path}: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("entries")
    if not isinstance(payload, list) or not all(isinstance(e, dict) for e in payload):
        raise SnapshotError(f"Snapshot {path} must contain a list of journal entries")
    return payload


def _bootstrap(config: str | None) -> Settings:
    try:
        settings = load_settings(config_path=config)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format.value)
    ctx = click.get_current_context(silent=True)
    run_id = (ctx.obj or {}).get("run_id") if ctx is not None else None
    if run_id:
        set_run_id(run_id)
    else:
        run_id = new_run_id()
    log.debug("cli_start", run_id=run_id, config=config)
    return settings


def _entries(snapshot: str) -> list[dict[str, Any]]:
    try:
        return load_snapshot(snapshot)
    except SnapshotError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--run-id", default=None, help="Run id attached to every log line")
@click.pass_context
def main(ctx: click.Context, run_id: str | None) -> None:
    """Trading psychology analytics."""
    ctx.ensure_object(dict)["run_id"] = run_id


@main.command()
@click.argument("snapshot", type=click.Path(dir_okay=False))
@click.option("--capital", type=float, default=None, help="Initial capital override")
@click.option("--as-of", "as_of", default=None, help="Reference date (YYYY-MM-DD)")
@click.option("--config", default=None, help="Config file path")
@click.option("--output", default=None, type=click.Path(dir_okay=False), help="Write JSON here")
def analyze(
    snapshot: str,
    capital: float | None,
    as_of: str | None,
    config: str | None,
    output: str | None,
) -> None:
    """Compute the full analytics bundle for a journal snapshot."""
    from .journal.engine import AnalyticsEngine
    from .journal.export import to_json

    settings = _bootstrap(config)
    bundle = AnalyticsEngine(settings).analyze(
        _entries(snapshot), initial_capital=capital, as_of=as_of
    )
    text = to_json(bundle)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        log.info("bundle_written", path=output, trades=len(bundle.trade_set))
    else:
        click.echo(text)


@main.command()
@click.argument("text")
@click.option("--all", "show_all", is_flag=True, help="Include undetected categories")
@click.option("--config", default=None, help="Config file path")
def classify(text: str, show_all: bool, config: str | None) -> None:
    """Classify one reflection text into behavioural patterns."""
    from .journal.engine import AnalyticsEngine

    settings = _bootstrap(config)
    matches = AnalyticsEngine(settings).classify(text).values()
    rows = [m.to_dict() for m in matches if show_all or m.detected]
    click.echo(json.dumps(rows, indent=2))


@main.command()
@click.argument("snapshot", type=click.Path(dir_okay=False))
@click.option("--month", required=True, help="Month (YYYY-MM)")
@click.option("--config", default=None, help="Config file path")
def recap(snapshot: str, month: str, config: str | None) -> None:
    """Print the monthly recap of a journal snapshot."""
    from .journal.engine import AnalyticsEngine

    settings = _bootstrap(config)
    try:
        result = AnalyticsEngine(settings).recap(_entries(snapshot), month)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--month") from exc
    click.echo(json.dumps(result.to_dict(), indent=2))


@main.command()
@click.argument("snapshot", type=click.Path(dir_okay=False))
@click.option(
    "--kind",
    type=click.Choice(["equity", "excursions"]),
    default="equity",
    help="Table to export",
)
@click.option("--capital", type=float, default=None, help="Initial capital override")
@click.option("--config", default=None, help="Config file path")
def export(snapshot: str, kind: str, capital: float | None, config: str | None) -> None:
    """Export the equity curve or excursion table as CSV."""
    from .journal.engine import AnalyticsEngine
    from .journal.export import equity_curve_csv, excursions_csv

    settings = _bootstrap(config)
    bundle = AnalyticsEngine(settings).analyze(_entries(snapshot), initial_capital=capital)
    writer = equity_curve_csv if kind == "equity" else excursions_csv
    click.echo(writer(bundle), nl=False)


if __name__ == "__main__":
    main()

"""
Regenerative Ratio tracker: CLI entry point.

Every store-backed command reads the layered config, sets up logging from
its ``[logging]`` section, opens the ``SnapshotStore`` (a first run seeds the
default project) and then acts. Results print to stdout. Domain errors print
to stderr and exit with code 1; a stale id is reported as ``[WARN]``.

Examples::

    pip install -e .
    regen-ratio --help
    regen-ratio score -m L=7 -m X=3 -i "Soil organic matter=6" -i 8
    regen-ratio project create "River catchment"
    regen-ratio snapshot save -m L=6 -i 7 --label "Baseline" --date 2026-01-15
    regen-ratio snapshot list
    regen-ratio forecast
    regen-ratio export --output data/exports/history.csv

Projects default to the active one, which after a fresh start is the first
project in saved order. Pass ``--project <id>`` to target another.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="regen-ratio",
    help="Score, snapshot, and forecast Regenerative Ratio (Re / Rx) readings.",
    add_completion=False,
)
project_app = typer.Typer(help="Create, list, rename, and delete projects.")
snapshot_app = typer.Typer(help="Save, list, update, and delete snapshots.")
app.add_typer(project_app, name="project")
app.add_typer(snapshot_app, name="snapshot")

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_PROJECT_OPTION = typer.Option(
    None, "--project", "-p", help="Project id (default: the active project)."
)
_METRIC_OPTION = typer.Option(
    None, "--metric", "-m", help="Factor value as SYMBOL=VALUE, e.g. L=7 or Omega=2. Repeatable."
)
_INDICATOR_OPTION = typer.Option(
    None, "--indicator", "-i", help="Indicator as NAME=VALUE or just VALUE. Repeatable."
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _config_or_exit(config_path: Optional[str]):
    """Return the layered AppConfig; a missing file or bad value exits with 1."""
    import pydantic

    from regen_ratio.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
    except (pydantic.ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Invalid configuration: {exc}", err=True)
    raise typer.Exit(code=1)


def _open_store(config_path: Optional[str]):
    """Load config, configure logging, and return an opened SnapshotStore."""
    from regen_ratio.config import build_store
    from regen_ratio.utils.logging import configure_logging

    config = _config_or_exit(config_path)
    configure_logging(config.logging)
    store = build_store(config)
    store.open()
    return store


def _fail(exc: Exception) -> typer.Exit:
    """Report a domain error on stderr and return the Exit to raise."""
    from regen_ratio.errors import NotFoundError

    tag = "[WARN]" if isinstance(exc, NotFoundError) else "[ERROR]"
    typer.echo(f"{tag} {exc}", err=True)
    return typer.Exit(code=1)


def _split_pair(raw: str) -> tuple[str, str]:
    """Split ``NAME=VALUE`` on the last ``=``; a bare value gets an empty name."""
    name, sep, value = raw.rpartition("=")
    return (name.strip(), value.strip()) if sep else ("", raw.strip())


def _parse_float(raw: str, what: str) -> float:
    try:
        return float(raw)
    except ValueError:
        typer.echo(f"[ERROR] {what}: '{raw}' is not a number.", err=True)
        raise typer.Exit(code=1)


def _apply_inputs(
    form,
    metrics: Optional[list[str]],
    indicators: Optional[list[str]],
    replace_indicators: bool,
) -> None:
    """Apply ``--metric`` / ``--indicator`` options to a FormState in place."""
    for raw in metrics or []:
        symbol, value = _split_pair(raw)
        try:
            form.set_metric(symbol, _parse_float(value, f"metric {symbol}"))
        except KeyError as exc:
            typer.echo(f"[ERROR] {exc.args[0]}", err=True)
            raise typer.Exit(code=1)

    if indicators and replace_indicators:
        for existing in list(form.indicators):
            form.remove_indicator(existing.id)
    for raw in indicators or []:
        name, value = _split_pair(raw)
        form.add_indicator(name=name, value=_parse_float(value, f"indicator {name or raw}"))


def _target_project(store, project_id: Optional[str]):
    from regen_ratio.errors import NotFoundError

    try:
        return store.get_project(project_id) if project_id else store.active_project
    except NotFoundError as exc:
        raise _fail(exc)


# ── Top-level commands ────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print the full config as JSON."),
) -> None:
    """Load the layered config and show the values commands will use."""
    config = _config_or_exit(config_path)

    rows = [
        ("Storage backend", config.storage.backend),
        ("Database path", config.storage.db_path),
        ("JSON path", config.storage.json_path),
        ("Storage key", config.storage.storage_key),
        ("Default project", config.projects.default_project_name),
        ("Log level", config.logging.level),
        ("Log file", config.logging.log_file or "(stderr only)"),
        ("Debug mode", config.debug),
    ]
    for name, value in rows:
        typer.echo(f"  {name + ':':<18}{value}")

    if show_full:
        typer.echo("\nResolved config:")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("score")
def score(
    metrics: Optional[list[str]] = _METRIC_OPTION,
    indicators: Optional[list[str]] = _INDICATOR_OPTION,
) -> None:
    """Compute Re / Rx for the given inputs without saving anything.

    Unspecified factors default to 5; with no indicators Rx is 0.
    """
    from regen_ratio.models.form_state import FormState
    from regen_ratio.reporting.formatters import format_current_scores

    form = FormState()
    _apply_inputs(form, metrics, indicators, replace_indicators=False)
    typer.echo(format_current_scores(form.scores(), form.metrics))


@app.command("forecast")
def forecast(
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Project the next (Re, Rx) point from the last two snapshots."""
    from regen_ratio.reporting.formatters import format_forecast

    store = _open_store(config_path)
    project = _target_project(store, project_id)
    typer.echo(f"Project: {project.name}")
    typer.echo(format_forecast(store.forecast(project.id)))


@app.command("export")
def export(
    output: str = typer.Option(..., "--output", "-o", help="Destination file path."),
    fmt: str = typer.Option("csv", "--format", "-f", help="csv (flat history) or json (full project)."),
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Export a project's snapshot history to CSV or JSON."""
    from regen_ratio.reporting.export import export_history_csv, export_project_json

    fmt = fmt.lower()
    if fmt not in ("csv", "json"):
        typer.echo(f"[ERROR] Unknown format '{fmt}'. Use csv or json.", err=True)
        raise typer.Exit(code=1)

    store = _open_store(config_path)
    project = _target_project(store, project_id)
    path = Path(output)
    if fmt == "csv":
        export_history_csv(project, path)
    else:
        export_project_json(project, path)
    typer.echo(f"[OK] Exported {len(project.time_points)} snapshot(s) to {path}")


# ── Project commands ──────────────────────────────────────────────────────────

@project_app.command("list")
def project_list(config_path: Optional[str] = _CONFIG_OPTION) -> None:
    """List projects; the active project is marked with '*'."""
    from regen_ratio.reporting.formatters import format_project_list

    store = _open_store(config_path)
    typer.echo(format_project_list(store.projects, store.active_project_id))


@project_app.command("create")
def project_create(
    name: str = typer.Argument(..., help="Project name."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create a new, empty project."""
    from regen_ratio.errors import RegenRatioError

    store = _open_store(config_path)
    try:
        project = store.create_project(name)
    except RegenRatioError as exc:
        raise _fail(exc)
    typer.echo(f"[OK] Created project '{project.name}' ({project.id}).")


@project_app.command("rename")
def project_rename(
    project_id: str = typer.Argument(..., help="Project id."),
    name: str = typer.Argument(..., help="New name."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rename a project."""
    from regen_ratio.errors import RegenRatioError

    store = _open_store(config_path)
    try:
        project = store.rename_project(project_id, name)
    except RegenRatioError as exc:
        raise _fail(exc)
    typer.echo(f"[OK] Renamed project {project.id} to '{project.name}'.")


@project_app.command("delete")
def project_delete(
    project_id: str = typer.Argument(..., help="Project id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a project and all its snapshots. The last project cannot be deleted."""
    from regen_ratio.errors import RegenRatioError

    store = _open_store(config_path)
    if not yes:
        typer.confirm(
            "Are you sure you want to delete this project and all its snapshots?",
            abort=True,
        )
    try:
        store.delete_project(project_id)
    except RegenRatioError as exc:
        raise _fail(exc)
    typer.echo(f"[OK] Deleted project {project_id}.")


# ── Snapshot commands ─────────────────────────────────────────────────────────

@snapshot_app.command("list")
def snapshot_list(
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List a project's snapshots in date order."""
    from regen_ratio.reporting.formatters import format_snapshot_history

    store = _open_store(config_path)
    typer.echo(format_snapshot_history(_target_project(store, project_id)))


@snapshot_app.command("save")
def snapshot_save(
    metrics: Optional[list[str]] = _METRIC_OPTION,
    indicators: Optional[list[str]] = _INDICATOR_OPTION,
    label: str = typer.Option("", "--label", "-l", help="Snapshot label (default: from the date)."),
    snapshot_date: Optional[str] = typer.Option(
        None, "--date", "-d", help="Snapshot date YYYY-MM-DD (default: now)."
    ),
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Save the given inputs as a new snapshot. Unspecified factors default to 5."""
    from regen_ratio.errors import RegenRatioError
    from regen_ratio.models.form_state import FormState

    store = _open_store(config_path)
    project = _target_project(store, project_id)

    form = FormState(label=label, snapshot_date=_parse_date(snapshot_date))
    _apply_inputs(form, metrics, indicators, replace_indicators=False)
    try:
        snapshot = store.save_snapshot(project.id, form)
    except RegenRatioError as exc:
        raise _fail(exc)
    typer.echo(
        f"[OK] Saved '{snapshot.label}' ({snapshot.id}) "
        f"Re(log)={snapshot.re_log:.3f} Rx(scaled)={snapshot.rx_scaled:.3f}"
    )


@snapshot_app.command("update")
def snapshot_update(
    snapshot_id: str = typer.Argument(..., help="Snapshot id."),
    metrics: Optional[list[str]] = _METRIC_OPTION,
    indicators: Optional[list[str]] = typer.Option(
        None, "--indicator", "-i", help="Replaces ALL indicators when given. Repeatable."
    ),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="New label."),
    snapshot_date: Optional[str] = typer.Option(None, "--date", "-d", help="New date YYYY-MM-DD."),
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Edit a saved snapshot; unspecified fields keep their saved values."""
    from regen_ratio.errors import NotFoundError, RegenRatioError
    from regen_ratio.models.form_state import FormState

    store = _open_store(config_path)
    project = _target_project(store, project_id)
    existing = project.find_snapshot(snapshot_id)
    if existing is None:
        raise _fail(NotFoundError(f"Snapshot {snapshot_id} not found in project {project.id}."))

    form = FormState.from_snapshot(existing)
    if label is not None:
        form.label = label
    if snapshot_date is not None:
        form.snapshot_date = _parse_date(snapshot_date)
    _apply_inputs(form, metrics, indicators, replace_indicators=True)
    try:
        snapshot = store.update_snapshot(project.id, snapshot_id, form)
    except RegenRatioError as exc:
        raise _fail(exc)
    typer.echo(
        f"[OK] Updated '{snapshot.label}' ({snapshot.id}) "
        f"Re(log)={snapshot.re_log:.3f} Rx(scaled)={snapshot.rx_scaled:.3f}"
    )


@snapshot_app.command("delete")
def snapshot_delete(
    snapshot_id: str = typer.Argument(..., help="Snapshot id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    project_id: Optional[str] = _PROJECT_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a snapshot. A missing snapshot is reported, not fatal."""
    store = _open_store(config_path)
    project = _target_project(store, project_id)
    if not yes:
        typer.confirm("Are you sure you want to delete this snapshot?", abort=True)
    if store.delete_snapshot(project.id, snapshot_id):
        typer.echo(f"[OK] Deleted snapshot {snapshot_id}.")
    else:
        typer.echo(f"[WARN] Snapshot {snapshot_id} not found; nothing deleted.", err=True)


def _parse_date(raw: Optional[str]) -> Optional[date]:
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        typer.echo(f"[ERROR] Invalid date '{raw}'. Expected YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

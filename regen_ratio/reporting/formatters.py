"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept models from the store and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Non-finite scores
-----------------
A zero pressure sum makes ``re_raw`` (and ``re_log``) infinite. That is a
defined value, not an error, so every number passes through
``format_score()`` which renders ``inf`` as ``"∞"`` and NaN / missing as
``"n/a"``.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from regen_ratio.models.forecast import Forecast, Point
from regen_ratio.models.metrics import FACTOR_DEFINITIONS, MetricSet
from regen_ratio.models.snapshot import Project
from regen_ratio.reporting.history import history_rows, quadrant_label
from regen_ratio.scoring.calculator import Scores
from regen_ratio.scoring.quadrants import clamp_point, classify


def format_score(value: Optional[float], decimals: int = 2) -> str:
    """Render a score: ``"∞"`` for +inf, ``"-∞"`` for -inf, ``"n/a"`` for NaN/None."""
    if value is None or math.isnan(value):
        return "n/a"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    return f"{value:.{decimals}f}"


# ── Current scores ────────────────────────────────────────────────────────────


def format_current_scores(scores: Scores, metrics: Optional[MetricSet] = None) -> str:
    """Format live Re / Rx values plus the quadrant of the (clamped) point.

    Args:
        scores:  Output of ``compute_scores()``.
        metrics: When given, a per-factor block is printed above the scores.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", "=== Current Scores ==="]

    if metrics is not None:
        for symbol, value in metrics.by_symbol().items():
            definition = FACTOR_DEFINITIONS[symbol]
            lines.append(f"  {definition.display_name:<32} {value:>6.2f}")
        lines.append("")

    point = clamp_point(Point(x=scores.x, y=scores.y))
    lines.append(f"  Re (raw):     {format_score(scores.re_raw)}")
    lines.append(f"  Re (log):     {format_score(scores.re_log, 3)}")
    lines.append(f"  Rx:           {format_score(scores.rx)}")
    lines.append(f"  Rx (scaled):  {format_score(scores.rx_scaled, 3)}")
    lines.append(f"  Quadrant:     {quadrant_label(classify(point))}")
    return "\n".join(lines)


# ── Projects ──────────────────────────────────────────────────────────────────


def format_project_list(projects: Sequence[Project], active_id: Optional[str]) -> str:
    """One line per project; the active one is marked with ``*``."""
    lines: list[str] = ["", "=== Projects ==="]
    if not projects:
        lines.append("  (no projects)")
        return "\n".join(lines)

    header = f"    {'Name':<30}  {'Snapshots':>9}  {'Updated':<20}  Id"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for project in projects:
        marker = "*" if project.id == active_id else " "
        updated = project.updated_at.strftime("%Y-%m-%d %H:%M")
        lines.append(
            f"  {marker} {project.name[:30]:<30}  {len(project.time_points):>9}  "
            f"{updated:<20}  {project.id}"
        )
    return "\n".join(lines)


# ── Snapshot history ──────────────────────────────────────────────────────────


def format_snapshot_history(project: Project) -> str:
    """Format a project's snapshots in timestamp order with quadrant labels."""
    lines: list[str] = ["", f"=== Snapshots: {project.name} ==="]
    rows = history_rows(project)
    if not rows:
        lines.append("  (no snapshots yet; run 'snapshot save' first)")
        return "\n".join(lines)

    header = (
        f"    {'Date':<10}  {'Label':<28}  {'Re(log)':>7}  {'Rx(sc)':>7}  "
        f"{'Quadrant':<16}  Id"
    )
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for row in rows:
        lines.append(
            f"    {row['date'] or '?':<10}  {row['label'][:28]:<28}  "
            f"{format_score(row['re_log']):>7}  {format_score(row['rx_scaled']):>7}  "
            f"{row['quadrant']:<16}  {row['snapshot_id']}"
        )
    return "\n".join(lines)


# ── Forecast ──────────────────────────────────────────────────────────────────


def format_forecast(forecast: Optional[Forecast]) -> str:
    """Format a forecast, or a hint when there is not enough history."""
    lines: list[str] = ["", "=== Trend Forecast ==="]
    if forecast is None:
        lines.append("  (no forecast: at least two dated snapshots are needed)")
        return "\n".join(lines)

    def _pt(p: Point) -> str:
        return f"({format_score(p.x, 3)}, {format_score(p.y, 3)})"

    lines.append(f"  Last observed:  {_pt(forecast.last_observed_point)}")
    lines.append(
        f"  Trend vector:   ({format_score(forecast.vector.dx, 3)}, "
        f"{format_score(forecast.vector.dy, 3)})"
    )
    lines.append(f"  Forecast point: {_pt(forecast.point)}  [{quadrant_label(forecast.quadrant)}]")
    lines.append(f"  Trend ray end:  {_pt(forecast.vector_endpoint)}")
    return "\n".join(lines)

"""
Flat history rows for charts and exports.

``history_rows(project)`` turns a project's snapshots, in timestamp order,
into plain dicts: one row per snapshot with both plotted scores and the
quadrant label of the point clamped into the square. The temporal evolution chart plots ``re_log`` and
``rx_scaled`` against ``date`` on a y-axis of ``CHART_AXIS_BOUNDS``.
"""

from __future__ import annotations

from typing import Optional

from regen_ratio.models.metrics import FACTOR_SYMBOLS, SCORE_UPPER_BOUND
from regen_ratio.models.snapshot import Project, Snapshot
from regen_ratio.scoring.quadrants import clamp_point, classify
from regen_ratio.taxonomy.quadrant_taxonomy import QUADRANT_INFO, Quadrant

CHART_AXIS_BOUNDS: tuple[float, float] = (0.0, SCORE_UPPER_BOUND)


def quadrant_label(quadrant: Optional[Quadrant]) -> str:
    return QUADRANT_INFO[quadrant].label if quadrant else "Out of range"


def snapshot_row(snapshot: Snapshot) -> dict:
    """Flatten one snapshot (metrics inlined by symbol)."""
    row: dict = {
        "snapshot_id": snapshot.id,
        "label": snapshot.label,
        "timestamp": snapshot.timestamp.isoformat() if snapshot.timestamp else "",
        "date": snapshot.timestamp.date().isoformat() if snapshot.timestamp else "",
        "re_raw": snapshot.re_raw,
        "re_log": snapshot.re_log,
        "rx": snapshot.rx,
        "rx_scaled": snapshot.rx_scaled,
        "quadrant": quadrant_label(classify(clamp_point(snapshot.point))),
        "indicator_count": len(snapshot.indicators),
    }
    metrics = snapshot.metrics.by_symbol()
    for symbol in FACTOR_SYMBOLS:
        row[symbol] = metrics[symbol]
    return row


def history_rows(project: Project) -> list[dict]:
    """Return one flat row per snapshot, sorted by timestamp."""
    return [snapshot_row(s) for s in project.ordered_snapshots()]

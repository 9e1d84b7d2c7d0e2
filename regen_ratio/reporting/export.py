"""
Flat-file export of a project's history.

  ``export_history_csv(project, path)``  - one row per snapshot, timestamp
      order, columns ``HISTORY_COLUMNS``. Opens directly in a spreadsheet.
  ``export_project_json(project, path)`` - the project exactly as persisted
      (camelCase keys, nested snapshots), re-loadable with
      ``Project.model_validate``.

Both create missing parent directories and return the written ``Path``.
Infinite scores are written as ``inf`` in CSV and ``Infinity`` in JSON.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, Sequence

from regen_ratio.models.metrics import FACTOR_SYMBOLS
from regen_ratio.models.snapshot import Project
from regen_ratio.reporting.history import history_rows

HISTORY_COLUMNS: tuple[str, ...] = (
    "snapshot_id",
    "label",
    "timestamp",
    "date",
    "re_raw",
    "re_log",
    "rx",
    "rx_scaled",
    "quadrant",
    "indicator_count",
    *FACTOR_SYMBOLS,
)


def write_csv(rows: Iterable[dict], path: Path, columns: Sequence[str]) -> Path:
    """Write ``rows`` under a header of ``columns``; unknown keys are ignored."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(columns), extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def export_history_csv(project: Project, path: Path) -> Path:
    """Write the project's snapshot history as CSV (header only if empty)."""
    return write_csv(history_rows(project), path, HISTORY_COLUMNS)


def export_project_json(project: Project, path: Path, indent: int = 2) -> Path:
    """Write one project, snapshots included, in the persisted camelCase shape."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = project.model_dump(mode="json", by_alias=True)
    path.write_text(json.dumps(payload, indent=indent, ensure_ascii=False), encoding="utf-8")
    return path

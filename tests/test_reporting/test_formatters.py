"""Tests for regen_ratio.reporting.formatters and history rows."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from regen_ratio.forecast.engine import forecast
from regen_ratio.models.metrics import Indicator, MetricSet
from regen_ratio.models.snapshot import Project, Snapshot
from regen_ratio.reporting.formatters import (
    format_current_scores,
    format_forecast,
    format_project_list,
    format_score,
    format_snapshot_history,
)
from regen_ratio.reporting.history import CHART_AXIS_BOUNDS, history_rows, quadrant_label
from regen_ratio.scoring.calculator import Scores
from regen_ratio.taxonomy.quadrant_taxonomy import Quadrant

_TS = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _project(*snapshots) -> Project:
    return Project(id="project-1", name="Farm", time_points=snapshots, created_at=_TS, updated_at=_TS)


# ── format_score ──────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.23456, "1.23"),
        (0.0, "0.00"),
        (math.inf, "∞"),
        (-math.inf, "-∞"),
        (math.nan, "n/a"),
        (None, "n/a"),
    ],
)
def test_format_score(value, expected) -> None:
    assert format_score(value) == expected


def test_format_score_decimals() -> None:
    assert format_score(1.23456, 3) == "1.235"


# ── format_current_scores ─────────────────────────────────────────────────────


def test_current_scores_includes_quadrant() -> None:
    scores = Scores(re_raw=100.0, re_log=math.log10(101), rx=8.0, rx_scaled=4.416)
    text = format_current_scores(scores)
    assert "Re (raw):     100.00" in text
    assert "Rx (scaled):  4.416" in text
    assert "Unsustainable" in text


def test_current_scores_infinite_re() -> None:
    scores = Scores(re_raw=math.inf, re_log=math.inf, rx=0.0, rx_scaled=0.0)
    text = format_current_scores(scores)
    assert "Re (raw):     ∞" in text
    # Clamped onto the right edge of the square for classification.
    assert "Latent Potential" in text


def test_current_scores_with_metrics_block() -> None:
    scores = Scores(re_raw=1.0, re_log=0.301, rx=0.0, rx_scaled=0.0)
    text = format_current_scores(scores, MetricSet.uniform(5.0))
    assert "L – Localized Identity" in text
    assert "Ω – Overdetermination" in text


# ── format_project_list ───────────────────────────────────────────────────────


def test_project_list_marks_active(make_snapshot) -> None:
    other = Project(id="project-2", name="Wetland", created_at=_TS, updated_at=_TS)
    text = format_project_list([_project(make_snapshot(1.0, 1.0)), other], "project-2")
    lines = text.splitlines()
    farm = next(line for line in lines if "Farm" in line)
    wetland = next(line for line in lines if "Wetland" in line)
    assert wetland.startswith("  *")
    assert not farm.startswith("  *")
    assert "project-1" in farm


def test_project_list_empty() -> None:
    assert "(no projects)" in format_project_list([], None)


# ── format_snapshot_history ───────────────────────────────────────────────────


def test_snapshot_history_empty() -> None:
    assert "no snapshots yet" in format_snapshot_history(_project())


def test_snapshot_history_sorted_by_date(make_snapshot) -> None:
    text = format_snapshot_history(
        _project(make_snapshot(4.0, 4.0, day=9), make_snapshot(1.0, 1.0, day=2))
    )
    assert text.index("2026-01-02") < text.index("2026-01-09")
    assert "Thriving" in text
    assert "Degenerative" in text


# ── format_forecast ───────────────────────────────────────────────────────────


def test_forecast_none() -> None:
    assert "at least two dated snapshots" in format_forecast(None)


def test_forecast_rendered(make_snapshot) -> None:
    result = forecast([make_snapshot(1.0, 1.0, day=1), make_snapshot(2.0, 1.5, day=2)])
    text = format_forecast(result)
    assert "(3.000, 2.000)" in text
    assert "Latent Potential" in text


# ── history rows ──────────────────────────────────────────────────────────────


def test_history_rows(make_snapshot) -> None:
    rows = history_rows(_project(make_snapshot(4.0, 1.0, day=5), make_snapshot(1.0, 4.0, day=3)))
    assert [r["date"] for r in rows] == ["2026-01-03", "2026-01-05"]
    assert rows[0]["quadrant"] == "Unsustainable"
    assert rows[1]["quadrant"] == "Latent Potential"
    assert rows[0]["Omega"] == 5.0
    assert rows[0]["indicator_count"] == 0


def test_history_rows_clamp_past_bound(make_snapshot) -> None:
    rows = history_rows(_project(make_snapshot(9.0, 1.0)))
    assert rows[0]["quadrant"] == "Latent Potential"
    assert rows[0]["re_log"] == 9.0


def test_history_rows_max_inputs_are_thriving() -> None:
    metrics = MetricSet.model_validate(
        {"L": 10, "I": 10, "F": 10, "E": 10, "X": 0.01, "Fg": 0.01, "Omega": 0.01}
    )
    snapshot = Snapshot.capture(
        snapshot_id="snapshot-max",
        label="Peak",
        timestamp=_TS,
        metrics=metrics,
        metric_comments=None,
        indicators=[Indicator(id=1, value=10.0)],
    )
    assert snapshot.x > 5.52
    assert snapshot.y >= 5.52

    rows = history_rows(_project(snapshot))
    assert rows[0]["quadrant"] == "Thriving"
    assert "Thriving" in format_snapshot_history(_project(snapshot))


def test_quadrant_label_and_axis() -> None:
    assert quadrant_label(Quadrant.THRIVING) == "Thriving"
    assert quadrant_label(None) == "Out of range"
    assert CHART_AXIS_BOUNDS == (0.0, 5.52)

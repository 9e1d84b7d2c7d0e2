"""
Shared pytest fixtures for the Regenerative Ratio test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema applied.
  - ``memory_backend`` / ``store``: A ``SnapshotStore`` over an in-memory
    backend, already opened (so the default project exists).
  - ``fixed_clock``: A controllable clock for deterministic timestamps.
  - Sample domain object factories used across test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest

from regen_ratio.db.schema import apply_schema
from regen_ratio.models.metrics import Indicator, MetricSet
from regen_ratio.models.snapshot import Snapshot
from regen_ratio.store.backends import InMemoryBackend
from regen_ratio.store.snapshot_store import SnapshotStore


class FixedClock:
    """Callable clock that returns ``now`` and advances only when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Store fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(memory_backend: InMemoryBackend, fixed_clock: FixedClock) -> SnapshotStore:
    """An opened store holding only the seeded default project."""
    s = SnapshotStore(memory_backend, clock=fixed_clock)
    s.open()
    return s


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def balanced_metrics() -> MetricSet:
    """Every factor at 5: re_raw = 625 / 15."""
    return MetricSet.uniform(5.0)


@pytest.fixture
def sample_indicators() -> list[Indicator]:
    return [
        Indicator(id=1, name="Soil organic matter", value=6.0),
        Indicator(id=2, name="Staff retention", value=8.0, comment="two departures"),
    ]


@pytest.fixture
def make_snapshot():
    """Factory building a snapshot with given plotted coordinates and date.

    Scores are supplied directly so tests can place points anywhere in the
    square without solving for factor values.
    """

    def _make(
        x: float,
        y: float,
        day: int = 1,
        snapshot_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> Snapshot:
        ts = timestamp or datetime(2026, 1, day, 12, 0, 0, tzinfo=timezone.utc)
        return Snapshot(
            id=snapshot_id or f"snapshot-{day}-{x}-{y}",
            label=f"Day {day}",
            timestamp=ts,
            re_raw=10 ** x - 1,
            re_log=x,
            rx=y / 0.552,
            rx_scaled=y,
            x=x,
            y=y,
        )

    return _make

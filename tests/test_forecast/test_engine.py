"""Tests for regen_ratio.forecast.engine."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from regen_ratio.forecast.engine import extend_to_boundary, forecast
from regen_ratio.models.forecast import Point, Vector
from regen_ratio.models.metrics import SCORE_UPPER_BOUND
from regen_ratio.models.snapshot import Snapshot
from regen_ratio.taxonomy.quadrant_taxonomy import Quadrant

B = SCORE_UPPER_BOUND


class TestForecastAvailability:
    def test_no_snapshots(self):
        assert forecast([]) is None

    def test_single_snapshot(self, make_snapshot):
        assert forecast([make_snapshot(1.0, 1.0)]) is None

    def test_undated_snapshots_are_ignored(self, make_snapshot):
        undated = make_snapshot(2.0, 2.0, day=2).model_copy(update={"timestamp": None})
        assert forecast([make_snapshot(1.0, 1.0), undated]) is None

    def test_infinite_score_is_ignored(self, make_snapshot):
        infinite = make_snapshot(1.0, 1.0, day=2).model_copy(update={"x": math.inf})
        assert forecast([make_snapshot(1.0, 1.0), infinite]) is None


class TestForecastPoint:
    def test_linear_extrapolation(self, make_snapshot):
        result = forecast([make_snapshot(1.0, 1.0, day=1), make_snapshot(2.0, 1.5, day=2)])
        assert result is not None
        assert result.point == Point(x=3.0, y=2.0)
        assert result.last_observed_point == Point(x=2.0, y=1.5)
        assert result.vector == Vector(dx=1.0, dy=0.5)
        assert result.quadrant is Quadrant.LATENT_POTENTIAL

    def test_order_is_by_timestamp_not_input(self, make_snapshot):
        later = make_snapshot(2.0, 1.5, day=5)
        earlier = make_snapshot(1.0, 1.0, day=1)
        result = forecast([later, earlier])
        assert result.point == Point(x=3.0, y=2.0)

    def test_uses_last_two_only(self, make_snapshot):
        history = [
            make_snapshot(0.5, 0.5, day=1),
            make_snapshot(4.0, 4.0, day=2),
            make_snapshot(4.0, 4.5, day=3),
        ]
        result = forecast(history)
        assert result.vector.dx == pytest.approx(0.0)
        assert result.vector.dy == pytest.approx(0.5)
        assert result.point.y == pytest.approx(5.0)

    def test_clamped_to_square(self, make_snapshot):
        result = forecast([make_snapshot(3.0, 3.0, day=1), make_snapshot(5.0, 0.5, day=2)])
        assert result.point == Point(x=B, y=0.0)
        assert result.quadrant is Quadrant.LATENT_POTENTIAL

    def test_zero_vector(self, make_snapshot):
        result = forecast([make_snapshot(2.0, 4.0, day=1), make_snapshot(2.0, 4.0, day=2)])
        assert result.vector.is_zero
        assert result.point == Point(x=2.0, y=4.0)
        assert result.vector_endpoint == result.point
        assert result.quadrant is Quadrant.UNSUSTAINABLE

    def test_endpoint_on_boundary(self, make_snapshot):
        result = forecast([make_snapshot(1.0, 1.0, day=1), make_snapshot(2.0, 1.5, day=2)])
        # From (3, 2) along (1, 0.5): x reaches B first.
        assert result.vector_endpoint.x == pytest.approx(B)
        assert result.vector_endpoint.y == pytest.approx(2.0 + (B - 3.0) * 0.5)

    def test_same_timestamp_keeps_input_order(self):
        ts = datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
        first = Snapshot(id="a", timestamp=ts, re_raw=0, re_log=1.0, rx=0, rx_scaled=1.0, x=1.0, y=1.0)
        second = Snapshot(id="b", timestamp=ts, re_raw=0, re_log=2.0, rx=0, rx_scaled=1.0, x=2.0, y=1.0)
        assert forecast([first, second]).point == Point(x=3.0, y=1.0)


class TestExtendToBoundary:
    def test_zero_vector_returns_start(self):
        start = Point(x=1.0, y=1.0)
        assert extend_to_boundary(start, Vector(dx=0, dy=0)) == start

    def test_already_on_boundary(self):
        start = Point(x=B, y=1.0)
        assert extend_to_boundary(start, Vector(dx=1.0, dy=0.0)) == start

    def test_negative_direction(self):
        end = extend_to_boundary(Point(x=2.0, y=3.0), Vector(dx=-1.0, dy=-0.5))
        assert end.x == pytest.approx(0.0)
        assert end.y == pytest.approx(2.0)

    def test_vertical_ray(self):
        end = extend_to_boundary(Point(x=2.0, y=3.0), Vector(dx=0.0, dy=1.0))
        assert end == Point(x=2.0, y=B)

"""
Two-point trend forecast.

Algorithm:
  1. Keep snapshots with a timestamp and finite plotted coordinates.
     Fewer than two remain → ``None`` (no forecast; not an error).
  2. Sort ascending by timestamp; take the last two points ``P_{n-1}``, ``P_n``.
  3. ``v = P_n - P_{n-1}``.
  4. ``F = P_n + v``, each coordinate clamped into ``[0, B]``.
  5. Trend ray: extend from ``F`` along ``v`` by the largest ``t >= 0`` that
     keeps ``F + t*v`` inside the square. A zero vector, or no room left,
     gives an endpoint equal to ``F``.

This is a deterministic extrapolation, not a fitted model. No growth-rate
simulation of individual factors is attempted.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from regen_ratio.models.forecast import Forecast, Point, Vector
from regen_ratio.models.metrics import SCORE_UPPER_BOUND
from regen_ratio.models.snapshot import Snapshot
from regen_ratio.scoring.quadrants import classify, clamp_coordinate

logger = logging.getLogger(__name__)

MIN_SNAPSHOTS_FOR_FORECAST = 2


def _is_plottable(snapshot: Snapshot) -> bool:
    return (
        snapshot.timestamp is not None
        and math.isfinite(snapshot.x)
        and math.isfinite(snapshot.y)
    )


def _ray_room(start: float, step: float, upper_bound: float) -> float:
    """Largest ``t >= 0`` with ``start + t*step`` in ``[0, upper_bound]`` on one axis."""
    if step > 0:
        return max(0.0, (upper_bound - start) / step)
    if step < 0:
        return max(0.0, start / -step)
    return math.inf


def extend_to_boundary(
    start: Point,
    vector: Vector,
    upper_bound: float = SCORE_UPPER_BOUND,
) -> Point:
    """Return the point where the ray ``start + t*vector`` leaves the square.

    Args:
        start: Ray origin; assumed inside ``[0, upper_bound]^2``.
        vector: Ray direction.
        upper_bound: Side length of the square.

    Returns:
        The boundary point, or ``start`` itself for a zero vector.
    """
    if vector.is_zero:
        return start
    t = min(
        _ray_room(start.x, vector.dx, upper_bound),
        _ray_room(start.y, vector.dy, upper_bound),
    )
    if not math.isfinite(t) or t <= 0:
        return start
    # Clamp away floating-point overshoot at the boundary.
    return Point(
        x=clamp_coordinate(start.x + t * vector.dx, upper_bound),
        y=clamp_coordinate(start.y + t * vector.dy, upper_bound),
    )


def forecast(
    snapshots: Iterable[Snapshot],
    upper_bound: float = SCORE_UPPER_BOUND,
) -> Optional[Forecast]:
    """Project the next point from the last two snapshots in time order.

    Args:
        snapshots: A project's snapshots in any order.
        upper_bound: Side length ``B`` of the plotting square.

    Returns:
        A ``Forecast``, or ``None`` when fewer than two usable snapshots exist.
    """
    usable = [s for s in snapshots if _is_plottable(s)]
    if len(usable) < MIN_SNAPSHOTS_FOR_FORECAST:
        logger.debug(
            "Forecast skipped: %d usable snapshot(s), need %d.",
            len(usable), MIN_SNAPSHOTS_FOR_FORECAST,
        )
        return None

    usable.sort(key=lambda s: s.timestamp)
    previous, last = usable[-2], usable[-1]

    vector = Vector(dx=last.x - previous.x, dy=last.y - previous.y)
    point = Point(
        x=clamp_coordinate(last.x + vector.dx, upper_bound),
        y=clamp_coordinate(last.y + vector.dy, upper_bound),
    )

    return Forecast(
        point=point,
        last_observed_point=last.point,
        vector_endpoint=extend_to_boundary(point, vector, upper_bound),
        vector=vector,
        quadrant=classify(point, upper_bound),
    )

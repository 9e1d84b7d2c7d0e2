"""
Quadrant classifier.

``classify()`` maps a point of the square ``[0, B] x [0, B]`` to exactly one
``Quadrant``. Both axes split at ``B / 2``; a point lying exactly on a
midline belongs to the lower / left region, so the four regions are
disjoint and cover the whole square.

``classify()`` does NOT clamp: points outside the square (or with non-finite
coordinates) return ``None``. Callers that want a label for out-of-range
points run them through ``clamp_point()`` first.
"""

from __future__ import annotations

import math
from typing import Optional

from regen_ratio.models.forecast import Point
from regen_ratio.models.metrics import SCORE_UPPER_BOUND
from regen_ratio.taxonomy.quadrant_taxonomy import Quadrant


def _in_range(v: float, upper_bound: float) -> bool:
    return math.isfinite(v) and 0.0 <= v <= upper_bound


def clamp_coordinate(v: float, upper_bound: float = SCORE_UPPER_BOUND) -> float:
    """Clamp one coordinate into ``[0, upper_bound]``; NaN maps to 0."""
    if math.isnan(v):
        return 0.0
    return min(upper_bound, max(0.0, v))


def clamp_point(point: Point, upper_bound: float = SCORE_UPPER_BOUND) -> Point:
    """Clamp both coordinates of ``point`` into the square."""
    return Point(
        x=clamp_coordinate(point.x, upper_bound),
        y=clamp_coordinate(point.y, upper_bound),
    )


def classify(point: Point, upper_bound: float = SCORE_UPPER_BOUND) -> Optional[Quadrant]:
    """Return the quadrant containing ``point``, or ``None`` if out of range.

    Args:
        point: Coordinates ``(x=re_log, y=rx_scaled)``.
        upper_bound: Side length ``B`` of the square.

    Returns:
        One of the four ``Quadrant`` members, or ``None``.
    """
    if not (_in_range(point.x, upper_bound) and _in_range(point.y, upper_bound)):
        return None

    mid = upper_bound / 2
    high_potential = point.x > mid
    high_outcome = point.y > mid

    if high_outcome:
        return Quadrant.THRIVING if high_potential else Quadrant.UNSUSTAINABLE
    return Quadrant.LATENT_POTENTIAL if high_potential else Quadrant.DEGENERATIVE

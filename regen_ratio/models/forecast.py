"""
Forecast output models.

``Point`` and ``Vector`` are plain coordinates in the (Re, Rx) square, where
``x = re_log`` and ``y = rx_scaled``.

``Forecast`` is derived from a project's snapshot history on every read and
is never persisted. It is frozen like every other output model.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from regen_ratio.taxonomy.quadrant_taxonomy import Quadrant


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Vector(BaseModel):
    model_config = ConfigDict(frozen=True)

    dx: float
    dy: float

    @property
    def is_zero(self) -> bool:
        return self.dx == 0 and self.dy == 0


class Forecast(BaseModel):
    """Projected next point from the last two observed points.

    Attributes:
        point: Forecast point ``P_n + v``, clamped into ``[0, B]`` per axis.
        last_observed_point: ``P_n``, the most recent snapshot's coordinates.
        vector_endpoint: Where the trend ray from ``point`` along ``vector``
            leaves the square. Equals ``point`` when there is no room left
            or the vector is zero.
        vector: Displacement ``P_n - P_{n-1}``.
        quadrant: Quadrant of ``point``, or ``None`` if unclassifiable.
    """

    model_config = ConfigDict(frozen=True)

    point: Point
    last_observed_point: Point
    vector_endpoint: Point
    vector: Vector
    quadrant: Optional[Quadrant] = None

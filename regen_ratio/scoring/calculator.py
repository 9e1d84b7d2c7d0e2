"""
Re / Rx score calculator.

Formulas::

    re_raw    = (L * I * F * E) / (X + Fg + Ω)
    re_log    = log10(re_raw + 1)
    rx        = mean(indicator values)
    rx_scaled = rx * RX_SCALE                 (RX_SCALE = 0.552)

Edge cases are values, not exceptions:
  - A zero denominator gives ``re_raw = re_log = +inf``.
  - An empty indicator list gives ``rx = rx_scaled = 0``.
  - NaN indicator values contribute 0 to the sum (but still count toward
    the mean's divisor), so NaN never reaches ``rx``.

The plotted coordinates of a score are ``x = re_log`` and ``y = rx_scaled``.
All functions are pure.
"""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

from regen_ratio.models.metrics import (
    PRESSURE_SYMBOLS,
    REGENERATIVE_SYMBOLS,
    RX_SCALE,
    Indicator,
    MetricSet,
)


class ReScore(NamedTuple):
    re_raw: float
    re_log: float


class RxScore(NamedTuple):
    rx: float
    rx_scaled: float


class Scores(NamedTuple):
    """Both axes plus the plotted coordinates."""

    re_raw: float
    re_log: float
    rx: float
    rx_scaled: float

    @property
    def x(self) -> float:
        return self.re_log

    @property
    def y(self) -> float:
        return self.rx_scaled


def compute_re(metrics: MetricSet) -> ReScore:
    """Compute the structural potential score from a MetricSet.

    Args:
        metrics: The seven factors.

    Returns:
        ``ReScore(re_raw, re_log)``. ``re_raw`` is ``+inf`` when the pressure
        sum is exactly zero.
    """
    numerator = math.prod(metrics.get(s) for s in REGENERATIVE_SYMBOLS)
    denominator = sum(metrics.get(s) for s in PRESSURE_SYMBOLS)
    re_raw = numerator / denominator if denominator != 0 else math.inf
    return ReScore(re_raw=re_raw, re_log=math.log10(re_raw + 1))


def compute_rx(indicators: Iterable[Indicator]) -> RxScore:
    """Compute the realized-outcomes score from a list of indicators.

    Args:
        indicators: Any iterable of ``Indicator``.

    Returns:
        ``RxScore(rx, rx_scaled)``; ``(0.0, 0.0)`` for an empty list.
    """
    values = [ind.value for ind in indicators]
    if not values:
        return RxScore(rx=0.0, rx_scaled=0.0)
    total = sum(0.0 if math.isnan(v) else v for v in values)
    rx = total / len(values)
    return RxScore(rx=rx, rx_scaled=rx * RX_SCALE)


def compute_scores(metrics: MetricSet, indicators: Iterable[Indicator]) -> Scores:
    """Compute Re and Rx together."""
    re = compute_re(metrics)
    rx = compute_rx(indicators)
    return Scores(re_raw=re.re_raw, re_log=re.re_log, rx=rx.rx, rx_scaled=rx.rx_scaled)

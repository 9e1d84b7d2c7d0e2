"""
Quadrant taxonomy for the (Re, Rx) plotting square.

The square ``[0, B] x [0, B]`` is split at ``B / 2`` on both axes:

                Rx (realized outcome)
                  ^
      UNSUSTAINABLE |  THRIVING
      --------------+--------------
      DEGENERATIVE  |  LATENT_POTENTIAL
                  +------------------> Re (structural potential)

Usage example::

    from regen_ratio.taxonomy.quadrant_taxonomy import Quadrant, QUADRANT_INFO

    info = QUADRANT_INFO[Quadrant.THRIVING]

This module has NO imports from any other ``regen_ratio`` package.
"""

from enum import StrEnum
from typing import NamedTuple


class Quadrant(StrEnum):
    """Named region of the (Re, Rx) square."""

    DEGENERATIVE = "degenerative"
    """Low potential, low realized outcome."""

    LATENT_POTENTIAL = "latent_potential"
    """High potential, low realized outcome."""

    UNSUSTAINABLE = "unsustainable"
    """Low potential, high realized outcome: outcomes outpace structural capacity."""

    THRIVING = "thriving"
    """High potential, high realized outcome."""


class QuadrantInfo(NamedTuple):
    label: str
    description: str
    high_potential: bool
    high_outcome: bool


QUADRANT_INFO: dict[Quadrant, QuadrantInfo] = {
    Quadrant.DEGENERATIVE: QuadrantInfo(
        "Degenerative", "Low potential, low realized outcome.", False, False,
    ),
    Quadrant.LATENT_POTENTIAL: QuadrantInfo(
        "Latent Potential", "High potential, low realized outcome.", True, False,
    ),
    Quadrant.UNSUSTAINABLE: QuadrantInfo(
        "Unsustainable",
        "Low potential, high realized outcome (outcome outpacing structural capacity).",
        False,
        True,
    ),
    Quadrant.THRIVING: QuadrantInfo(
        "Thriving", "High potential, high realized outcome.", True, True,
    ),
}

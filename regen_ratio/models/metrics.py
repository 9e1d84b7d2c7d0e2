"""
Metric and indicator models: the raw inputs of every score.

``MetricSet`` holds the seven structural factors of the Regenerative Ratio:

  Regenerative (numerator):  L, I, F, E
  Pressure (denominator):    X, Fg, Ω

``Indicator`` is one user-defined realized-outcome measure. A free-form list of
indicators feeds the Rx score.

Every value is clamped into ``[VALUE_MIN, VALUE_MAX]`` on construction, so a
stored MetricSet can never carry a negative or zero factor. Non-numeric and
NaN input clamps to the floor.

Persisted form uses the factor symbols as keys (``L``, ``I``, ``F``, ``E``,
``X``, ``Fg``, ``Omega``); Python code uses the descriptive attribute names.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

VALUE_MIN: float = 0.01
VALUE_MAX: float = 10.0
DEFAULT_METRIC_VALUE: float = 5.0

# Shared upper bound of the (Re, Rx) plotting space. Quadrant midlines,
# forecast clamping, and chart axes all use this value.
SCORE_UPPER_BOUND: float = 5.52

# Maps the indicator ceiling (VALUE_MAX) onto SCORE_UPPER_BOUND.
RX_SCALE: float = 0.552


class FactorKind(StrEnum):
    """Which side of the Re fraction a factor sits on."""

    REGENERATIVE = "regenerative"
    PRESSURE = "pressure"


class FactorDefinition(NamedTuple):
    symbol: str
    field_name: str
    display_name: str
    description: str
    kind: FactorKind


FACTOR_DEFINITIONS: dict[str, FactorDefinition] = {
    d.symbol: d
    for d in (
        FactorDefinition(
            "L", "localized_identity", "L – Localized Identity",
            "The system's rootedness in its specific context, culture, and place.",
            FactorKind.REGENERATIVE,
        ),
        FactorDefinition(
            "I", "interconnection", "I – Interconnection",
            "The degree of integration and relationship across different parts of the system.",
            FactorKind.REGENERATIVE,
        ),
        FactorDefinition(
            "F", "feedback", "F – Feedback & Reciprocity",
            "The quality and responsiveness of feedback loops and mutual exchange.",
            FactorKind.REGENERATIVE,
        ),
        FactorDefinition(
            "E", "evolutionary_capacity", "E – Evolutionary Capacity",
            "The ability to learn, adapt, and transform under stress.",
            FactorKind.REGENERATIVE,
        ),
        FactorDefinition(
            "X", "extractive_pressure", "X – Extractive Pressure",
            "The extent of non-reciprocal resource depletion (labor, land, energy).",
            FactorKind.PRESSURE,
        ),
        FactorDefinition(
            "Fg", "fragmentation", "Fg – Fragmentation",
            "Systemic incoherence, disconnection, or breakdown in shared meaning.",
            FactorKind.PRESSURE,
        ),
        FactorDefinition(
            "Omega", "overdetermination", "Ω – Overdetermination",
            "The degree of structural rigidity or institutional lock-in that prevents adaptation.",
            FactorKind.PRESSURE,
        ),
    )
}

FACTOR_SYMBOLS: tuple[str, ...] = tuple(FACTOR_DEFINITIONS)
REGENERATIVE_SYMBOLS: tuple[str, ...] = tuple(
    s for s, d in FACTOR_DEFINITIONS.items() if d.kind is FactorKind.REGENERATIVE
)
PRESSURE_SYMBOLS: tuple[str, ...] = tuple(
    s for s, d in FACTOR_DEFINITIONS.items() if d.kind is FactorKind.PRESSURE
)

# "Ω" is accepted wherever a symbol is, and normalised to "Omega".
_SYMBOL_ALIASES = {"Ω": "Omega", "omega": "Omega"}


def normalize_symbol(symbol: str) -> str:
    """Return the canonical factor symbol, or raise ``KeyError``."""
    canonical = _SYMBOL_ALIASES.get(symbol, symbol)
    if canonical not in FACTOR_DEFINITIONS:
        raise KeyError(
            f"Unknown factor '{symbol}'. Must be one of {list(FACTOR_SYMBOLS)}."
        )
    return canonical


def clamp_value(value: Any, lo: float = VALUE_MIN, hi: float = VALUE_MAX) -> float:
    """Coerce ``value`` to float and clamp into ``[lo, hi]``.

    Unparseable input and NaN map to ``lo``; ``+inf`` maps to ``hi``.
    """
    try:
        v = float(value)
    except (TypeError, ValueError):
        return lo
    if math.isnan(v):
        return lo
    return min(hi, max(lo, v))


class MetricSet(BaseModel):
    """The seven structural factors, each clamped to ``[0.01, 10]``.

    Missing factors default to ``DEFAULT_METRIC_VALUE`` so partially written
    legacy snapshots still load.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    localized_identity: float = Field(DEFAULT_METRIC_VALUE, alias="L")
    interconnection: float = Field(DEFAULT_METRIC_VALUE, alias="I")
    feedback: float = Field(DEFAULT_METRIC_VALUE, alias="F")
    evolutionary_capacity: float = Field(DEFAULT_METRIC_VALUE, alias="E")
    extractive_pressure: float = Field(DEFAULT_METRIC_VALUE, alias="X")
    fragmentation: float = Field(DEFAULT_METRIC_VALUE, alias="Fg")
    overdetermination: float = Field(
        DEFAULT_METRIC_VALUE,
        alias="Omega",
        validation_alias=AliasChoices("Omega", "Ω", "overdetermination"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def clamp_factor(cls, v: Any) -> float:
        return clamp_value(v)

    @classmethod
    def uniform(cls, value: float) -> "MetricSet":
        """Build a MetricSet with every factor set to ``value`` (clamped)."""
        return cls.model_validate({s: value for s in FACTOR_SYMBOLS})

    def get(self, symbol: str) -> float:
        """Return the value of a factor by symbol (``"L"``, ``"Fg"``, ``"Ω"`` ...)."""
        return getattr(self, FACTOR_DEFINITIONS[normalize_symbol(symbol)].field_name)

    def by_symbol(self) -> dict[str, float]:
        """Return ``{symbol: value}`` in canonical factor order."""
        return {s: self.get(s) for s in FACTOR_SYMBOLS}

    def with_factor(self, symbol: str, value: Any) -> "MetricSet":
        """Return a copy with one factor replaced (clamped like any write)."""
        values = self.by_symbol()
        values[normalize_symbol(symbol)] = value
        return MetricSet.model_validate(values)


class Indicator(BaseModel):
    """A single realized-outcome indicator.

    Attributes:
        id: Positive integer, unique within one indicator list. Ids are never
            reused after a delete; see ``FormState.next_indicator_id``.
        name: Free-text label. Blank names default to ``"Indicator <id>"``.
        value: Score in ``[0.01, 10]``; NaN clamps to the floor.
        comment: Optional free-text note captured with the snapshot.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    value: float = VALUE_MIN
    comment: str = ""

    @model_validator(mode="before")
    @classmethod
    def default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not str(data.get("name") or "").strip():
            data = {**data, "name": f"Indicator {data.get('id')}"}
        return data

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Indicator id must be >= 1, got {v}.")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def clamp_indicator_value(cls, v: Any) -> float:
        return clamp_value(v)

    @field_validator("comment", mode="before")
    @classmethod
    def blank_comment(cls, v: Any) -> str:
        return v or ""

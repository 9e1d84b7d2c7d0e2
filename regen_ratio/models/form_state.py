"""
Current form state: the transient, editable inputs behind a snapshot.

``FormState`` is the only mutable model in the package. It mirrors what a
dashboard holds while the user edits sliders and indicators: a MetricSet,
per-factor comments, an indicator list, an optional label, and an optional
snapshot date. Nothing here is persisted until ``SnapshotStore.save_snapshot``
or ``update_snapshot`` freezes it into a ``Snapshot``.

Indicator ids are assigned from ``next_indicator_id``, which only moves
forward: removing an indicator never frees its id for reuse.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from regen_ratio.errors import NotFoundError
from regen_ratio.models.metrics import VALUE_MIN, Indicator, MetricSet, normalize_symbol
from regen_ratio.models.snapshot import Snapshot, normalize_metric_comments
from regen_ratio.scoring.calculator import Scores, compute_scores

INITIAL_INDICATOR_NAMES: tuple[str, ...] = (
    "Example: Soil Organic Matter (%)",
    "Example: Employee Turnover Rate (Inverse)",
)


class FormState(BaseModel):
    """Editable inputs for the next snapshot save or update.

    Attributes:
        metrics: Current MetricSet (replaced on every edit; MetricSet is frozen).
        metric_comments: Per-factor notes keyed by symbol.
        indicators: Current indicators in display order.
        label: Optional label; blank means "derive from the date".
        snapshot_date: Optional calendar date; ``None`` means "now".
        next_indicator_id: Id the next ``add_indicator()`` call will use.
    """

    # Mutable: edited in place between saves
    model_config = ConfigDict(frozen=False)

    metrics: MetricSet = Field(default_factory=MetricSet)
    metric_comments: dict[str, str] = Field(
        default_factory=lambda: normalize_metric_comments(None)
    )
    indicators: list[Indicator] = Field(default_factory=list)
    label: str = ""
    snapshot_date: Optional[date] = None
    next_indicator_id: int = 1

    @model_validator(mode="after")
    def advance_indicator_counter(self) -> "FormState":
        highest = max((i.id for i in self.indicators), default=0)
        if self.next_indicator_id <= highest:
            self.next_indicator_id = highest + 1
        self.metric_comments = normalize_metric_comments(self.metric_comments)
        return self

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def initial(cls) -> "FormState":
        """The state a fresh dashboard opens with: all factors at 5, two examples."""
        indicators = [
            Indicator(id=idx, name=name, value=VALUE_MIN)
            for idx, name in enumerate(INITIAL_INDICATOR_NAMES, start=1)
        ]
        return cls(indicators=indicators)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "FormState":
        """Load a snapshot back into an editable form (for update or copy).

        The indicator counter resumes from the one saved with the snapshot,
        or after the highest loaded id for snapshots saved without it.
        """
        return cls(
            metrics=snapshot.metrics,
            metric_comments=dict(snapshot.metric_comments),
            indicators=list(snapshot.indicators),
            label=snapshot.label,
            snapshot_date=snapshot.timestamp.date() if snapshot.timestamp else None,
            next_indicator_id=snapshot.next_indicator_id or 1,
        )

    def reset(self) -> None:
        """Clear the form: every factor at the floor, one blank indicator."""
        self.metrics = MetricSet.uniform(VALUE_MIN)
        self.metric_comments = normalize_metric_comments(None)
        self.indicators = [Indicator(id=1, value=VALUE_MIN)]
        self.next_indicator_id = 2
        self.label = ""
        self.snapshot_date = None

    # ── Metric edits ─────────────────────────────────────────────────────────

    def set_metric(self, symbol: str, value: Any) -> float:
        """Set one factor; returns the clamped value actually stored."""
        self.metrics = self.metrics.with_factor(symbol, value)
        return self.metrics.get(symbol)

    def set_metric_comment(self, symbol: str, text: str) -> None:
        self.metric_comments[normalize_symbol(symbol)] = text or ""

    # ── Indicator edits ──────────────────────────────────────────────────────

    def add_indicator(self, name: str = "", value: Any = VALUE_MIN, comment: str = "") -> Indicator:
        indicator = Indicator(id=self.next_indicator_id, name=name, value=value, comment=comment)
        self.indicators.append(indicator)
        self.next_indicator_id += 1
        return indicator

    def update_indicator(
        self,
        indicator_id: int,
        *,
        name: Optional[str] = None,
        value: Any = None,
        comment: Optional[str] = None,
    ) -> Indicator:
        """Replace fields of one indicator.

        Raises:
            NotFoundError: If no indicator has ``indicator_id``.
        """
        for idx, current in enumerate(self.indicators):
            if current.id == indicator_id:
                updated = Indicator(
                    id=current.id,
                    name=current.name if name is None else name,
                    value=current.value if value is None else value,
                    comment=current.comment if comment is None else comment,
                )
                self.indicators[idx] = updated
                return updated
        raise NotFoundError(f"Indicator {indicator_id} not found.")

    def remove_indicator(self, indicator_id: int) -> bool:
        """Remove an indicator; returns ``False`` if it was not present."""
        before = len(self.indicators)
        self.indicators = [i for i in self.indicators if i.id != indicator_id]
        return len(self.indicators) < before

    # ── Live scores ──────────────────────────────────────────────────────────

    def scores(self) -> Scores:
        """Re / Rx for the current inputs (recomputed on every call)."""
        return compute_scores(self.metrics, self.indicators)

"""
Snapshot and project models: the persisted history.

``Snapshot`` is a frozen capture of one MetricSet, its comments, an indicator
list, and the scores computed from them at save time. It changes only through
``with_changes()``, which re-derives every score and plotted coordinate.

``Project`` owns an ordered tuple of snapshots (insertion order). Display and
forecasting use ``ordered_snapshots()`` which sorts by timestamp.

Both models serialize with camelCase keys (``timePoints``, ``reLog``,
``rxScaled``, ...), the shape of the durable JSON blob. Older blobs are read
best-effort:
  - ``rxIndicators`` is accepted in place of ``indicators``.
  - Missing scores are recomputed from the stored metrics and indicators.
  - Missing ``x`` / ``y`` are filled from ``reLog`` / ``rxScaled``.
  - Unparseable timestamps load as ``None`` (excluded from forecasts).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from regen_ratio.models.forecast import Point
from regen_ratio.models.metrics import FACTOR_SYMBOLS, Indicator, MetricSet, normalize_symbol
from regen_ratio.scoring.calculator import compute_scores
from regen_ratio.utils.time_utils import ensure_utc, parse_timestamp, utcnow

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# field name -> persisted key, for scores that may be missing in older blobs
_SCORE_KEYS: dict[str, str] = {
    "re_raw": "reRaw",
    "re_log": "reLog",
    "rx": "rx",
    "rx_scaled": "rxScaled",
}


def _lookup(data: dict[str, Any], field_name: str) -> Any:
    """Return ``data[alias]`` or ``data[field_name]``, whichever is set."""
    alias = to_camel(field_name)
    value = data.get(alias)
    return value if value is not None else data.get(field_name)


def normalize_metric_comments(comments: Optional[dict[str, Any]]) -> dict[str, str]:
    """Return a comment for every factor symbol; unknown keys are dropped."""
    result = {s: "" for s in FACTOR_SYMBOLS}
    for key, text in (comments or {}).items():
        try:
            result[normalize_symbol(key)] = str(text or "")
        except KeyError:
            continue
    return result


class Snapshot(BaseModel):
    """A frozen, timestamped capture of metrics, indicators, and scores.

    Attributes:
        id: Unique id (``snapshot-<uuid4 hex>``).
        label: Display label.
        timestamp: UTC capture instant, or ``None`` for unreadable legacy data.
        metrics: The MetricSet at capture time.
        metric_comments: Per-factor free-text notes, keyed by symbol.
        indicators: Indicators at capture time, each with its comment.
        re_raw: ``(L*I*F*E)/(X+Fg+Ω)``; may be ``inf``.
        re_log: ``log10(re_raw + 1)``.
        rx: Mean indicator value.
        rx_scaled: ``rx * RX_SCALE``.
        x: Plotted x coordinate (``re_log``).
        y: Plotted y coordinate (``rx_scaled``).
        next_indicator_id: The form's indicator counter at capture time;
            ``None`` for legacy data.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_inf_nan="constants",
    )

    id: str
    label: str = ""
    timestamp: Optional[datetime] = None
    metrics: MetricSet = Field(default_factory=MetricSet)
    metric_comments: dict[str, str] = Field(default_factory=dict, validate_default=True)
    indicators: tuple[Indicator, ...] = Field(
        default=(),
        validation_alias=AliasChoices("indicators", "rxIndicators"),
    )
    re_raw: float
    re_log: float
    rx: float
    rx_scaled: float
    x: float
    y: float
    next_indicator_id: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def fill_derived_scores(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if any(_lookup(data, name) is None for name in _SCORE_KEYS):
            metrics = MetricSet.model_validate(data.get("metrics") or {})
            raw_indicators = _lookup(data, "indicators")
            if raw_indicators is None:
                raw_indicators = data.get("rxIndicators") or []
            if not isinstance(raw_indicators, (list, tuple)):
                raise ValueError(
                    f"indicators must be a list, got {type(raw_indicators).__name__}"
                )
            indicators = [
                i if isinstance(i, Indicator) else Indicator.model_validate(i)
                for i in raw_indicators
            ]
            scores = compute_scores(metrics, indicators)
            for name, alias in _SCORE_KEYS.items():
                data.pop(name, None)
                data[alias] = getattr(scores, name)

        if _lookup(data, "x") is None:
            data["x"] = _lookup(data, "re_log")
        if _lookup(data, "y") is None:
            data["y"] = _lookup(data, "rx_scaled")
        return data

    @field_validator("timestamp", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("metric_comments", mode="before")
    @classmethod
    def complete_metric_comments(cls, v: Any) -> dict[str, str]:
        return normalize_metric_comments(v if isinstance(v, dict) else None)

    @field_validator("label", mode="before")
    @classmethod
    def strip_label(cls, v: Any) -> str:
        return str(v or "").strip()

    @classmethod
    def capture(
        cls,
        snapshot_id: str,
        label: str,
        timestamp: datetime,
        metrics: MetricSet,
        metric_comments: Optional[dict[str, str]],
        indicators: Iterable[Indicator],
        next_indicator_id: Optional[int] = None,
    ) -> "Snapshot":
        """Build a snapshot, computing every score from the inputs."""
        indicators = tuple(indicators)
        scores = compute_scores(metrics, indicators)
        return cls(
            id=snapshot_id,
            label=label,
            timestamp=ensure_utc(timestamp),
            metrics=metrics,
            metric_comments=metric_comments or {},
            indicators=indicators,
            re_raw=scores.re_raw,
            re_log=scores.re_log,
            rx=scores.rx,
            rx_scaled=scores.rx_scaled,
            x=scores.x,
            y=scores.y,
            next_indicator_id=next_indicator_id,
        )

    def with_changes(
        self,
        *,
        label: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        metrics: Optional[MetricSet] = None,
        metric_comments: Optional[dict[str, str]] = None,
        indicators: Optional[Iterable[Indicator]] = None,
        next_indicator_id: Optional[int] = None,
    ) -> "Snapshot":
        """Return a copy with the given fields replaced and scores recomputed.

        The id is always preserved. Omitted arguments keep current values.
        """
        return Snapshot.capture(
            snapshot_id=self.id,
            label=self.label if label is None else label,
            timestamp=(timestamp or self.timestamp or utcnow()),
            metrics=self.metrics if metrics is None else metrics,
            metric_comments=(
                self.metric_comments if metric_comments is None else metric_comments
            ),
            indicators=self.indicators if indicators is None else indicators,
            next_indicator_id=(
                self.next_indicator_id if next_indicator_id is None else next_indicator_id
            ),
        )

    @property
    def point(self) -> Point:
        return Point(x=self.x, y=self.y)


class Project(BaseModel):
    """A named container of an ordered snapshot history.

    Attributes:
        id: Unique id (``project-<uuid4 hex>``).
        name: Non-blank display name.
        time_points: Snapshots in insertion order.
        created_at: UTC creation instant.
        updated_at: UTC instant of the last snapshot mutation or rename.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    time_points: tuple[Snapshot, ...] = ()
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Project name must not be empty.")
        return v.strip()

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def lenient_instant(cls, v: Any) -> datetime:
        return parse_timestamp(v) or utcnow()

    @field_validator("time_points", mode="before")
    @classmethod
    def null_time_points(cls, v: Any) -> Any:
        return v or ()

    def find_snapshot(self, snapshot_id: str) -> Optional[Snapshot]:
        return next((s for s in self.time_points if s.id == snapshot_id), None)

    def ordered_snapshots(self) -> list[Snapshot]:
        """Snapshots sorted by timestamp ascending.

        The sort is stable; snapshots without a timestamp go last in
        insertion order.
        """
        return sorted(
            self.time_points,
            key=lambda s: (s.timestamp is None, s.timestamp or _EPOCH),
        )

    def with_snapshot_added(self, snapshot: Snapshot, now: datetime) -> "Project":
        return self._copy_with(time_points=(*self.time_points, snapshot), updated_at=now)

    def with_snapshot_replaced(self, snapshot: Snapshot, now: datetime) -> "Project":
        time_points = tuple(snapshot if s.id == snapshot.id else s for s in self.time_points)
        return self._copy_with(time_points=time_points, updated_at=now)

    def with_snapshot_removed(self, snapshot_id: str, now: datetime) -> "Project":
        time_points = tuple(s for s in self.time_points if s.id != snapshot_id)
        return self._copy_with(time_points=time_points, updated_at=now)

    def renamed(self, name: str, now: datetime) -> "Project":
        return self._copy_with(name=name, updated_at=now)

    def _copy_with(self, **changes: Any) -> "Project":
        values = {
            "id": self.id,
            "name": self.name,
            "time_points": self.time_points,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        values.update(changes)
        return Project(**values)

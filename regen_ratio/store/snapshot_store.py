"""
SnapshotStore: owns every Project and its snapshot history.

Lifecycle::

    store = SnapshotStore(SqliteBackend("data/db/regen_ratio.db"))
    store.open()                       # load, seed "Default Project" if empty
    form = FormState.initial()
    form.set_metric("L", 7)
    store.save_snapshot(store.active_project.id, form)
    store.forecast()                   # Forecast | None

Guarantees:
  - At least one project exists once ``open()`` has run; deleting the last
    project raises ``InvariantError``.
  - Exactly one project is active. The active id is session state and is not
    persisted; after a reload the first project in persisted order is active.
  - Every mutation builds a new immutable project tuple, persists it with one
    backend write, and only then swaps it in. If the write raises
    ``PersistenceError`` the in-memory state is unchanged.
  - ``load_all()`` never raises: a missing, unreadable, or corrupt blob
    yields ``[]``. Individually malformed projects are skipped.

All operations are synchronous and single-threaded.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional
from uuid import uuid4

import pydantic

from regen_ratio.errors import InvariantError, NotFoundError, PersistenceError, ValidationError
from regen_ratio.forecast.engine import forecast as forecast_snapshots
from regen_ratio.models.forecast import Forecast
from regen_ratio.models.form_state import FormState
from regen_ratio.models.snapshot import Project, Snapshot
from regen_ratio.store.backends import KeyValueBackend
from regen_ratio.utils.time_utils import (
    default_snapshot_label,
    snapshot_timestamp_for,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "regenerativeRatioProjects"
DEFAULT_PROJECT_NAME = "Default Project"


def new_project_id() -> str:
    return f"project-{uuid4().hex}"


def new_snapshot_id() -> str:
    return f"snapshot-{uuid4().hex}"


def serialize_projects(projects: Iterable[Project]) -> str:
    """Serialize projects to the durable JSON array (camelCase keys)."""
    return json.dumps([p.model_dump(mode="json", by_alias=True) for p in projects])


class SnapshotStore:
    """In-memory project list backed by a durable key-value blob.

    Attributes:
        backend: Durable store the project list is written to.
        storage_key: Key of the JSON blob inside ``backend``.
        default_project_name: Name of the project seeded into an empty store.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        storage_key: str = DEFAULT_STORAGE_KEY,
        default_project_name: str = DEFAULT_PROJECT_NAME,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.backend = backend
        self.storage_key = storage_key
        self.default_project_name = default_project_name
        self._clock = clock
        self._projects: tuple[Project, ...] = ()
        self._active_id: Optional[str] = None

    # ── Read access ──────────────────────────────────────────────────────────

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    @property
    def active_project_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_project(self) -> Optional[Project]:
        if self._active_id is None:
            return None
        return self._find_project(self._active_id)

    def get_project(self, project_id: str) -> Project:
        """Return a project by id.

        Raises:
            NotFoundError: If ``project_id`` does not resolve.
        """
        return self._require_project(project_id)

    # ── Persistence ──────────────────────────────────────────────────────────

    def load_all(self) -> list[Project]:
        """Read the full project list from the backend.

        Returns ``[]`` for a missing, unreadable, or corrupt blob. Never raises.
        """
        try:
            blob = self.backend.read(self.storage_key)
        except PersistenceError as exc:
            logger.warning("Durable store unavailable, starting empty: %s", exc)
            return []

        if blob is None:
            logger.info("No saved projects under key '%s'.", self.storage_key)
            return []

        try:
            raw = json.loads(blob)
        except json.JSONDecodeError as exc:
            logger.warning("Saved projects are not valid JSON, ignoring: %s", exc)
            return []

        if not isinstance(raw, list):
            logger.warning("Saved projects blob is not a JSON array, ignoring.")
            return []

        projects: list[Project] = []
        for idx, entry in enumerate(raw):
            try:
                projects.append(Project.model_validate(entry))
            except pydantic.ValidationError as exc:
                logger.warning(
                    "Skipping malformed project #%d: %d validation error(s).",
                    idx, exc.error_count(),
                )
        logger.info("Loaded %d project(s).", len(projects))
        return projects

    def open(self) -> list[Project]:
        """Load the saved projects, seeding a default project if none exist.

        The first project in persisted order becomes active. If the seed
        cannot be persisted the error is logged and the seeded project is
        kept in memory.
        """
        projects = tuple(self.load_all())
        if projects:
            self._projects = projects
            self._active_id = projects[0].id
            return list(projects)

        now = self._clock()
        seed = Project(
            id=new_project_id(),
            name=self.default_project_name,
            created_at=now,
            updated_at=now,
        )
        try:
            self._commit((seed,), seed.id)
        except PersistenceError:
            self._projects = (seed,)
            self._active_id = seed.id
        logger.info("Seeded project '%s' (%s).", seed.name, seed.id)
        return list(self._projects)

    def persist(self) -> None:
        """Write the current project list to the backend (full overwrite).

        Raises:
            PersistenceError: If the backend write fails.
        """
        self._write(self._projects)

    # ── Projects ─────────────────────────────────────────────────────────────

    def create_project(self, name: str) -> Project:
        """Create an empty project and make it active.

        Raises:
            ValidationError: If ``name`` is blank.
        """
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Project name must not be empty.")

        now = self._clock()
        project = Project(id=new_project_id(), name=clean, created_at=now, updated_at=now)
        self._commit((*self._projects, project), project.id)
        logger.info("Created project '%s' (%s).", project.name, project.id)
        return project

    def rename_project(self, project_id: str, name: str) -> Project:
        """Rename a project.

        Raises:
            ValidationError: If ``name`` is blank.
            NotFoundError: If ``project_id`` does not resolve.
        """
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Project name must not be empty.")
        project = self._require_project(project_id).renamed(clean, self._clock())
        self._commit(self._with_project(project), self._active_id)
        logger.info("Renamed project %s to '%s'.", project_id, clean)
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project and all its snapshots.

        If it was active, the first remaining project becomes active.

        Raises:
            NotFoundError: If ``project_id`` does not resolve.
            InvariantError: If it is the only project left.
        """
        self._require_project(project_id)
        if len(self._projects) <= 1:
            raise InvariantError("Cannot delete the last remaining project.")

        remaining = tuple(p for p in self._projects if p.id != project_id)
        active_id = remaining[0].id if self._active_id == project_id else self._active_id
        self._commit(remaining, active_id)
        logger.info("Deleted project %s; active project is %s.", project_id, active_id)

    def set_active_project(self, project_id: str) -> Project:
        """Make ``project_id`` the active project (session state only).

        Raises:
            NotFoundError: If ``project_id`` does not resolve.
        """
        project = self._require_project(project_id)
        self._active_id = project.id
        return project

    # ── Snapshots ────────────────────────────────────────────────────────────

    def save_snapshot(
        self,
        project_id: str,
        form_state: FormState,
        label: Optional[str] = None,
    ) -> Snapshot:
        """Freeze ``form_state`` into a new snapshot appended to a project.

        Scores are computed now and not recomputed later except by
        ``update_snapshot``. The timestamp is 12:00 UTC on
        ``form_state.snapshot_date`` when one is set, otherwise the current
        instant. ``label`` overrides ``form_state.label``; when both are
        blank the label is derived from the timestamp.

        Raises:
            NotFoundError: If ``project_id`` does not resolve.
        """
        project = self._require_project(project_id)
        now = self._clock()
        timestamp = (
            snapshot_timestamp_for(form_state.snapshot_date)
            if form_state.snapshot_date
            else now
        )
        snapshot = Snapshot.capture(
            snapshot_id=new_snapshot_id(),
            label=(label or form_state.label).strip() or default_snapshot_label(timestamp),
            timestamp=timestamp,
            metrics=form_state.metrics,
            metric_comments=form_state.metric_comments,
            indicators=form_state.indicators,
            next_indicator_id=form_state.next_indicator_id,
        )
        self._commit(self._with_project(project.with_snapshot_added(snapshot, now)), self._active_id)
        logger.info(
            "Saved snapshot %s to project %s (Re=%.3f, Rx=%.3f).",
            snapshot.id, project_id, snapshot.re_log, snapshot.rx_scaled,
        )
        return snapshot

    def update_snapshot(
        self,
        project_id: str,
        snapshot_id: str,
        form_state: FormState,
    ) -> Snapshot:
        """Replace a snapshot's editable fields and recompute its scores.

        The timestamp only changes when ``form_state.snapshot_date`` is set
        and differs from the stored date. The id is preserved.

        Raises:
            NotFoundError: If either id does not resolve.
        """
        project = self._require_project(project_id)
        existing = project.find_snapshot(snapshot_id)
        if existing is None:
            raise NotFoundError(f"Snapshot {snapshot_id} not found in project {project_id}.")

        now = self._clock()
        timestamp = existing.timestamp
        chosen = form_state.snapshot_date
        if chosen is not None and (timestamp is None or timestamp.date() != chosen):
            timestamp = snapshot_timestamp_for(chosen)

        updated = existing.with_changes(
            label=form_state.label.strip() or default_snapshot_label(timestamp or now),
            timestamp=timestamp,
            metrics=form_state.metrics,
            metric_comments=form_state.metric_comments,
            indicators=form_state.indicators,
            next_indicator_id=form_state.next_indicator_id,
        )
        self._commit(
            self._with_project(project.with_snapshot_replaced(updated, now)),
            self._active_id,
        )
        logger.info("Updated snapshot %s in project %s.", snapshot_id, project_id)
        return updated

    def delete_snapshot(self, project_id: str, snapshot_id: str) -> bool:
        """Delete a snapshot.

        Returns:
            ``True`` if removed; ``False`` (with a warning) if either id is
            unknown.
        """
        project = self._find_project(project_id)
        if project is None or project.find_snapshot(snapshot_id) is None:
            logger.warning(
                "Delete ignored: snapshot %s not found in project %s.", snapshot_id, project_id
            )
            return False

        updated = project.with_snapshot_removed(snapshot_id, self._clock())
        self._commit(self._with_project(updated), self._active_id)
        logger.info("Deleted snapshot %s from project %s.", snapshot_id, project_id)
        return True

    # ── Forecast ─────────────────────────────────────────────────────────────

    def forecast(self, project_id: Optional[str] = None) -> Optional[Forecast]:
        """Forecast for a project's history (default: the active project).

        Advisory only: an unknown project or too little history gives ``None``.
        """
        target = project_id or self._active_id
        project = self._find_project(target) if target else None
        if project is None:
            logger.warning("No forecast: project %s not found.", target)
            return None
        return forecast_snapshots(project.time_points)

    # ── Internals ────────────────────────────────────────────────────────────

    def _find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self._projects if p.id == project_id), None)

    def _require_project(self, project_id: str) -> Project:
        project = self._find_project(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found.")
        return project

    def _with_project(self, updated: Project) -> tuple[Project, ...]:
        return tuple(updated if p.id == updated.id else p for p in self._projects)

    def _write(self, projects: tuple[Project, ...]) -> None:
        try:
            self.backend.write(self.storage_key, serialize_projects(projects))
        except PersistenceError:
            logger.error("Persist failed; in-memory state left unchanged.", exc_info=True)
            raise

    def _commit(self, projects: tuple[Project, ...], active_id: Optional[str]) -> None:
        self._write(projects)
        self._projects = projects
        self._active_id = active_id

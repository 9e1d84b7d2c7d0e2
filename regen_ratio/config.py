"""
Configuration for the Regenerative Ratio tracker.

Layers, lowest precedence first:

  1. Built-in model defaults
  2. ``config/default.toml`` (or the file passed to ``load_config``)
  3. ``local.toml`` next to that file, if present (gitignored)
  4. ``.env`` at the project root, exported into the environment
  5. ``REGEN_RATIO_*`` environment variables (see ``ENV_OVERRIDES``)

Every consumer receives one frozen ``AppConfig``; nothing else reads the
environment. ``build_store(config)`` turns it into an unopened
``SnapshotStore``.
"""

from __future__ import annotations

import os
import tomllib
from functools import reduce
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from regen_ratio.store.backends import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    SqliteBackend,
)
from regen_ratio.store.snapshot_store import (
    DEFAULT_PROJECT_NAME,
    DEFAULT_STORAGE_KEY,
    SnapshotStore,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Environment variable -> path inside the raw config dict.
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "REGEN_RATIO_BACKEND": ("storage", "backend"),
    "REGEN_RATIO_DB_PATH": ("storage", "db_path"),
    "REGEN_RATIO_JSON_PATH": ("storage", "json_path"),
    "REGEN_RATIO_STORAGE_KEY": ("storage", "storage_key"),
    "REGEN_RATIO_LOG_LEVEL": ("logging", "level"),
    "REGEN_RATIO_LOG_FILE": ("logging", "log_file"),
    "REGEN_RATIO_DEBUG": ("debug",),
}


class StorageConfig(BaseModel):
    """Where and how the project list is persisted.

    Attributes:
        backend: ``sqlite`` (default), ``json`` (single file), or ``memory``
            (nothing survives the process).
        db_path: SQLite file used by the ``sqlite`` backend.
        json_path: File used by the ``json`` backend.
        storage_key: Key the serialized project list is stored under.
        wal_mode: Enable SQLite WAL journaling.
        busy_timeout_ms: SQLite lock wait.
    """

    model_config = ConfigDict(frozen=True)

    backend: Literal["sqlite", "json", "memory"] = "sqlite"
    db_path: str = "data/db/regen_ratio.db"
    json_path: str = "data/regen_ratio.json"
    storage_key: str = DEFAULT_STORAGE_KEY
    wal_mode: bool = True
    busy_timeout_ms: int = 5000

    @field_validator("backend", mode="before")
    @classmethod
    def lower_backend(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("storage_key")
    @classmethod
    def storage_key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("storage_key must not be blank.")
        return v


class ProjectsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    default_project_name: str = DEFAULT_PROJECT_NAME


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: LogLevel = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class AppConfig(BaseModel):
    """Root configuration object handed to the CLI and factories."""

    model_config = ConfigDict(frozen=True)

    storage: StorageConfig = StorageConfig()
    projects: ProjectsConfig = ProjectsConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False

    @field_validator("debug", mode="before")
    @classmethod
    def truthy_debug(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes", "on")
        return v


# ── Loading ───────────────────────────────────────────────────────────────────


def project_root() -> Path:
    """The nearest ancestor of this package holding ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    return next(
        (p for p in (here, *here.parents) if (p / "pyproject.toml").is_file()),
        here.parent,
    )


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build the ``AppConfig`` from every layer.

    Args:
        config_path: TOML file to use instead of ``config/default.toml``.
            When the default file is absent the built-in defaults apply;
            an explicit path must exist.

    Returns:
        Validated, frozen ``AppConfig``.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        pydantic.ValidationError: If a merged value is invalid.
    """
    root = project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is not None:
        base = Path(config_path)
        if not base.is_file():
            raise FileNotFoundError(f"Config file not found: {base}")
    else:
        base = root / "config" / "default.toml"

    layers = [_read_toml(p) for p in (base, base.parent / "local.toml") if p.is_file()]
    raw = reduce(_deep_merge, layers, {})
    return AppConfig.model_validate(_with_env_overrides(raw, os.environ))


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _with_env_overrides(raw: dict[str, Any], environ: Any) -> dict[str, Any]:
    """Return ``raw`` with every set ``ENV_OVERRIDES`` variable applied."""
    overrides: dict[str, Any] = {}
    for var, path in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        *sections, leaf = path
        target = overrides
        for section in sections:
            target = target.setdefault(section, {})
        target[leaf] = value
    return _deep_merge(raw, overrides)


# ── Factories ─────────────────────────────────────────────────────────────────


def build_backend(config: AppConfig) -> KeyValueBackend:
    """Construct the durable backend selected by ``config.storage.backend``."""
    storage = config.storage
    if storage.backend == "sqlite":
        return SqliteBackend(
            storage.db_path,
            wal_mode=storage.wal_mode,
            busy_timeout_ms=storage.busy_timeout_ms,
        )
    if storage.backend == "json":
        return JsonFileBackend(storage.json_path)
    return InMemoryBackend()


def build_store(config: AppConfig) -> SnapshotStore:
    """Construct a ``SnapshotStore`` wired to the configured backend (not yet opened)."""
    return SnapshotStore(
        build_backend(config),
        storage_key=config.storage.storage_key,
        default_project_name=config.projects.default_project_name,
    )

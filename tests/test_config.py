"""Tests for configuration loading, env overrides, and backend wiring."""

from __future__ import annotations

import logging

import pydantic
import pytest

from regen_ratio.config import (
    ENV_OVERRIDES,
    AppConfig,
    LoggingConfig,
    StorageConfig,
    build_backend,
    build_store,
    load_config,
)
from regen_ratio.store.backends import InMemoryBackend, JsonFileBackend, SqliteBackend
from regen_ratio.utils.logging import JsonLineFormatter, build_logging_dict, configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    def test_default_file(self):
        config = load_config()
        assert config.storage.backend == "sqlite"
        assert config.storage.storage_key == "regenerativeRatioProjects"
        assert config.projects.default_project_name == "Default Project"
        assert config.logging.level == "INFO"

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text(
            '[storage]\nbackend = "json"\njson_path = "x.json"\n'
            '[projects]\ndefault_project_name = "Home"\n',
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.storage.backend == "json"
        assert config.storage.json_path == "x.json"
        assert config.projects.default_project_name == "Home"

    def test_local_overrides_merged(self, tmp_path):
        (tmp_path / "base.toml").write_text('[logging]\nlevel = "INFO"\n', encoding="utf-8")
        (tmp_path / "local.toml").write_text('[logging]\nlevel = "debug"\n', encoding="utf-8")
        assert load_config(tmp_path / "base.toml").logging.level == "DEBUG"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REGEN_RATIO_BACKEND", "memory")
        monkeypatch.setenv("REGEN_RATIO_LOG_LEVEL", "warning")
        monkeypatch.setenv("REGEN_RATIO_DEBUG", "yes")
        config = load_config()
        assert config.storage.backend == "memory"
        assert config.logging.level == "WARNING"
        assert config.debug is True

    def test_invalid_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("REGEN_RATIO_BACKEND", "postgres")
        with pytest.raises(pydantic.ValidationError):
            load_config()

    def test_invalid_log_level_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            LoggingConfig(level="LOUD")

    def test_blank_storage_key_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            StorageConfig(storage_key="  ")


class TestFactories:
    @pytest.mark.parametrize(
        "backend, expected",
        [("sqlite", SqliteBackend), ("json", JsonFileBackend), ("memory", InMemoryBackend)],
    )
    def test_build_backend(self, backend, expected):
        config = AppConfig(storage=StorageConfig(backend=backend))
        assert isinstance(build_backend(config), expected)

    def test_build_store_uses_config(self):
        config = AppConfig.model_validate(
            {
                "storage": {"backend": "memory", "storage_key": "k"},
                "projects": {"default_project_name": "Seed"},
            }
        )
        store = build_store(config)
        store.open()
        assert store.storage_key == "k"
        assert store.active_project.name == "Seed"


class TestLogging:
    def test_configure_text(self):
        configure_logging(LoggingConfig(level="DEBUG"))
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_file(self, tmp_path):
        log_file = tmp_path / "logs" / "regen.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
        logging.getLogger("regen_ratio.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_logging_dict_handlers(self):
        plain = build_logging_dict(LoggingConfig())
        assert list(plain["handlers"]) == ["console"]
        assert plain["handlers"]["console"]["formatter"] == "text"

        with_file = build_logging_dict(LoggingConfig(log_file="x.log", json_format=True))
        assert set(with_file["handlers"]) == {"console", "file"}
        assert with_file["root"]["handlers"] == ["console", "file"]
        assert with_file["handlers"]["file"]["formatter"] == "json"

    def test_json_formatter(self):
        record = logging.LogRecord("regen_ratio.x", logging.WARNING, __file__, 1, "n=%d", (3,), None)
        record.project_id = "project-1"
        line = JsonLineFormatter().format(record)
        assert '"msg": "n=3"' in line
        assert '"level": "WARNING"' in line
        assert '"project_id": "project-1"' in line

"""
Logging setup for the Regenerative Ratio tracker.

Call ``configure_logging(config)`` once at CLI entry, before the store is
opened. Library modules only ever call ``logging.getLogger(__name__)``.

Console output goes to stderr so command output on stdout stays pipeable
(``regen-ratio snapshot list | less``). An optional log file receives the
same records.

With ``json_format = true`` each record is one JSON object per line::

    {"ts": "2026-10-19T09:30:00Z", "level": "INFO", "logger": "regen_ratio.store.snapshot_store", "msg": "..."}

Values passed through ``extra=`` appear as additional top-level keys.
"""

from __future__ import annotations

import json
import logging
import logging.config
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from regen_ratio.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s | %(message)s"
ISO_UTC = "%Y-%m-%dT%H:%M:%SZ"

# Attribute names present on every LogRecord; anything else came from ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class UtcFormatter(logging.Formatter):
    converter = time.gmtime


class JsonLineFormatter(UtcFormatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``.

    ``exc`` holds the formatted traceback when one is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, ISO_UTC),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (k, v) for k, v in vars(record).items()
            if k not in _STANDARD_ATTRS and not k.startswith("_")
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def build_logging_dict(config: "LoggingConfig") -> dict[str, Any]:
    """Translate a ``LoggingConfig`` into a ``dictConfig`` schema."""
    formatter = "json" if config.json_format else "text"
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": formatter,
        },
    }
    if config.log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": config.log_file,
            "encoding": "utf-8",
            "formatter": formatter,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {"()": UtcFormatter, "fmt": TEXT_FORMAT, "datefmt": ISO_UTC},
            "json": {"()": JsonLineFormatter},
        },
        "handlers": handlers,
        "root": {"level": config.level, "handlers": list(handlers)},
    }


def configure_logging(config: "LoggingConfig") -> None:
    """Apply ``config`` to the root logger, replacing any earlier handlers.

    Args:
        config: The ``[logging]`` section of ``AppConfig``.
    """
    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_dict(config))

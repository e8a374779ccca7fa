"""Log sink wiring for the zeta process."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

LOG_FILE_NAME = "zeta.log"
ROOT_LOGGER_NAME = "zeta"

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


@dataclass(slots=True)
class LoggingState:
    """Tracks which handlers this process has already attached."""

    console_handler: logging.Handler | None = None
    file_handler: logging.Handler | None = None

    @property
    def file_attached(self) -> bool:
        return self.file_handler is not None


def record_fields(record: logging.LogRecord) -> dict[str, object]:
    """Return the structured ``extra`` fields carried by a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class ConsoleFormatter(logging.Formatter):
    """``[time] [LEVEL] [logger] event key=value ...`` for humans on stderr."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] [%(levelname)-5s] [%(name)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value!r}" for key, value in fields.items())
        return line


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record for the persistent log file."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(
    state: LoggingState,
    *,
    level: str | int = logging.INFO,
    logs_dir: str | Path | None = None,
) -> logging.Logger:
    """Attach console and file handlers once and return the process logger."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    if state.console_handler is None:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ConsoleFormatter())
        logger.addHandler(console)
        state.console_handler = console

    if logs_dir is not None and not state.file_attached:
        log_path = Path(logs_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)
        state.file_handler = file_handler

    return logger


def reset_logging(state: LoggingState) -> None:
    """Detach and close every handler recorded in ``state``."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in (state.console_handler, state.file_handler):
        if handler is not None:
            logger.removeHandler(handler)
            handler.close()
    state.console_handler = None
    state.file_handler = None

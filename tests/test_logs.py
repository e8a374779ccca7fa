from __future__ import annotations

import json
import logging
from pathlib import Path

from zeta.logs import (
    LOG_FILE_NAME,
    ConsoleFormatter,
    LoggingState,
    configure_logging,
    record_fields,
    reset_logging,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("zeta.tasks", logging.INFO, __file__, 1, "task_enqueued", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_attaches_file_handler_once(tmp_path: Path) -> None:
    state = LoggingState()
    try:
        logger = configure_logging(state, level="DEBUG", logs_dir=tmp_path)
        first_file_handler = state.file_handler
        configure_logging(state, level="DEBUG", logs_dir=tmp_path)

        assert state.file_attached
        assert state.file_handler is first_file_handler
        assert logger.handlers.count(first_file_handler) == 1
        assert logger.level == logging.DEBUG
    finally:
        reset_logging(state)


def test_file_sink_writes_json_lines(tmp_path: Path) -> None:
    state = LoggingState()
    try:
        logger = configure_logging(state, logs_dir=tmp_path)
        logger.getChild("tasks").info("task_enqueued", extra={"task_id": 7, "sender": "alice"})
    finally:
        reset_logging(state)

    lines = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
    entry = json.loads(lines[-1])
    assert entry["event"] == "task_enqueued"
    assert entry["level"] == "info"
    assert entry["logger"] == "zeta.tasks"
    assert entry["task_id"] == 7
    assert entry["sender"] == "alice"
    assert "timestamp" in entry


def test_console_only_without_logs_dir() -> None:
    state = LoggingState()
    try:
        configure_logging(state)
        assert state.console_handler is not None
        assert not state.file_attached
    finally:
        reset_logging(state)


def test_reset_logging_detaches_handlers(tmp_path: Path) -> None:
    state = LoggingState()
    logger = configure_logging(state, logs_dir=tmp_path)
    handlers = [state.console_handler, state.file_handler]

    reset_logging(state)

    assert state.console_handler is None
    assert not state.file_attached
    assert all(handler not in logger.handlers for handler in handlers)


def test_record_fields_skips_standard_attributes() -> None:
    assert record_fields(_record(task_id=3)) == {"task_id": 3}


def test_console_formatter_appends_fields() -> None:
    line = ConsoleFormatter().format(_record(task_id=3))

    assert "[zeta.tasks] task_enqueued" in line
    assert line.endswith("task_id=3")

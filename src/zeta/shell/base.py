"""Base shell adapter primitives and output normalization."""

from __future__ import annotations

import abc
import locale
import logging
import re
import time

from zeta.agent.models import CommandResult

LOGGER = logging.getLogger(__name__)

BINARY_OUTPUT_PLACEHOLDER = "[binary output skipped]"
TRUNCATION_MARKER = "\n... [output truncated]"

_BINARY_BYTES = re.compile(rb"[\x00-\x08\x0e-\x1f]")

_SECRET_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"(--?(?:password|token|secret|api[-_]?key)\s+)([^\s]+)",
        r"((?:password|token|secret|api[-_]?key)\s*=\s*)([^\s]+)",
    )
]


class ShellAdapter(abc.ABC):
    """Abstract adapter for shell-specific command execution."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Friendly shell adapter name."""

    @abc.abstractmethod
    def execute(
        self,
        command: str,
        *,
        cwd: str | None = None,
        timeout: float | None = None,
        max_output_length: int | None = None,
    ) -> CommandResult:
        """Execute a shell command and return a bounded, classified result."""

    def log_request(self, command: str, *, cwd: str | None, timeout: float | None) -> None:
        self.logger.warning(
            "command_request",
            extra={
                "shell": self.name,
                "command": self._sanitize_command(command),
                "cwd": cwd,
                "timeout": timeout,
            },
        )

    def log_result(self, result: CommandResult, *, duration_seconds: float) -> None:
        self.logger.info(
            "command_result",
            extra={
                "shell": self.name,
                "exit_code": result.exit_code,
                "duration_seconds": round(duration_seconds, 4),
                "stdout_length": len(result.stdout),
                "stderr_length": len(result.stderr),
            },
        )

    @staticmethod
    def monotonic_now() -> float:
        return time.monotonic()

    def _sanitize_command(self, command: str) -> str:
        sanitized = command
        for pattern in _SECRET_PATTERNS:
            sanitized = pattern.sub(r"\1***", sanitized)
        return sanitized


def contains_binary(payload: bytes | str | None) -> bool:
    """Return true when output carries control bytes outside tab/newline/CR."""
    if not payload:
        return False
    if isinstance(payload, str):
        payload = payload.encode("utf-8", errors="replace")
    return _BINARY_BYTES.search(payload) is not None


def truncate_output(text: str, max_length: int | None) -> str:
    if max_length is None or len(text) <= max_length:
        return text
    return f"{text[:max_length]}{TRUNCATION_MARKER}"


def normalize_output(payload: bytes | str | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload.strip()

    for encoding in ("utf-8", "utf-8-sig", locale.getpreferredencoding(False), "cp1252"):
        try:
            return payload.decode(encoding).strip()
        except (LookupError, UnicodeDecodeError):
            continue
    return payload.decode("utf-8", errors="replace").strip()

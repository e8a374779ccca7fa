"""Shell adapter implementations."""

import logging

from .base import BINARY_OUTPUT_PLACEHOLDER, TRUNCATION_MARKER, ShellAdapter
from .bash_adapter import BashAdapter


def create_shell_adapter(
    shell_name: str,
    *,
    working_directory: str | None = None,
    logger: logging.Logger | None = None,
) -> ShellAdapter:
    normalized = shell_name.strip().lower()
    if normalized in {"bash", "sh", "shell"}:
        return BashAdapter(
            executable="sh" if normalized == "sh" else None,
            working_directory=working_directory,
            logger=logger,
        )
    msg = f"Unsupported shell adapter: {shell_name}"
    raise ValueError(msg)


__all__ = [
    "BINARY_OUTPUT_PLACEHOLDER",
    "TRUNCATION_MARKER",
    "BashAdapter",
    "ShellAdapter",
    "create_shell_adapter",
]

"""Bash shell adapter implementation."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from zeta.agent.models import CommandResult

from .base import (
    BINARY_OUTPUT_PLACEHOLDER,
    ShellAdapter,
    contains_binary,
    normalize_output,
    truncate_output,
)


class BashAdapter(ShellAdapter):
    """Adapter for command execution via ``bash``/``sh``."""

    def __init__(
        self,
        executable: str | None = None,
        *,
        working_directory: str | None = None,
        fallback_to_sh: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.executable = executable or _default_executable(fallback_to_sh=fallback_to_sh)
        self.working_directory = working_directory or str(Path.home())

    @property
    def name(self) -> str:
        return "bash"

    def execute(
        self,
        command: str,
        *,
        cwd: str | None = None,
        timeout: float | None = None,
        max_output_length: int | None = None,
    ) -> CommandResult:
        run_cwd = cwd or self.working_directory
        self.log_request(command, cwd=run_cwd, timeout=timeout)
        started = self.monotonic_now()

        try:
            process = subprocess.run(
                [self.executable, "-c", command],
                capture_output=True,
                cwd=run_cwd,
                timeout=timeout,
                check=False,
                text=False,
                env={**os.environ, "LC_ALL": "en_US.UTF-8"},
            )
        except subprocess.TimeoutExpired as exc:
            result = self._failure_result(
                command,
                stdout=exc.stdout,
                stderr=exc.stderr,
                fallback_message=f"Command timed out after {timeout}s",
                exit_code=1,
                max_output_length=max_output_length,
            )
        except OSError as exc:
            result = self._failure_result(
                command,
                stdout=None,
                stderr=None,
                fallback_message=str(exc),
                exit_code=1,
                max_output_length=max_output_length,
            )
        else:
            if process.returncode == 0:
                result = self._success_result(
                    command,
                    stdout=process.stdout,
                    stderr=process.stderr,
                    max_output_length=max_output_length,
                )
            else:
                result = self._failure_result(
                    command,
                    stdout=process.stdout,
                    stderr=process.stderr,
                    fallback_message=f"Command failed with exit code {process.returncode}",
                    exit_code=process.returncode,
                    max_output_length=max_output_length,
                )

        self.log_result(result, duration_seconds=self.monotonic_now() - started)
        return result

    @staticmethod
    def _success_result(
        command: str,
        *,
        stdout: bytes | None,
        stderr: bytes | None,
        max_output_length: int | None,
    ) -> CommandResult:
        if contains_binary(stdout):
            return CommandResult(
                command=command,
                stdout=BINARY_OUTPUT_PLACEHOLDER,
                stderr="",
                exit_code=0,
            )
        return CommandResult(
            command=command,
            stdout=truncate_output(normalize_output(stdout), max_output_length),
            stderr=truncate_output(normalize_output(stderr), max_output_length),
            exit_code=0,
        )

    @staticmethod
    def _failure_result(
        command: str,
        *,
        stdout: bytes | str | None,
        stderr: bytes | str | None,
        fallback_message: str,
        exit_code: int,
        max_output_length: int | None,
    ) -> CommandResult:
        error_text = normalize_output(stderr) or fallback_message
        return CommandResult(
            command=command,
            stdout=truncate_output(normalize_output(stdout), max_output_length),
            stderr=truncate_output(error_text, max_output_length),
            exit_code=exit_code or 1,
        )


def _default_executable(*, fallback_to_sh: bool) -> str:
    if shutil.which("bash"):
        return "bash"
    if fallback_to_sh and shutil.which("sh"):
        return "sh"
    return "bash"

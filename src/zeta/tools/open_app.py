"""Launch a named application."""

from __future__ import annotations

import logging
import platform
import subprocess

from zeta.agent.models import CommandResult

from .actions import OpenAppAction
from .base import DesktopTool


class OpenAppTool(DesktopTool[OpenAppAction]):
    """Launch an application by name.

    On macOS this goes through ``open -a`` so bundle names such as ``Safari``
    resolve; elsewhere the name is treated as an executable and started
    detached from zeta.
    """

    tool_name = "open_app"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        system: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.timeout = timeout
        self.system = system or platform.system()

    def run(self, action: OpenAppAction) -> CommandResult:
        try:
            if self.system == "Darwin":
                process = subprocess.run(
                    ["open", "-a", action.app],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
                if process.returncode != 0:
                    error = process.stderr.strip() or f"open exited with {process.returncode}"
                    return self._failed(action.description, error)
            else:
                subprocess.Popen(
                    [action.app],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
        except (OSError, subprocess.SubprocessError) as exc:
            return self._failed(action.description, exc)
        return self._succeeded(action.description, f"Opened {action.app}")

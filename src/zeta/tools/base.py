"""Shared plumbing for desktop tools."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from zeta.agent.models import CommandResult

LOGGER = logging.getLogger(__name__)

ActionT = TypeVar("ActionT")
GuiLoader = Callable[[], Any]

ACCESSIBILITY_HINT = (
    "Hint: grant Accessibility access to the terminal running zeta in "
    "System Settings > Privacy & Security > Accessibility, then restart it."
)
SCREEN_RECORDING_HINT = (
    "Hint: grant Screen Recording access to the terminal running zeta in "
    "System Settings > Privacy & Security > Screen Recording, then restart it."
)

_ACCESSIBILITY_MARKERS = (
    "not allowed to send keystrokes",
    "not authorized",
    "not trusted",
    "accessibility",
    "(1002)",
)
_SCREEN_RECORDING_MARKERS = (
    "could not create image",
    "screen recording",
    "cgdisplaycreateimage",
)


def load_pyautogui() -> Any:
    """Import pyautogui on first use; it needs a display at import time."""
    import pyautogui

    pyautogui.FAILSAFE = True
    return pyautogui


def with_permission_hint(message: str) -> str:
    """Append a remediation hint when an error looks like a macOS permission denial."""
    lowered = message.lower()
    if any(marker in lowered for marker in _SCREEN_RECORDING_MARKERS):
        return f"{message}\n{SCREEN_RECORDING_HINT}"
    if any(marker in lowered for marker in _ACCESSIBILITY_MARKERS):
        return f"{message}\n{ACCESSIBILITY_HINT}"
    return message


class DesktopTool(abc.ABC, Generic[ActionT]):
    """A named tool performing exactly one platform-level side effect."""

    tool_name: str = ""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    @abc.abstractmethod
    def run(self, action: ActionT) -> CommandResult:
        """Perform the side effect and report it; never raises."""

    def _succeeded(self, description: str, stdout: str) -> CommandResult:
        self.logger.info("tool_succeeded", extra={"tool": self.tool_name, "description": description})
        return CommandResult(command=description, stdout=stdout, stderr="", exit_code=0)

    def _failed(self, description: str, error: BaseException | str) -> CommandResult:
        message = str(error) or error.__class__.__name__
        self.logger.error(
            "tool_failed",
            extra={"tool": self.tool_name, "description": description, "error": message},
        )
        return CommandResult.failure(description, with_permission_hint(message))

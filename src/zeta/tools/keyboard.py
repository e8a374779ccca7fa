"""Keystroke synthesis tool."""

from __future__ import annotations

import logging
import platform
import subprocess

from zeta.agent.models import CommandResult

from .actions import KeyboardAction
from .base import DesktopTool, GuiLoader, load_pyautogui


class KeyboardTool(DesktopTool[KeyboardAction]):
    """Type text into whichever window currently has focus.

    pyautogui presses one mapped key per character and silently drops anything
    outside its key map, so non-ASCII text goes through System Events on macOS
    and is rejected elsewhere.
    """

    tool_name = "keyboard_type"

    def __init__(
        self,
        *,
        gui_loader: GuiLoader = load_pyautogui,
        interval: float = 0.01,
        timeout: float = 10.0,
        system: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.gui_loader = gui_loader
        self.interval = interval
        self.timeout = timeout
        self.system = system or platform.system()

    def run(self, action: KeyboardAction) -> CommandResult:
        if not action.text.isascii():
            if self.system != "Darwin":
                untypeable = "".join(dict.fromkeys(ch for ch in action.text if not ch.isascii()))
                return self._failed(
                    action.description,
                    f"Cannot type non-ASCII characters on {self.system}: {untypeable}",
                )
            return self._type_with_system_events(action)

        try:
            gui = self.gui_loader()
            gui.write(action.text, interval=self.interval)
        except Exception as exc:  # noqa: BLE001
            return self._failed(action.description, exc)
        return self._succeeded(action.description, f'Typed: "{action.text}"')

    def _type_with_system_events(self, action: KeyboardAction) -> CommandResult:
        escaped = action.text.replace("\\", "\\\\").replace('"', '\\"')
        script = f'tell application "System Events" to keystroke "{escaped}"'
        try:
            process = subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            return self._failed(action.description, exc)
        if process.returncode != 0:
            error = process.stderr.strip() or f"osascript exited with {process.returncode}"
            return self._failed(action.description, error)
        return self._succeeded(action.description, f'Typed: "{action.text}"')

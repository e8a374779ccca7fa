"""Full-screen capture tool."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from zeta.agent.models import CommandResult

from .actions import INVALID_SCREENSHOT_FILENAME, ScreenshotAction, screenshot_basename
from .base import DesktopTool, GuiLoader, load_pyautogui


class ScreenshotTool(DesktopTool[ScreenshotAction]):
    """Capture the display into the screenshots directory."""

    tool_name = "screenshot"

    def __init__(
        self,
        screenshots_dir: str | Path,
        *,
        gui_loader: GuiLoader = load_pyautogui,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.screenshots_dir = Path(screenshots_dir).expanduser()
        self.gui_loader = gui_loader

    def run(self, action: ScreenshotAction) -> CommandResult:
        # Only the base name is honoured so captures never leave the directory.
        if action.filename:
            filename = screenshot_basename(action.filename)
            if not filename:
                return self._failed(f"screenshot: {action.filename}", INVALID_SCREENSHOT_FILENAME)
        else:
            filename = _default_filename()
        file_path = (self.screenshots_dir / filename).resolve()
        description = f"screenshot: {filename}"

        try:
            self.screenshots_dir.mkdir(parents=True, exist_ok=True)
            gui = self.gui_loader()
            gui.screenshot(str(file_path))
        except Exception as exc:  # noqa: BLE001
            return self._failed(description, exc)

        if not file_path.exists():
            return self._failed(description, "Screenshot file was not created")
        return self._succeeded(description, str(file_path))


def _default_filename() -> str:
    return f"screenshot-{int(time.time() * 1000)}.png"

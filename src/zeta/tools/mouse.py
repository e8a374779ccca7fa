"""Pointer control tool."""

from __future__ import annotations

import logging

from zeta.agent.models import CommandResult

from .actions import MouseAction
from .base import DesktopTool, GuiLoader, load_pyautogui


class MouseTool(DesktopTool[MouseAction]):
    tool_name = "mouse_click"

    def __init__(
        self,
        *,
        gui_loader: GuiLoader = load_pyautogui,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.gui_loader = gui_loader

    def run(self, action: MouseAction) -> CommandResult:
        try:
            gui = self.gui_loader()
            if action.action == "move":
                gui.moveTo(action.x, action.y)
            else:
                gui.click(x=action.x, y=action.y)
        except Exception as exc:  # noqa: BLE001
            return self._failed(action.description, exc)
        return self._succeeded(
            action.description, f"Performed {action.action} at ({action.x}, {action.y})"
        )

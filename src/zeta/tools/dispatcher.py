"""Route planner-selected actions to the shell or a named tool."""

from __future__ import annotations

import logging
from pathlib import Path

from zeta.agent.models import CommandResult, ToolAction
from zeta.config import ExecutionSettings
from zeta.shell import ShellAdapter

from .actions import (
    ActionValidationError,
    KeyboardAction,
    MouseAction,
    OpenUrlAction,
    ScreenshotAction,
    ShellAction,
    TypedAction,
    UnknownTool,
    parse_tool_action,
)
from .keyboard import KeyboardTool
from .mouse import MouseTool
from .open_app import OpenAppTool
from .open_url import OpenUrlTool
from .screenshot import ScreenshotTool

LOGGER = logging.getLogger(__name__)


class ActionDispatcher:
    """Turns one plan action into a ``CommandResult`` without raising."""

    def __init__(
        self,
        *,
        shell: ShellAdapter,
        screenshots_dir: str | Path,
        settings: ExecutionSettings | None = None,
        screenshot_tool: ScreenshotTool | None = None,
        mouse_tool: MouseTool | None = None,
        keyboard_tool: KeyboardTool | None = None,
        open_url_tool: OpenUrlTool | None = None,
        open_app_tool: OpenAppTool | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.shell = shell
        self.settings = settings or ExecutionSettings()
        self.logger = logger or LOGGER
        self.screenshot_tool = screenshot_tool or ScreenshotTool(screenshots_dir, logger=logger)
        self.mouse_tool = mouse_tool or MouseTool(logger=logger)
        self.keyboard_tool = keyboard_tool or KeyboardTool(logger=logger)
        self.open_url_tool = open_url_tool or OpenUrlTool(logger=logger)
        self.open_app_tool = open_app_tool or OpenAppTool(logger=logger)

    def dispatch(
        self,
        command: str,
        tool: ToolAction | None,
        settings: ExecutionSettings | None = None,
    ) -> CommandResult:
        """Run one action; ``settings`` overrides the defaults for this call."""
        run_settings = settings or self.settings
        if tool is None:
            return self._run_shell(ShellAction(command=command), run_settings)

        self.logger.info("tool_dispatch", extra={"tool": tool.name, "params": tool.params})
        parsed = parse_tool_action(tool, command=command)
        if isinstance(parsed, UnknownTool):
            return CommandResult.failure(
                f"unknown tool: {parsed.name}", f"Unknown tool: {parsed.name}"
            )
        if isinstance(parsed, ActionValidationError):
            self.logger.warning(
                "tool_validation_failed",
                extra={"tool": tool.name, "error": parsed.message},
            )
            return CommandResult.failure(parsed.description, parsed.message)

        try:
            return self._run_typed(parsed, run_settings)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("tool_dispatch_error", extra={"tool": tool.name})
            return CommandResult.failure(tool.name, str(exc) or exc.__class__.__name__)

    def _run_typed(self, action: TypedAction, settings: ExecutionSettings) -> CommandResult:
        if isinstance(action, ShellAction):
            return self._run_shell(action, settings)
        if isinstance(action, ScreenshotAction):
            return self.screenshot_tool.run(action)
        if isinstance(action, MouseAction):
            return self.mouse_tool.run(action)
        if isinstance(action, KeyboardAction):
            return self.keyboard_tool.run(action)
        if isinstance(action, OpenUrlAction):
            return self.open_url_tool.run(action)
        return self.open_app_tool.run(action)

    def _run_shell(self, action: ShellAction, settings: ExecutionSettings) -> CommandResult:
        return self.shell.execute(
            action.command,
            timeout=settings.command_timeout_ms / 1000,
            max_output_length=settings.max_output_length,
        )

"""Typed tool actions validated at the dispatch boundary."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from zeta.agent.models import ToolAction

MouseActionKind = Literal["click", "move"]
MOUSE_ACTIONS: frozenset[str] = frozenset({"click", "move"})
INVALID_SCREENSHOT_FILENAME = "Invalid screenshot filename"


@dataclass(frozen=True, slots=True)
class ShellAction:
    command: str


@dataclass(frozen=True, slots=True)
class ScreenshotAction:
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class MouseAction:
    x: float
    y: float
    action: MouseActionKind = "click"

    @property
    def description(self) -> str:
        return f"mouse_click: {self.action} at ({self.x}, {self.y})"


@dataclass(frozen=True, slots=True)
class KeyboardAction:
    text: str

    @property
    def description(self) -> str:
        return f'keyboard_type: "{self.text[:50]}"'


@dataclass(frozen=True, slots=True)
class OpenUrlAction:
    url: str

    @property
    def description(self) -> str:
        return f"open_url: {self.url}"


@dataclass(frozen=True, slots=True)
class OpenAppAction:
    app: str

    @property
    def description(self) -> str:
        return f"open_app: {self.app}"


TypedAction = (
    ShellAction | ScreenshotAction | MouseAction | KeyboardAction | OpenUrlAction | OpenAppAction
)


@dataclass(frozen=True, slots=True)
class ActionValidationError:
    """Rejected tool action; no side effect may run for it."""

    description: str
    message: str


@dataclass(frozen=True, slots=True)
class UnknownTool:
    name: str


def parse_tool_action(
    tool: ToolAction, *, command: str = ""
) -> TypedAction | ActionValidationError | UnknownTool:
    """Convert a planner tool action into its typed variant."""
    params = tool.params
    if tool.name == "shell":
        shell_command = command or _string_param(params, "command")
        if not shell_command:
            return ActionValidationError(description="shell", message="Command is required")
        return ShellAction(command=shell_command)

    if tool.name == "screenshot":
        filename = _string_param(params, "filename").strip()
        if filename and not screenshot_basename(filename):
            return ActionValidationError(
                description=f"screenshot: {filename}", message=INVALID_SCREENSHOT_FILENAME
            )
        return ScreenshotAction(filename=filename or None)

    if tool.name == "mouse_click":
        x = _number_param(params, "x")
        y = _number_param(params, "y")
        action = params.get("action", "click")
        if x is None or y is None:
            return ActionValidationError(
                description=f"mouse_click: {action} at ({params.get('x')}, {params.get('y')})",
                message="x and y coordinates are required",
            )
        if action not in MOUSE_ACTIONS:
            return ActionValidationError(
                description=f"mouse_click: {action} at ({x}, {y})",
                message=f"Unsupported mouse action: {action} (expected click or move)",
            )
        return MouseAction(x=x, y=y, action=action)  # type: ignore[arg-type]

    if tool.name == "keyboard_type":
        text = _string_param(params, "text")
        if not text:
            return ActionValidationError(description='keyboard_type: ""', message="Text is required")
        return KeyboardAction(text=text)

    if tool.name == "open_url":
        url = _string_param(params, "url").strip()
        if not url:
            return ActionValidationError(description="open_url: ", message="URL is required")
        return OpenUrlAction(url=url)

    if tool.name == "open_app":
        app = _string_param(params, "app").strip()
        if not app:
            return ActionValidationError(description="open_app: ", message="App name is required")
        return OpenAppAction(app=app)

    return UnknownTool(name=tool.name)


def screenshot_basename(filename: str) -> str:
    """Return the bare file name to capture into, or "" when none is usable."""
    name = Path(filename.strip()).name
    return "" if name in ("", ".", "..") else name


def _string_param(params: dict[str, object], key: str) -> str:
    value = params.get(key)
    return value if isinstance(value, str) else ""


def _number_param(params: dict[str, object], key: str) -> float | None:
    value = params.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None

"""Action dispatch and the fixed set of desktop tools."""

from .actions import (
    ActionValidationError,
    KeyboardAction,
    MouseAction,
    OpenAppAction,
    OpenUrlAction,
    ScreenshotAction,
    ShellAction,
    UnknownTool,
    parse_tool_action,
)
from .base import load_pyautogui, with_permission_hint
from .dispatcher import ActionDispatcher
from .keyboard import KeyboardTool
from .mouse import MouseTool
from .open_app import OpenAppTool
from .open_url import OpenUrlTool
from .screenshot import ScreenshotTool

__all__ = [
    "ActionDispatcher",
    "ActionValidationError",
    "KeyboardAction",
    "KeyboardTool",
    "MouseAction",
    "MouseTool",
    "OpenAppAction",
    "OpenAppTool",
    "OpenUrlAction",
    "OpenUrlTool",
    "ScreenshotAction",
    "ScreenshotTool",
    "ShellAction",
    "UnknownTool",
    "load_pyautogui",
    "parse_tool_action",
    "with_permission_hint",
]

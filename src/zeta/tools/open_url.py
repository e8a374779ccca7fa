"""Open a URL with the default handler."""

from __future__ import annotations

import webbrowser

from zeta.agent.models import CommandResult

from .actions import OpenUrlAction
from .base import DesktopTool


class OpenUrlTool(DesktopTool[OpenUrlAction]):
    tool_name = "open_url"

    def run(self, action: OpenUrlAction) -> CommandResult:
        try:
            opened = webbrowser.open(action.url)
        except webbrowser.Error as exc:
            return self._failed(action.description, exc)
        if not opened:
            return self._failed(action.description, f"No handler available to open {action.url}")
        return self._succeeded(action.description, f"Opened {action.url}")

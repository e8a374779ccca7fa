"""Outbound message transport used to deliver replies and files."""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class MessageTransport(Protocol):
    async def send_reply(self, recipient: str, text: str) -> None: ...

    async def send_file(self, recipient: str, path: str) -> None: ...


class ConsoleTransport:
    """Writes replies to a text stream in place of a messaging session."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    async def send_reply(self, recipient: str, text: str) -> None:
        self.stream.write(f"[zeta -> {recipient}] {text}\n")
        self.stream.flush()

    async def send_file(self, recipient: str, path: str) -> None:
        self.stream.write(f"[zeta -> {recipient}] file: {path}\n")
        self.stream.flush()

"""Data models shared by the agent loop, planner, and action dispatcher."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal

ToolName = Literal[
    "shell",
    "screenshot",
    "mouse_click",
    "keyboard_type",
    "open_url",
    "open_app",
]
TOOL_NAMES: frozenset[str] = frozenset(
    {"shell", "screenshot", "mouse_click", "keyboard_type", "open_url", "open_app"}
)
Role = Literal["system", "user", "assistant"]
Message = dict[str, str]


@dataclass(slots=True)
class ToolAction:
    """A named side-effecting instruction as chosen by the planner."""

    name: str
    params: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {"tool": self.name, "params": dict(self.params)}


@dataclass(slots=True)
class Plan:
    """One planner decision for the current conversation state."""

    command: str = ""
    tool: ToolAction | None = None
    reasoning: str = ""
    reply: str = ""
    files: list[str] = field(default_factory=list)
    done: bool = False

    @property
    def has_action(self) -> bool:
        return bool(self.command) or self.tool is not None

    @property
    def is_terminal(self) -> bool:
        """Return true when the loop must stop on this plan."""
        if self.done:
            return True
        return not self.has_action

    def to_dict(self) -> dict[str, object]:
        return {
            "command": self.command,
            "tool": self.tool.to_dict() if self.tool else None,
            "reasoning": self.reasoning,
            "reply": self.reply,
            "files": list(self.files),
            "done": self.done,
        }


@dataclass(slots=True)
class CommandResult:
    """Uniform outcome of a shell command or a named tool."""

    command: str
    stdout: str
    stderr: str
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def failure(cls, command: str, stderr: str, *, stdout: str = "") -> CommandResult:
        return cls(command=command, stdout=stdout, stderr=stderr, exit_code=1)

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(slots=True)
class AgentResponse:
    """Final reply for one task plus any files produced along the way."""

    reply: str
    files: list[str] = field(default_factory=list)

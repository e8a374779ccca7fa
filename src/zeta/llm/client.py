"""Planner client that asks the reasoning model for the next action."""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib import request
from urllib.error import HTTPError, URLError

from zeta.agent.models import TOOL_NAMES, Message, Plan, ToolAction
from zeta.config import DEFAULT_API_URL, DEFAULT_MODEL

LOGGER = logging.getLogger(__name__)

DecodeKind = Literal["parsed", "degraded"]


class PlannerError(RuntimeError):
    """Raised when the planner cannot be reached or returns an unusable envelope."""


@dataclass(frozen=True, slots=True)
class PlanDecodeResult:
    """Outcome of decoding planner text: a parsed plan or a plain-text fallback."""

    kind: DecodeKind
    plan: Plan

    @property
    def degraded(self) -> bool:
        return self.kind == "degraded"


def build_system_prompt(working_directory: str | None = None) -> str:
    """Describe the machine and the response contract to the planner."""
    home = str(Path.home())
    cwd = working_directory or home
    return "\n".join(
        [
            "You are Zeta, an AI operator that controls this computer on behalf of the user.",
            "",
            "Environment:",
            f"- OS: {platform.system()} {platform.release()} ({platform.machine()})",
            f"- os_name: {os.name}",
            "- Shell: /bin/bash",
            f"- Home directory: {home}",
            f"- Working directory: {cwd}",
            "",
            "Work iteratively: choose exactly ONE action per response, observe its result",
            "in the next message, then decide the next action.",
            "",
            "Always return a single JSON object with this exact shape:",
            "{",
            '  "command": "shell command to run, or empty string",',
            '  "tool": null or {"tool": "<name>", "params": {...}},',
            '  "reasoning": "why this action moves the request forward",',
            '  "reply": "final message for the user, empty while more work is needed",',
            '  "files": ["absolute paths of files to send to the user"],',
            '  "done": false',
            "}",
            "",
            "Tools (use instead of a shell command when appropriate):",
            '- screenshot: {"filename"?: string} captures the screen; the file is sent'
            " automatically.",
            '- mouse_click: {"x": number, "y": number, "action"?: "click" | "move"}',
            '- keyboard_type: {"text": string} types into the focused window.',
            '- open_url: {"url": string} opens a URL in the default browser.',
            '- open_app: {"app": string} launches an application by name.',
            '- shell: {"command": string} same as setting "command".',
            "",
            "Rules:",
            "- Commands run in /bin/bash from the working directory; use absolute paths.",
            "- Prefer read-only commands unless the user explicitly asks for a change.",
            "- Never use sudo unless explicitly requested.",
            '- When the request is answered, set "done": true and put the answer in "reply".',
            "- For greetings or simple questions, reply directly with no command and no tool.",
            "- Do not ask follow-up questions; you are a task executor, not a chatbot.",
        ]
    )


def decode_plan(raw: str) -> PlanDecodeResult:
    """Decode planner text into a plan, degrading to a terminal plain-text reply."""
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        parsed = None
    if not isinstance(parsed, dict):
        return PlanDecodeResult(
            kind="degraded",
            plan=Plan(command="", tool=None, reasoning="", reply=raw, files=[], done=True),
        )
    return PlanDecodeResult(kind="parsed", plan=_to_plan(parsed))


def _to_plan(parsed: dict[str, object]) -> Plan:
    command = parsed.get("command")
    reasoning = parsed.get("reasoning")
    reply = parsed.get("reply")
    files = parsed.get("files")
    done = parsed.get("done", False)

    return Plan(
        command=command.strip() if isinstance(command, str) else "",
        tool=_to_tool_action(parsed.get("tool")),
        reasoning=reasoning if isinstance(reasoning, str) else "",
        reply=reply if isinstance(reply, str) else "",
        files=[item for item in files if isinstance(item, str) and item]
        if isinstance(files, list)
        else [],
        done=done if isinstance(done, bool) else False,
    )


def _to_tool_action(value: object) -> ToolAction | None:
    if not isinstance(value, dict):
        return None
    name = value.get("tool")
    if not isinstance(name, str) or not name.strip():
        return None
    params = value.get("params")
    normalized_params = (
        {str(key): item for key, item in params.items()} if isinstance(params, dict) else {}
    )
    normalized_name = name.strip()
    if normalized_name not in TOOL_NAMES:
        LOGGER.warning("planner_unknown_tool", extra={"tool": normalized_name})
    return ToolAction(name=normalized_name, params=normalized_params)


class PlannerClient:
    """Small HTTP client for chat-completions planner calls."""

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 120.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout = timeout
        self.logger = logger or LOGGER

    def next_plan(self, messages: list[Message]) -> Plan:
        raw = self.complete(messages)
        self.logger.debug("planner_raw_response", extra={"raw_response": raw})
        decoded = decode_plan(raw)
        if decoded.degraded:
            self.logger.warning(
                "planner_output_degraded",
                extra={"response_excerpt": raw[:200]},
            )
        return decoded.plan

    def complete(self, messages: list[Message]) -> str:
        """Send the conversation and return the assistant message text."""
        payload = self._build_payload(messages)
        body = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        self.logger.debug(
            "planner_request_prepared",
            extra={
                "api_url": self.api_url,
                "model": self.model,
                "payload_bytes": len(body),
                "turns": len(messages),
            },
        )

        req = request.Request(self.api_url, data=body, headers=headers, method="POST")
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:  # noqa: S310
                raw_response = json.loads(resp.read().decode("utf-8"))
        except HTTPError as exc:
            body_excerpt = self._read_error_body_excerpt(exc)
            self.logger.error(
                "planner_request_http_error",
                extra={
                    "api_url": self.api_url,
                    "model": self.model,
                    "http_status": exc.code,
                    "reason": exc.reason,
                    "response_excerpt": body_excerpt,
                },
            )
            details = f"Planner request failed with HTTP {exc.code}: {exc.reason}"
            if body_excerpt:
                details = f"{details}. Response body: {body_excerpt}"
            raise PlannerError(details) from exc
        except URLError as exc:
            self.logger.error(
                "planner_request_transport_error",
                extra={"api_url": self.api_url, "reason": str(exc.reason)},
            )
            raise PlannerError(f"Planner request transport error: {exc.reason}") from exc
        except TimeoutError as exc:
            self.logger.error(
                "planner_request_timeout",
                extra={"api_url": self.api_url, "timeout_seconds": self.timeout},
            )
            raise PlannerError(f"Planner request timed out after {self.timeout:.1f}s") from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PlannerError(f"Planner response envelope parsing error: {exc}") from exc

        return self._extract_content(raw_response)

    def _build_payload(self, messages: list[Message]) -> dict[str, object]:
        return {
            "model": self.model,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": message["role"], "content": message["content"]} for message in messages
            ],
        }

    @staticmethod
    def _extract_content(payload: object) -> str:
        if not isinstance(payload, dict):
            raise PlannerError("Planner response envelope is not an object")
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise PlannerError("Planner response contained no choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            return "{}"
        return content

    @staticmethod
    def _read_error_body_excerpt(exc: HTTPError, *, max_chars: int = 500) -> str | None:
        if exc.fp is None:
            return None
        try:
            raw = exc.read()
        except OSError:
            return None

        if not raw:
            return None

        excerpt = raw.decode("utf-8", errors="replace").replace("\n", " ").strip()
        if len(excerpt) > max_chars:
            return f"{excerpt[:max_chars]}..."
        return excerpt

"""Plan/dispatch/observe loop that turns one request into a reply."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from zeta.agent.models import AgentResponse, CommandResult, Message, Plan, ToolAction
from zeta.config import ExecutionSettings, load_settings
from zeta.llm.client import build_system_prompt

LOGGER = logging.getLogger(__name__)

DEFAULT_REPLY = "Done."
MAX_ITERATIONS_REPLY = "Done (max iterations reached)."
MAX_ITERATIONS_INSTRUCTION = (
    "Max iterations reached. Summarise everything you have so far into a final reply. "
    'Set "done": true.'
)
NO_OUTPUT = "(no output)"


class Planner(Protocol):
    def next_plan(self, messages: list[Message]) -> Plan: ...


class Dispatcher(Protocol):
    def dispatch(
        self,
        command: str,
        tool: ToolAction | None,
        settings: ExecutionSettings | None = None,
    ) -> CommandResult: ...


class AgentLoop:
    """Runs the plan/dispatch/observe cycle for a single task.

    With ``settings_path`` set, execution settings are re-read from disk at the
    start of every run and that snapshot is used for the whole run, including
    each dispatched action. Otherwise the fixed ``settings`` apply.
    """

    def __init__(
        self,
        *,
        planner: Planner,
        dispatcher: Dispatcher,
        settings: ExecutionSettings | None = None,
        settings_path: str | Path | None = None,
        system_prompt: str | None = None,
        working_directory: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.planner = planner
        self.dispatcher = dispatcher
        self.settings = settings or ExecutionSettings()
        self.settings_path = settings_path
        self.system_prompt = system_prompt or build_system_prompt(working_directory)
        self.logger = logger or LOGGER

    async def load_run_settings(self) -> ExecutionSettings:
        if self.settings_path is None:
            return self.settings
        return await asyncio.to_thread(load_settings, self.settings_path)

    async def run(self, message: str, previous_context: str | None = None) -> AgentResponse:
        settings = await self.load_run_settings()
        max_iterations = settings.max_iterations
        self.logger.info(
            "agent_run_started",
            extra={"request": message[:80], "max_iterations": max_iterations},
        )
        messages = self._initial_messages(message, previous_context)
        files: list[str] = []

        for iteration in range(1, max_iterations + 1):
            plan = await asyncio.to_thread(self.planner.next_plan, messages)
            self.logger.info(
                "agent_plan",
                extra={
                    "iteration": iteration,
                    "reasoning": plan.reasoning,
                    "command": plan.command,
                    "tool": plan.tool.name if plan.tool else None,
                    "done": plan.done,
                },
            )
            _add_files(files, plan.files)
            messages.append({"role": "assistant", "content": json.dumps(plan.to_dict())})

            if plan.is_terminal:
                self.logger.info(
                    "agent_finished",
                    extra={"iteration": iteration, "reply_excerpt": plan.reply[:100]},
                )
                return AgentResponse(reply=plan.reply or DEFAULT_REPLY, files=files)

            result = await asyncio.to_thread(
                self.dispatcher.dispatch, plan.command, plan.tool, settings
            )
            if _is_screenshot(plan.tool) and result.succeeded and result.stdout:
                _add_files(files, [result.stdout])

            summary = self._format_result(result)
            self.logger.info("agent_action_result", extra={"iteration": iteration, "summary": summary})
            messages.append({"role": "user", "content": f"Action result:\n{summary}"})

        self.logger.warning("agent_max_iterations_reached", extra={"max_iterations": max_iterations})
        messages.append({"role": "user", "content": MAX_ITERATIONS_INSTRUCTION})
        final_plan = await asyncio.to_thread(self.planner.next_plan, messages)
        _add_files(files, final_plan.files)
        return AgentResponse(reply=final_plan.reply or MAX_ITERATIONS_REPLY, files=files)

    def _initial_messages(self, message: str, previous_context: str | None) -> list[Message]:
        messages: list[Message] = [{"role": "system", "content": self.system_prompt}]
        if previous_context:
            messages.append(
                {"role": "user", "content": f"Previous task context:\n{previous_context}"}
            )
        messages.append({"role": "user", "content": message})
        return messages

    @staticmethod
    def _format_result(result: CommandResult) -> str:
        status = "✓" if result.succeeded else "✗"
        output = result.stdout or result.stderr or NO_OUTPUT
        return f"{status} {result.command}\n{output}"


def _is_screenshot(tool: ToolAction | None) -> bool:
    return tool is not None and tool.name == "screenshot"


def _add_files(files: list[str], new_files: list[str]) -> None:
    for path in new_files:
        if path not in files:
            files.append(path)

"""Command-line interface for zeta."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import cast

from .agent.loop import AgentLoop
from .config import AppConfig, ExecutionSettings, load_settings
from .llm.client import PlannerClient
from .logs import LoggingState, configure_logging, reset_logging
from .shell import create_shell_adapter
from .tasks import Task, TaskProcessor, TaskQueue
from .tools import ActionDispatcher
from .transport import ConsoleTransport, MessageTransport

VERSION = "0.1.0"
CONSOLE_SENDER = "console"
EXIT_WORDS = {"exit", "quit"}

LOGGER = logging.getLogger(__name__)


class CLIArgs(argparse.Namespace):
    message: str | None
    api_key: str | None
    working_directory: str | None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zeta",
        description="Zeta assistant: a local AI operator for your computer",
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        help="OpenAI API key. Can also be set via OPEN_AI_API_KEY or ZETA_OPENAI_API_KEY.",
    )
    parser.add_argument(
        "--cwd",
        dest="working_directory",
        help=(
            "Override the working directory for shell commands. "
            "Takes precedence over config/env cwd values."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "message",
        nargs="?",
        help="Run a single request and exit; without it, requests are read from stdin",
    )
    return parser


def build_processor(loop: AgentLoop, transport: MessageTransport) -> TaskProcessor:
    """Wrap the agent loop as a queue processor that delivers its output."""

    async def process(task: Task) -> str:
        response = await loop.run(task.message, task.previous_context or None)
        await transport.send_reply(task.sender, response.reply)
        for path in response.files:
            await transport.send_file(task.sender, path)
        return response.reply

    return process


def build_agent_loop(
    config: AppConfig,
    settings: ExecutionSettings,
    *,
    api_key: str,
    logger: logging.Logger,
) -> AgentLoop:
    planner = PlannerClient(
        api_key=api_key,
        model=config.model,
        api_url=config.api_url,
        logger=logger.getChild("planner"),
    )
    dispatcher = ActionDispatcher(
        shell=create_shell_adapter(
            "bash",
            working_directory=config.working_directory,
            logger=logger.getChild("shell"),
        ),
        settings=settings,
        screenshots_dir=config.screenshots_dir,
        logger=logger.getChild("tools"),
    )
    return AgentLoop(
        planner=planner,
        dispatcher=dispatcher,
        settings=settings,
        settings_path=config.settings_path,
        working_directory=config.working_directory,
        logger=logger.getChild("agent"),
    )


def main() -> int:
    parser = build_parser()
    args = cast(CLIArgs, parser.parse_args())
    config = AppConfig.from_env()

    api_key = args.api_key or config.api_key
    if not api_key:
        print("Missing OpenAI API key. Pass --api-key or set OPEN_AI_API_KEY.")
        return 1

    configured_working_directory = (
        args.working_directory if args.working_directory is not None else config.working_directory
    )
    resolved_working_directory = Path(configured_working_directory).expanduser().resolve()
    if not resolved_working_directory.exists() or not resolved_working_directory.is_dir():
        print(f"Invalid configured cwd directory: {configured_working_directory}")
        return 1
    config.working_directory = str(resolved_working_directory)

    config.ensure_directories()
    logging_state = LoggingState()
    logger = configure_logging(logging_state, level=config.log_level, logs_dir=config.logs_dir)
    logger.info("zeta_starting", extra={"version": VERSION, "home_dir": config.home_dir})
    try:
        # Creates settings.json on first start; each task re-reads it.
        settings = load_settings(config.settings_path)
        loop = build_agent_loop(config, settings, api_key=api_key, logger=logger)
        return asyncio.run(
            _serve(config, loop, message=args.message, logger=logger)
        )
    except KeyboardInterrupt:
        logger.info("zeta_interrupted")
        return 130
    finally:
        reset_logging(logging_state)


async def _serve(
    config: AppConfig,
    loop: AgentLoop,
    *,
    message: str | None,
    logger: logging.Logger,
) -> int:
    queue = await TaskQueue.open(config.db_path, logger=logger.getChild("tasks"))
    try:
        queue.set_processor(build_processor(loop, ConsoleTransport()))
        if message:
            await queue.enqueue(CONSOLE_SENDER, message)
        else:
            while (line := await asyncio.to_thread(_read_request)) is not None:
                if line:
                    await queue.enqueue(CONSOLE_SENDER, line)
        await queue.join()
        return 0
    finally:
        await queue.close()


def _read_request() -> str | None:
    """Read one request line from stdin; ``None`` ends the session."""
    line = sys.stdin.readline()
    if not line:
        return None
    request = line.strip()
    if request.lower() in EXIT_WORDS:
        return None
    return request


if __name__ == "__main__":
    raise SystemExit(main())

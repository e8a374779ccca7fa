from __future__ import annotations

import io
from pathlib import Path

import pytest

from zeta import cli
from zeta.agent.models import AgentResponse
from zeta.config import DEFAULT_API_URL, DEFAULT_MODEL, AppConfig
from zeta.tasks import Task
from zeta.transport import ConsoleTransport


def _fake_config(tmp_path: Path, *, api_key: str | None = "sk-test") -> AppConfig:
    return AppConfig(
        api_key=api_key,
        model=DEFAULT_MODEL,
        api_url=DEFAULT_API_URL,
        home_dir=str(tmp_path / "home"),
        working_directory=str(tmp_path),
        log_level="INFO",
    )


def _task(message: str, previous_context: str = "") -> Task:
    return Task(
        id=1,
        sender="+15550001111",
        message=message,
        status="running",
        previous_context=previous_context,
        result="",
        created_at="2026-01-01 00:00:00",
    )


class FakeLoop:
    def __init__(self, response: AgentResponse) -> None:
        self.response = response
        self.calls: list[tuple[str, str | None]] = []

    async def run(self, message: str, previous_context: str | None = None) -> AgentResponse:
        self.calls.append((message, previous_context))
        return self.response


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    async def send_reply(self, recipient: str, text: str) -> None:
        self.sent.append(("reply", recipient, text))

    async def send_file(self, recipient: str, path: str) -> None:
        self.sent.append(("file", recipient, path))


def _patch_config(monkeypatch: pytest.MonkeyPatch, config: AppConfig) -> None:
    monkeypatch.setattr(
        cli,
        "AppConfig",
        type("FakeConfig", (), {"from_env": staticmethod(lambda: config)}),
    )


def test_parser_defaults() -> None:
    args = cli.build_parser().parse_args([])
    assert args.message is None
    assert args.api_key is None
    assert args.working_directory is None


def test_parser_accepts_options() -> None:
    args = cli.build_parser().parse_args(
        ["--api-key", "sk-cli", "--cwd", "./sandbox", "check disk space"]
    )

    assert args.api_key == "sk-cli"
    assert args.working_directory == "./sandbox"
    assert args.message == "check disk space"


def test_main_requires_api_key(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr("sys.argv", ["zeta", "hi"])
    _patch_config(monkeypatch, _fake_config(tmp_path, api_key=None))

    assert cli.main() == 1
    assert "Missing OpenAI API key" in capsys.readouterr().out


def test_main_rejects_invalid_cwd_from_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr("sys.argv", ["zeta", "hi"])
    config = _fake_config(tmp_path)
    config.working_directory = str(tmp_path / "definitely-missing-dir")
    _patch_config(monkeypatch, config)

    assert cli.main() == 1
    assert "Invalid configured cwd directory" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_processor_sends_reply_then_files() -> None:
    loop = FakeLoop(AgentResponse(reply="Here it is", files=["/tmp/shot.png"]))
    transport = FakeTransport()
    processor = cli.build_processor(loop, transport)

    result = await processor(_task("show my screen", "Disk is 40% full"))

    assert result == "Here it is"
    assert loop.calls == [("show my screen", "Disk is 40% full")]
    assert transport.sent == [
        ("reply", "+15550001111", "Here it is"),
        ("file", "+15550001111", "/tmp/shot.png"),
    ]


@pytest.mark.asyncio
async def test_processor_passes_no_context_for_first_task() -> None:
    loop = FakeLoop(AgentResponse(reply="Hello!"))
    processor = cli.build_processor(loop, FakeTransport())

    await processor(_task("hi"))

    assert loop.calls == [("hi", None)]


@pytest.mark.asyncio
async def test_console_transport_writes_lines() -> None:
    stream = io.StringIO()
    transport = ConsoleTransport(stream)

    await transport.send_reply("console", "Hello!")
    await transport.send_file("console", "/tmp/a.png")

    assert stream.getvalue() == "[zeta -> console] Hello!\n[zeta -> console] file: /tmp/a.png\n"


def test_main_runs_single_message(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    override_dir = tmp_path / "override"
    override_dir.mkdir()
    monkeypatch.setattr("sys.argv", ["zeta", "--cwd", str(override_dir), "hi"])
    config = _fake_config(tmp_path)
    _patch_config(monkeypatch, config)

    captured: dict[str, object] = {}
    loop = FakeLoop(AgentResponse(reply="Hello!"))

    def fake_build_agent_loop(config_arg, settings, *, api_key, logger):
        captured["working_directory"] = config_arg.working_directory
        captured["api_key"] = api_key
        captured["settings"] = settings
        return loop

    monkeypatch.setattr(cli, "build_agent_loop", fake_build_agent_loop)

    assert cli.main() == 0
    assert loop.calls == [("hi", None)]
    assert captured["working_directory"] == str(override_dir.resolve())
    assert captured["api_key"] == "sk-test"
    assert "[zeta -> console] Hello!" in capsys.readouterr().out
    assert config.settings_path.exists()
    assert config.db_path.exists()
    assert (config.logs_dir / "zeta.log").exists()


def test_main_reads_requests_from_stdin(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr("sys.argv", ["zeta", "--api-key", "sk-cli"])
    monkeypatch.setattr("sys.stdin", io.StringIO("first\n\nsecond\nquit\nignored\n"))
    _patch_config(monkeypatch, _fake_config(tmp_path, api_key=None))
    loop = FakeLoop(AgentResponse(reply="ok"))
    monkeypatch.setattr(cli, "build_agent_loop", lambda *_a, **_k: loop)

    assert cli.main() == 0
    assert [call[0] for call in loop.calls] == ["first", "second"]
    assert loop.calls[1][1] == "ok"
    assert capsys.readouterr().out.count("[zeta -> console] ok") == 2

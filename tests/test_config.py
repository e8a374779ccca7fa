import json
from pathlib import Path

import pytest

from zeta.config import (
    DEFAULT_API_URL,
    DEFAULT_MODEL,
    AppConfig,
    ExecutionSettings,
    load_settings,
)

ENV_VARS = (
    "ZETA_CONFIG_FILE",
    "ZETA_OPENAI_API_KEY",
    "OPEN_AI_API_KEY",
    "ZETA_MODEL",
    "ZETA_API_URL",
    "ZETA_HOME",
    "ZETA_CWD",
    "ZETA_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_settings_creates_file_with_defaults(tmp_path) -> None:
    settings_path = tmp_path / "home" / "settings.json"

    settings = load_settings(settings_path)

    assert settings == ExecutionSettings(
        max_iterations=10, command_timeout_ms=30000, max_output_length=4000
    )
    assert json.loads(settings_path.read_text(encoding="utf-8")) == {
        "maxIterations": 10,
        "commandTimeoutMs": 30000,
        "maxOutputLength": 4000,
    }


def test_load_settings_reads_existing_values(tmp_path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"maxIterations": 3, "commandTimeoutMs": 500, "maxOutputLength": 80}),
        encoding="utf-8",
    )

    settings = load_settings(settings_path)

    assert settings.max_iterations == 3
    assert settings.command_timeout_ms == 500
    assert settings.max_output_length == 80


def test_invalid_fields_fall_back_individually(tmp_path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"maxIterations": -2, "commandTimeoutMs": "15000", "maxOutputLength": True}),
        encoding="utf-8",
    )

    settings = load_settings(settings_path)

    assert settings.max_iterations == 10
    assert settings.command_timeout_ms == 15000
    assert settings.max_output_length == 4000


def test_unreadable_settings_use_defaults_without_overwriting(tmp_path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")

    settings = load_settings(settings_path)

    assert settings == ExecutionSettings()
    assert settings_path.read_text(encoding="utf-8") == "{not json"


def test_app_config_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = AppConfig.from_env()

    assert config.api_key is None
    assert config.model == DEFAULT_MODEL
    assert config.api_url == DEFAULT_API_URL
    assert config.home_dir == str(Path("~/.zeta").expanduser())
    assert config.working_directory == str(Path.home())
    assert config.log_level == "INFO"


def test_app_config_loads_from_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "zeta.config.json"
    config_path.write_text(
        json.dumps(
            {
                "openai": {"api_key": "file-key", "api_url": "https://example.invalid/v1"},
                "model": "gpt-4.1-mini",
                "home_dir": str(tmp_path / "zeta-home"),
                "cwd": str(tmp_path),
                "log_level": "debug",
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("ZETA_CONFIG_FILE", str(config_path))

    config = AppConfig.from_env()

    assert config.api_key == "file-key"
    assert config.api_url == "https://example.invalid/v1"
    assert config.model == "gpt-4.1-mini"
    assert config.home_dir == str(tmp_path / "zeta-home")
    assert config.working_directory == str(tmp_path)
    assert config.log_level == "DEBUG"
    assert config.db_path == tmp_path / "zeta-home" / "tasks.db"
    assert config.settings_path == tmp_path / "zeta-home" / "settings.json"


def test_env_overrides_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "zeta.config.json"
    config_path.write_text(
        json.dumps({"openai": {"api_key": "file-key"}, "model": "gpt-4.1-mini"}),
        encoding="utf-8",
    )
    monkeypatch.setenv("ZETA_CONFIG_FILE", str(config_path))
    monkeypatch.setenv("OPEN_AI_API_KEY", "env-key")
    monkeypatch.setenv("ZETA_MODEL", "o3")
    monkeypatch.setenv("ZETA_HOME", str(tmp_path / "env-home"))

    config = AppConfig.from_env()

    assert config.api_key == "env-key"
    assert config.model == "o3"
    assert config.home_dir == str(tmp_path / "env-home")


def test_prefixed_api_key_wins(monkeypatch) -> None:
    monkeypatch.setenv("OPEN_AI_API_KEY", "generic")
    monkeypatch.setenv("ZETA_OPENAI_API_KEY", "prefixed")

    assert AppConfig.from_env().api_key == "prefixed"


def test_local_config_auto_loaded_without_env_override(tmp_path, monkeypatch) -> None:
    (tmp_path / "zeta.config.json").write_text(
        json.dumps(
            {
                "model": "gpt-4.1-mini",
                "openai": {"api_url": "https://example.invalid/base", "api_key": "base-key"},
            }
        ),
        encoding="utf-8",
    )
    (tmp_path / "zeta.config.local.json").write_text(
        json.dumps({"openai": {"api_key": "local-key"}}),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    config = AppConfig.from_env()

    assert config.api_key == "local-key"
    assert config.api_url == "https://example.invalid/base"
    assert config.model == "gpt-4.1-mini"


def test_explicit_config_file_disables_local_auto_merge(tmp_path, monkeypatch) -> None:
    explicit_path = tmp_path / "custom.config.json"
    explicit_path.write_text(json.dumps({"model": "o3"}), encoding="utf-8")
    (tmp_path / "zeta.config.local.json").write_text(
        json.dumps({"model": "gpt-4.1-mini"}),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ZETA_CONFIG_FILE", str(explicit_path))

    assert AppConfig.from_env().model == "o3"


def test_ensure_directories(tmp_path) -> None:
    config = AppConfig(
        api_key=None,
        model=DEFAULT_MODEL,
        api_url=DEFAULT_API_URL,
        home_dir=str(tmp_path / "home"),
        working_directory=str(tmp_path),
        log_level="INFO",
    )

    config.ensure_directories()

    assert config.logs_dir.is_dir()
    assert config.screenshots_dir.is_dir()

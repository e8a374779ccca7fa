"""Environment-backed application configuration and execution settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "o3-mini"
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_HOME_DIR = "~/.zeta"

DEFAULT_MAX_ITERATIONS = 10
DEFAULT_COMMAND_TIMEOUT_MS = 30_000
DEFAULT_MAX_OUTPUT_LENGTH = 4_000


@dataclass(frozen=True, slots=True)
class ExecutionSettings:
    """Per-run limits consumed by the agent loop and the command executor."""

    max_iterations: int = DEFAULT_MAX_ITERATIONS
    command_timeout_ms: int = DEFAULT_COMMAND_TIMEOUT_MS
    max_output_length: int = DEFAULT_MAX_OUTPUT_LENGTH

    @classmethod
    def from_mapping(cls, raw: dict[str, object]) -> ExecutionSettings:
        """Build settings where each invalid field falls back on its own."""
        return cls(
            max_iterations=_to_positive_int(
                raw.get("maxIterations"), default=DEFAULT_MAX_ITERATIONS
            ),
            command_timeout_ms=_to_positive_int(
                raw.get("commandTimeoutMs"), default=DEFAULT_COMMAND_TIMEOUT_MS
            ),
            max_output_length=_to_positive_int(
                raw.get("maxOutputLength"), default=DEFAULT_MAX_OUTPUT_LENGTH
            ),
        )

    def to_mapping(self) -> dict[str, int]:
        return {
            "maxIterations": self.max_iterations,
            "commandTimeoutMs": self.command_timeout_ms,
            "maxOutputLength": self.max_output_length,
        }


def load_settings(path: str | Path) -> ExecutionSettings:
    """Read settings from disk, creating the file with defaults when missing."""
    settings_path = Path(path)
    if not settings_path.exists():
        defaults = ExecutionSettings()
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(
            json.dumps(defaults.to_mapping(), indent=2) + "\n", encoding="utf-8"
        )
        LOGGER.info("settings_created", extra={"path": str(settings_path)})
        return defaults

    raw = _load_file_config(str(settings_path))
    if not raw:
        LOGGER.warning("settings_unreadable", extra={"path": str(settings_path)})
    settings = ExecutionSettings.from_mapping(raw)
    LOGGER.info("settings_loaded", extra={"path": str(settings_path), **settings.to_mapping()})
    return settings


@dataclass(slots=True)
class AppConfig:
    """Runtime settings loaded from environment variables and config files."""

    api_key: str | None
    model: str
    api_url: str
    home_dir: str
    working_directory: str
    log_level: str

    @property
    def logs_dir(self) -> Path:
        return Path(self.home_dir) / "logs"

    @property
    def db_path(self) -> Path:
        return Path(self.home_dir) / "tasks.db"

    @property
    def settings_path(self) -> Path:
        return Path(self.home_dir) / "settings.json"

    @property
    def screenshots_dir(self) -> Path:
        return Path(self.home_dir) / "screenshots"

    def ensure_directories(self) -> None:
        for directory in (Path(self.home_dir), self.logs_dir, self.screenshots_dir):
            directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> AppConfig:
        file_config = _load_preferred_file_config()
        openai_from_file = file_config.get("openai")
        openai_config = openai_from_file if isinstance(openai_from_file, dict) else {}

        home_dir = (
            os.getenv("ZETA_HOME")
            or _to_optional_string(file_config.get("home_dir"))
            or DEFAULT_HOME_DIR
        )
        return cls(
            api_key=(
                os.getenv("ZETA_OPENAI_API_KEY")
                or os.getenv("OPEN_AI_API_KEY")
                or _to_optional_string(openai_config.get("api_key"))
            ),
            model=(
                os.getenv("ZETA_MODEL")
                or _to_optional_string(file_config.get("model"))
                or DEFAULT_MODEL
            ),
            api_url=(
                os.getenv("ZETA_API_URL")
                or _to_optional_string(openai_config.get("api_url"))
                or DEFAULT_API_URL
            ),
            home_dir=str(Path(home_dir).expanduser()),
            working_directory=str(
                Path(
                    os.getenv("ZETA_CWD")
                    or _to_optional_string(file_config.get("cwd"))
                    or Path.home()
                ).expanduser()
            ),
            log_level=(
                os.getenv("ZETA_LOG_LEVEL")
                or _to_optional_string(file_config.get("log_level"))
                or "INFO"
            ).upper(),
        )


def _to_optional_string(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _load_file_config(path_value: str) -> dict[str, object]:
    path = Path(path_value)
    if not path.exists() or not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            parsed = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(parsed, dict):
        return parsed
    return {}


def _load_preferred_file_config() -> dict[str, object]:
    explicit_path = os.getenv("ZETA_CONFIG_FILE")
    if explicit_path:
        return _load_file_config(explicit_path)

    shared_config = _load_file_config("zeta.config.json")
    local_override = _load_file_config("zeta.config.local.json")
    return _merge_dicts(shared_config, local_override)


def _merge_dicts(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    merged: dict[str, object] = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _merge_dicts(base_value, value)
        else:
            merged[key] = value
    return merged


def _to_positive_int(value: object, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default

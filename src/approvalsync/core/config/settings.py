"""Process-wide settings, loaded once at startup."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from approvalsync.core.errors import ConfigError

MIN_POLL_MS = 8000
DEFAULT_POLL_MS = 25000

_REQUIRED_KEYS = ("BOT_TOKEN", "GUILD_ID", "ROLE_ID", "LOG_CHANNEL_ID", "API_BASE", "API_KEY")
_OPTIONAL_KEYS = (
    "POLL_MS",
    "DISCORD_API_BASE",
    "REPORT_FOOTER",
    "GRANT_REASON",
    "APPROVALSYNC_NOTIFIER",
    "APPROVALSYNC_STATE_DIR",
    "APPROVALSYNC_LOG_LEVEL",
    "APPROVALSYNC_LOG_TO_FILE",
    "APPROVALSYNC_LOG_DIR",
)
_FIELD_NAMES = {
    "APPROVALSYNC_NOTIFIER": "notifier",
    "APPROVALSYNC_STATE_DIR": "state_dir",
    "APPROVALSYNC_LOG_LEVEL": "log_level",
    "APPROVALSYNC_LOG_TO_FILE": "log_to_file",
    "APPROVALSYNC_LOG_DIR": "log_dir",
}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: str
    guild_id: str
    role_id: str
    log_channel_id: str
    api_base: str
    api_key: str
    poll_ms: int = DEFAULT_POLL_MS
    discord_api_base: str = "https://discord.com/api/v10"
    report_footer: str = "approvalsync"
    grant_reason: str = "Approved in panel (API)"
    notifier: str = "discord"
    state_dir: Path = Field(default_factory=lambda: Path.home() / ".approvalsync")
    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: Path | None = None

    @field_validator("api_base", "discord_api_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("state_dir")
    @classmethod
    def expand_state_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return normalized

    @property
    def log_path(self) -> Path:
        return (self.log_dir or self.state_dir / "logs").expanduser() / "approvalsync.log"

    @property
    def poll_interval_ms(self) -> int:
        return max(MIN_POLL_MS, self.poll_ms)

    @property
    def notifier_channels(self) -> list[str]:
        return [name.strip().casefold() for name in self.notifier.split(",") if name.strip()]


def _field_name(key: str) -> str:
    return _FIELD_NAMES.get(key, key.lower())


def _load_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return {str(key).upper(): value for key, value in data.items()}


def load_settings(env: Mapping[str, str] | None = None, config_file: str | Path | None = None) -> Settings:
    """Build settings from an optional YAML file overlaid by the environment.

    Raises ConfigError naming the first missing required key.
    """
    source = os.environ if env is None else env
    file_path = config_file or source.get("APPROVALSYNC_CONFIG_FILE")

    raw: dict[str, Any] = _load_file(Path(file_path)) if file_path else {}
    for key in (*_REQUIRED_KEYS, *_OPTIONAL_KEYS):
        value = source.get(key)
        if value not in (None, ""):
            raw[key] = value

    for key in _REQUIRED_KEYS:
        if raw.get(key) in (None, ""):
            raise ConfigError(f"missing required setting {key}")

    values = {_field_name(key): value for key, value in raw.items() if key in (*_REQUIRED_KEYS, *_OPTIONAL_KEYS)}
    for key in _REQUIRED_KEYS:
        values[_field_name(key)] = str(raw[key])
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc

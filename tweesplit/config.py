"""Configuration model and loaders for tweesplit.

Responsibilities:
- Define host runtime settings as a typed dataclass.
- Resolve the per-user state directory.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `TweesplitConfig`: normalized runtime settings for CLI commands.
- `ConfigLoader`: static construction helpers for `TweesplitConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import clean_text, parse_flag

_APP_DIR_NAME = "tweesplit"
_DEFAULT_LOG_LEVEL = "WARNING"
_DEFAULT_ARCHIVE_NAME = "export.zip"
_DEFAULT_STORY_EXTENSIONS = ("twee", "tw")
_SUPPORTED_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"})


def default_state_dir() -> Path:
    """Return the per-user directory holding persisted application state."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / _APP_DIR_NAME
        return Path.home() / _APP_DIR_NAME
    return Path.home() / ".config" / _APP_DIR_NAME


@dataclass(slots=True)
class TweesplitConfig:
    """Runtime configuration for CLI commands.

    Attributes:
        state_dir: Directory holding `state.json`.
        log_level: Minimum loguru level for stage logs.
        archive_name: Suggested file name for archive save prompts.
        story_extensions: Extensions offered by the story file prompt.
        remember_state: Whether successful exports update the saved state.
    """

    state_dir: Path = field(default_factory=default_state_dir)
    log_level: str = _DEFAULT_LOG_LEVEL
    archive_name: str = _DEFAULT_ARCHIVE_NAME
    story_extensions: tuple[str, ...] = _DEFAULT_STORY_EXTENSIONS
    remember_state: bool = True

    def validate(self) -> None:
        """Validate configuration values before use."""

        if self.log_level.upper() not in _SUPPORTED_LOG_LEVELS:
            supported = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(f"`log_level` must be one of: {supported}.")
        if not self.archive_name.strip():
            raise ValueError("`archive_name` must be a non-empty string.")
        if not self.story_extensions:
            raise ValueError("`story_extensions` must list at least one extension.")


class ConfigLoader:
    """Factory methods for creating `TweesplitConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "state_dir",
            "log_level",
            "archive_name",
            "story_extensions",
            "remember_state",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> TweesplitConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(path_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> TweesplitConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        state_dir = clean_text(env_map.get("TWEESPLIT_STATE_DIR"))
        log_level = clean_text(env_map.get("TWEESPLIT_LOG_LEVEL"))
        archive_name = clean_text(env_map.get("TWEESPLIT_ARCHIVE_NAME"))
        remember_state = ConfigLoader._optional_env_boolean(env_map, "TWEESPLIT_REMEMBER_STATE")

        config = TweesplitConfig(
            state_dir=Path(state_dir) if state_dir else default_state_dir(),
            log_level=(log_level or _DEFAULT_LOG_LEVEL).upper(),
            archive_name=archive_name or _DEFAULT_ARCHIVE_NAME,
            remember_state=True if remember_state is None else remember_state,
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> TweesplitConfig:
        """Build a validated config from a mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        state_dir = clean_text(payload.get("state_dir"))
        log_level = clean_text(payload.get("log_level"))
        archive_name = clean_text(payload.get("archive_name"))

        config = TweesplitConfig(
            state_dir=Path(state_dir).expanduser() if state_dir else default_state_dir(),
            log_level=(log_level or _DEFAULT_LOG_LEVEL).upper(),
            archive_name=archive_name or _DEFAULT_ARCHIVE_NAME,
            story_extensions=ConfigLoader._optional_extensions(
                payload, "story_extensions", source_label
            ),
            remember_state=ConfigLoader._optional_boolean(
                payload, "remember_state", source_label, default=True
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_extensions(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> tuple[str, ...]:
        """Read a list of file extensions, stripping leading dots."""

        if key not in payload or payload[key] is None:
            return _DEFAULT_STORY_EXTENSIONS

        raw = payload[key]
        if not isinstance(raw, list):
            raise ValueError(f"{source_label} field `{key}` must be a list.")
        extensions: list[str] = []
        for item in raw:
            value = clean_text(item)
            if value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank extension.")
            extensions.append(value.lstrip(".").lower())
        return tuple(extensions)

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default

        parsed = parse_flag(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _optional_env_boolean(env: Mapping[str, str], key: str) -> bool | None:
        """Read an optional boolean from environment mapping."""

        if key not in env:
            return None
        parsed = parse_flag(env.get(key))
        if parsed is None:
            raise ValueError(
                f"Environment variable `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

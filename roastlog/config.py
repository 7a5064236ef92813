"""Configuration record and loader for roastlog.

Sources are layered: defaults < environment < first config file found <
explicit overrides. Environment variables use ROASTLOG_* as primary with the
unprefixed names (ANTHROPIC_API_KEY, HUMOR_LEVEL, ...) as fallback.

Invalid environment values and invalid config files are skipped, not fatal.
Explicit updates and validation calls raise ConfigurationError instead.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from roastlog.humor.models import HumorLevel
from roastlog.infrastructure.settings import API_KEY_PREFIX
from roastlog.observability.logging import get_logger
from roastlog.utils.redaction import redact

logger = get_logger(__name__)

CONFIG_FILES: tuple[str, ...] = (".roastlog.json", "roastlog.config.json", "pyproject.toml")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

_DOTENV_LOADED = False


class ConfigurationError(ValueError):
    """Raised when an explicit update or validation gets invalid input."""


class RoastConfig(BaseModel):
    """Validated, immutable configuration record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str | None = Field(default=None, strict=True)
    humor_level: HumorLevel = HumorLevel.MEDIUM
    frequency: int = Field(default=50, ge=0, le=100, strict=True)
    enabled: bool = Field(default=True, strict=True)
    cache_size: int = Field(default=100, ge=0, strict=True)
    api_timeout: int = Field(default=5000, ge=1000, strict=True)
    fallback_to_local: bool = Field(default=True, strict=True)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("api_key must be a non-empty string")
        if not v.startswith(API_KEY_PREFIX):
            logger.warning(
                'API key does not match expected Anthropic format (should start with "%s")',
                API_KEY_PREFIX,
            )
        return v

    def with_updates(self, **changes: Any) -> RoastConfig:
        """Return a new validated record with `changes` applied."""
        try:
            return RoastConfig.model_validate({**self.model_dump(), **changes})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration provided: {e}") from e

    def redacted(self) -> dict[str, Any]:
        """Configuration as a dict, safe to print or log."""
        data = self.model_dump(mode="json")
        if self.api_key:
            data["api_key"] = redact(self.api_key)
        return data


def _env(new_key: str, old_key: str, default: str | None = None) -> str | None:
    """Read env var with ROASTLOG_* primary and unprefixed fallback."""
    return os.getenv(new_key, os.getenv(old_key, default))


def _parse_int(value: str | None, minimum: int, maximum: int | None = None) -> int | None:
    if not value:
        return None
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    if parsed < minimum or (maximum is not None and parsed > maximum):
        return None
    return parsed


def _parse_bool(value: str | None) -> bool | None:
    if not value:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def _parse_level(value: str | None) -> HumorLevel | None:
    if not value:
        return None
    try:
        return HumorLevel(value.strip().lower())
    except ValueError:
        return None


def ensure_dotenv_loaded() -> None:
    """Load a .env file from the working directory once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    load_dotenv(find_dotenv(usecwd=True))
    _DOTENV_LOADED = True


def env_overrides() -> dict[str, Any]:
    """Configuration values present and valid in the environment."""
    api_key = _env("ROASTLOG_API_KEY", "ANTHROPIC_API_KEY")
    candidates: dict[str, Any] = {
        "api_key": api_key.strip() if api_key and api_key.strip() else None,
        "humor_level": _parse_level(_env("ROASTLOG_HUMOR_LEVEL", "HUMOR_LEVEL")),
        "frequency": _parse_int(_env("ROASTLOG_FREQUENCY", "FREQUENCY"), 0, 100),
        "enabled": _parse_bool(_env("ROASTLOG_ENABLED", "ENABLED")),
        "cache_size": _parse_int(_env("ROASTLOG_CACHE_SIZE", "CACHE_SIZE"), 0),
        "api_timeout": _parse_int(_env("ROASTLOG_API_TIMEOUT", "API_TIMEOUT"), 1000),
        "fallback_to_local": _parse_bool(_env("ROASTLOG_FALLBACK_TO_LOCAL", "FALLBACK_TO_LOCAL")),
    }
    return {k: v for k, v in candidates.items() if v is not None}


def _read_config_file(path: Path) -> dict[str, Any]:
    if path.name == "pyproject.toml":
        with open(path, "rb") as f:
            data = tomllib.load(f)
        section = data.get("tool", {}).get("roastlog", {})
        return dict(section) if isinstance(section, dict) else {}

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, dict) else {}


def file_overrides(cwd: Path | None = None) -> dict[str, Any]:
    """Values from the first valid config file in `cwd`, or {} if none."""
    base = cwd or Path.cwd()
    for name in CONFIG_FILES:
        path = base / name
        if not path.is_file():
            continue
        try:
            values = _read_config_file(path)
        except (OSError, ValueError) as e:
            logger.debug("Skipping unreadable config file %s: %s", path, e)
            continue
        if values and validate_config(values):
            logger.debug("Loaded configuration from %s", path)
            return values
    return {}


def validate_config(values: Mapping[str, Any]) -> bool:
    """Check a partial configuration mapping without applying it."""
    try:
        RoastConfig.model_validate(dict(values))
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e.errors(include_url=False))
        return False
    return True


def load_config(
    overrides: Mapping[str, Any] | None = None,
    cwd: Path | None = None,
) -> RoastConfig:
    """
    Build the effective configuration.

    Args:
        overrides: Explicit values, applied last
        cwd: Directory searched for config files (defaults to the working directory)

    Returns:
        Validated RoastConfig

    Raises:
        ConfigurationError: If the overrides are invalid
    """
    ensure_dotenv_loaded()
    merged: dict[str, Any] = {**env_overrides(), **file_overrides(cwd)}
    base = RoastConfig.model_validate(merged)
    return base.with_updates(**dict(overrides or {}))


class ConfigurationManager:
    """Holds the current configuration and applies validated updates."""

    def __init__(
        self,
        initial: Mapping[str, Any] | None = None,
        cwd: Path | None = None,
        base: RoastConfig | None = None,
    ) -> None:
        # An explicit base record skips environment and file discovery
        if base is not None:
            self._config = base.with_updates(**dict(initial or {}))
        else:
            self._config = load_config(initial, cwd)

    def get_config(self) -> RoastConfig:
        return self._config

    def update_config(self, **changes: Any) -> RoastConfig:
        self._config = self._config.with_updates(**changes)
        return self._config

    def validate_config(self, values: Mapping[str, Any]) -> bool:
        return validate_config(values)

    def reset_to_defaults(self) -> None:
        self._config = RoastConfig()

    @staticmethod
    def defaults() -> RoastConfig:
        return RoastConfig()

    def has_api_key(self) -> bool:
        return bool(self._config.api_key and self._config.api_key.strip())

    def to_json(self) -> str:
        return self._config.model_dump_json(indent=2)

    def from_json(self, text: str) -> None:
        """Replace the configuration with defaults overlaid by a JSON document."""
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ConfigurationError("configuration JSON must be an object")
            self._config = RoastConfig.model_validate(data)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}") from e


def validate_env() -> tuple[bool, list[str]]:
    """
    Check that the environment is ready for remote generation.

    Returns:
        (valid, errors) where errors lists human-readable problems
    """
    ensure_dotenv_loaded()
    errors: list[str] = []

    api_key = _env("ROASTLOG_API_KEY", "ANTHROPIC_API_KEY")
    if not api_key:
        errors.append("ANTHROPIC_API_KEY is required")
    elif not api_key.startswith(API_KEY_PREFIX):
        errors.append(f'ANTHROPIC_API_KEY must start with "{API_KEY_PREFIX}"')

    level = _env("ROASTLOG_HUMOR_LEVEL", "HUMOR_LEVEL")
    if level and _parse_level(level) is None:
        errors.append("HUMOR_LEVEL must be one of: mild, medium, savage")

    frequency = _env("ROASTLOG_FREQUENCY", "FREQUENCY")
    if frequency and _parse_int(frequency, 0, 100) is None:
        errors.append("FREQUENCY must be an integer between 0 and 100")

    api_timeout = _env("ROASTLOG_API_TIMEOUT", "API_TIMEOUT")
    if api_timeout and _parse_int(api_timeout, 1000) is None:
        errors.append("API_TIMEOUT must be an integer >= 1000")

    return (not errors, errors)


def example_env() -> str:
    """Example .env contents."""
    return """# Anthropic API Configuration
ANTHROPIC_API_KEY=sk-ant-REDACTED

# roastlog configuration
HUMOR_LEVEL=medium
FREQUENCY=50
ENABLED=true
CACHE_SIZE=100
API_TIMEOUT=5000
FALLBACK_TO_LOCAL=true"""

"""
Configuration models for secrets-sync.

Uses Pydantic for validation and type safety.

Two sources:
- ``env-config.yml`` / ``env-config.yaml`` in the working directory (optional).
  Only the ``scrubbing`` section is consumed here; the sync engine owns the rest.
- ``SECRETS_SYNC_*`` environment variables for runtime settings.

This module is imported by the output guard before interception is in place,
so it MUST NOT import logging setup or emit output.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


CONFIG_FILENAMES = ("env-config.yml", "env-config.yaml")

DEFAULT_TIMEOUT_MS = 30_000


class ScrubbingConfig(BaseModel):
    """User extensions to the built-in secret/whitelist name sets."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Glob patterns, e.g. "*_KEY", matched case-insensitively
    scrub_patterns: List[str] = Field(default_factory=list, alias="scrubPatterns")
    whitelist_patterns: List[str] = Field(default_factory=list, alias="whitelistPatterns")


class EnvConfig(BaseModel):
    """Parsed ``env-config.yml``. Unknown sections belong to other components."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    scrubbing: ScrubbingConfig = Field(default_factory=ScrubbingConfig)

    @field_validator("scrubbing", mode="before")
    @classmethod
    def _null_section(cls, v: Any) -> Any:
        return {} if v is None else v


class SyncSettings(BaseSettings):
    """Runtime settings from ``SECRETS_SYNC_*`` environment variables."""
    model_config = SettingsConfigDict(env_prefix="SECRETS_SYNC_", extra="ignore")

    # Remote-store CLI timeout in milliseconds
    timeout: int = DEFAULT_TIMEOUT_MS
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("timeout", mode="before")
    @classmethod
    def _fallback_timeout(cls, v: Any) -> int:
        try:
            parsed = int(str(v).strip())
        except (TypeError, ValueError):
            return DEFAULT_TIMEOUT_MS
        return parsed if parsed > 0 else DEFAULT_TIMEOUT_MS

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> str:
        level = str(v or "INFO").strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return "INFO"
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def _known_format(cls, v: Any) -> str:
        fmt = str(v or "text").strip().lower()
        return fmt if fmt in ("json", "text") else "text"


def parse_env_config(document: Optional[Mapping[str, Any]]) -> EnvConfig:
    """
    Validate a parsed config document.

    Absent or malformed input yields the defaults (built-in patterns only);
    this never raises.
    """
    if not isinstance(document, Mapping):
        return EnvConfig()
    try:
        return EnvConfig.model_validate(document)
    except ValidationError:
        return EnvConfig()


def find_env_config(directory: Optional[Path] = None) -> Optional[Path]:
    """First existing ``env-config.yml``/``.yaml`` in ``directory`` (default: cwd)."""
    root = Path(directory) if directory is not None else Path.cwd()
    for filename in CONFIG_FILENAMES:
        candidate = root / filename
        if candidate.is_file():
            return candidate
    return None


def load_env_config(directory: Optional[Path] = None) -> Optional[EnvConfig]:
    """
    Load and validate ``env-config.yml`` from ``directory``.

    Returns:
        EnvConfig, or None when no config file exists

    Raises:
        OSError: If the file exists but cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    path = find_env_config(directory)
    if path is None:
        return None
    with open(path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f)
    return parse_env_config(document)


def load_settings() -> SyncSettings:
    return SyncSettings()

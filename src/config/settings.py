# src/config/settings.py — v3
"""Typed configuration loaded from .env and the environment via pydantic-settings.

Every action input accepts both its plain name (``JEKYLL_SRC``) and the form
GitHub Actions exports for it (``INPUT_JEKYLL_SRC``). Variable names are
matched case-insensitively.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RESTORE_KEYS = ("Linux-gems-", "bundle-use-ruby-Linux-gems-")

_OFF_VALUES = frozenset({"false", "0", "no", "off"})


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


def _input(name: str, *extra: str) -> AliasChoices:
    return AliasChoices(name, f"input_{name}", *extra)


class Settings(BaseSettings):
    """Application settings loaded from .env file and environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === ACTION INPUTS ===
    jekyll_src: str = Field("", validation_alias=_input("jekyll_src"))
    src: str = Field("", validation_alias=_input("src"))
    gem_src: str = Field("", validation_alias=_input("gem_src"))
    enable_cache: bool = Field(False, validation_alias=_input("enable_cache"))
    key: str = Field("", validation_alias=_input("key"))
    restore_keys: str = Field(
        "", validation_alias=_input("restore_keys", "input_restore-keys")
    )
    workspace: str = Field(
        ".", validation_alias=AliasChoices("workspace", "github_workspace")
    )

    # === PROJECT LAYOUT ===
    marker_filename: str = "_config.yml"
    manifest_filename: str = "Gemfile"
    vendor_path: str = "vendor/bundle"
    output_glob: str = "_site/**/*.html"

    # === Bundler ===
    bundle_jobs: int = 4
    bundle_retry: int = 3

    # === Cache ===
    cache_key_prefix: str = "Linux-gems-"
    cache_backend: Literal["local", "redis"] = "local"
    cache_root: Path = Path("~/.jekyllbuild/cache")
    cache_redis_url: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text", "actions"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("enable_cache", mode="before")
    @classmethod
    def validate_enable_cache(cls, v: object) -> object:  # noqa: N805
        """Any non-empty input turns caching on, except an explicit off value.

        Unset action inputs arrive as empty strings.
        """
        if isinstance(v, str):
            value = v.strip().lower()
            return bool(value) and value not in _OFF_VALUES
        return v

    @field_validator("log_file", mode="before")
    @classmethod
    def validate_log_file(cls, v: object) -> object:  # noqa: N805
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.bundle_jobs < 1:
            errors.append("BUNDLE_JOBS must be >= 1")

        if self.bundle_retry < 0:
            errors.append("BUNDLE_RETRY must be >= 0")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def restore_keys_list(self) -> list[str]:
        """Non-blank lines of the restore keys input, kept as written.

        Falls back to the defaults when no line is given.
        """
        keys = [k for k in self.restore_keys.splitlines() if k.strip()]
        return keys or list(DEFAULT_RESTORE_KEYS)

    @property
    def workspace_path(self) -> Path:
        """Absolute repository root."""
        return Path(self.workspace or ".").expanduser().resolve()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env and environment with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags or tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]

# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

RunConfiguration is the immutable input set for one run; ResolvedLocations
and StageResult are produced once and never mutated.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from jekyllbuild.config.settings import Settings


class RunConfiguration(BaseModel):
    """Explicit inputs for a single pipeline run.

    Explicit values always win over discovered ones. An empty string is
    normalized to None so "not configured" has a single representation.
    """

    model_config = ConfigDict(frozen=True)

    workspace: Path = Field(default_factory=Path.cwd)
    source_dir: str | None = None
    manifest: str | None = None
    cache_enabled: bool = False
    cache_key: str | None = None
    fallback_keys: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings) -> RunConfiguration:
        """Collapse raw settings into a run configuration.

        ``jekyll_src`` takes precedence over the alternate ``src`` spelling.
        """
        return cls(
            workspace=settings.workspace_path,
            source_dir=settings.jekyll_src or settings.src or None,
            manifest=settings.gem_src or None,
            cache_enabled=settings.enable_cache,
            cache_key=settings.key or None,
            fallback_keys=tuple(settings.restore_keys_list),
        )


class ResolvedLocations(BaseModel):
    """Project source directory and manifest path, resolved once per run."""

    model_config = ConfigDict(frozen=True)

    source_dir: str
    manifest_path: str


class StageResult(BaseModel):
    """Timing and outcome of one pipeline stage."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration_ms: int
    failed: bool = False

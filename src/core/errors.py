# src/core/errors.py — v1
"""Error taxonomy for the build pipeline.

Resolution and validation errors abort a run immediately. Transient cache
errors are absorbed by the cache manager. Stage failures (install, build,
format) propagate to the top level after a diagnostic is logged.
"""

from __future__ import annotations


class JekyllBuildError(Exception):
    """Base class for all pipeline errors."""


# === RESOLUTION ===


class ResolutionError(JekyllBuildError):
    """Project or manifest location could not be determined."""


class AmbiguousProjectError(ResolutionError):
    """More than one candidate project root was found."""

    def __init__(self, count: int, marker: str = "_config.yml") -> None:
        self.count = count
        super().__init__(
            f"error: found {count} {marker}! Please define which to use "
            f'with input variable "JEKYLL_SRC"'
        )


class UnresolvedManifestError(ResolutionError):
    """Several manifests found and none lives in the resolved source directory."""

    def __init__(self, count: int, manifest: str = "Gemfile") -> None:
        self.count = count
        super().__init__(
            f"found {count} {manifest}s, and failed to resolve them! Please "
            f'define which to use with input variable "GEM_SRC"'
        )


class NoProjectFoundError(ResolutionError):
    """No marker file exists anywhere in the workspace."""

    def __init__(self, marker: str = "_config.yml") -> None:
        super().__init__(
            f"error: no {marker} found! Please define the source directory "
            f'with input variable "JEKYLL_SRC"'
        )


class NoManifestFoundError(ResolutionError):
    """No manifest file exists at the configured path or in the workspace."""

    def __init__(self, manifest: str = "Gemfile", path: str | None = None) -> None:
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(
            f"error: no {manifest} found{where}! Please define which to use "
            f'with input variable "GEM_SRC"'
        )


# === CACHE ===


class CacheError(JekyllBuildError):
    """Base class for cache store failures."""


class CacheValidationError(CacheError):
    """Malformed cache key or path. Always fatal."""


class ReserveCacheError(CacheError):
    """Another run already reserved this key. Informational only."""


# === STAGES ===


class StageFailure(JekyllBuildError):
    """An external tool or post-processing step failed."""


class InstallFailure(StageFailure):
    """bundle install exited non-zero."""


class BuildFailure(StageFailure):
    """jekyll build exited non-zero."""


class FormatFailure(StageFailure):
    """An output file could not be read or rewritten."""

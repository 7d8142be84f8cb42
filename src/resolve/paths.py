# src/resolve/paths.py — v1
"""Path resolver — locate the site source directory and its Gemfile.

Explicit configuration always wins and never triggers a search. Otherwise
the workspace is searched for marker and manifest files, outside the vendor
directory, and the results are disambiguated.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Protocol

from jekyllbuild.core.errors import (
    AmbiguousProjectError,
    NoManifestFoundError,
    NoProjectFoundError,
    UnresolvedManifestError,
)
from jekyllbuild.core.models import ResolvedLocations, RunConfiguration

logger = logging.getLogger(__name__)


class Searcher(Protocol):
    async def glob(self, pattern: str) -> list[str]: ...


def _containing_dir(match: str) -> str:
    """``blog/_config.yml`` -> ``blog/``; a root-level file -> ``./``."""
    parent = PurePosixPath(match).parent
    return f"{parent}/"


class PathResolver:
    """Resolve ResolvedLocations for a run.

    Args:
        search: File search primitive over the workspace.
        marker_filename: File identifying the project root.
        manifest_filename: Dependency manifest file name.
    """

    def __init__(
        self,
        search: Searcher,
        marker_filename: str = "_config.yml",
        manifest_filename: str = "Gemfile",
    ) -> None:
        self._search = search
        self._marker = marker_filename
        self._manifest = manifest_filename

    async def resolve(self, config: RunConfiguration) -> ResolvedLocations:
        """Resolve the source directory, then the manifest next to it."""
        source_dir = await self.resolve_source_dir(config)
        manifest = await self.resolve_manifest(config, source_dir)
        return ResolvedLocations(source_dir=source_dir, manifest_path=manifest)

    async def resolve_source_dir(self, config: RunConfiguration) -> str:
        if config.source_dir:
            logger.debug(
                "Using parameter value %s as a source directory", config.source_dir
            )
            return config.source_dir

        matches = await self._search.glob(f"**/{self._marker}")
        if len(matches) > 1:
            raise AmbiguousProjectError(len(matches), self._marker)
        if not matches:
            raise NoProjectFoundError(self._marker)

        source_dir = _containing_dir(matches[0])
        logger.debug("Resolved %s as source directory", source_dir)
        return source_dir

    async def resolve_manifest(self, config: RunConfiguration, source_dir: str) -> str:
        if config.manifest:
            manifest = self.normalize_manifest(config.manifest)
            if not (config.workspace / manifest).is_file():
                raise NoManifestFoundError(self._manifest, manifest)
            logger.debug("Using parameter value %s as %s", manifest, self._manifest)
            return manifest

        matches = await self._search.glob(f"**/{self._manifest}")
        if not matches:
            raise NoManifestFoundError(self._manifest)
        if len(matches) == 1:
            manifest = matches[0]
        else:
            manifest = self._disambiguate(matches, source_dir, config.workspace)

        logger.debug("Resolved %s as %s", manifest, self._manifest)
        return manifest

    def normalize_manifest(self, value: str) -> str:
        """Append the manifest file name when ``value`` names a directory."""
        if value.endswith(self._manifest):
            return value
        if not value.endswith("/"):
            value += "/"
        return value + self._manifest

    def _disambiguate(self, matches: list[str], source_dir: str, workspace: Path) -> str:
        """Pick the manifest living directly in the source directory."""
        target = absolute_dir(source_dir, workspace)
        chosen = None
        for candidate in matches:
            if absolute_dir(str(PurePosixPath(candidate).parent), workspace) == target:
                chosen = candidate
        if chosen is None:
            raise UnresolvedManifestError(len(matches), self._manifest)
        logger.warning("found %d %ss!", len(matches), self._manifest)
        return chosen


def absolute_dir(path: str, workspace: Path) -> str:
    """Normalize ``path`` to an absolute directory rooted at ``workspace``.

    ``.``-relative and bare relative forms are both resolved against the
    workspace; absolute paths are only normalized.
    """
    joined = os.path.join(str(workspace), path)
    return os.path.normpath(joined)

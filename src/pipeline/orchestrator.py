# src/pipeline/orchestrator.py — v3
"""Pipeline orchestrator — wire collaborators and define the build stages.

Stage order:
  1. resolve directories
  2. restore bundler cache (caching enabled only)
  3. bundle install
  4. jekyll build
  5. format output html files
  6. save bundler cache (caching enabled only)

Collaborators never call each other; every hand-off goes through the
PipelineState returned by the previous stage.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jekyllbuild.cache.key_deriver import CacheKeyDeriver
from jekyllbuild.cache.manager import CacheManager
from jekyllbuild.cache.models import CacheErrorKind
from jekyllbuild.ci.actions import export_variable
from jekyllbuild.core.errors import (
    BuildFailure,
    CacheValidationError,
    InstallFailure,
)
from jekyllbuild.core.models import RunConfiguration
from jekyllbuild.pipeline.runner import PipelineRunner, RunResult, Stage
from jekyllbuild.pipeline.state import PipelineState
from jekyllbuild.resolve.paths import PathResolver
from jekyllbuild.resolve.search import FileSearch
from jekyllbuild.tools.bundler import Bundler
from jekyllbuild.tools.command import CommandFailedError, CommandRunner

if TYPE_CHECKING:
    from jekyllbuild.cache.base_cache_store import BaseCacheStore
    from jekyllbuild.config.settings import Settings
    from jekyllbuild.output.formatter import HtmlOutputFormatter
    from jekyllbuild.resolve.paths import Searcher

logger = logging.getLogger(__name__)

LOCKFILE_HINT = (
    'Gemfile.lock probably needs updating. Run "bundle install" locally and '
    "commit changes. Exiting action"
)


class PipelineOrchestrator:
    """Top-level orchestrator for one site build.

    Args:
        settings: Application settings.
        cache_store: Cache backend. Built from settings when caching is on.
        search: File search primitive. Defaults to a workspace FileSearch.
        bundler: Bundler client. Defaults to one bound to the workspace.
        formatter: Output formatter. Defaults to the HTML formatter.
    """

    def __init__(
        self,
        settings: Settings,
        cache_store: BaseCacheStore | None = None,
        search: Searcher | None = None,
        bundler: Bundler | None = None,
        formatter: HtmlOutputFormatter | None = None,
    ) -> None:
        self._settings = settings
        self._config = RunConfiguration.from_settings(settings)
        workspace = self._config.workspace

        self._resolver = PathResolver(
            search or FileSearch(workspace, exclude=[settings.vendor_path]),
            marker_filename=settings.marker_filename,
            manifest_filename=settings.manifest_filename,
        )
        self._key_deriver = CacheKeyDeriver(settings.cache_key_prefix)

        self._cache_manager: CacheManager | None = None
        self._owned_store: BaseCacheStore | None = None
        if self._config.cache_enabled:
            if cache_store is None:
                from jekyllbuild.cache.cache_factory import create_cache_store
                cache_store = self._owned_store = create_cache_store(settings)
            self._cache_manager = CacheManager(cache_store, [settings.vendor_path])

        self._bundler = bundler or Bundler(
            CommandRunner(workspace),
            vendor_dir=workspace / settings.vendor_path,
            jobs=settings.bundle_jobs,
            retry=settings.bundle_retry,
        )

        if formatter is None:
            from jekyllbuild.output.formatter import HtmlOutputFormatter
            formatter = HtmlOutputFormatter(workspace, settings.output_glob)
        self._formatter = formatter

    @property
    def config(self) -> RunConfiguration:
        return self._config

    def stages(self) -> list[Stage]:
        """Stage list in execution order."""
        cache_on = self._caching_enabled
        return [
            Stage("resolve directories", self._resolve_locations),
            Stage("restore bundler cache", self._restore_cache, cache_on),
            Stage("bundle install", self._install_dependencies),
            Stage("jekyll build", self._build_site),
            Stage("format output html files", self._format_output),
            Stage("save bundler cache", self._save_cache, cache_on),
        ]

    async def run(self) -> RunResult:
        """Execute the full pipeline."""
        state = PipelineState(config=self._config)
        logger.info("Starting build run %s in %s", state.run_id, self._config.workspace)
        return await PipelineRunner(self.stages()).run(state)

    def close(self) -> None:
        """Close the cache store if this orchestrator created it."""
        if self._owned_store is not None:
            self._owned_store.close()
            self._owned_store = None

    def _caching_enabled(self, state: PipelineState) -> bool:
        return state.config.cache_enabled and self._cache_manager is not None

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _resolve_locations(self, state: PipelineState) -> PipelineState:
        locations = await self._resolver.resolve(state.config)
        export_variable("BUNDLE_GEMFILE", locations.manifest_path)
        return state.model_copy(update={"locations": locations})

    async def _restore_cache(self, state: PipelineState) -> PipelineState:
        if self._cache_manager is None:
            raise RuntimeError("Cache stage run with caching disabled")
        locations = state.require_locations()
        key_state = self._key_deriver.derive(state.config, locations.manifest_path)

        outcome = await self._cache_manager.restore(key_state)
        if outcome.error_kind is CacheErrorKind.VALIDATION:
            raise CacheValidationError(outcome.message)

        key_state = key_state.model_copy(update={"exact_match": outcome.exact_match})
        return state.model_copy(update={"cache": key_state})

    async def _install_dependencies(self, state: PipelineState) -> PipelineState:
        locations = state.require_locations()
        try:
            await self._bundler.install(locations.manifest_path)
        except CommandFailedError as exc:
            logger.error(LOCKFILE_HINT)
            raise InstallFailure(str(exc)) from exc
        return state

    async def _build_site(self, state: PipelineState) -> PipelineState:
        locations = state.require_locations()
        export_variable("JEKYLL_ENV", "production")
        try:
            await self._bundler.build(locations.manifest_path, locations.source_dir)
        except CommandFailedError as exc:
            raise BuildFailure(str(exc)) from exc
        return state

    async def _format_output(self, state: PipelineState) -> PipelineState:
        await self._formatter.format_all()
        return state

    async def _save_cache(self, state: PipelineState) -> PipelineState:
        if self._cache_manager is None:
            raise RuntimeError("Cache stage run with caching disabled")
        if state.cache is None:
            raise RuntimeError("Cache key was not derived before save")

        outcome = await self._cache_manager.save(state.cache)
        if outcome.error_kind is CacheErrorKind.VALIDATION:
            raise CacheValidationError(outcome.message)
        return state

# src/tools/bundler.py — v1
"""Bundler invocations: dependency install and jekyll build.

The manifest path travels with each call as ``BUNDLE_GEMFILE`` in the
subprocess environment; nothing is written to ``os.environ``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jekyllbuild.tools.command import CommandRunner

logger = logging.getLogger(__name__)


class Bundler:
    """Thin wrapper over the ``bundle`` executable.

    Args:
        runner: Command runner bound to the workspace.
        vendor_dir: Absolute directory gems are installed into.
        jobs: Parallel install jobs.
        retry: Network retry count for ``bundle install``.
    """

    def __init__(
        self,
        runner: CommandRunner,
        vendor_dir: Path,
        jobs: int = 4,
        retry: int = 3,
    ) -> None:
        self._runner = runner
        self._vendor_dir = vendor_dir
        self._jobs = jobs
        self._retry = retry

    async def install(self, manifest: str) -> None:
        env = {"BUNDLE_GEMFILE": manifest}
        await self._runner.run(["bundle", "config", "set", "deployment", "true"], env=env)
        await self._runner.run(
            ["bundle", "config", "path", str(self._vendor_dir)], env=env
        )
        await self._runner.run(
            [
                "bundle",
                "install",
                f"--jobs={self._jobs}",
                f"--retry={self._retry}",
                f"--gemfile={manifest}",
            ],
            env=env,
        )

    async def build(self, manifest: str, source_dir: str) -> None:
        env = {"BUNDLE_GEMFILE": manifest, "JEKYLL_ENV": "production"}
        await self._runner.run(
            ["bundle", "exec", "jekyll", "build", "-s", source_dir], env=env
        )

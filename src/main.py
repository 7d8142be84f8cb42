# src/main.py — v3
"""CLI entry point — run, key, cache commands.

Usage:
    jekyllbuild run [options]
    jekyllbuild key [options]
    jekyllbuild cache [--delete KEY]

Inputs not given on the command line are read from the environment
(``JEKYLL_SRC`` / ``INPUT_JEKYLL_SRC`` and friends) or a .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from jekyllbuild.config.settings import Settings, load_settings
from jekyllbuild.logging.logger import setup_logging
from jekyllbuild.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings(**_overrides(args))
        _setup_logging(args.verbose, settings)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="jekyllbuild",
        description=f"jekyllbuild v{__version__} — Jekyll build with dependency caching",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser("run", help="Install, build and format the site")
    _add_location_args(p_run)
    p_run.add_argument(
        "--enable-cache", action="store_true", default=None,
        help="Restore and save the vendor/bundle cache",
    )
    p_run.add_argument("--key", default=None, help="Explicit cache key")
    p_run.add_argument(
        "--restore-keys", default=None,
        help="Newline-delimited fallback cache keys",
    )
    p_run.set_defaults(func=_cmd_run)

    # --- key ---
    p_key = subparsers.add_parser(
        "key", help="Print the cache key derived for the resolved Gemfile",
    )
    _add_location_args(p_key)
    p_key.set_defaults(func=_cmd_key)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="List or delete cache entries")
    p_cache.add_argument("--workspace", type=Path, default=None)
    p_cache.add_argument("--delete", metavar="KEY", default=None, help="Delete an entry")
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workspace", type=Path, default=None,
        help="Repository root (default: $GITHUB_WORKSPACE or .)",
    )
    parser.add_argument("--jekyll-src", default=None, help="Site source directory")
    parser.add_argument("--gem-src", default=None, help="Gemfile path or directory")


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    """Settings overrides for flags given on the command line."""
    mapping = {
        "workspace": "workspace",
        "jekyll_src": "jekyll_src",
        "gem_src": "gem_src",
        "enable_cache": "enable_cache",
        "key": "key",
        "restore_keys": "restore_keys",
    }
    overrides: dict[str, object] = {}
    for attr, field_name in mapping.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[field_name] = str(value) if isinstance(value, Path) else value
    return overrides


async def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the build pipeline."""
    from jekyllbuild.pipeline.orchestrator import PipelineOrchestrator

    orchestrator = PipelineOrchestrator(settings)
    try:
        result = await orchestrator.run()
    finally:
        orchestrator.close()

    _print_stage_summary(result)
    return 0 if result.success else 1


async def _cmd_key(args: argparse.Namespace, settings: Settings) -> int:
    """Resolve locations and print the derived cache keys."""
    from jekyllbuild.cache.key_deriver import CacheKeyDeriver
    from jekyllbuild.core.models import RunConfiguration
    from jekyllbuild.resolve.paths import PathResolver
    from jekyllbuild.resolve.search import FileSearch

    config = RunConfiguration.from_settings(settings)
    resolver = PathResolver(
        FileSearch(config.workspace, exclude=[settings.vendor_path]),
        marker_filename=settings.marker_filename,
        manifest_filename=settings.manifest_filename,
    )
    locations = await resolver.resolve(config)
    state = CacheKeyDeriver(settings.cache_key_prefix).derive(
        config, locations.manifest_path
    )

    print(f"Source:        {locations.source_dir}")
    print(f"Gemfile:       {locations.manifest_path}")
    print(f"Key:           {state.key}")
    print(f"Restore keys:  {', '.join(state.fallback_keys)}")
    return 0


async def _cmd_cache(args: argparse.Namespace, settings: Settings) -> int:
    """List cache entries, or delete one."""
    from jekyllbuild.cache.cache_factory import create_cache_store

    store = create_cache_store(settings)
    try:
        if args.delete:
            await store.delete(args.delete)
            print(f"Deleted {args.delete}")
            return 0
        entries = sorted(await store.list_entries(), key=lambda e: e.created_at)
    finally:
        store.close()

    if not entries:
        print("No cache entries")
        return 0
    for entry in entries:
        status = "" if entry.committed else " (reserved)"
        print(
            f"{entry.created_at:%Y-%m-%d %H:%M}  {entry.size_bytes:>12}  "
            f"{entry.key}{status}"
        )
    return 0


def _print_stage_summary(result: object) -> None:
    """Print per-stage timings of a RunResult."""
    print("\nStages:")
    for stage in result.stage_results:
        status = "FAILED" if stage.failed else "ok"
        print(f"  {stage.name:<28} {stage.duration_ms:>8}ms  {status}")
    for name in result.skipped_stages:
        print(f"  {name:<28} {'-':>10}  skipped")


def _setup_logging(verbose: bool, settings: Settings) -> None:
    """Configure logging for CLI usage."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())

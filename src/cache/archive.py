# src/cache/archive.py — v1
"""tar.gz packing of cached paths, stored relative to the workspace."""

from __future__ import annotations

import logging
import tarfile
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def write_archive(workspace: Path, paths: Sequence[str], dest: Path) -> int:
    """Pack existing ``paths`` into ``dest`` and return its size in bytes.

    Raises:
        FileNotFoundError: If none of the paths exist.
    """
    existing = [p for p in paths if (workspace / p).exists()]
    if not existing:
        raise FileNotFoundError(
            "Path Validation Error: Path(s) specified for caching do not exist, "
            "hence no cache is being saved."
        )

    dest.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(dest, "w:gz") as tar:
        for path in existing:
            tar.add(workspace / path, arcname=path)
    size = dest.stat().st_size
    logger.debug("Archived %s into %s (%d bytes)", existing, dest, size)
    return size


def extract_archive(src: Path, workspace: Path) -> None:
    """Unpack ``src`` into ``workspace``, refusing members that escape it."""
    with tarfile.open(src, "r:gz") as tar:
        tar.extractall(workspace, filter="data")
    logger.debug("Extracted %s into %s", src, workspace)

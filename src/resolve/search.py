# src/resolve/search.py — v1
"""Workspace file search with excluded directories.

Matches are returned as POSIX paths relative to the search root, sorted, so
callers get stable results across platforms.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


class FileSearch:
    """Glob files under ``root`` skipping any path inside an excluded directory.

    Args:
        root: Directory to search from.
        exclude: Relative directory paths (e.g. ``vendor/bundle``) whose
            contents are skipped wherever they occur in the tree.
    """

    def __init__(self, root: Path, exclude: Sequence[str] = ()) -> None:
        self._root = Path(root)
        self._exclude = [PurePosixPath(e).parts for e in exclude if e]

    async def glob(self, pattern: str) -> list[str]:
        """Return files matching ``pattern`` relative to the root."""
        matches: list[str] = []
        for path in self._root.glob(pattern):
            if not path.is_file():
                continue
            rel = PurePosixPath(path.relative_to(self._root).as_posix())
            if self._is_excluded(rel.parts[:-1]):
                continue
            matches.append(str(rel))
        matches.sort()
        logger.debug("Search %s under %s: %d match(es)", pattern, self._root, len(matches))
        return matches

    def _is_excluded(self, dir_parts: tuple[str, ...]) -> bool:
        for excluded in self._exclude:
            width = len(excluded)
            for i in range(len(dir_parts) - width + 1):
                if dir_parts[i : i + width] == excluded:
                    return True
        return False

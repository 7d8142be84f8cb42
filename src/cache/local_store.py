# src/cache/local_store.py — v2
"""Local filesystem cache store (default CACHE_BACKEND=local).

Each entry is a pair of files under CACHE_ROOT named after the SHA-256 of the
key: ``<digest>.json`` (index record) and ``<digest>.tar.gz`` (archive).
Creating the index record with exclusive mode is the reservation. A record
left uncommitted for longer than the reservation TTL is reclaimed.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from jekyllbuild.cache.archive import extract_archive, write_archive
from jekyllbuild.cache.base_cache_store import (
    RESERVATION_TTL_SECONDS,
    BaseCacheStore,
    is_stale_reservation,
    select_entry,
    validate_keys,
    validate_paths,
)
from jekyllbuild.cache.models import CacheEntry
from jekyllbuild.core.errors import ReserveCacheError

logger = logging.getLogger(__name__)


class LocalCacheStore(BaseCacheStore):
    """File-based cache store shared by runs on the same machine."""

    def __init__(
        self,
        cache_root: Path | str,
        workspace: Path | str,
        reservation_ttl: int = RESERVATION_TTL_SECONDS,
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._workspace = Path(workspace)
        self._reservation_ttl = reservation_ttl

    async def restore(
        self, paths: Sequence[str], primary_key: str, restore_keys: Sequence[str]
    ) -> str | None:
        """Restore the best match for ``primary_key`` then ``restore_keys``."""
        validate_paths(paths)
        keys = [primary_key, *restore_keys]
        validate_keys(keys)

        entry = select_entry(await self.list_entries(), keys)
        if entry is None:
            return None

        archive = self._root / entry.archive
        logger.info("Restoring cache %s from %s", entry.key, archive)
        extract_archive(archive, self._workspace)
        return entry.key

    async def save(self, paths: Sequence[str], key: str) -> None:
        """Reserve ``key``, archive ``paths`` and commit the entry."""
        validate_paths(paths)
        validate_keys([key])

        index_path = self._index_path(key)
        entry = CacheEntry(
            key=key,
            archive=f"{self._digest(key)}.tar.gz",
            created_at=datetime.now(timezone.utc),
        )
        self._reserve(index_path, entry)

        committed = False
        try:
            size = write_archive(self._workspace, paths, self._root / entry.archive)
            final = entry.model_copy(update={"size_bytes": size, "committed": True})
            index_path.write_text(final.model_dump_json(indent=2), encoding="utf-8")
            committed = True
        finally:
            if not committed:
                index_path.unlink(missing_ok=True)
                (self._root / entry.archive).unlink(missing_ok=True)
        logger.info("Cache saved with key: %s", key)

    def _reserve(self, index_path: Path, entry: CacheEntry) -> None:
        """Create the index record exclusively, reclaiming a stale reservation."""
        for attempt in range(2):
            try:
                with index_path.open("x", encoding="utf-8") as fh:
                    fh.write(entry.model_dump_json(indent=2))
                return
            except FileExistsError as e:
                existing = self._read_entry(index_path)
                if attempt == 0 and existing is not None and is_stale_reservation(
                    existing, self._reservation_ttl
                ):
                    logger.warning(
                        "Reclaiming abandoned reservation for key %s", entry.key
                    )
                    index_path.unlink(missing_ok=True)
                    continue
                raise ReserveCacheError(
                    f"Unable to reserve cache with key {entry.key}, another job "
                    f"may be creating this cache."
                ) from e

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        digest = self._digest(key)
        for path in (self._root / f"{digest}.json", self._root / f"{digest}.tar.gz"):
            path.unlink(missing_ok=True)

    async def list_entries(self) -> list[CacheEntry]:
        """List all index records."""
        if not self._root.is_dir():
            return []
        entries = (self._read_entry(path) for path in sorted(self._root.glob("*.json")))
        return [e for e in entries if e is not None]

    @staticmethod
    def _read_entry(path: Path) -> CacheEntry | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(**data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping unreadable cache index %s: %s", path.name, e)
            return None

    def _index_path(self, key: str) -> Path:
        return self._root / f"{self._digest(key)}.json"

    @staticmethod
    def _digest(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

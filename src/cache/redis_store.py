# src/cache/redis_store.py — v3
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for runners that do not share a filesystem. The reservation is a
``SET NX`` on the entry record; archives are stored as raw bytes.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from jekyllbuild.cache.archive import extract_archive, write_archive
from jekyllbuild.cache.base_cache_store import (
    RESERVATION_TTL_SECONDS,
    BaseCacheStore,
    select_entry,
    validate_keys,
    validate_paths,
)
from jekyllbuild.cache.models import CacheEntry
from jekyllbuild.core.errors import ReserveCacheError

logger = logging.getLogger(__name__)

_ENTRY_PREFIX = "jekyllbuild:cache:entry:"
_BLOB_PREFIX = "jekyllbuild:cache:blob:"
_INDEX_KEY = "jekyllbuild:cache:__index__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for distributed runners."""

    def __init__(
        self,
        redis_url: str,
        workspace: Path | str,
        reservation_ttl: int = RESERVATION_TTL_SECONDS,
    ) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url)
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

        blob = self._client.get(f"{_BLOB_PREFIX}{entry.key}")
        if blob is None:
            logger.warning("Cache entry %s has no archive, ignoring", entry.key)
            return None

        with tempfile.TemporaryDirectory() as tmp:
            archive = Path(tmp) / "cache.tar.gz"
            archive.write_bytes(blob)
            extract_archive(archive, self._workspace)
        return entry.key

    async def save(self, paths: Sequence[str], key: str) -> None:
        """Reserve ``key``, upload the archive and commit the entry.

        The reservation expires after the reservation TTL so an interrupted
        save cannot block the key forever.
        """
        validate_paths(paths)
        validate_keys([key])

        entry_key = f"{_ENTRY_PREFIX}{key}"
        entry = CacheEntry(
            key=key,
            archive=f"{_BLOB_PREFIX}{key}",
            created_at=datetime.now(timezone.utc),
        )
        if not self._client.set(
            entry_key, entry.model_dump_json(), nx=True, ex=self._reservation_ttl
        ):
            raise ReserveCacheError(
                f"Unable to reserve cache with key {key}, another job may be "
                f"creating this cache."
            )

        committed = False
        try:
            with tempfile.TemporaryDirectory() as tmp:
                archive = Path(tmp) / "cache.tar.gz"
                size = write_archive(self._workspace, paths, archive)
                self._client.set(entry.archive, archive.read_bytes())

            final = entry.model_copy(update={"size_bytes": size, "committed": True})
            # A plain SET drops the reservation TTL.
            self._client.set(entry_key, final.model_dump_json())
            self._client.sadd(_INDEX_KEY, key)
            committed = True
        finally:
            if not committed:
                self._client.delete(entry_key, entry.archive)
        logger.info("Cache saved with key: %s", key)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._client.delete(f"{_ENTRY_PREFIX}{key}", f"{_BLOB_PREFIX}{key}")
        self._client.srem(_INDEX_KEY, key)

    async def list_entries(self) -> list[CacheEntry]:
        """List all committed entries."""
        entries: list[CacheEntry] = []
        for raw_key in self._client.smembers(_INDEX_KEY):
            key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else raw_key
            data = self._client.get(f"{_ENTRY_PREFIX}{key}")
            if data is None:
                continue
            try:
                entries.append(CacheEntry.model_validate_json(data))
            except ValueError as e:
                logger.warning("Failed to deserialize cache entry %s: %s", key, e)
        return entries

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()

# src/cache/base_cache_store.py — v2
"""Abstract blob cache store interface and shared input validation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone

from jekyllbuild.cache.models import CacheEntry
from jekyllbuild.core.errors import CacheValidationError

MAX_KEY_LENGTH = 512
MAX_KEYS = 10

# An uncommitted reservation older than this is treated as abandoned.
RESERVATION_TTL_SECONDS = 600


def validate_paths(paths: Sequence[str]) -> None:
    """Reject an empty path list."""
    if not paths:
        raise CacheValidationError(
            "Path Validation Error: At least one directory or file path is required"
        )


def validate_key(key: str) -> None:
    """Reject empty, overlong, or comma-containing keys."""
    if not key:
        raise CacheValidationError("Key Validation Error: key cannot be empty.")
    if len(key) > MAX_KEY_LENGTH:
        raise CacheValidationError(
            f"Key Validation Error: {key} cannot be larger than "
            f"{MAX_KEY_LENGTH} characters."
        )
    if "," in key:
        raise CacheValidationError(
            f"Key Validation Error: {key} cannot contain commas."
        )


def is_stale_reservation(
    entry: CacheEntry, ttl_seconds: int = RESERVATION_TTL_SECONDS, now: datetime | None = None
) -> bool:
    """True for an uncommitted entry whose save was never finished."""
    if entry.committed:
        return False
    now = now or datetime.now(timezone.utc)
    return (now - entry.created_at).total_seconds() > ttl_seconds


def validate_keys(keys: Sequence[str]) -> None:
    if len(keys) > MAX_KEYS:
        raise CacheValidationError(
            f"Key Validation Error: Keys are limited to a maximum of {MAX_KEYS}."
        )
    for key in keys:
        validate_key(key)


def select_entry(entries: Sequence[CacheEntry], keys: Sequence[str]) -> CacheEntry | None:
    """Pick the entry a restore should use.

    Keys are tried in order; for each, an exact committed entry wins,
    otherwise the newest committed entry whose key starts with it.
    """
    committed = sorted(
        (e for e in entries if e.committed),
        key=lambda e: e.created_at,
        reverse=True,
    )
    for key in keys:
        for entry in committed:
            if entry.key == key:
                return entry
        for entry in committed:
            if entry.key.startswith(key):
                return entry
    return None


class BaseCacheStore(ABC):
    """Key/value blob cache for directories under the workspace."""

    @abstractmethod
    async def restore(
        self, paths: Sequence[str], primary_key: str, restore_keys: Sequence[str]
    ) -> str | None:
        """Extract the best matching archive and return its key, or None."""

    @abstractmethod
    async def save(self, paths: Sequence[str], key: str) -> None:
        """Archive ``paths`` under ``key``.

        Raises:
            ReserveCacheError: If ``key`` is already reserved.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an entry and its archive."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List all entries, committed or not."""

    def close(self) -> None:
        """Release backend connections."""

# src/cache/key_deriver.py — v1
"""Cache key derivation from the dependency lock file.

The primary key is a fixed platform prefix followed by the SHA-256 of the
exact lock file bytes, so any change to pinned versions produces a new key.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from jekyllbuild.cache.models import CacheKeyState
from jekyllbuild.config.settings import DEFAULT_RESTORE_KEYS
from jekyllbuild.core.models import RunConfiguration

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "Linux-gems-"


def lock_file_digest(lock_path: Path) -> str:
    """SHA-256 hex digest of the raw lock file bytes."""
    return hashlib.sha256(lock_path.read_bytes()).hexdigest()


def is_exact_key_match(key: str, matched_key: str | None) -> bool:
    """True when the restored key is the requested primary key."""
    return matched_key is not None and matched_key == key


class CacheKeyDeriver:
    """Compute the primary and fallback cache keys for a run."""

    def __init__(self, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self._prefix = key_prefix

    def derive(self, config: RunConfiguration, manifest_path: str) -> CacheKeyState:
        """Build the key state for ``manifest_path``.

        An explicit key is used verbatim and the lock file is not read.
        """
        if config.cache_key:
            key = config.cache_key
            logger.debug("Using configured cache key %s", key)
        else:
            lock_path = config.workspace / f"{manifest_path}.lock"
            digest = lock_file_digest(lock_path)
            logger.debug("Hash of %s: %s", lock_path.name, digest)
            key = f"{self._prefix}{digest}"

        fallback_keys = config.fallback_keys or DEFAULT_RESTORE_KEYS
        return CacheKeyState(key=key, fallback_keys=tuple(fallback_keys))

# src/cache/manager.py — v1
"""Cache manager — restore before install, conditional save after build.

Store exceptions never cross this boundary: each is classified into a
CacheErrorKind on the returned outcome and the orchestrator decides what is
fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from jekyllbuild.cache.base_cache_store import BaseCacheStore
from jekyllbuild.cache.key_deriver import is_exact_key_match
from jekyllbuild.cache.models import (
    CacheErrorKind,
    CacheKeyState,
    RestoreOutcome,
    SaveOutcome,
)
from jekyllbuild.core.errors import CacheValidationError, ReserveCacheError

logger = logging.getLogger(__name__)


class CacheManager:
    """Restore and save the vendor directory through a cache store."""

    def __init__(self, store: BaseCacheStore, paths: Sequence[str]) -> None:
        self._store = store
        self._paths = list(paths)

    async def restore(self, state: CacheKeyState) -> RestoreOutcome:
        """Restore the cache for ``state.key`` with fallbacks.

        A missing cache or a transient failure is a miss; a validation
        failure is reported with kind VALIDATION.
        """
        try:
            matched = await self._store.restore(
                self._paths, state.key, list(state.fallback_keys)
            )
        except CacheValidationError as exc:
            return RestoreOutcome(
                error_kind=CacheErrorKind.VALIDATION, message=str(exc)
            )
        except Exception as exc:
            logger.warning("%s", exc)
            return RestoreOutcome(
                error_kind=CacheErrorKind.TRANSIENT, message=str(exc)
            )

        if not matched:
            logger.info(
                "Cache not found for input keys: %s", ", ".join(state.all_keys)
            )
            return RestoreOutcome()

        exact = is_exact_key_match(state.key, matched)
        logger.info("Cache restored from key: %s (exact=%s)", matched, exact)
        return RestoreOutcome(matched_key=matched, exact_match=exact)

    async def save(self, state: CacheKeyState) -> SaveOutcome:
        """Save the cache unless the restore was an exact hit."""
        if state.exact_match:
            logger.info(
                "Cache hit occurred on the primary key %s, not saving cache.",
                state.key,
            )
            return SaveOutcome(skipped=True)

        try:
            await self._store.save(self._paths, state.key)
        except CacheValidationError as exc:
            return SaveOutcome(
                error_kind=CacheErrorKind.VALIDATION, message=str(exc)
            )
        except ReserveCacheError as exc:
            logger.info("%s", exc)
            return SaveOutcome(
                error_kind=CacheErrorKind.RESERVATION_CONFLICT, message=str(exc)
            )
        except Exception as exc:
            logger.warning("%s", exc)
            return SaveOutcome(
                error_kind=CacheErrorKind.TRANSIENT, message=str(exc)
            )

        return SaveOutcome(saved=True)

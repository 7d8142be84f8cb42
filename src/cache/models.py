# src/cache/models.py — v2
"""Cache domain models: CacheKeyState, CacheEntry, RestoreOutcome, SaveOutcome."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class CacheErrorKind(str, Enum):
    """Closed set of failure kinds reported by the cache manager."""

    VALIDATION = "validation"
    RESERVATION_CONFLICT = "reservation_conflict"
    TRANSIENT = "transient"


class CacheKeyState(BaseModel):
    """Primary key, ordered fallbacks and exact-hit status for one run.

    ``exact_match`` stays None until a restore attempt has completed.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    fallback_keys: tuple[str, ...] = ()
    exact_match: bool | None = None

    @property
    def all_keys(self) -> list[str]:
        return [self.key, *self.fallback_keys]


class CacheEntry(BaseModel):
    """Index record for one stored archive."""

    key: str
    archive: str
    created_at: datetime
    size_bytes: int = 0
    committed: bool = False


class RestoreOutcome(BaseModel):
    """Result of a restore attempt as seen by the orchestrator."""

    matched_key: str | None = None
    exact_match: bool = False
    error_kind: CacheErrorKind | None = None
    message: str = ""


class SaveOutcome(BaseModel):
    """Result of a save attempt as seen by the orchestrator."""

    saved: bool = False
    skipped: bool = False
    error_kind: CacheErrorKind | None = None
    message: str = ""

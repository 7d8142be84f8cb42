# tests/unit/cache/test_base_cache_store.py — v2
"""Tests for cache/base_cache_store.py — ABC, validation and entry selection."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jekyllbuild.cache.base_cache_store import (
    MAX_KEYS,
    BaseCacheStore,
    is_stale_reservation,
    select_entry,
    validate_key,
    validate_keys,
    validate_paths,
)
from jekyllbuild.cache.models import CacheEntry
from jekyllbuild.core.errors import CacheValidationError

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _entry(key: str, minutes: int = 0, committed: bool = True) -> CacheEntry:
    return CacheEntry(
        key=key,
        archive=f"{key}.tar.gz",
        created_at=T0 + timedelta(minutes=minutes),
        committed=committed,
    )


class TestBaseCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseCacheStore()  # type: ignore[abstract]

    def test_has_required_methods(self):
        for method in ["restore", "save", "delete", "list_entries"]:
            assert hasattr(BaseCacheStore, method)


class TestValidation:
    def test_empty_paths(self):
        with pytest.raises(CacheValidationError, match="Path Validation Error"):
            validate_paths([])

    def test_paths_ok(self):
        validate_paths(["vendor/bundle"])

    @pytest.mark.parametrize("key", ["", "a,b", "x" * 513])
    def test_bad_keys(self, key):
        with pytest.raises(CacheValidationError, match="Key Validation Error"):
            validate_key(key)

    def test_max_length_ok(self):
        validate_key("x" * 512)

    def test_too_many_keys(self):
        with pytest.raises(CacheValidationError, match="maximum"):
            validate_keys([f"k{i}" for i in range(MAX_KEYS + 1)])


class TestSelectEntry:
    def test_exact_primary_preferred(self):
        entries = [_entry("Linux-gems-abc", 0), _entry("Linux-gems-abcdef", 5)]
        assert select_entry(entries, ["Linux-gems-abc"]).key == "Linux-gems-abc"

    def test_prefix_newest(self):
        entries = [_entry("Linux-gems-old", 0), _entry("Linux-gems-new", 10)]
        chosen = select_entry(entries, ["Linux-gems-xyz", "Linux-gems-"])
        assert chosen.key == "Linux-gems-new"

    def test_keys_in_order(self):
        entries = [_entry("bundle-use-ruby-Linux-gems-1", 10), _entry("Linux-gems-1", 0)]
        chosen = select_entry(
            entries, ["nope", "Linux-gems-", "bundle-use-ruby-Linux-gems-"]
        )
        assert chosen.key == "Linux-gems-1"

    def test_uncommitted_ignored(self):
        entries = [_entry("Linux-gems-abc", committed=False)]
        assert select_entry(entries, ["Linux-gems-abc", "Linux-gems-"]) is None

    def test_no_match(self):
        assert select_entry([_entry("other")], ["Linux-gems-"]) is None


class TestStaleReservation:
    def test_committed_never_stale(self):
        assert is_stale_reservation(_entry("k"), now=T0 + timedelta(days=30)) is False

    def test_fresh_reservation(self):
        entry = _entry("k", committed=False)
        assert is_stale_reservation(entry, ttl_seconds=600, now=T0 + timedelta(minutes=5)) is False

    def test_old_reservation(self):
        entry = _entry("k", committed=False)
        assert is_stale_reservation(entry, ttl_seconds=600, now=T0 + timedelta(minutes=11)) is True

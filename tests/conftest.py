# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides workspace builders, settings factories, an in-memory cache store and
mocked Bundler/formatter collaborators. No test talks to a real Bundler.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from jekyllbuild.cache.base_cache_store import BaseCacheStore
from jekyllbuild.cache.models import CacheEntry
from jekyllbuild.config.settings import Settings
from jekyllbuild.logging.context import clear_context

_ENV_VARS = [
    "JEKYLL_SRC", "INPUT_JEKYLL_SRC",
    "SRC", "INPUT_SRC",
    "GEM_SRC", "INPUT_GEM_SRC",
    "ENABLE_CACHE", "INPUT_ENABLE_CACHE",
    "KEY", "INPUT_KEY",
    "RESTORE_KEYS", "INPUT_RESTORE_KEYS", "INPUT_RESTORE-KEYS",
    "WORKSPACE", "GITHUB_WORKSPACE",
    "GITHUB_ENV", "GITHUB_ACTIONS",
    "CACHE_BACKEND", "CACHE_ROOT", "CACHE_REDIS_URL",
    "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE",
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch):
    """Keep CI runner variables from leaking into Settings."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    clear_context()


# === FIXTURES: Workspace ===


def write_tree(root: Path, files: dict[str, str | bytes]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty repository checkout."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def make_tree(workspace: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Write files into the workspace and return it."""

    def _make(files: dict[str, str | bytes]) -> Path:
        write_tree(workspace, files)
        return workspace

    return _make


@pytest.fixture
def blog_workspace(make_tree) -> Path:
    """A single Jekyll site under blog/ with Gemfile and lock file."""
    return make_tree({
        "blog/_config.yml": "title: Blog\n",
        "blog/Gemfile": 'source "https://rubygems.org"\ngem "jekyll"\n',
        "blog/Gemfile.lock": "GEM\n  specs:\n    jekyll (4.3.3)\n",
    })


@pytest.fixture
def make_settings(workspace: Path, tmp_path: Path) -> Callable[..., Settings]:
    """Settings bound to the test workspace with a temp cache root."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "workspace": str(workspace),
            "cache_root": tmp_path / "cache",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)  # type: ignore[arg-type]

    return _make


# === FIXTURES: Collaborators ===


class InMemoryCacheStore(BaseCacheStore):
    """Cache store double recording calls.

    ``restore_result`` is returned from restore; ``restore_error`` and
    ``save_error`` are raised when set.
    """

    def __init__(self) -> None:
        self.restore_result: str | None = None
        self.restore_error: Exception | None = None
        self.save_error: Exception | None = None
        self.restore_calls: list[tuple[list[str], str, list[str]]] = []
        self.save_calls: list[tuple[list[str], str]] = []
        self.entries: dict[str, CacheEntry] = {}

    async def restore(
        self, paths: Sequence[str], primary_key: str, restore_keys: Sequence[str]
    ) -> str | None:
        self.restore_calls.append((list(paths), primary_key, list(restore_keys)))
        if self.restore_error is not None:
            raise self.restore_error
        return self.restore_result

    async def save(self, paths: Sequence[str], key: str) -> None:
        self.save_calls.append((list(paths), key))
        if self.save_error is not None:
            raise self.save_error
        self.entries[key] = CacheEntry(
            key=key,
            archive=f"{key}.tar.gz",
            created_at=datetime.now(timezone.utc),
            committed=True,
        )

    async def delete(self, key: str) -> None:
        self.entries.pop(key, None)

    async def list_entries(self) -> list[CacheEntry]:
        return list(self.entries.values())


@pytest.fixture
def memory_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def mock_bundler() -> MagicMock:
    """Bundler double whose install/build succeed by default."""
    bundler = MagicMock()
    bundler.install = AsyncMock(return_value=None)
    bundler.build = AsyncMock(return_value=None)
    return bundler


@pytest.fixture
def mock_formatter() -> MagicMock:
    formatter = MagicMock()
    formatter.format_all = AsyncMock(return_value=[])
    return formatter

# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from jekyllbuild.cache.base_cache_store import BaseCacheStore
from jekyllbuild.config.settings import Settings


def create_cache_store(settings: Settings) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = settings.cache_backend
    workspace = settings.workspace_path

    if backend == "local":
        from jekyllbuild.cache.local_store import LocalCacheStore
        return LocalCacheStore(cache_root=settings.cache_root, workspace=workspace)

    if backend == "redis":
        from jekyllbuild.cache.redis_store import RedisCacheStore
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(
            redis_url=settings.cache_redis_url, workspace=workspace,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")

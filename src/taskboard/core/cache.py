"""Redis-backed response cache with namespace invalidation."""

from __future__ import annotations

import asyncio
import json
import logging
from threading import Lock
from typing import Any, Awaitable, Callable, TypeVar, cast

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from .config import get_settings

T = TypeVar("T")

logger = logging.getLogger(__name__)

TASK_LIST_CACHE_NAMESPACE = "tasks:list"
TASK_STATISTICS_CACHE_NAMESPACE = "tasks:statistics"


class CacheMetrics:
    """In-memory counters for cache behaviour instrumentation."""

    _FIELDS = ("hits", "misses", "stores", "invalidations", "skipped")

    def __init__(self) -> None:
        self._lock = Lock()
        self._counts = dict.fromkeys(self._FIELDS, 0)

    def _bump(self, field: str, amount: int = 1) -> None:
        with self._lock:
            self._counts[field] += amount

    def record_hit(self) -> None:
        self._bump("hits")

    def record_miss(self) -> None:
        self._bump("misses")

    def record_store(self) -> None:
        self._bump("stores")

    def record_invalidation(self, amount: int = 1) -> None:
        self._bump("invalidations", amount)

    def record_skipped(self) -> None:
        self._bump("skipped")

    def reset(self) -> None:
        with self._lock:
            self._counts = dict.fromkeys(self._FIELDS, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)


cache_metrics = CacheMetrics()

_redis_client: Redis | None = None
_redis_lock = asyncio.Lock()
_connection_error_logged = False


def set_cache_client(client: Redis | None) -> None:
    """Inject a Redis client instance (primarily for tests)."""

    global _redis_client, _connection_error_logged
    _redis_client = client
    _connection_error_logged = False


async def close_cache_client() -> None:
    """Close the active Redis client, if any."""

    global _redis_client
    client = _redis_client
    _redis_client = None
    if client is not None:
        await client.aclose()


async def _create_redis_client() -> Redis | None:
    global _connection_error_logged

    settings = get_settings()
    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError):
        if not _connection_error_logged:
            logger.warning("Redis cache unavailable; caching will be bypassed.", exc_info=True)
            _connection_error_logged = True
        await client.aclose()
        return None
    _connection_error_logged = False
    return client


async def get_cache_client() -> Redis | None:
    """Return a connected Redis client or ``None`` if caching is disabled."""

    if not get_settings().cache_enabled:
        return None

    global _redis_client
    if _redis_client is not None:
        return _redis_client

    async with _redis_lock:
        if _redis_client is None:
            _redis_client = await _create_redis_client()
        return _redis_client


def _resolve_ttl(ttl: int | None, default: int) -> int | None:
    expires = default if ttl is None else ttl
    return expires if expires > 0 else None


async def cache_get_or_set(
    *,
    namespace: str,
    key: str,
    builder: Callable[[], Awaitable[T]],
    ttl: int | None = None,
    model: type[BaseModel] | None = None,
) -> T:
    """Return a cached value or compute and store it if absent.

    The cached entry is the JSON encoding of the builder's result. On a hit the
    stored document is returned as-is (validated into ``model`` when one is given),
    so repeated calls with the same key yield identical payloads until the entry
    expires or its namespace is invalidated.
    """

    client = await get_cache_client()
    if client is None:
        cache_metrics.record_skipped()
        return await builder()

    cache_key = f"{namespace}:{key}"

    try:
        cached_payload = await client.get(cache_key)
    except RedisError:
        logger.warning("Failed to read cache key %s; bypassing cache.", cache_key, exc_info=True)
        cached_payload = None

    if cached_payload is not None:
        cache_metrics.record_hit()
        logger.debug("Cache hit for %s", cache_key)
        data: Any = json.loads(cached_payload)
        if model is not None:
            return cast(T, model.model_validate(data))
        return cast(T, data)

    cache_metrics.record_miss()
    logger.debug("Cache miss for %s", cache_key)

    result = await builder()
    if isinstance(result, BaseModel):
        payload = result.model_dump(mode="json", by_alias=True)
    else:
        payload = jsonable_encoder(result)
    expires = _resolve_ttl(ttl, get_settings().cache_default_ttl_seconds)

    try:
        await client.set(cache_key, json.dumps(payload), ex=expires)
    except RedisError:
        logger.warning("Failed to store cache key %s", cache_key, exc_info=True)
    else:
        cache_metrics.record_store()
        logger.debug("Stored cache entry for %s", cache_key, extra={"ttl": expires})

    return result


async def invalidate_namespace(namespace: str, match: str = "*") -> int:
    """Remove cached entries under ``namespace`` and return how many were dropped."""

    client = await get_cache_client()
    if client is None:
        return 0

    pattern = f"{namespace}:{match}"
    try:
        keys = [key async for key in client.scan_iter(match=pattern)]
        if keys:
            await client.delete(*keys)
    except RedisError:
        logger.warning("Failed to invalidate cache keys for pattern %s", pattern, exc_info=True)
        return 0

    if keys:
        cache_metrics.record_invalidation(len(keys))
        logger.info("Invalidated %d cache entries for pattern %s", len(keys), pattern)
    return len(keys)


async def invalidate_task_cache() -> None:
    """Drop every cached task listing and statistics entry, for all owners."""

    await invalidate_namespace(TASK_LIST_CACHE_NAMESPACE)
    await invalidate_namespace(TASK_STATISTICS_CACHE_NAMESPACE)


__all__ = [
    "TASK_LIST_CACHE_NAMESPACE",
    "TASK_STATISTICS_CACHE_NAMESPACE",
    "CacheMetrics",
    "cache_get_or_set",
    "cache_metrics",
    "close_cache_client",
    "get_cache_client",
    "invalidate_namespace",
    "invalidate_task_cache",
    "set_cache_client",
]

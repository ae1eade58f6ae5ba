# barberworld/client/cache.py
"""
Key-value cache used opportunistically to skip server round trips.

The cache is advisory: a failing store behaves like an empty one and callers
always have the server to fall back on. Values must be JSON-serializable.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from barberworld.config import REDIS_URL

logger = logging.getLogger(__name__)


def appointments_key(actor_id: str, role: str) -> str:
    return f"appointments:{role}:{actor_id}"


def slots_key(shop_id, on_date: date) -> str:
    return f"slots:{shop_id}:{on_date.isoformat()}"


class CacheStore:
    """get / set / remove over JSON values"""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    async def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryCacheStore(CacheStore):
    """In-process store; values are kept serialized so callers never share objects"""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return json.loads(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisCacheStore(CacheStore):
    """Redis-backed store with automatic serialization"""

    def __init__(self, url: Optional[str] = None, client=None, prefix: str = "barberworld:"):
        self.url = url
        self.redis_client = client
        self.prefix = prefix

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            self.redis_client = redis.from_url(self.url, decode_responses=True)
        return self.redis_client

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self._get_client().get(self.prefix + key)
            if value is None:
                logger.debug(f"Cache MISS: {key}")
                return None
            logger.debug(f"Cache HIT: {key}")
            return json.loads(value)
        except (RedisError, ValueError) as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> None:
        try:
            await self._get_client().set(self.prefix + key, json.dumps(value))
        except RedisError as e:
            logger.warning(f"Cache set error for {key}: {e}")

    async def remove(self, key: str) -> None:
        try:
            await self._get_client().delete(self.prefix + key)
        except RedisError as e:
            logger.warning(f"Cache delete error for {key}: {e}")


def make_cache_store(url: Optional[str] = REDIS_URL) -> CacheStore:
    if url:
        return RedisCacheStore(url)
    logger.info("REDIS_URL not set, using in-memory cache")
    return MemoryCacheStore()


@dataclass
class Snapshot:
    items: List[dict]
    fetched_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.fetched_at < ttl


async def load_snapshot(store: CacheStore, key: str) -> Optional[Snapshot]:
    blob = await store.get(key)
    if not isinstance(blob, dict):
        return None
    try:
        return Snapshot(items=list(blob["items"]), fetched_at=float(blob["fetchedAt"]))
    except (KeyError, TypeError, ValueError):
        logger.warning(f"Discarding unreadable cache entry {key}")
        return None


async def save_snapshot(store: CacheStore, key: str, items: List[dict], fetched_at: float) -> None:
    await store.set(key, {"items": items, "fetchedAt": fetched_at})

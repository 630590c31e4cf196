import json
import time
from collections.abc import Callable, Sequence
from typing import Protocol

from cachetools import TLRUCache
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import RECOMMENDATION_CACHE_KEY, RECOMMENDATION_CACHE_PATTERN
from app.models.recommendation import Category, RecommendationItem
from app.services.redis_service import RedisService


class RecommendationCache(Protocol):
    """Shaped batches keyed by (category, preference fingerprint)."""

    async def get(self, category: Category, fingerprint: str) -> list[RecommendationItem] | None: ...

    async def set(
        self, category: Category, fingerprint: str, items: Sequence[RecommendationItem], ttl_minutes: int
    ) -> bool: ...

    async def clear(self) -> None: ...


def cache_key(category: Category, fingerprint: str) -> str:
    return RECOMMENDATION_CACHE_KEY.format(category=category.value, fingerprint=fingerprint)


def _snapshot(items: Sequence[RecommendationItem]) -> list[RecommendationItem]:
    return [item.model_copy(deep=True) for item in items]


class InMemoryRecommendationCache:
    """
    Process-local cache. Every entry carries its own TTL; ``timer`` is injectable so
    expiry can be driven from tests.
    """

    def __init__(
        self,
        maxsize: int = settings.RECOMMENDATION_CACHE_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._entries: TLRUCache = TLRUCache(
            maxsize=maxsize,
            ttu=lambda _key, value, now: now + value[0],
            timer=timer,
        )

    async def get(self, category: Category, fingerprint: str) -> list[RecommendationItem] | None:
        key = cache_key(category, fingerprint)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Recommendation cache miss: {key}")
            return None
        logger.debug(f"Recommendation cache hit: {key}")
        return _snapshot(entry[1])

    async def set(
        self, category: Category, fingerprint: str, items: Sequence[RecommendationItem], ttl_minutes: int
    ) -> bool:
        if ttl_minutes <= 0:
            return False
        self._entries[cache_key(category, fingerprint)] = (ttl_minutes * 60, _snapshot(items))
        return True

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisRecommendationCache:
    """Shared cache stored as JSON strings with a Redis-side expiry."""

    def __init__(self, redis: RedisService):
        self.redis = redis

    async def get(self, category: Category, fingerprint: str) -> list[RecommendationItem] | None:
        key = cache_key(category, fingerprint)
        cached = await self.redis.get(key)
        if not cached:
            logger.debug(f"Recommendation cache miss: {key}")
            return None
        try:
            payload = json.loads(cached)
            items = [RecommendationItem.model_validate(entry) for entry in payload]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning(f"Dropping unreadable cache entry {key}: {e}")
            await self.redis.delete(key)
            return None
        logger.debug(f"Recommendation cache hit: {key}")
        return items

    async def set(
        self, category: Category, fingerprint: str, items: Sequence[RecommendationItem], ttl_minutes: int
    ) -> bool:
        if ttl_minutes <= 0:
            return False
        payload = json.dumps([item.model_dump(mode="json", by_alias=True) for item in items], ensure_ascii=False)
        return await self.redis.set(cache_key(category, fingerprint), payload, ttl=ttl_minutes * 60)

    async def clear(self) -> None:
        deleted = await self.redis.delete_by_pattern(RECOMMENDATION_CACHE_PATTERN)
        logger.debug(f"Cleared {deleted} recommendation cache entries")

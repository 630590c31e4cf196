"""
Test doubles and small factories shared across the test suite.
"""
import asyncio
from collections.abc import Sequence
from urllib.parse import quote

from app.models.recommendation import Category, HistoryEntry, RecommendationCandidate, RecommendationItem
from app.services.recommendation_cache import InMemoryRecommendationCache
from app.services.stores import InMemoryHistoryStore


class FakeGenerator:
    """Generator double: returns canned candidates, raises, or stalls."""

    def __init__(
        self,
        candidates: Sequence[RecommendationCandidate] = (),
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.candidates = list(candidates)
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def generate(self, history, category, locale, preference=None, count=12):
        self.calls.append(
            {"history": list(history), "category": category, "locale": locale, "preference": preference, "count": count}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [c.model_copy(deep=True) for c in self.candidates]


class SpyCache(InMemoryRecommendationCache):
    """In-memory cache that records every call made to it."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, Category, str]] = []

    async def get(self, category, fingerprint):
        self.calls.append(("get", category, fingerprint))
        return await super().get(category, fingerprint)

    async def set(self, category, fingerprint, items, ttl_minutes):
        self.calls.append(("set", category, fingerprint))
        return await super().set(category, fingerprint, items, ttl_minutes)


class FailingHistoryStore(InMemoryHistoryStore):
    async def read(self, user_id, category, limit):
        raise ConnectionError("history backend down")

    async def write(self, user_id, items):
        raise ConnectionError("history backend down")


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_candidate(
    title: str,
    sub_type: str | None = None,
    platform: str = "",
    query: str = "",
    tags: Sequence[str] = (),
    description: str = "",
) -> RecommendationCandidate:
    return RecommendationCandidate.model_validate(
        {
            "title": title,
            "description": description or f"About {title}",
            "reason": "Picked for you",
            "tags": list(tags),
            "searchQuery": query,
            "platform": platform,
            "subType": sub_type,
        }
    )


def history_of(*titles: str, category: Category = Category.ENTERTAINMENT) -> list[HistoryEntry]:
    return [HistoryEntry(title=t, category=category, metadata={"searchQuery": t}) for t in titles]


def make_item(
    title: str,
    category: Category = Category.ENTERTAINMENT,
    platform: str = "YouTube",
    query: str = "",
    sub_type: str | None = None,
) -> RecommendationItem:
    query = query or title.lower()
    return RecommendationItem.model_validate(
        {
            "title": title,
            "category": category,
            "subType": sub_type,
            "searchQuery": query,
            "platform": platform,
            "link": f"https://www.youtube.com/results?search_query={quote(query)}",
        }
    )

class FakeRedis:
    """Stand-in for RedisService keeping strings and lists in dicts."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.lists: dict[str, list[str]] = {}

    async def get(self, key: str) -> str | None:
        return None if self.fail else self.values.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        if self.fail:
            return False
        self.values[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> bool:
        return self.values.pop(key, None) is not None

    async def delete_by_pattern(self, pattern: str) -> int:
        prefix = pattern.rstrip("*")
        keys = [k for k in self.values if k.startswith(prefix)]
        for key in keys:
            del self.values[key]
        return len(keys)

    async def push_capped(self, key: str, values: list[str], max_length: int) -> bool:
        if self.fail:
            return False
        stored = self.lists.setdefault(key, [])
        for value in values:
            stored.insert(0, value)
        del stored[max_length:]
        return True

    async def list_range(self, key: str, limit: int) -> list[str] | None:
        if self.fail:
            return None
        return self.lists.get(key, [])[:limit]

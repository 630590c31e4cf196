import json
from collections import defaultdict, deque
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import HISTORY_KEY, PREFERENCE_KEY
from app.core.exceptions import PersistenceFailure
from app.core.security import redact_user
from app.models.recommendation import Category, HistoryEntry, RecommendationItem, UserPreference
from app.services.redis_service import RedisService


class HistoryStore(Protocol):
    async def read(self, user_id: str, category: Category, limit: int) -> list[HistoryEntry]:
        """Newest first, at most ``limit`` entries."""
        ...

    async def write(self, user_id: str, items: Sequence[RecommendationItem]) -> list[str]:
        """Record served items and return their entry ids."""
        ...


class PreferenceStore(Protocol):
    async def read(self, user_id: str, category: Category) -> UserPreference | None: ...


def history_entry_for(item: RecommendationItem) -> tuple[str, HistoryEntry]:
    entry = HistoryEntry(
        title=item.title,
        category=item.category,
        metadata={
            "searchQuery": item.search_query,
            "platform": item.platform,
            "link": item.link,
            "subType": item.sub_type.value if item.sub_type else None,
        },
        created_at=datetime.now(timezone.utc),
    )
    return uuid4().hex, entry


class InMemoryHistoryStore:
    def __init__(self, max_entries: int = settings.HISTORY_MAX_ENTRIES):
        self.max_entries = max_entries
        self._entries: dict[tuple[str, Category], deque[HistoryEntry]] = defaultdict(
            lambda: deque(maxlen=self.max_entries)
        )

    async def read(self, user_id: str, category: Category, limit: int) -> list[HistoryEntry]:
        entries = self._entries.get((user_id, category))
        if not entries:
            return []
        return list(entries)[:limit]

    async def write(self, user_id: str, items: Sequence[RecommendationItem]) -> list[str]:
        recorded = [(item.category, *history_entry_for(item)) for item in items]
        # Reverse so the batch keeps its order at the head of the deque
        for category, _, entry in reversed(recorded):
            self._entries[(user_id, category)].appendleft(entry)
        return [entry_id for _, entry_id, _ in recorded]

    def clear(self) -> None:
        self._entries.clear()


class InMemoryPreferenceStore:
    def __init__(self) -> None:
        self._preferences: dict[tuple[str, Category], UserPreference] = {}

    async def read(self, user_id: str, category: Category) -> UserPreference | None:
        return self._preferences.get((user_id, category))

    async def save(self, user_id: str, category: Category, preference: UserPreference) -> None:
        self._preferences[(user_id, category)] = preference.model_copy(update={"user_id": user_id, "category": category})

    def clear(self) -> None:
        self._preferences.clear()


class RedisHistoryStore:
    """History kept as a capped Redis list per (user, category), newest at the head."""

    def __init__(self, redis: RedisService, max_entries: int = settings.HISTORY_MAX_ENTRIES):
        self.redis = redis
        self.max_entries = max_entries

    @staticmethod
    def _key(user_id: str, category: Category) -> str:
        return HISTORY_KEY.format(user_id=user_id, category=category.value)

    async def read(self, user_id: str, category: Category, limit: int) -> list[HistoryEntry]:
        raw = await self.redis.list_range(self._key(user_id, category), limit)
        if raw is None:
            raise PersistenceFailure(f"History for {redact_user(user_id)} could not be read")

        entries = []
        for value in raw:
            try:
                entries.append(HistoryEntry.model_validate_json(value))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable history entry for {redact_user(user_id)}: {e}")
        return entries

    async def write(self, user_id: str, items: Sequence[RecommendationItem]) -> list[str]:
        grouped: dict[Category, list[str]] = defaultdict(list)
        ids = []
        for item in items:
            entry_id, entry = history_entry_for(item)
            grouped[item.category].append(entry.model_dump_json())
            ids.append(entry_id)

        for category, values in grouped.items():
            # lpush puts the last value at the head, so push in reverse to keep item order
            if not await self.redis.push_capped(self._key(user_id, category), values[::-1], self.max_entries):
                raise PersistenceFailure(f"History write failed for {redact_user(user_id)} ({category.value})")
        return ids


class RedisPreferenceStore:
    def __init__(self, redis: RedisService):
        self.redis = redis

    @staticmethod
    def _key(user_id: str, category: Category) -> str:
        return PREFERENCE_KEY.format(user_id=user_id, category=category.value)

    async def read(self, user_id: str, category: Category) -> UserPreference | None:
        cached = await self.redis.get(self._key(user_id, category))
        if not cached:
            return None
        try:
            return UserPreference.model_validate(json.loads(cached))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to decode preference for {redact_user(user_id)}: {e}")
            return None

    async def save(self, user_id: str, category: Category, preference: UserPreference) -> None:
        record = preference.model_copy(update={"user_id": user_id, "category": category})
        if not await self.redis.set(self._key(user_id, category), record.model_dump_json()):
            raise PersistenceFailure(f"Preference write failed for {redact_user(user_id)}")

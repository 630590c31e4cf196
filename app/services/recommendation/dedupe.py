import random
import re
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TypeVar

from app.core.constants import MAX_EXCLUSION_SIGNATURES
from app.models.recommendation import HistoryEntry, RecommendationCandidate
from app.services.recommendation.fingerprint import normalize_tag

T = TypeVar("T", bound=RecommendationCandidate)

_PUNCTUATION = re.compile(r"[·•。！!？?，,、；;：:\"'“”‘’（）()【】\[\]{}<>《》]")


def normalize_text_key(text: str | None) -> str:
    """Matching key for titles and queries: lower-cased, no whitespace, no common punctuation."""
    if not text:
        return ""
    return _PUNCTUATION.sub("", "".join(text.split()).lower())


class DedupeMode(str, Enum):
    STRICT = "strict"
    LOOSE = "loose"


def _capped_keys(values: Iterable[str | None]) -> set[str]:
    keys: list[str] = []
    for value in values:
        key = normalize_text_key(value)
        if key:
            keys.append(key)
        if len(keys) >= MAX_EXCLUSION_SIGNATURES:
            break
    return set(keys)


def composite_key(item: RecommendationCandidate) -> str | None:
    title_key = normalize_text_key(item.title)
    if not title_key:
        return None
    kind = item.sub_type.value if item.sub_type else ""
    return f"{title_key}|{normalize_text_key(item.search_query)}|{kind}"


def overlap_score(tags: Iterable[str], preference_tags: set[str]) -> int:
    if not preference_tags:
        return 0
    return sum(1 for tag in {normalize_tag(t) for t in tags} if tag in preference_tags)


class Deduplicator:
    """
    Count-bounded, duplicate-free selection from a candidate pool.

    Siblings sharing a (title, query, sub-type) key are always collapsed to the first
    one. Caller-supplied ``exclude_titles`` are always dropped. History matches (by
    title or search query) are dropped in ``strict`` mode and only used to fill the
    tail in ``loose`` mode.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def rank(self, pool: Sequence[T], preference_tags: Iterable[str] | None) -> list[T]:
        """Order by preference-tag overlap, ties broken by an independent random draw."""
        wanted = {normalize_tag(t) for t in (preference_tags or []) if isinstance(t, str) and normalize_tag(t)}
        if not wanted:
            return list(pool)
        scored = [(overlap_score(item.tags, wanted), self.rng.random(), item) for item in pool]
        scored.sort(key=lambda entry: (-entry[0], entry[1]))
        return [item for _, _, item in scored]

    def select(
        self,
        pool: Sequence[T],
        count: int,
        history: Sequence[HistoryEntry] | None = None,
        exclude_titles: Sequence[str] | None = None,
        mode: DedupeMode = DedupeMode.STRICT,
        preference_tags: Iterable[str] | None = None,
    ) -> list[T]:
        if count <= 0 or not pool:
            return []

        history = history or []
        excluded_titles = _capped_keys(exclude_titles or [])
        history_titles = _capped_keys(entry.title for entry in history)
        history_queries = _capped_keys(entry.search_query for entry in history)

        ordered = self.rank(pool, preference_tags) if preference_tags else list(pool)

        seen: set[str] = set()
        output: list[T] = []

        def in_history(item: T) -> bool:
            query_key = normalize_text_key(item.search_query)
            return normalize_text_key(item.title) in history_titles or bool(query_key and query_key in history_queries)

        def try_add(item: T, allow_history: bool) -> None:
            key = composite_key(item)
            if key is None or key in seen:
                return
            if normalize_text_key(item.title) in excluded_titles:
                return
            if not allow_history and in_history(item):
                return
            seen.add(key)
            output.append(item)

        for item in ordered:
            try_add(item, allow_history=False)
            if len(output) >= count:
                return output

        if mode == DedupeMode.STRICT:
            return output

        # Loose: history matches rank behind every clean candidate
        for item in ordered:
            try_add(item, allow_history=True)
            if len(output) >= count:
                return output
        return output

import asyncio
import random
from collections.abc import Coroutine, Sequence
from typing import Any, Protocol

from loguru import logger

from app.core.config import settings
from app.core.constants import (
    GENERATOR_FAILED_MESSAGE,
    GENERATOR_MAX_CANDIDATES,
    GENERATOR_MIN_CANDIDATES,
    SUPPLEMENTED_KEY,
)
from app.core.exceptions import GeneratorFailure, GeneratorUnavailable, PersistenceFailure
from app.core.security import redact_user
from app.models.recommendation import (
    Category,
    HistoryEntry,
    Locale,
    RecommendationCandidate,
    RecommendationItem,
    RecommendRequest,
    RecommendResponse,
    Source,
    UserPreference,
)
from app.services.gemini import GeminiGenerator
from app.services.platforms import (
    ROTATING_CATEGORIES,
    LinkSynthesizer,
    PlatformCatalog,
    PlatformSelector,
    platform_catalog,
)
from app.services.recommendation.classify import classify
from app.services.recommendation.dedupe import DedupeMode, Deduplicator
from app.services.recommendation.diversity import DiversityEnforcer
from app.services.recommendation.enhancers import enhance
from app.services.recommendation.fallback import FallbackPool
from app.services.recommendation.fingerprint import fingerprint
from app.services.recommendation_cache import (
    InMemoryRecommendationCache,
    RecommendationCache,
    RedisRecommendationCache,
)
from app.services.redis_service import RedisService
from app.services.stores import (
    HistoryStore,
    InMemoryHistoryStore,
    InMemoryPreferenceStore,
    PreferenceStore,
    RedisHistoryStore,
    RedisPreferenceStore,
)


class Generator(Protocol):
    async def generate(
        self,
        history: Sequence[HistoryEntry],
        category: Category,
        locale: Locale,
        preference: UserPreference | None = None,
        count: int = GENERATOR_MIN_CANDIDATES,
    ) -> list[RecommendationCandidate]: ...


def generator_batch_size(count: int) -> int:
    return min(GENERATOR_MAX_CANDIDATES, max(count * 3, GENERATOR_MIN_CANDIDATES))


class RecommendationOrchestrator:
    """
    Request pipeline: cache check, generation (or fallback), shaping, persistence.

    Every collaborator is injected. Persistence runs as detached tasks that never
    delay or fail the response; ``drain()`` waits for them.
    """

    def __init__(
        self,
        cache: RecommendationCache,
        history_store: HistoryStore,
        preference_store: PreferenceStore,
        generator: Generator | None = None,
        catalog: PlatformCatalog = platform_catalog,
        rng: random.Random | None = None,
        generator_timeout: float = settings.GENERATOR_TIMEOUT_SECONDS,
        cache_ttl_minutes: int = settings.RECOMMENDATION_CACHE_TTL_MINUTES,
        deployment_region: str = settings.DEPLOYMENT_REGION,
        fitness_theory_variant: bool = settings.FITNESS_THEORY_VARIANT,
    ):
        self.cache = cache
        self.history_store = history_store
        self.preference_store = preference_store
        self.generator = generator
        self.rng = rng or random.Random()
        self.generator_timeout = generator_timeout
        self.cache_ttl_minutes = cache_ttl_minutes

        self.deduplicator = Deduplicator(self.rng)
        self.diversity = DiversityEnforcer(self.deduplicator, deployment_region, fitness_theory_variant)
        self.fallback_pool = FallbackPool(self.rng)
        self.selector = PlatformSelector(catalog)
        self.links = LinkSynthesizer(catalog)

        self._pending: set[asyncio.Task] = set()
        self.persistence_failures = 0

    async def recommend(self, request: RecommendRequest) -> RecommendResponse:
        category = request.category
        user = redact_user(request.user_id)
        logger.info(f"[{user}] Recommending {request.count} {category.value} items ({request.locale}/{request.client})")

        history: list[HistoryEntry] = []
        preference: UserPreference | None = None
        if not request.is_anonymous:
            history, preference = await asyncio.gather(
                self._load_history(request),
                self._load_preference(request),
            )
        pref_fingerprint = fingerprint(preference)

        # 1. Cache check. Anonymous callers never touch the cache.
        if not request.is_anonymous and not request.skip_cache:
            cached = await self._cache_get(category, pref_fingerprint)
            if cached:
                self.rng.shuffle(cached)
                logger.info(f"[{user}] Serving {category.value} from cache")
                return RecommendResponse(recommendations=cached[: request.count], source=Source.CACHE)

        # 2. Generate, or degrade to the curated pool
        source = Source.AI
        error: str | None = None
        items: list[RecommendationItem] = []
        try:
            candidates = await self._generate(request, history, preference)
            supplement = self.fallback_pool.candidates(category, request.locale)
            items = self.shape(candidates, request, history, preference, supplement=supplement)
            generated = sum(1 for item in items if not item.metadata.get(SUPPLEMENTED_KEY))
            if not items:
                logger.warning(f"[{user}] Generated {category.value} items were all filtered out, using fallback")
                source = Source.FALLBACK
            elif generated * 2 < len(items):
                logger.info(f"[{user}] Only {generated}/{len(items)} {category.value} items were generated")
                source = Source.FALLBACK
        except GeneratorUnavailable as e:
            logger.info(f"Generator unavailable ({e}), using fallback for {category.value}")
            source = Source.FALLBACK
        except (GeneratorFailure, asyncio.TimeoutError) as e:
            logger.warning(f"[{user}] Generator failed for {category.value}: {e!r}")
            source = Source.FALLBACK
            error = GENERATOR_FAILED_MESSAGE
        except Exception as e:
            logger.exception(f"[{user}] Unexpected generator error for {category.value}: {e}")
            source = Source.FALLBACK
            error = GENERATOR_FAILED_MESSAGE

        # 3. Shape the fallback pool through the same steps
        if source == Source.FALLBACK and not items:
            pool = self.fallback_pool.candidates(category, request.locale)
            items = self.shape(pool, request, history, preference)
            if not items and history:
                logger.info(f"[{user}] Curated {category.value} items all seen before, allowing repeats")
                items = self.shape(pool, request, history, preference, DedupeMode.LOOSE)

        # 4. Persist in the background
        if not request.is_anonymous and items:
            self._spawn(self._write_history(request.user_id, items), "history write")
            if source == Source.AI:
                self._spawn(self._write_cache(category, pref_fingerprint, items), "cache write")

        return RecommendResponse(recommendations=items[: request.count], source=source, error=error)

    def shape(
        self,
        pool: Sequence[RecommendationCandidate],
        request: RecommendRequest,
        history: Sequence[HistoryEntry],
        preference: UserPreference | None,
        mode: DedupeMode = DedupeMode.STRICT,
        supplement: Sequence[RecommendationCandidate] = (),
    ) -> list[RecommendationItem]:
        """
        Turn a raw pool into at most ``request.count`` finished, linked items.

        ``supplement`` candidates only fill what ``pool`` cannot: required
        sub-types it does not cover, then any shortfall against ``count``. They
        go through the same strict exclusions and are marked in their metadata.
        """
        category = request.category
        tags = preference.tags if preference else None
        classified = [classify(item, category) for item in pool]
        ranked = self.deduplicator.rank(classified, tags)

        required = self.diversity.required_sub_types(category, request.locale, request.client)
        picks = self.diversity.enforce(ranked, required, history, request.exclude_titles)

        extra = [
            classify(item.model_copy(update={"metadata": {**item.metadata, SUPPLEMENTED_KEY: True}}), category)
            for item in supplement
        ]
        covered = {item.sub_type for item in picks}
        missing = [sub_type for sub_type in required if sub_type not in covered]
        if missing and extra:
            rolling = [item.title for item in picks] + request.exclude_titles
            picks += self.diversity.enforce(self.deduplicator.rank(extra, tags), missing, history, rolling)
            picks.sort(key=lambda item: required.index(item.sub_type))

        rolling = [item.title for item in picks] + request.exclude_titles
        fill = self.deduplicator.select(ranked, request.count, history, rolling, mode)
        shortfall = request.count - len(picks) - len(fill)
        if shortfall > 0 and extra:
            rolling += [item.title for item in fill]
            fill += self.deduplicator.select(
                extra, shortfall, history, rolling, DedupeMode.STRICT, preference_tags=tags
            )

        selected = self.deduplicator.select(
            picks + fill, request.count, history, request.exclude_titles, mode
        )
        return [self._finish(item, position, request) for position, item in enumerate(selected)]

    def _finish(self, item: RecommendationCandidate, position: int, request: RecommendRequest) -> RecommendationItem:
        enhanced = enhance(item, request.locale)
        index = position if request.category in ROTATING_CATEGORIES else None
        platform = self.selector.choose(request.category, enhanced.sub_type, request.locale, enhanced.platform, index)
        link = self.links.synthesize(enhanced, platform, request.locale, request.client)

        metadata = {
            **enhanced.metadata,
            "searchQuery": link.query,
            "originalPlatform": item.platform,
            "isSearchLink": link.is_search,
        }
        if link.app_url:
            metadata["appLink"] = link.app_url

        return RecommendationItem(
            title=enhanced.title,
            description=enhanced.description,
            reason=enhanced.reason,
            tags=enhanced.tags,
            category=request.category,
            sub_type=enhanced.sub_type,
            search_query=link.query,
            platform=link.display_name,
            link=link.url,
            link_type=link.link_type,
            metadata=metadata,
        )

    async def _generate(
        self,
        request: RecommendRequest,
        history: list[HistoryEntry],
        preference: UserPreference | None,
    ) -> list[RecommendationCandidate]:
        if self.generator is None:
            raise GeneratorUnavailable("No generator configured")
        candidates = await asyncio.wait_for(
            self.generator.generate(
                history,
                request.category,
                request.locale,
                preference=preference,
                count=generator_batch_size(request.count),
            ),
            timeout=self.generator_timeout,
        )
        if not candidates:
            raise GeneratorFailure("Generator returned no candidates")
        return candidates

    async def _load_history(self, request: RecommendRequest) -> list[HistoryEntry]:
        try:
            return await self.history_store.read(request.user_id, request.category, request.history_limit)
        except Exception as e:
            logger.warning(f"[{redact_user(request.user_id)}] History read failed, continuing without it: {e}")
            return []

    async def _load_preference(self, request: RecommendRequest) -> UserPreference | None:
        try:
            return await self.preference_store.read(request.user_id, request.category)
        except Exception as e:
            logger.warning(f"[{redact_user(request.user_id)}] Preference read failed, continuing without it: {e}")
            return None

    async def _cache_get(self, category: Category, pref_fingerprint: str) -> list[RecommendationItem] | None:
        try:
            return await self.cache.get(category, pref_fingerprint)
        except Exception as e:
            logger.warning(f"Recommendation cache read failed, treating as miss: {e}")
            return None

    async def _write_history(self, user_id: str, items: list[RecommendationItem]) -> None:
        ids = await self.history_store.write(user_id, items)
        logger.debug(f"[{redact_user(user_id)}] Recorded {len(ids)} history entries")

    async def _write_cache(self, category: Category, pref_fingerprint: str, items: list[RecommendationItem]) -> None:
        if not await self.cache.set(category, pref_fingerprint, items, self.cache_ttl_minutes):
            raise PersistenceFailure(f"Cache write for {category.value}:{pref_fingerprint} was not stored")

    def _spawn(self, coro: Coroutine[Any, Any, None], label: str) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)

        def _done(t: asyncio.Task) -> None:
            self._pending.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                self.persistence_failures += 1
                logger.error(f"Background {label} failed: {exc!r}")

        task.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for every in-flight persistence task."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def build_orchestrator(redis: RedisService | None = None) -> RecommendationOrchestrator:
    """Wire an orchestrator from settings."""
    if redis is None and "redis" in (settings.CACHE_BACKEND, settings.STORE_BACKEND):
        redis = RedisService()

    if settings.CACHE_BACKEND == "redis":
        cache: RecommendationCache = RedisRecommendationCache(redis)
    else:
        cache = InMemoryRecommendationCache()

    if settings.STORE_BACKEND == "redis":
        history_store: HistoryStore = RedisHistoryStore(redis)
        preference_store: PreferenceStore = RedisPreferenceStore(redis)
    else:
        history_store = InMemoryHistoryStore()
        preference_store = InMemoryPreferenceStore()

    generator = GeminiGenerator()
    logger.info(
        f"Recommendation pipeline ready: cache={settings.CACHE_BACKEND}, store={settings.STORE_BACKEND}, "
        f"generator={'gemini' if generator.configured else 'disabled'}, region={settings.DEPLOYMENT_REGION}"
    )
    return RecommendationOrchestrator(
        cache=cache,
        history_store=history_store,
        preference_store=preference_store,
        generator=generator if generator.configured else None,
    )

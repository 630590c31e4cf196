"""
Pytest configuration and shared fixtures for the recommendation service tests.
"""
import random
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.exceptions import GeneratorFailure
from app.models.recommendation import Category, RecommendationCandidate, UserPreference
from app.services.rate_limiter import RateLimiter
from app.services.recommendation.orchestrator import RecommendationOrchestrator
from app.services.stores import InMemoryHistoryStore, InMemoryPreferenceStore
from tests.helpers import FakeClock, FakeGenerator, SpyCache, make_candidate


# ============================================================================
# Fixtures: Candidate Pools
# ============================================================================


@pytest.fixture
def entertainment_candidates() -> list[RecommendationCandidate]:
    """Generator output covering every entertainment sub-type, videos first."""
    return [
        make_candidate("Severance Season 2", "video", "YouTube", "severance season 2 trailer", ["sci-fi", "drama"]),
        make_candidate("The Bear", "video", "Netflix", "the bear series", ["drama", "food"]),
        make_candidate("Shogun", "video", "Netflix", "shogun series", ["history", "drama"]),
        make_candidate("Hades II", "game", "Steam", "hades 2", ["roguelike", "action"]),
        make_candidate("Stardew Valley", "game", "Steam", "stardew valley", ["cozy", "farming"]),
        make_candidate("Lo-Fi Beats to Study To", "music", "Spotify", "lofi study playlist", ["lofi", "focus"]),
        make_candidate("Best Films of the Decade", "review", "IMDb", "best films decade list", ["film", "ranking"]),
    ]


@pytest.fixture
def fitness_candidates() -> list[RecommendationCandidate]:
    return [
        make_candidate("20-Minute HIIT Follow-Along", "tutorial", "YouTube", "20 minute hiit", ["hiit", "cardio"]),
        make_candidate("Yoga for Back Pain", "tutorial", "YouTube Fitness", "yoga back pain", ["yoga"]),
        make_candidate("Adjustable Dumbbells Review", "equipment", "GarageGymReviews", "adjustable dumbbells"),
        make_candidate("Climbing Gyms Near Me", "nearby_place", "Google Maps", "climbing gym near me"),
        make_candidate("Why Sleep Builds Muscle", "theory_article", "Medium", "sleep muscle growth science"),
    ]


# ============================================================================
# Fixtures: Services
# ============================================================================


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> SpyCache:
    return SpyCache(maxsize=128, timer=clock)


@pytest.fixture
def history_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore(max_entries=200)


@pytest.fixture
def preference_store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def make_orchestrator(cache, history_store, preference_store, rng):
    """Factory for orchestrators sharing the fixture cache and stores."""

    def _make(generator=None, **overrides) -> RecommendationOrchestrator:
        options = {
            "cache": cache,
            "history_store": history_store,
            "preference_store": preference_store,
            "generator": generator,
            "rng": rng,
            "generator_timeout": 1.0,
            "deployment_region": "INTL",
            "fitness_theory_variant": True,
        }
        options.update(overrides)
        return RecommendationOrchestrator(**options)

    return _make


@pytest.fixture
def seed_preference(preference_store):
    async def _seed(user_id: str, category: Category, tags: list[str]) -> UserPreference:
        preference = UserPreference(tags=tags)
        await preference_store.save(user_id, category, preference)
        return preference

    return _seed


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================


@pytest.fixture
def app_factory(make_orchestrator):
    from app.core.app import create_app

    def _create(generator=None, rate_limit: int = 0, **overrides):
        orchestrator = make_orchestrator(generator, **overrides)
        limiter = RateLimiter(limit=rate_limit)
        return create_app(orchestrator=orchestrator, rate_limiter=limiter)

    return _create


@pytest.fixture
async def async_client(app_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to an app whose generator is not configured."""
    app = app_factory()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def failing_generator() -> FakeGenerator:
    return FakeGenerator(error=GeneratorFailure("model overloaded"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")

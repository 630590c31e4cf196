"""
Integration tests for the HTTP surface: routing, parameter parsing, error mapping.
"""
import json

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.constants import GENERATOR_FAILED_MESSAGE
from app.core.version import __version__
from tests.helpers import FakeGenerator, make_candidate

pytestmark = pytest.mark.integration


@pytest.fixture
def food_generator() -> FakeGenerator:
    return FakeGenerator([make_candidate(t, query=t.lower()) for t in ("Ramen Night", "Taco Tuesday", "Dim Sum")])


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ============================================================================
# Service endpoints
# ============================================================================


class TestServiceEndpoints:
    async def test_root(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": "PickNext API is running"}

    async def test_health(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


# ============================================================================
# GET /api/recommend/{category}
# ============================================================================


class TestRecommendGet:
    async def test_invalid_category(self, async_client):
        response = await async_client.get("/api/recommend/movies")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid category: movies"

    async def test_fallback_payload_shape(self, async_client):
        response = await async_client.get("/api/recommend/food", params={"locale": "en", "count": 3})
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["source"] == "fallback"
        assert body["error"] is None
        assert 1 <= len(body["recommendations"]) <= 3
        item = body["recommendations"][0]
        assert {"title", "searchQuery", "platform", "link", "linkType", "metadata", "category"} <= set(item)
        assert item["category"] == "food"
        assert item["link"].startswith("https://")

    @pytest.mark.parametrize("count,expected_max", [("50", 10), ("0", 1), ("nope", 5)])
    async def test_count_is_clamped(self, async_client, count, expected_max):
        response = await async_client.get("/api/recommend/travel", params={"locale": "en", "count": count})
        assert response.status_code == 200
        assert 1 <= len(response.json()["recommendations"]) <= expected_max

    async def test_category_is_case_insensitive(self, async_client):
        response = await async_client.get("/api/recommend/Shopping", params={"locale": "en", "count": 1})
        assert response.status_code == 200
        assert response.json()["recommendations"][0]["category"] == "shopping"

    @pytest.mark.parametrize(
        "exclude,expected",
        [
            ("Ramen Night|dim sum", ["Taco Tuesday"]),
            (json.dumps(["Ramen Night", "Taco Tuesday"]), ["Dim Sum"]),
        ],
    )
    async def test_exclude_titles(self, app_factory, food_generator, exclude, expected):
        async with client_for(app_factory(food_generator)) as client:
            response = await client.get(
                "/api/recommend/food", params={"locale": "en", "count": 1, "excludeTitles": exclude}
            )
        body = response.json()
        assert body["source"] == "ai"
        assert [i["title"] for i in body["recommendations"]] == expected

    async def test_rate_limit(self, app_factory):
        async with client_for(app_factory(rate_limit=2)) as client:
            codes = [
                (await client.get("/api/recommend/food", params={"userId": "u1"})).status_code for _ in range(3)
            ]
            other = await client.get("/api/recommend/food", params={"userId": "u2"})
        assert codes == [200, 200, 429]
        assert other.status_code == 200

    async def test_unexpected_errors_become_500(self, app_factory):
        app = app_factory()

        async def boom(_request):
            raise RuntimeError("kaput")

        app.state.orchestrator.recommend = boom
        async with client_for(app) as client:
            response = await client.get("/api/recommend/food")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate recommendations"


# ============================================================================
# POST /api/recommend/{category}
# ============================================================================


class TestRecommendPost:
    async def test_fitness_fallback_with_error(self, app_factory, failing_generator):
        async with client_for(app_factory(failing_generator)) as client:
            response = await client.post(
                "/api/recommend/fitness", json={"locale": "zh", "userId": "u1", "count": 3}
            )
        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "fallback"
        assert body["error"] == GENERATOR_FAILED_MESSAGE
        assert [i["subType"] for i in body["recommendations"]] == ["nearby_place", "tutorial", "equipment"]

    async def test_empty_body_uses_defaults(self, async_client):
        response = await async_client.post("/api/recommend/food")
        assert response.status_code == 200
        assert len(response.json()["recommendations"]) <= 5

    async def test_exclude_titles_in_body(self, app_factory, food_generator):
        async with client_for(app_factory(food_generator)) as client:
            response = await client.post(
                "/api/recommend/food", json={"locale": "en", "count": 2, "excludeTitles": ["Taco Tuesday"]}
            )
        assert [i["title"] for i in response.json()["recommendations"]] == ["Ramen Night", "Dim Sum"]

    @pytest.mark.parametrize("content", ["[1, 2]", "{not json", '"text"'])
    async def test_non_object_bodies_are_rejected(self, async_client, content):
        response = await async_client.post(
            "/api/recommend/food", content=content, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    async def test_invalid_field_types(self, async_client):
        response = await async_client.post("/api/recommend/food", json={"skipCache": "sometimes"})
        assert response.status_code == 422

    async def test_invalid_category(self, async_client):
        response = await async_client.post("/api/recommend/pets", json={})
        assert response.status_code == 400

import json

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from pydantic import ValidationError

from app.core.exceptions import InvalidCategory
from app.core.security import redact_user
from app.models.recommendation import Category, RecommendParams, RecommendRequest, RecommendResponse
from app.services.rate_limiter import RateLimiter
from app.services.recommendation.orchestrator import RecommendationOrchestrator

router = APIRouter(prefix="/api/recommend", tags=["recommend"])


def get_orchestrator(request: Request) -> RecommendationOrchestrator:
    return request.app.state.orchestrator


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def parse_exclude_titles(raw: str | None) -> list[str]:
    """Accept a JSON array or a "|"-separated list."""
    if not raw or not raw.strip():
        return []
    raw = raw.strip()
    if raw.startswith("["):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError:
            values = None
        if isinstance(values, list):
            return [str(v) for v in values if v is not None]
    return [part for part in raw.split("|") if part.strip()]


def parse_category(category: str) -> Category:
    try:
        return Category(category.strip().lower())
    except ValueError as e:
        raise InvalidCategory(category) from e


async def _recommend(
    category: str,
    params: RecommendParams,
    http_request: Request,
    orchestrator: RecommendationOrchestrator,
    limiter: RateLimiter,
) -> RecommendResponse:
    try:
        recommend_request = RecommendRequest(category=parse_category(category), **params.model_dump())
    except InvalidCategory as e:
        raise HTTPException(status_code=400, detail=str(e))

    client_id = recommend_request.user_id if not recommend_request.is_anonymous else None
    if client_id is None:
        client_id = http_request.client.host if http_request.client else "unknown"
    if not limiter.hit(client_id):
        raise HTTPException(status_code=429, detail="Too many requests, please slow down")

    try:
        return await orchestrator.recommend(recommend_request)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            f"[{redact_user(recommend_request.user_id)}] Recommendation failed for {recommend_request.category.value}: {e}"
        )
        raise HTTPException(status_code=500, detail="Failed to generate recommendations")


@router.get("/{category}", response_model=RecommendResponse)
async def recommend(
    category: str,
    http_request: Request,
    locale: str = "zh",
    user_id: str | None = Query(default=None, alias="userId"),
    count: str | None = None,
    skip_cache: bool = Query(default=False, alias="skipCache"),
    client: str = "web",
    exclude_titles: str | None = Query(default=None, alias="excludeTitles"),
    history_limit: str | None = Query(default=None, alias="historyLimit"),
    orchestrator: RecommendationOrchestrator = Depends(get_orchestrator),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    params = RecommendParams(
        locale=locale,
        user_id=user_id,
        count=count,
        skip_cache=skip_cache,
        client=client,
        exclude_titles=parse_exclude_titles(exclude_titles),
        history_limit=history_limit,
    )
    return await _recommend(category, params, http_request, orchestrator, limiter)


@router.post("/{category}", response_model=RecommendResponse)
async def recommend_post(
    category: str,
    http_request: Request,
    orchestrator: RecommendationOrchestrator = Depends(get_orchestrator),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    try:
        body = await http_request.json() if await http_request.body() else {}
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    try:
        params = RecommendParams.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    return await _recommend(category, params, http_request, orchestrator, limiter)

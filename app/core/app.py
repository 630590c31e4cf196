from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.api.main import api_router
from app.services.rate_limiter import RateLimiter
from app.services.recommendation.orchestrator import RecommendationOrchestrator, build_orchestrator
from app.services.redis_service import RedisService

from .config import settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events (startup/shutdown).
    """
    redis: RedisService | None = None
    if getattr(app.state, "orchestrator", None) is None:
        if "redis" in (settings.CACHE_BACKEND, settings.STORE_BACKEND):
            redis = RedisService()
        app.state.orchestrator = build_orchestrator(redis)
    if getattr(app.state, "rate_limiter", None) is None:
        app.state.rate_limiter = RateLimiter(limit=settings.RATE_LIMIT_PER_MINUTE)

    yield

    orchestrator: RecommendationOrchestrator = app.state.orchestrator
    await orchestrator.drain()
    logger.info("Pending persistence tasks drained")
    if redis is not None:
        await redis.close()


def create_app(
    orchestrator: RecommendationOrchestrator | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Personalized recommendations for entertainment, shopping, food, travel and fitness",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.APP_ENV != "development" else "/docs",
        redoc_url=None if settings.APP_ENV != "development" else "/redoc",
    )
    app.state.orchestrator = orchestrator
    app.state.rate_limiter = rate_limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    return app


app = create_app()

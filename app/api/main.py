from fastapi import APIRouter

from .endpoints.health import router as health_router
from .endpoints.recommend import router as recommend_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "PickNext API is running"}


api_router.include_router(health_router)
api_router.include_router(recommend_router)

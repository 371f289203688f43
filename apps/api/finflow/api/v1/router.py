from __future__ import annotations

from fastapi import APIRouter

from finflow.api.v1.endpoints import digest, news

api_router = APIRouter()
api_router.include_router(news.router)
api_router.include_router(digest.router)

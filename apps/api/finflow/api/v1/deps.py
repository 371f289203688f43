from __future__ import annotations

from fastapi import Request

from finflow.services.digest_service import DigestService
from finflow.services.news_service import NewsService
from finflow.services.onboarding_service import OnboardingService


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


def get_digest_service(request: Request) -> DigestService:
    return request.app.state.digest_service


def get_onboarding_service(request: Request) -> OnboardingService:
    return request.app.state.onboarding_service

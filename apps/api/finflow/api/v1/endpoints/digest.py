from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from finflow.api.v1.deps import get_digest_service, get_onboarding_service
from finflow.core.errors import ConfigurationError
from finflow.schemas.digest import BatchResult, WelcomeRequest, WelcomeResponse
from finflow.services.digest_service import DigestService
from finflow.services.onboarding_service import OnboardingService

router = APIRouter(prefix="/digest", tags=["digest"])


@router.post("/run", response_model=BatchResult)
async def run_digest(service: DigestService = Depends(get_digest_service)):
    try:
        return await service.run_daily_digest()
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.post("/welcome", response_model=WelcomeResponse)
async def welcome(payload: WelcomeRequest, service: OnboardingService = Depends(get_onboarding_service)):
    try:
        sent = await service.send_welcome_email(payload)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return WelcomeResponse(email=payload.email, sent=sent)

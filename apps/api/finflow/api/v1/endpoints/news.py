from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from finflow.api.v1.deps import get_news_service
from finflow.core.errors import ConfigurationError, SourceUnavailable
from finflow.schemas.news import NewsResponse
from finflow.services.news_service import NewsService, normalize_symbols

router = APIRouter(prefix="/news", tags=["news"])


@router.get("", response_model=NewsResponse)
async def news(
    symbols: str | None = Query(default=None, description="Comma separated tickers, e.g. AAPL,MSFT"),
    service: NewsService = Depends(get_news_service),
):
    requested = normalize_symbols(symbols.split(",") if symbols else [])
    try:
        articles, personalized = await service.get_news_with_mode(requested)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except SourceUnavailable as exc:
        raise HTTPException(status_code=502, detail=f"News provider unavailable: {exc}")

    return NewsResponse(personalized=personalized, items=articles)

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from finflow.api.v1.router import api_router
from finflow.core.cache import CacheClient
from finflow.core.config import Settings, settings
from finflow.core.database import Database
from finflow.core.logging_config import configure_logging
from finflow.services.ai_service import AIService
from finflow.services.digest_service import DigestService
from finflow.services.directory_service import SqlUserDirectory, SqlWatchlistStore
from finflow.services.mail_service import ResendMailer
from finflow.services.news_service import NewsService
from finflow.services.onboarding_service import OnboardingService
from finflow.services.providers.finnhub_provider import FinnhubProvider
from finflow.services.retry import RetryScheduler
from finflow.services.scheduler import DigestScheduler


def wire_services(app: FastAPI, config: Settings, db: Database, cache: CacheClient) -> None:
    source = FinnhubProvider(
        config.finnhub_api_key,
        base_url=config.finnhub_base_url,
        cache=cache,
        general_ttl_seconds=config.general_news_cache_ttl_seconds,
    )
    summarizer = AIService(config.openai_api_key, model=config.openai_model)
    mailer = ResendMailer(config.resend_api_key, config.digest_sender, base_url=config.resend_base_url)
    retry = RetryScheduler(
        max_attempts=config.summary_max_attempts,
        base_delay_seconds=config.summary_backoff_base_seconds,
        stagger_seconds=config.summary_stagger_seconds,
    )

    news_service = NewsService(source)
    app.state.news_service = news_service
    app.state.summarizer = summarizer
    app.state.digest_service = DigestService(
        users=SqlUserDirectory(db),
        watchlists=SqlWatchlistStore(db),
        news=news_service,
        summarizer=summarizer,
        mailer=mailer,
        retry=retry,
    )
    app.state.onboarding_service = OnboardingService(summarizer=summarizer, mailer=mailer, retry=retry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    db = Database(settings.database_url)
    db.create_all()
    cache = CacheClient(settings.redis_url)
    await cache.connect()

    wire_services(app, settings, db, cache)
    scheduler = DigestScheduler(
        app.state.digest_service,
        hour=settings.digest_cron_hour,
        minute=settings.digest_cron_minute,
    )
    if settings.digest_scheduler_enabled:
        scheduler.start()

    yield

    await scheduler.stop()
    await app.state.summarizer.close()
    await cache.close()
    db.close()


app = FastAPI(
    title="FinFlow Digest API",
    version="1.0.0",
    description="Market news aggregation and daily AI digest delivery.",
    lifespan=lifespan,
)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.api_v1_prefix)

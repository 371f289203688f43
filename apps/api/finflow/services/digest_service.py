from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from finflow.core.errors import ConfigurationError
from finflow.schemas.digest import BatchResult, UserOutcome, UserRef
from finflow.schemas.news import Article
from finflow.services.ai_service import AIService
from finflow.services.dedup import MAX_ARTICLES
from finflow.services.directory_service import UserDirectory, WatchlistStore
from finflow.services.mail_service import MailSink, send_daily_news_summary_email
from finflow.services.news_service import NewsService, normalize_symbols
from finflow.services.retry import RetryScheduler
from finflow.utils.dates import format_date_today

logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE_TEXT = (
    "Your market news summary is temporarily unavailable. Please check back tomorrow for the latest updates."
)
NO_NEWS_TEXT = "No market news today."


@dataclass
class UserNewsJob:
    user: UserRef
    symbols: list[str] = field(default_factory=list)
    articles: list[Article] = field(default_factory=list)
    has_personalization: bool = False
    summary: str | None = None


class DigestService:
    """Daily digest batch: news per user, AI summary, then one email each.

    Every stage isolates failures to the user they belong to. Only a missing
    credential aborts the run.
    """

    def __init__(
        self,
        *,
        users: UserDirectory,
        watchlists: WatchlistStore,
        news: NewsService,
        summarizer: AIService,
        mailer: MailSink,
        retry: RetryScheduler,
    ) -> None:
        self.users = users
        self.watchlists = watchlists
        self.news = news
        self.summarizer = summarizer
        self.mailer = mailer
        self.retry = retry
        self._lock = asyncio.Lock()

    def require_configured(self) -> None:
        self.news.source.require_configured()
        self.summarizer.require_configured()
        self.mailer.require_configured()

    async def run_daily_digest(self) -> BatchResult:
        async with self._lock:
            return await self._run()

    async def _run(self) -> BatchResult:
        self.require_configured()

        users = await self.users.all_users_for_digest()
        if not users:
            logger.info("No users found for daily news digest")
            return BatchResult()

        jobs = [await self.build_job(user) for user in users]

        await asyncio.gather(*(self.summarize_job(job, index) for index, job in enumerate(jobs)))

        outcomes = await asyncio.gather(*(self.deliver_job(job) for job in jobs))
        result = BatchResult.from_outcomes(list(outcomes))
        logger.info(
            "Daily digest processed %d users: %d sent, %d failed", len(users), result.sent, result.failed
        )
        return result

    async def build_job(self, user: UserRef) -> UserNewsJob:
        job = UserNewsJob(user=user)
        try:
            job.symbols = normalize_symbols(await self.watchlists.symbols_for_user(user))
            job.has_personalization = bool(job.symbols)

            job.articles = (await self.news.get_news(job.symbols or None))[:MAX_ARTICLES]
            if job.has_personalization and not job.articles:
                job.articles = (await self.news.get_news())[:MAX_ARTICLES]
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.warning("Error fetching news for user %s: %s", user.email, exc)
            job.articles = []
        return job

    async def summarize_job(self, job: UserNewsJob, index: int) -> str:
        if not job.articles:
            job.summary = NO_NEWS_TEXT
            return job.summary

        job.summary = await self.retry.run(
            lambda: self.summarizer.summarize_news(job.articles),
            SUMMARY_UNAVAILABLE_TEXT,
            job_index=index,
            label=f"summarize-news-{job.user.email}",
        )
        return job.summary

    async def deliver_job(self, job: UserNewsJob) -> UserOutcome:
        try:
            ok = await send_daily_news_summary_email(
                self.mailer,
                job.user.email,
                job.summary or SUMMARY_UNAVAILABLE_TEXT,
                date=format_date_today(),
            )
        except Exception as exc:
            logger.warning("Failed to send daily news email to %s: %s", job.user.email, exc)
            ok = False
        return UserOutcome(user=job.user, ok=bool(ok))

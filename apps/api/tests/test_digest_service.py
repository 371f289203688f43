from __future__ import annotations

import asyncio
from datetime import date

import pytest

from finflow.core.errors import ConfigurationError, QuotaExceeded, SendFailure, SourceUnavailable
from finflow.schemas.digest import UserRef
from finflow.services.digest_service import NO_NEWS_TEXT, SUMMARY_UNAVAILABLE_TEXT, DigestService
from finflow.services.news_service import NewsService
from finflow.services.providers.base import ArticleSource
from finflow.services.retry import RetryScheduler


def _raw(raw_id, stamp):
    return {
        "id": raw_id,
        "headline": f"Headline {raw_id}",
        "summary": "Summary",
        "url": f"https://news.example.com/{raw_id}",
        "source": "CNBC",
        "datetime": stamp,
        "related": "",
    }


def _user(n):
    return UserRef(id=f"u{n}", email=f"user{n}@example.com", name=f"User {n}")


class FakeSource(ArticleSource):
    name = "fake"

    def __init__(self, *, general=None, by_symbol=None, failing=()):
        self.general = general if general is not None else [_raw(i, 100 + i) for i in range(8)]
        self.by_symbol = by_symbol or {}
        self.failing = set(failing)
        self.calls = []

    async def fetch_general(self, from_date, to_date):
        self.calls.append("general")
        if "general" in self.failing:
            raise SourceUnavailable("Bad Gateway", status_code=502)
        return list(self.general)

    async def fetch_for_symbol(self, symbol, from_date, to_date):
        self.calls.append(symbol)
        return list(self.by_symbol.get(symbol, []))


class FakeUsers:
    def __init__(self, users):
        self.users = users

    async def all_users_for_digest(self):
        return list(self.users)


class FakeWatchlists:
    def __init__(self, symbols_by_email=None, failing=()):
        self.symbols_by_email = symbols_by_email or {}
        self.failing = set(failing)

    async def symbols_for_user(self, user):
        if user.email in self.failing:
            raise RuntimeError("watchlist store offline")
        return list(self.symbols_by_email.get(user.email, []))


class FakeSummarizer:
    def __init__(self, failures=None, configured=True):
        self.client = object() if configured else None
        self.failures = failures or {}
        self.prompts = []

    def require_configured(self):
        if self.client is None:
            raise ConfigurationError("OPENAI_API_KEY is not configured")

    async def summarize_news(self, articles):
        self.prompts.append([a.id for a in articles])
        remaining = self.failures.get(articles[0].related or articles[0].id, [])
        if remaining:
            raise remaining.pop(0)
        return f"<p>{len(articles)} stories</p>"


class FakeMailer:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    def require_configured(self):
        return None

    async def send(self, address, subject, html_body):
        if address in self.failing:
            raise SendFailure(address, "HTTP 500: mailbox unavailable")
        self.sent.append((address, subject, html_body))
        return True


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _digest(*, users, source=None, watchlists=None, summarizer=None, mailer=None, sleep=None):
    return DigestService(
        users=FakeUsers(users),
        watchlists=watchlists or FakeWatchlists(),
        news=NewsService(source or FakeSource(), today=lambda: date(2026, 3, 10)),
        summarizer=summarizer or FakeSummarizer(),
        mailer=mailer or FakeMailer(),
        retry=RetryScheduler(sleep=sleep or FakeSleep()),
    )


def test_one_failed_send_does_not_affect_other_users():
    users = [_user(1), _user(2), _user(3)]
    mailer = FakeMailer(failing={"user2@example.com"})

    result = asyncio.run(_digest(users=users, mailer=mailer).run_daily_digest())

    assert result.sent == 2
    assert result.failed == 1
    outcomes = {outcome.user.id: outcome.ok for outcome in result.per_user}
    assert outcomes == {"u1": True, "u2": False, "u3": True}
    assert sorted(address for address, _, _ in mailer.sent) == ["user1@example.com", "user3@example.com"]


def test_personalized_users_get_their_symbols_and_general_users_get_market_news():
    source = FakeSource(by_symbol={"AAPL": [_raw("a1", 500), _raw("a2", 400)]})
    watchlists = FakeWatchlists({"user1@example.com": [" aapl "]})
    summarizer = FakeSummarizer()

    asyncio.run(
        _digest(users=[_user(1), _user(2)], source=source, watchlists=watchlists, summarizer=summarizer).run_daily_digest()
    )

    assert ["a1", "a2"] in summarizer.prompts
    assert ["5", "4", "3", "2", "1", "0"] in summarizer.prompts


def test_summary_falls_back_after_quota_exhaustion():
    summarizer = FakeSummarizer(failures={"5": [QuotaExceeded("429")] * 3})
    mailer = FakeMailer()
    sleep = FakeSleep()

    result = asyncio.run(_digest(users=[_user(1)], summarizer=summarizer, mailer=mailer, sleep=sleep).run_daily_digest())

    assert result.sent == 1
    assert SUMMARY_UNAVAILABLE_TEXT in mailer.sent[0][2]
    assert sleep.delays == [60.0, 120.0]


def test_summaries_are_staggered_per_user():
    sleep = FakeSleep()

    asyncio.run(_digest(users=[_user(1), _user(2), _user(3)], sleep=sleep).run_daily_digest())

    assert sorted(sleep.delays) == [2.0, 4.0]


def test_empty_personalized_news_reruns_general_once_then_sends_placeholder():
    source = FakeSource(general=[], by_symbol={})
    watchlists = FakeWatchlists({"user1@example.com": ["ZZZZ"]})
    summarizer = FakeSummarizer()
    mailer = FakeMailer()

    result = asyncio.run(
        _digest(users=[_user(1)], source=source, watchlists=watchlists, summarizer=summarizer, mailer=mailer).run_daily_digest()
    )

    assert source.calls.count("general") == 2
    assert summarizer.prompts == []
    assert NO_NEWS_TEXT in mailer.sent[0][2]
    assert result.sent == 1


def test_news_failure_for_one_user_is_isolated():
    source = FakeSource(failing={"general"}, by_symbol={"MSFT": [_raw("m1", 900)]})
    watchlists = FakeWatchlists({"user2@example.com": ["MSFT"]}, failing={"user3@example.com"})
    mailer = FakeMailer()

    result = asyncio.run(
        _digest(users=[_user(1), _user(2), _user(3)], source=source, watchlists=watchlists, mailer=mailer).run_daily_digest()
    )

    assert result.sent == 3
    bodies = {address: body for address, _, body in mailer.sent}
    assert NO_NEWS_TEXT in bodies["user1@example.com"]
    assert "1 stories" in bodies["user2@example.com"]
    assert NO_NEWS_TEXT in bodies["user3@example.com"]


def test_no_users_returns_empty_result():
    result = asyncio.run(_digest(users=[]).run_daily_digest())

    assert result.sent == 0
    assert result.failed == 0
    assert result.per_user == []


def test_missing_credentials_abort_the_run():
    mailer = FakeMailer()

    with pytest.raises(ConfigurationError):
        asyncio.run(_digest(users=[_user(1)], summarizer=FakeSummarizer(configured=False), mailer=mailer).run_daily_digest())
    assert mailer.sent == []


def test_every_send_failing_is_still_a_result():
    users = [_user(1), _user(2)]
    mailer = FakeMailer(failing={"user1@example.com", "user2@example.com"})

    result = asyncio.run(_digest(users=users, mailer=mailer).run_daily_digest())

    assert result.sent == 0
    assert result.failed == 2


class SlowUsers:
    def __init__(self, users):
        self.users = users
        self.active = 0
        self.max_active = 0
        self.calls = 0

    async def all_users_for_digest(self):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return list(self.users)


def test_overlapping_runs_are_serialized():
    users = SlowUsers([_user(1)])
    mailer = FakeMailer()
    service = DigestService(
        users=users,
        watchlists=FakeWatchlists(),
        news=NewsService(FakeSource(), today=lambda: date(2026, 3, 10)),
        summarizer=FakeSummarizer(),
        mailer=mailer,
        retry=RetryScheduler(sleep=FakeSleep()),
    )

    async def scenario():
        return await asyncio.gather(service.run_daily_digest(), service.run_daily_digest())

    first, second = asyncio.run(scenario())

    assert users.calls == 2
    assert users.max_active == 1
    assert first.sent == second.sent == 1
    assert len(mailer.sent) == 2

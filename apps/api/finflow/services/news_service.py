from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from finflow.core.errors import SourceUnavailable
from finflow.schemas.news import Article
from finflow.services.dedup import MAX_ARTICLES, PersonalizedDedup, format_article, select_general, sort_newest_first
from finflow.services.providers.base import ArticleSource
from finflow.utils.dates import get_date_range

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 5
MAX_ROUNDS = 6


def normalize_symbols(symbols: Iterable[str] | None) -> list[str]:
    """Trim, uppercase and drop empty or repeated tickers, keeping first-seen order."""
    cleaned = (str(symbol).strip().upper() for symbol in symbols or [])
    return list(dict.fromkeys(symbol for symbol in cleaned if symbol))


class NewsService:
    def __init__(self, source: ArticleSource, today: Callable[[], date] = date.today) -> None:
        self.source = source
        self.today = today

    async def get_news(self, symbols: Iterable[str] | None = None) -> list[Article]:
        """Up to six articles, newest first.

        With symbols, one article is taken per round-robin round across the
        watchlist; without them (or when that yields nothing) the general
        market feed is used instead.
        """
        articles, _ = await self.get_news_with_mode(symbols)
        return articles

    async def get_news_with_mode(self, symbols: Iterable[str] | None = None) -> tuple[list[Article], bool]:
        """Like ``get_news``, also reporting whether the personalized round-robin produced the result."""
        self.source.require_configured()
        from_date, to_date = get_date_range(LOOKBACK_DAYS, today=self.today)

        tickers = normalize_symbols(symbols)
        if tickers:
            articles = await self._personalized_news(tickers, from_date, to_date)
            if articles:
                return articles, True
            logger.info("No company news for %s, falling back to general news", ",".join(tickers))

        return await self.general_news(from_date, to_date), False

    async def general_news(self, from_date: str, to_date: str) -> list[Article]:
        raws = await self.source.fetch_general(from_date, to_date)
        return select_general(raws, limit=MAX_ARTICLES)

    async def _personalized_news(self, tickers: list[str], from_date: str, to_date: str) -> list[Article]:
        dedup = PersonalizedDedup()
        articles: list[Article] = []

        for round_index in range(MAX_ROUNDS):
            if len(articles) >= MAX_ARTICLES:
                break
            symbol = tickers[round_index % len(tickers)]
            try:
                raws = await self.source.fetch_for_symbol(symbol, from_date, to_date)
            except SourceUnavailable as exc:
                logger.warning("Error fetching news for symbol %s: %s", symbol, exc)
                continue

            raw = dedup.first_unseen(raws)
            if raw is None:
                continue
            dedup.mark(raw)
            articles.append(format_article(raw, True, symbol=symbol, rank=round_index))

        return sort_newest_first(articles)

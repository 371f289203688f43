from __future__ import annotations

import math
from abc import ABC, abstractmethod
from numbers import Real

from finflow.schemas.news import Article

MAX_ARTICLES = 6
DEFAULT_SOURCE = "Finnhub"


def _non_empty_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_article(raw) -> bool:
    if not isinstance(raw, dict):
        return False
    if not all(_non_empty_str(raw.get(field)) for field in ("headline", "summary", "url")):
        return False
    stamp = raw.get("datetime")
    return isinstance(stamp, Real) and not isinstance(stamp, bool) and math.isfinite(stamp) and stamp > 0


def format_article(raw: dict, is_personalized: bool, symbol: str | None = None, rank: int | None = None) -> Article:
    raw_id = raw.get("id")
    article_id = str(raw_id) if raw_id not in (None, "") else f"{symbol or 'general'}-{rank}"

    if is_personalized:
        related = symbol
    else:
        related = raw.get("related") or None

    return Article(
        id=article_id,
        headline=raw["headline"].strip(),
        summary=raw["summary"].strip(),
        url=raw["url"].strip(),
        source=str(raw.get("source") or "").strip() or DEFAULT_SOURCE,
        datetime=int(raw["datetime"]),
        related=related,
    )


def sort_newest_first(articles: list[Article]) -> list[Article]:
    return sorted(articles, key=lambda article: article.datetime, reverse=True)


class DedupPolicy(ABC):
    """Tracks which raw items have already been accepted under one identity rule."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    @abstractmethod
    def key(self, raw: dict) -> str:
        raise NotImplementedError

    def seen(self, raw: dict) -> bool:
        return self.key(raw) in self._seen

    def mark(self, raw: dict) -> None:
        self._seen.add(self.key(raw))


class GeneralDedup(DedupPolicy):
    def key(self, raw: dict) -> str:
        return f"{raw.get('id')}-{raw.get('url')}-{raw.get('headline')}"

    def select(self, raws: list[dict], limit: int = MAX_ARTICLES) -> list[Article]:
        """Keep the first occurrence per key in provider order, stopping once ``limit`` are collected."""
        selected: list[Article] = []
        for index, raw in enumerate(raws):
            if not validate_article(raw) or self.seen(raw):
                continue
            self.mark(raw)
            selected.append(format_article(raw, False, rank=index))
            if len(selected) >= limit:
                break
        return sort_newest_first(selected)


class PersonalizedDedup(DedupPolicy):
    """Identity is the provider id alone, shared across every symbol of one aggregation."""

    def key(self, raw: dict) -> str:
        return str(raw.get("id"))

    def first_unseen(self, raws: list[dict]) -> dict | None:
        for raw in raws:
            if validate_article(raw) and not self.seen(raw):
                return raw
        return None


def select_general(raws: list[dict], limit: int = MAX_ARTICLES) -> list[Article]:
    return GeneralDedup().select(raws, limit=limit)

from __future__ import annotations

from pydantic import BaseModel


class Article(BaseModel):
    id: str
    headline: str
    summary: str
    url: str
    source: str
    datetime: int
    related: str | None = None


class NewsResponse(BaseModel):
    personalized: bool
    items: list[Article]

from __future__ import annotations

from abc import ABC, abstractmethod


class ArticleSource(ABC):
    """Raw news I/O. One outbound request per call, no retries."""

    name: str

    @abstractmethod
    async def fetch_general(self, from_date: str, to_date: str) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_for_symbol(self, symbol: str, from_date: str, to_date: str) -> list[dict]:
        raise NotImplementedError

    def require_configured(self) -> None:
        """Raise ``ConfigurationError`` when the source cannot make requests."""

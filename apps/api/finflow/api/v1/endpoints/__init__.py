from __future__ import annotations

from finflow.api.v1.endpoints import digest, news

__all__ = ["digest", "news"]

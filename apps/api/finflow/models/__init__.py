from __future__ import annotations

from finflow.models.user import User
from finflow.models.watchlist import Watchlist

__all__ = [
    "User",
    "Watchlist",
]

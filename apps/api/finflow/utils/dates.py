from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta


def get_date_range(days: int, today: Callable[[], date] = date.today) -> tuple[str, str]:
    """Inclusive ``(from, to)`` window ending today, as ``YYYY-MM-DD`` strings."""
    end = today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def format_date_today(now: datetime | None = None) -> str:
    current = now or datetime.now()
    return f"{current:%A}, {current:%B} {current.day}, {current.year}"

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from finflow.services.digest_service import DigestService

logger = logging.getLogger(__name__)


def next_run_at(now: datetime, hour: int, minute: int) -> datetime:
    """Next occurrence of ``hour:minute`` strictly after ``now``, in ``now``'s timezone."""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class DigestScheduler:
    """Daily cron-style trigger for ``DigestService.run_daily_digest`` (``M H * * *`` in UTC)."""

    def __init__(
        self,
        digest: DigestService,
        *,
        hour: int = 12,
        minute: int = 0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.digest = digest
        self.hour = hour
        self.minute = minute
        self.clock = clock
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name="daily-news-summary")
            logger.info("Daily news digest scheduled at %02d:%02d UTC", self.hour, self.minute)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            now = self.clock()
            wait_seconds = (next_run_at(now, self.hour, self.minute) - now).total_seconds()
            await asyncio.sleep(wait_seconds)
            await self.run_once()

    async def run_once(self):
        try:
            return await self.digest.run_daily_digest()
        except Exception:
            logger.exception("Scheduled daily news digest failed")
            return None

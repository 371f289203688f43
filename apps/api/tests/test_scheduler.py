from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from finflow.core.errors import ConfigurationError
from finflow.schemas.digest import BatchResult
from finflow.services.scheduler import DigestScheduler, next_run_at


class FakeDigest:
    def __init__(self, error=None):
        self.error = error
        self.runs = 0

    async def run_daily_digest(self):
        self.runs += 1
        if self.error:
            raise self.error
        return BatchResult(sent=1)


def test_next_run_later_today():
    now = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
    assert next_run_at(now, 12, 0) == datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_next_run_rolls_to_tomorrow_once_passed():
    now = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert next_run_at(now, 12, 0) == datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)


def test_run_once_returns_batch_result():
    digest = FakeDigest()
    result = asyncio.run(DigestScheduler(digest).run_once())

    assert result.sent == 1
    assert digest.runs == 1


def test_run_once_logs_and_survives_failures():
    digest = FakeDigest(error=ConfigurationError("RESEND_API_KEY is not configured"))

    assert asyncio.run(DigestScheduler(digest).run_once()) is None


def test_start_and_stop_cancel_the_loop():
    async def scenario():
        scheduler = DigestScheduler(FakeDigest(), hour=12, minute=0)
        scheduler.start()
        await asyncio.sleep(0)
        running = scheduler._task is not None and not scheduler._task.done()
        await scheduler.stop()
        return running, scheduler._task

    running, task = asyncio.run(scenario())

    assert running
    assert task is None

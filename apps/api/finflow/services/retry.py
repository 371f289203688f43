from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from finflow.core.errors import ConfigurationError, QuotaExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryState:
    attempt: int = 0
    max_attempts: int = 3
    last_error: Exception | None = None

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts


class RetryScheduler:
    """Bounded retries with exponential backoff for rate-limited calls.

    Each job first waits ``stagger_seconds * job_index`` so that concurrent
    jobs do not hit the provider at the same instant. ``QuotaExceeded`` is
    retried after ``2 ** attempt * base_delay_seconds``; any other failure
    returns ``fallback`` straight away. ``ConfigurationError`` is the only
    error that escapes.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay_seconds: float = 30.0,
        stagger_seconds: float = 2.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.stagger_seconds = stagger_seconds
        self.sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        return (2**attempt) * self.base_delay_seconds

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        fallback: T,
        *,
        job_index: int = 0,
        label: str = "job",
    ) -> T:
        if job_index > 0 and self.stagger_seconds > 0:
            await self.sleep(self.stagger_seconds * job_index)

        state = RetryState(max_attempts=self.max_attempts)
        while not state.exhausted:
            state.attempt += 1
            try:
                return await operation()
            except ConfigurationError:
                raise
            except QuotaExceeded as exc:
                state.last_error = exc
                if state.exhausted:
                    break
                delay = self.backoff_delay(state.attempt)
                logger.warning(
                    "%s hit rate limit (attempt %d/%d), retrying in %.0fs",
                    label,
                    state.attempt,
                    state.max_attempts,
                    delay,
                )
                await self.sleep(delay)
            except Exception as exc:
                logger.warning("%s failed with %s, using fallback: %s", label, type(exc).__name__, exc)
                return fallback

        logger.warning("%s exhausted %d attempts, using fallback: %s", label, state.max_attempts, state.last_error)
        return fallback

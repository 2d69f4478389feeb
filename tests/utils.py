import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import TypeVar

NOW = datetime(2025, 6, 9, 10, 0, 0, tzinfo=UTC)

T = TypeVar("T")


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


async def wait_for(fn: Callable[[], Awaitable[T]], timeout: timedelta = timedelta(seconds=10)) -> T:
    deadline = time.monotonic() + timeout.total_seconds()
    while True:
        try:
            return await fn()
        except Exception:
            if time.monotonic() > deadline:
                raise
            await asyncio.sleep(0.1)

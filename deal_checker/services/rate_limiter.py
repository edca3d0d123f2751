# deal_checker/services/rate_limiter.py

"""Minimum-interval gate between outbound provider calls."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger("deal_checker.rate_limiter")


class RateLimiter:
    """Spaces the *starts* of consecutive calls at least ``interval`` apart.

    One instance is created per run and shared by every batch of every
    input file, so the gap is never reset between files.  The
    read-then-write of the last start time happens under a lock; callers
    that arrive together are released one interval apart.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the gate.

        Args:
            interval: Minimum seconds between call starts.
            clock: Monotonic time source.
            sleep: Coroutine used to suspend the caller.
        """
        if interval < 0:
            msg = f"Interval must be non-negative, got {interval}"
            raise ValueError(msg)
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last_start: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_start(self) -> float | None:
        """Clock reading recorded for the most recent call start."""
        return self._last_start

    async def acquire(self) -> float:
        """Wait until the next call may start, then record its start.

        Returns:
            Seconds spent waiting (0.0 when no wait was needed).
        """
        async with self._lock:
            waited = 0.0
            if self._last_start is not None:
                elapsed = self._clock() - self._last_start
                if elapsed < self.interval:
                    waited = self.interval - elapsed
                    logger.info(
                        "Waiting %.1fs to respect provider rate limits",
                        waited,
                    )
                    await self._sleep(waited)
            self._last_start = self._clock()
            return waited

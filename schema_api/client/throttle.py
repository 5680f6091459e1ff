"""Request pacing."""

import asyncio
import time

from schema_api.core.constants import MILLISECONDS_PER_SECOND


class FixedThrottle:
    """Enforce a minimum interval between consecutive call starts.

    Every caller reserves the next free start slot before sleeping, so with
    ``n`` callers already waiting a new caller starts ``n + 1`` intervals
    after the last start. The reservation happens before the first ``await``
    and is therefore atomic under asyncio.

    Args:
        interval_ms: Minimum gap between two call starts, in milliseconds.
    """

    def __init__(self, interval_ms: float) -> None:
        if interval_ms < 0:
            msg = "Throttle interval must be non-negative"
            raise ValueError(msg)
        self.interval_ms = interval_ms
        self._next_slot = float("-inf")
        self._waiting = 0

    @property
    def waiting(self) -> int:
        """Number of callers currently sleeping for their slot."""
        return self._waiting

    async def throttle(self) -> None:
        """Wait until this caller's start slot."""
        now = time.monotonic()
        start = max(now, self._next_slot)
        self._next_slot = start + self.interval_ms / MILLISECONDS_PER_SECOND

        delay = start - now
        if delay <= 0:
            return

        self._waiting += 1
        try:
            await asyncio.sleep(delay)
        finally:
            self._waiting -= 1

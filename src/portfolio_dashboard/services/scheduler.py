"""Debounced recomputation.

Bursts of change notifications collapse into one recompute that starts once
no new notification has arrived for `delay` seconds. Only the waiting period
is ever cancelled; a recompute that has started always runs to completion.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

logger = logging.getLogger(__name__)

RECOMPUTE_DELAY_SECONDS = 1.0


class RecomputeScheduler:
    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        delay: float = RECOMPUTE_DELAY_SECONDS,
    ):
        self._callback = callback
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self) -> None:
        """(Re)start the quiet-period timer. Must be called from the event loop."""
        if self.is_pending:
            self._pending.cancel()
            logger.debug("Superseded pending recompute")
        self._pending = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self.is_pending:
            self._pending.cancel()
        self._pending = None

    async def wait(self) -> None:
        """Wait until the pending recompute (if any) has finished."""
        while self.is_pending or (self._in_flight is not None and not self._in_flight.done()):
            task = self._pending if self.is_pending else self._in_flight
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # Superseded while we waited; loop picks up its replacement
                if asyncio.current_task().cancelling():
                    raise

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        # From here on the task can no longer be superseded
        self._in_flight, self._pending = self._pending, None
        logger.debug("Running debounced recompute")
        await self._callback()

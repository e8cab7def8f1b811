"""Background poll loop: one fetch pass now, then one per interval."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ghadmin.config import settings

logger = logging.getLogger(__name__)


class PollScheduler:
    """Runs ``run_pass`` immediately and then every ``interval`` seconds.

    The interval is measured from the end of a pass. ``stop()`` only sets a
    signal: an in-flight pass always runs to completion and the loop exits
    at its next wait.
    """

    def __init__(self, run_pass: Callable[[], Awaitable[None]], interval: float | None = None):
        self._run_pass = run_pass
        self._interval = interval if interval is not None else settings.poll_interval_seconds
        self._task: asyncio.Task | None = None
        self._stop: asyncio.Event | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    def start(self) -> bool:
        """Start the loop. Returns False if it was already running."""
        if self._task is not None:
            return False
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self._loop(self._stop))
        return True

    def stop(self) -> bool:
        """Signal the loop to exit. Returns False if it was not running."""
        if self._task is None:
            return False
        self._stop.set()
        self._task = None
        self._stop = None
        return True

    async def _loop(self, stop: asyncio.Event) -> None:
        while True:
            try:
                await self._run_pass()
            except Exception:
                logger.exception("Fetch pass failed")
            if await self._wait(stop):
                logger.info("Polling stopped")
                return

    async def _wait(self, stop: asyncio.Event) -> bool:
        try:
            await asyncio.wait_for(stop.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            return stop.is_set()
        return True

"""Background task that posts stats on a fixed interval."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .errors.handling import log_error

Counts = tuple[float, float]
CountsProvider = Callable[[], Counts | Awaitable[Counts]]
SubmitFn = Callable[[float, float], Awaitable[Any]]


class AutoPoster:
    """Calls ``submit`` with fresh counts every ``interval`` seconds.

    The first post happens right after ``start()``. A failed round is logged
    and the next round runs on schedule; rounds are never retried.
    """

    def __init__(self, submit: SubmitFn, counts_provider: CountsProvider, interval: float):
        self._submit = submit
        self._counts_provider = counts_provider
        self.interval = interval
        self.rounds = 0
        self.failures = 0
        self._running = False
        self._task: asyncio.Task[Any] | None = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the posting loop. Must be called from a running event loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logging.info(f"⏱️ Stats auto-post started (interval={self.interval:.0f}s)")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logging.info("⏹️ Stats auto-post stopped")

    async def _loop(self) -> None:
        while self._running:
            await self.tick()
            await asyncio.sleep(self.interval)

    async def tick(self) -> bool:
        """Run one posting round. Returns True if the round raised no error."""
        self.rounds += 1
        try:
            counts = self._counts_provider()
            if inspect.isawaitable(counts):
                counts = await counts
            guilds_count, users_count = counts
            await self._submit(guilds_count, users_count)
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            self.failures += 1
            log_error(
                "Automatic stats post failed",
                e,
                context={"round": self.rounds, "failures": self.failures},
            )
            return False

# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Expired-session sweeper — a cancellable loop around ``delete_expired``."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import Any

from sessionkeep.session.ports.outbound import ExpiredDeletion

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = timedelta(seconds=60)


class ExpiredSessionSweeper:
    """Runs ``store.delete_expired()`` on a fixed delay until stopped.

    The store never schedules itself; the application owns one sweeper per
    store. A failing sweep ends the loop and the error is logged (or, when
    awaiting :meth:`run` directly, raised).

    Usage::

        sweeper = ExpiredSessionSweeper(store, timedelta(minutes=5))
        sweeper.start()
        # ... application runs ...
        await sweeper.stop()
    """

    def __init__(self, store: ExpiredDeletion, period: timedelta = DEFAULT_PERIOD) -> None:
        if period <= timedelta(0):
            raise ValueError("Sweep period must be positive")
        self._store = store
        self._period = period
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._sweeps = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def sweeps(self) -> int:
        """Number of completed sweeps."""
        return self._sweeps

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Sweep, then wait one period, until *stop_event* is set."""
        stop_event = stop_event or self._stop_event
        while not stop_event.is_set():
            await self._store.delete_expired()
            self._sweeps += 1
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_event.wait(), self._period.total_seconds())

    def start(self) -> asyncio.Task[None]:
        """Start the loop as a background task on the running event loop."""
        if self.running:
            raise RuntimeError("Sweeper is already running")
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(self._stop_event))
        self._task.add_done_callback(self._loop_done_callback)
        return self._task

    async def stop(self) -> None:
        """Signal the loop to finish and wait for the in-flight sweep, if any."""
        self._stop_event.set()
        task, self._task = self._task, None
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    @staticmethod
    def _loop_done_callback(task: asyncio.Task[Any]) -> None:
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                logger.error("Expired session sweep failed: %s", exc, exc_info=exc)


async def continuously_delete_expired(store: ExpiredDeletion, period: timedelta = DEFAULT_PERIOD) -> None:
    """Sweep *store* every *period* until cancelled or a sweep fails."""
    await ExpiredSessionSweeper(store, period).run()

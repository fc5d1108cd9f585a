from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..settings import settings
from .session_store import MongoSessionStore

log = logging.getLogger("mongo_session.sweeper")


class ExpirySweeper:
    """
    Background task calling ``sweep_expired`` every ``interval_seconds``
    (default: ``SWEEP_INTERVAL_SECONDS`` from settings).
    A failed sweep is logged and retried on the next tick.
    """

    def __init__(self, store: MongoSessionStore, interval_seconds: Optional[float] = None) -> None:
        self.store = store
        self.interval_seconds = interval_seconds if interval_seconds is not None else settings.SWEEP_INTERVAL_SECONDS
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        return await self.store.sweep_expired()

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                log.exception("expiry sweep failed: %s", e)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
        log.info("expiry sweeper stopped")

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop())
        log.info("expiry sweeper started interval=%ss", self.interval_seconds)

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task:
            await self._task
            self._task = None

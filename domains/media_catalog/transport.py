"""
Transfer transports used by the ingestion pipeline.

A transport moves one staging entry's bytes somewhere durable. While doing so
it reports progress in percent through ``on_progress`` and finally returns a
content reference. It signals failure by raising a StagingError subclass.
The pipeline owns the state machine; transports only do the transfer.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, Optional, Protocol

from loguru import logger

from domains.media_catalog.blobs import Materializer
from domains.media_catalog.models import StagingEntry

ProgressCallback = Callable[[float], None]
SleepFn = Callable[[float], Awaitable[None]]


class Transport(Protocol):
    async def transfer(self, entry: StagingEntry, on_progress: ProgressCallback) -> str: ...


class SimulatedTransport:
    """
    Local stand-in for a network upload.

    Each entry gets its own tick interval (``tick_min_ms`` plus up to
    ``tick_jitter_ms``). Every tick advances progress by a random step in
    ``(0, max_increment]``; the tick that reaches 100 is clamped to exactly
    100, after which the source is materialized.
    """

    def __init__(
        self,
        materializer: Materializer,
        tick_min_ms: int = 200,
        tick_jitter_ms: int = 300,
        max_increment: float = 15.0,
        sleep: SleepFn = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        if max_increment <= 0:
            raise ValueError("max_increment must be positive")

        self.materializer = materializer
        self.tick_min_ms = tick_min_ms
        self.tick_jitter_ms = tick_jitter_ms
        self.max_increment = max_increment
        self._sleep = sleep
        self._rng = rng or random.Random()

    def _increment(self) -> float:
        # random() is in [0, 1), so the step is in (0, max_increment]
        return self.max_increment - self._rng.random() * self.max_increment

    async def transfer(self, entry: StagingEntry, on_progress: ProgressCallback) -> str:
        interval = (self.tick_min_ms + self._rng.random() * self.tick_jitter_ms) / 1000.0
        progress = entry.progress

        while progress < 100.0:
            await self._sleep(interval)
            progress = min(progress + self._increment(), 100.0)
            on_progress(progress)

        logger.debug(f"Transfer of {entry.name} finished, materializing content")
        return self.materializer.materialize(entry.source, expected_size=entry.size_bytes)

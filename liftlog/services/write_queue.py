"""Strictly ordered, fire-and-forget storage writes for one live session.

Callers submit coroutine factories and return immediately; a single worker
task awaits them one at a time in submission order, so two writes to the same
row can never race. A failing write is logged and reported, then the queue
moves on: the in-memory session stays authoritative.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[Any]]
ErrorHandler = Callable[[str, Exception], None]


class WriteQueue:
    def __init__(self, name: str = "session", on_error: ErrorHandler | None = None) -> None:
        self.name = name
        self._on_error = on_error
        self._queue: asyncio.Queue[tuple[str, Operation]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self.failures = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, description: str, operation: Operation) -> None:
        """Queue an operation; must be called from the event loop thread."""
        self._queue.put_nowait((description, operation))
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run(), name=f"write-queue:{self.name}")

    async def _run(self) -> None:
        while True:
            description, operation = await self._queue.get()
            try:
                await operation()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.failures += 1
                logger.warning("[%s] storage write failed: %s", self.name, description, exc_info=True)
                if self._on_error is not None:
                    try:
                        self._on_error(description, exc)
                    except Exception:
                        logger.exception("[%s] error handler failed", self.name)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until everything submitted so far has been attempted."""
        await self._queue.join()

    async def close(self) -> None:
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

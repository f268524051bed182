from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine


log = logging.getLogger(__name__)


class BackgroundWork:
    """
    Registry of detached tasks that outlive the request that started them.

    Holds strong references (the event loop only keeps weak ones), logs
    crashes, and lets the app drain or cancel everything at shutdown.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            log.warning("background: %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            log.error("background: %s crashed", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        # let tasks spawned this tick enter their body so their cleanup runs on cancel
        await asyncio.sleep(0)
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

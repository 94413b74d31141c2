"""Chat Poller — periodic refetch of one open chat thread.

Invariants:
    - Each poll replaces the visible message list wholesale (no merging)
    - A failed poll is logged and the loop keeps going
    - After stop() returns, on_update is never called again
"""

import asyncio
import logging
from typing import Awaitable, Callable

from app.core.errors import ThinkBiggerError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0


class ChatPoller:

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[dict]]],
        on_update: Callable[[list[dict]], None],
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._fetch = fetch
        self._on_update = on_update
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Fetch once immediately, then keep polling in the background."""
        if self.running:
            return
        self._stopped = False
        await self.poll_once()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.poll_once()

    async def poll_once(self) -> None:
        try:
            messages = await self._fetch()
        except ThinkBiggerError as e:
            logger.warning("Chat poll failed: %s", e.message, extra={"error_code": e.code})
            return
        if not self._stopped:
            self._on_update(messages)

    async def stop(self) -> None:
        self._stopped = True
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

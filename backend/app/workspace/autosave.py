"""Autosave Scheduler — debounced, non-overlapping saves of the Working Store.

Invariants:
    - A save fires only after `quiet_seconds` without further mutations
    - Every new mutation re-arms the timer (the pending save is pushed back)
    - At most ONE save in flight; mutations during a save schedule exactly one
      follow-up save, which reads the snapshot current at the time it starts
    - A failed save is logged and reported; the store stays dirty and the next
      mutation (or flush) retries with the latest snapshot
    - No save is attempted while the store has no project id

Design Decisions:
    - loop.call_later TimerHandle instead of a sleeping task: re-arming is a
      cancel + schedule, nothing to await
    - Snapshot read lazily through a callable, never captured at mark time
    - asyncio.Event tracks idleness so tests and close() can await quiescence
"""

import asyncio
import logging
from typing import Awaitable, Callable

from app.core.entities import ProjectDocument
from app.core.errors import ThinkBiggerError

logger = logging.getLogger(__name__)

SaveFn = Callable[[str, ProjectDocument], Awaitable[None]]
SnapshotFn = Callable[[], tuple[str | None, ProjectDocument]]

DEFAULT_QUIET_SECONDS = 2.0


class AutosaveScheduler:
    """Coalesces store mutations into debounced saves."""

    def __init__(
        self,
        save: SaveFn,
        snapshot: SnapshotFn,
        quiet_seconds: float = DEFAULT_QUIET_SECONDS,
        on_error: Callable[[ThinkBiggerError], None] | None = None,
    ):
        self._save = save
        self._snapshot = snapshot
        self.quiet_seconds = quiet_seconds
        self._on_error = on_error
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._follow_up = False
        self._idle = asyncio.Event()
        self._idle.set()
        self.saves_attempted = 0

    @property
    def pending(self) -> bool:
        """True while a save is armed or running."""
        return not self._idle.is_set()

    @property
    def saving(self) -> bool:
        return self._task is not None and not self._task.done()

    def mark_dirty(self, *_args) -> None:
        """(Re)arm the quiet-period timer. Accepts and ignores listener args."""
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.quiet_seconds, self._on_quiet)
        self._idle.clear()

    def _on_quiet(self) -> None:
        self._timer = None
        if self.saving:
            self._follow_up = True
            return
        self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while True:
                self._follow_up = False
                await self._save_once()
                if not self._follow_up:
                    break
        finally:
            if self._timer is None:
                self._idle.set()

    async def _save_once(self) -> None:
        project_id, document = self._snapshot()
        if project_id is None:
            logger.debug("Autosave skipped: no project loaded")
            return
        self.saves_attempted += 1
        logger.debug(
            "Autosave started",
            extra={"project_id": project_id, "attempt": self.saves_attempted},
        )
        try:
            await self._save(project_id, document)
        except ThinkBiggerError as e:
            logger.warning(
                "Autosave failed: %s", e.message,
                extra={
                    "project_id": project_id, "error_code": e.code,
                    "attempt": self.saves_attempted,
                },
            )
            if self._on_error is not None:
                self._on_error(e)
            return
        logger.debug("Autosave complete", extra={"project_id": project_id})

    async def wait_idle(self) -> None:
        """Wait until nothing is armed or running."""
        await self._idle.wait()

    async def flush(self) -> None:
        """Fire an armed save now and wait for all in-flight work to finish."""
        if self._timer is not None:
            self._timer.cancel()
            self._on_quiet()
        while self.saving:
            await asyncio.shield(self._task)

    async def aclose(self) -> None:
        await self.flush()

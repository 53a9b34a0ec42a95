"""Live polling sessions.

A session periodically fetches a payload and re-renders one transcript
block with it. At most one session exists at a time; the supervisor
stops the old one before starting a new one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from folioshell.shell.api import ApiError
from folioshell.shell.transcript import Block

logger = logging.getLogger(__name__)

STOPPED_NOTICE = "Live updates stopped (Ctrl+C)."

Fetch = Callable[[], Awaitable[dict[str, Any]]]
Render = Callable[[dict[str, Any]], list[str]]


class LiveSession:
    """One recurring fetch-and-render loop bound to a transcript block."""

    def __init__(self, block: Block, fetch: Fetch, render: Render, interval: float) -> None:
        self.block = block
        self._fetch = fetch
        self._render = render
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def interval(self) -> float:
        return self._interval

    async def tick(self) -> None:
        """Fetch once and render, unless the session stopped meanwhile."""
        try:
            data = await self._fetch()
        except ApiError as e:
            if self._active:
                self.block.set_body([f"Error fetching server info: {e}"])
            return
        if not self._active:
            return
        try:
            lines = self._render(data)
        except Exception as e:
            logger.exception("Live session render failed")
            lines = [f"Error rendering server info: {e}"]
        self.block.set_body(lines)

    def schedule(self) -> None:
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        # The task is not awaited; a fetch still in flight just renders nothing
        self._active = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while self._active:
            await asyncio.sleep(self._interval)
            logger.debug("Live session tick")
            await self.tick()


class PollingSupervisor:
    """Holds the single process-wide live session handle."""

    def __init__(self) -> None:
        self._current: LiveSession | None = None

    @property
    def active(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> LiveSession | None:
        return self._current

    async def start(
        self, block: Block, fetch: Fetch, render: Render, interval: float = 2.0
    ) -> LiveSession:
        """Replace any running session, render immediately, then keep polling."""
        self.stop(show_notice=False)
        session = LiveSession(block, fetch, render, interval)
        self._current = session
        try:
            await session.tick()
        except BaseException:
            session.cancel()
            if self._current is session:
                self._current = None
            raise
        if session.active:
            session.schedule()
            logger.info("Live session started (every %.1fs)", interval)
        return session

    def stop(self, show_notice: bool = True) -> bool:
        """Stop the current session. Returns False when none was running."""
        session = self._current
        if session is None:
            return False
        session.cancel()
        if show_notice:
            session.block.add_note(STOPPED_NOTICE)
        self._current = None
        logger.info("Live session stopped")
        return True

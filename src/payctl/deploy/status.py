"""Transient deployment status line."""

import asyncio

from rich.console import Console
from rich.status import Status

from payctl.core.logging import get_logger

logger = get_logger(__name__)


class StatusBar:
    """Shows one status message at a time and hides it on a timer.

    Publishing a new message cancels any pending hide, so a quick
    follow-up deployment keeps its own message on screen.
    """

    def __init__(self, console: Console | None = None, enabled: bool = True):
        self._console = console or Console(stderr=True)
        self._enabled = enabled
        self._status: Status | None = None
        self._message: str | None = None
        self._pending_hide: asyncio.Task[None] | None = None

    @property
    def message(self) -> str | None:
        return self._message

    def publish(self, message: str) -> None:
        """Show a message, replacing the current one."""
        self._cancel_pending()
        self._message = message
        logger.debug("Status", text=message)
        if not self._enabled:
            return
        if self._status is None:
            self._status = Status(message, console=self._console)
            self._status.start()
        else:
            self._status.update(message)

    def hide(self) -> None:
        """Hide the message now."""
        self._cancel_pending()
        self._clear()

    def hide_after(self, delay: float) -> "asyncio.Task[None]":
        """Hide the message after ``delay`` seconds unless superseded."""
        self._cancel_pending()
        task = asyncio.create_task(self._hide_later(delay))
        self._pending_hide = task
        return task

    async def drain(self) -> None:
        """Wait for a pending hide to run."""
        while self._pending_hide is not None and not self._pending_hide.done():
            await asyncio.wait({self._pending_hide})

    async def _hide_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._pending_hide = None
        self._clear()

    def _cancel_pending(self) -> None:
        if self._pending_hide is not None and not self._pending_hide.done():
            self._pending_hide.cancel()
        self._pending_hide = None

    def _clear(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
        self._message = None

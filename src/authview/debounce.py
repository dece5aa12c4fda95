"""Deferred reveal of the browser surface to avoid progress-indicator flicker.

Every navigation covers the browser with a progress indicator straight away.
Revealing the page again is deferred by a short delay, so a burst of
redirects (``navigating`` → ``load_completed`` → ``navigating`` ...) keeps the
indicator up instead of flashing the intermediate pages.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from authview.surfaces.base import NavigationSurface

logger = logging.getLogger(__name__)

DEFAULT_HIDE_DELAY = 0.15
"""Seconds between a page settling and the indicator being hidden."""


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with :meth:`asyncio.AbstractEventLoop.call_later`'s shape."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class ProgressDebouncer:
    """Shows the progress indicator at once and hides it after a quiet period.

    Only one hide timer is ever pending; scheduling a new one cancels the
    previous. When the timer fires, the browser is revealed only while the
    login is still in progress. Once the session has finished, the indicator
    stays up and covers the surface while the host unwinds the screen.

    Args:
        surface: Surface whose indicator visibility is controlled.
        in_progress: Returns whether the login session is still in progress.
        delay: Quiet period in seconds.
        scheduler: Timer source; defaults to the running asyncio loop.
    """

    def __init__(
        self,
        surface: NavigationSurface,
        in_progress: Callable[[], bool],
        delay: float = DEFAULT_HIDE_DELAY,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._surface = surface
        self._in_progress = in_progress
        self._delay = delay
        self._scheduler = scheduler
        self._pending: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        """Whether a hide is scheduled and has not fired yet."""
        return self._pending is not None

    def show(self) -> None:
        """Cancel any pending hide and cover the browser with the indicator."""
        self.cancel()
        self._surface.set_progress_visible(True)

    def schedule_hide(self) -> None:
        """Start (or restart) the quiet period before revealing the browser."""
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._pending = scheduler.call_later(self._delay, self._on_expired)

    def cancel(self) -> None:
        """Drop the pending hide, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_expired(self) -> None:
        if self._pending is None:
            return
        self._pending = None

        if self._in_progress():
            self._surface.set_progress_visible(False)
        else:
            logger.debug("Login no longer in progress; keeping the indicator up")

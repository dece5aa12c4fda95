"""Host-side login screen binding the flow controller to a surface.

A :class:`LoginScreen` stands for the page or window that hosts the browser
during a login. The host UI calls its three lifecycle hooks; the screen turns
them into controller transitions and subscribes the controller to the
surface's navigation events.

Example::

    screen = LoginScreen(broker, surface)
    outcome = await broker.authenticate(start, end, launcher=screen.entered)
"""

from __future__ import annotations

from typing import Optional

from authview.broker import AuthenticationBroker
from authview.controller import FlowController
from authview.debounce import Scheduler
from authview.models import FlowSettings
from authview.surfaces.base import NavigationSurface


class LoginScreen:
    """Host lifecycle hooks for the login page."""

    def __init__(
        self,
        broker: AuthenticationBroker,
        surface: NavigationSurface,
        settings: Optional[FlowSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._surface = surface
        self.controller = FlowController(broker, surface, settings, scheduler)
        surface.bind(self.controller.handle_event, self.leaving)

    def entered(self) -> None:
        """The screen became visible: start or resume the login."""
        self.controller.start()

    def leaving(self, incidental: bool = False) -> None:
        """The screen is being left; deliver the outcome unless *incidental*."""
        self.controller.on_navigating_away(incidental=incidental)

    def back_pressed(self) -> None:
        """The user pressed back (or a timeout expired): cancel the login."""
        self.controller.on_back_cancel()

    async def clear_cookies(self) -> None:
        await self._surface.clear_cookies()

"""Abstract base class for navigation surfaces.

A navigation surface is whatever actually shows the identity provider's pages:
an embedded web view in a desktop or mobile host, a headless HTTP client, or
a scripted fake in tests. The flow core never talks to a browser directly; it
only uses the small capability set defined here.

To implement a new surface, subclass :class:`NavigationSurface` and implement
:meth:`~NavigationSurface.navigate`, :meth:`~NavigationSurface.clear_cookies`,
:meth:`~NavigationSurface.go_back` and
:meth:`~NavigationSurface.set_progress_visible`. Report navigation events with
:meth:`~NavigationSurface.emit` and, when the host actually leaves the login
screen (usually as a consequence of :meth:`go_back`), call
:meth:`~NavigationSurface.notify_leaving`.

See Also:
    :class:`authview.screen.LoginScreen` which binds a flow controller to a
    surface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from authview.models import NavigationEvent

EventHandler = Callable[[NavigationEvent], None]
LeavingHandler = Callable[[], None]


class NavigationSurface(ABC):
    """Browser surrogate plus host navigation stack, as seen by the flow core."""

    def __init__(self) -> None:
        self._event_handler: Optional[EventHandler] = None
        self._leaving_handler: Optional[LeavingHandler] = None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def bind(
        self,
        on_event: EventHandler,
        on_leaving: Optional[LeavingHandler] = None,
    ) -> None:
        """Register the handlers that receive events and the leaving signal.

        A surface has a single subscriber; binding again replaces it.

        Args:
            on_event: Receives every :class:`~authview.models.NavigationEvent`
                synchronously, in navigation order.
            on_leaving: Called when the host leaves the login screen.
        """
        self._event_handler = on_event
        self._leaving_handler = on_leaving

    def emit(self, event: NavigationEvent) -> NavigationEvent:
        """Deliver *event* to the bound handler and return it.

        The returned event carries the handler's ``cancel``/``handled``
        feedback. Events emitted while nothing is bound are dropped.
        """
        if self._event_handler is not None:
            self._event_handler(event)
        return event

    def notify_leaving(self) -> None:
        """Tell the bound host that the login screen is being left."""
        if self._leaving_handler is not None:
            self._leaving_handler()

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    @abstractmethod
    def navigate(self, uri: str) -> None:
        """Start loading *uri*. Must not block; results arrive as events."""
        ...

    @abstractmethod
    async def clear_cookies(self) -> None:
        """Forget every cookie the surface holds (e.g. to force a fresh login)."""
        ...

    @abstractmethod
    def go_back(self) -> None:
        """Pop the host's navigation stack back to the screen that started the login."""
        ...

    @abstractmethod
    def set_progress_visible(self, visible: bool) -> None:
        """Show the progress indicator over the browser, or reveal the browser.

        ``True`` covers the browser with the indicator; ``False`` hides the
        indicator and shows the page.
        """
        ...

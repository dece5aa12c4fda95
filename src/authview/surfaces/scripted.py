"""In-memory surface that records capability calls and replays scripted events.

Used by ``authview replay`` to drive a recorded transcript through the real
flow controller, and by the test-suite as a fake browser.

Example::

    surface = ScriptedSurface()
    screen = LoginScreen(broker, surface)
    screen.entered()
    surface.play(NavigationKind.NAVIGATING, "https://app.example.com/cb?code=1")
    assert surface.go_back_count == 1
"""

from __future__ import annotations

from typing import Optional

from authview.models import NavigationEvent, NavigationKind
from authview.surfaces.base import NavigationSurface


class ScriptedSurface(NavigationSurface):
    """Records every call made by the flow core.

    Args:
        pop_on_go_back: When true, :meth:`go_back` behaves like a real host and
            immediately reports that the login screen is being left.
    """

    def __init__(self, pop_on_go_back: bool = True) -> None:
        super().__init__()
        self._pop_on_go_back = pop_on_go_back
        self.navigations: list[str] = []
        self.progress_history: list[bool] = []
        self.go_back_count = 0
        self.cookies: dict[str, str] = {}
        self.cookies_cleared = 0
        self.current_uri: Optional[str] = None

    @property
    def progress_visible(self) -> bool:
        """Last visibility requested for the progress indicator."""
        return self.progress_history[-1] if self.progress_history else False

    def navigate(self, uri: str) -> None:
        self.navigations.append(uri)
        self.current_uri = uri

    async def clear_cookies(self) -> None:
        self.cookies.clear()
        self.cookies_cleared += 1

    def go_back(self) -> None:
        self.go_back_count += 1
        if self._pop_on_go_back:
            self.notify_leaving()

    def set_progress_visible(self, visible: bool) -> None:
        self.progress_history.append(visible)

    def play(
        self,
        kind: NavigationKind,
        uri: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> NavigationEvent:
        """Emit one event as if the browser produced it.

        A missing *uri* defaults to the last URI the surface navigated to or
        reported. A ``navigating`` event that is not cancelled becomes the
        surface's current URI.
        """
        event = NavigationEvent(
            uri=uri if uri is not None else (self.current_uri or ""),
            kind=kind,
            status_code=status_code,
        )
        self.emit(event)
        if kind in (NavigationKind.NAVIGATING, NavigationKind.NAVIGATED) and not event.cancel:
            self.current_uri = event.uri
        return event

"""Headless navigation surface backed by :class:`httpx.AsyncClient`.

:class:`HttpSurface` walks a redirect chain hop by hop instead of letting
httpx follow redirects, so that every hop is reported as a ``navigating``
event *before* it is fetched. The flow controller cancels the hop that
targets the callback URI, which is therefore never requested (it is often a
custom scheme or a loopback address that nothing listens on).

This is useful for providers that finish without user interaction, such as a
silent re-authentication with an existing session cookie. Interactive login
pages simply load and sit there until the caller's timeout cancels the flow.

The surface only fetches URIs it is told to navigate to and the redirects
they return; it never builds provider requests of its own.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from authview.models import FlowSettings, NavigationEvent, NavigationKind
from authview.output import progress
from authview.surfaces.base import NavigationSurface

logger = logging.getLogger(__name__)


class HttpSurface(NavigationSurface):
    """Navigation surface that loads pages with httpx.

    Must be used as an async context manager so that the underlying client
    is closed.

    Args:
        settings: Flow settings (``max_redirects``, ``verify_ssl``).
        cookies: Cookies to seed the client's jar with.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`.

    Example::

        async with HttpSurface() as surface:
            outcome = await run_login(surface, start_uri, end_uri)
    """

    def __init__(
        self,
        settings: Optional[FlowSettings] = None,
        cookies: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__()
        self._settings = settings or FlowSettings()
        self._cookies = dict(cookies or {})
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._load: Optional[asyncio.Task[None]] = None
        self.current_uri: Optional[str] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpSurface:
        self._client = httpx.AsyncClient(
            follow_redirects=False,
            verify=self._settings.verify_ssl,
            cookies=self._cookies,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._stop_load()
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def loading(self) -> bool:
        return self._load is not None and not self._load.done()

    async def wait_idle(self) -> None:
        """Wait for the current load, if any, to finish."""
        if self._load is not None:
            await asyncio.gather(self._load, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Capabilities
    # ------------------------------------------------------------------ #

    def navigate(self, uri: str) -> None:
        if self._client is None:
            raise RuntimeError("HttpSurface must be entered before navigating")
        if self._load is not None and not self._load.done():
            self._load.cancel()
        self._load = asyncio.get_running_loop().create_task(self._walk(uri))

    async def clear_cookies(self) -> None:
        if self._client is not None:
            self._client.cookies.clear()
        self._cookies.clear()

    def go_back(self) -> None:
        # go_back usually runs inside the walk's own emit(); the walk stops by
        # itself right after, so only a different load is cancelled.
        if self.loading and self._load is not asyncio.current_task():
            assert self._load is not None
            self._load.cancel()
        self.notify_leaving()

    def set_progress_visible(self, visible: bool) -> None:
        if visible:
            progress("Loading...")
        else:
            progress(f"Showing {self.current_uri or 'page'}")

    # ------------------------------------------------------------------ #
    # Redirect walking
    # ------------------------------------------------------------------ #

    async def _stop_load(self) -> None:
        if self._load is not None and not self._load.done():
            self._load.cancel()
            await asyncio.gather(self._load, return_exceptions=True)

    async def _walk(self, uri: str) -> None:
        assert self._client is not None
        url = uri
        for _ in range(self._settings.max_redirects + 1):
            event = self.emit(NavigationEvent(uri=url, kind=NavigationKind.NAVIGATING))
            if event.cancel:
                return
            self.current_uri = url

            try:
                response = await self._client.get(url)
            except httpx.RequestError as exc:
                logger.debug("Request to %s failed: %s", url, exc)
                self._fail(url, None)
                return

            if response.is_redirect:
                location = response.headers.get("location", "")
                url = str(response.url.join(location))
                logger.debug("Redirected (%s) to %s", response.status_code, url)
                continue

            if response.status_code >= 400:
                self._fail(url, response.status_code)
                return

            self.emit(NavigationEvent(uri=url, kind=NavigationKind.NAVIGATED))
            self.emit(NavigationEvent(uri=url, kind=NavigationKind.LOAD_COMPLETED))
            return

        logger.debug("Gave up after %d redirects", self._settings.max_redirects)
        self._fail(url, None)

    def _fail(self, url: str, status_code: Optional[int]) -> None:
        event = self.emit(
            NavigationEvent(uri=url, kind=NavigationKind.FAILED, status_code=status_code)
        )
        if not event.handled:
            logger.warning(
                "Unhandled navigation failure for %s (status %s)", url, status_code
            )

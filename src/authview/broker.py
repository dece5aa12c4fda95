"""Authentication broker -- the single-flight completion notifier.

The broker is the seam between the code that *wants* a login (and awaits its
result) and the login screen that drives the browser surface. It holds the
one in-flight :class:`~authview.models.Session`, answers
:attr:`AuthenticationBroker.authentication_in_progress` for the controller,
and resolves the caller's pending future exactly once.

Typical usage::

    broker = AuthenticationBroker()
    outcome = await broker.authenticate(
        "https://tenant.example.com/authorize?client_id=abc",
        "https://tenant.example.com/mobile",
        launcher=screen.entered,
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from authview.exceptions import FlowError
from authview.models import Outcome, Session

logger = logging.getLogger(__name__)


class AuthenticationBroker:
    """Holds the in-flight login session and delivers its outcome once.

    All methods must be called from the event loop that owns the pending
    future. There is exactly one writer (the flow controller), but
    :meth:`complete` still refuses a second delivery so that a re-entrant
    "leaving" signal can never resolve the caller twice.
    """

    def __init__(self) -> None:
        self._session: Optional[Session] = None
        self._future: Optional[asyncio.Future[Outcome]] = None

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def session(self) -> Optional[Session]:
        """The most recent session, including one that already completed."""
        return self._session

    @property
    def authentication_in_progress(self) -> bool:
        """Whether a session is waiting for its outcome."""
        return self._session is not None and self._session.in_progress

    @property
    def start_uri(self) -> Optional[str]:
        return self._session.start_uri if self._session else None

    @property
    def end_uri(self) -> Optional[str]:
        return self._session.end_uri if self._session else None

    # ------------------------------------------------------------------
    # Starting a session
    # ------------------------------------------------------------------

    def begin(
        self,
        start_uri: str,
        end_uri: str,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> asyncio.Future[Outcome]:
        """Create a new session and return the future its outcome resolves.

        Args:
            start_uri: The identity provider's login page.
            end_uri: The callback URI that ends the login.
            loop: Loop that owns the future. Defaults to the running loop.

        Returns:
            A future resolved by the first call to :meth:`complete`.

        Raises:
            FlowError: If another session is still in progress.
        """
        if self.authentication_in_progress:
            raise FlowError(
                "An authentication session is already in progress; "
                "use a separate broker for concurrent logins"
            )
        if loop is None:
            loop = asyncio.get_running_loop()

        self._session = Session(start_uri=start_uri, end_uri=end_uri)
        self._future = loop.create_future()
        logger.info("Authentication session begun for %s", end_uri)
        return self._future

    async def authenticate(
        self,
        start_uri: str,
        end_uri: str,
        launcher: Optional[Callable[[], None]] = None,
    ) -> Outcome:
        """Begin a session, launch the login screen, and await the outcome.

        If the awaiting task is cancelled, the session is abandoned so that a
        later login can begin on the same broker.

        Args:
            start_uri: The identity provider's login page.
            end_uri: The callback URI that ends the login.
            launcher: Called once the session exists, typically the host's
                "show the login screen" action.

        Returns:
            The delivered :class:`~authview.models.Outcome`.
        """
        future = self.begin(start_uri, end_uri)
        if launcher is not None:
            launcher()
        try:
            return await future
        except asyncio.CancelledError:
            self._abandon()
            raise

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete(self, outcome: Outcome) -> bool:
        """Deliver *outcome* to the caller if no outcome was delivered yet.

        Args:
            outcome: The terminal result of the session.

        Returns:
            ``True`` if this call resolved the caller's future, ``False`` if
            it was ignored (no session, or already completed).
        """
        session = self._session
        future = self._future
        if session is None or future is None or not session.in_progress:
            logger.warning(
                "Ignoring completion with status '%s': no authentication in progress",
                outcome.status.value,
            )
            return False

        session.in_progress = False
        session.outcome = outcome
        if future.done():
            # The awaiting caller went away; nothing left to resolve.
            logger.debug("Caller stopped waiting before completion was delivered")
            return False
        future.set_result(outcome)
        logger.info("Authentication finished with status '%s'", outcome.status.value)
        return True

    def _abandon(self) -> None:
        if self._session is not None and self._session.in_progress:
            self._session.in_progress = False
            logger.info("Authentication session abandoned by the caller")

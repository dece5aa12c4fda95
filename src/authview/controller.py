"""Flow controller -- the login state machine driving a navigation surface.

The controller reacts to three kinds of input, all delivered on one event
loop:

* **Navigation events** from the surface (``navigating``, ``navigated``,
  ``load_completed``, ``failed``), dispatched through :meth:`FlowController.handle_event`.
* **Host lifecycle signals**: the login screen was entered (:meth:`start`),
  is being left (:meth:`on_navigating_away`), or the user pressed back
  (:meth:`on_back_cancel`).
* **Debounce timer expiry**, which only affects indicator visibility.

States are derived from the broker's session::

    IDLE --start()--> STARTED --terminal navigation--> FINISHED
      ^                  |
      +--back / leaving--+

A terminal navigation runs the *finish sequence*: cover the browser, deliver
the outcome through the broker (once), and ask the host to go back. The
resulting "leaving" signal finds the broker no longer in progress and does
nothing, so the caller is notified exactly once.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

from authview.broker import AuthenticationBroker
from authview.cancellation import CancellationHandler
from authview.classifier import classify
from authview.debounce import ProgressDebouncer, Scheduler
from authview.models import (
    FlowSettings,
    NavigationEvent,
    NavigationKind,
    Outcome,
    Session,
)
from authview.surfaces.base import NavigationSurface

logger = logging.getLogger(__name__)


class FlowState(str, enum.Enum):
    """Externally visible state of the controller's current session."""

    IDLE = "idle"
    STARTED = "started"
    FINISHED = "finished"


class FlowController:
    """Drives a :class:`~authview.surfaces.base.NavigationSurface` through a login.

    Args:
        broker: Holds the session and delivers its outcome.
        surface: The browser surrogate and host navigation stack.
        settings: Flow tunables (only ``hide_delay_ms`` is used here).
        scheduler: Timer source for the progress debouncer.
    """

    def __init__(
        self,
        broker: AuthenticationBroker,
        surface: NavigationSurface,
        settings: Optional[FlowSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        settings = settings or FlowSettings()
        self._broker = broker
        self._surface = surface
        self._cancellation = CancellationHandler()
        self._progress = ProgressDebouncer(
            surface,
            lambda: broker.authentication_in_progress,
            delay=settings.hide_delay_ms / 1000,
            scheduler=scheduler,
        )

    @property
    def session(self) -> Optional[Session]:
        return self._broker.session

    @property
    def progress(self) -> ProgressDebouncer:
        return self._progress

    @property
    def state(self) -> FlowState:
        session = self._broker.session
        if session is None:
            return FlowState.IDLE
        if not session.in_progress:
            # An abandoned session has no outcome.
            return FlowState.FINISHED if session.outcome is not None else FlowState.IDLE
        if session.finished:
            return FlowState.FINISHED
        if session.started:
            return FlowState.STARTED
        return FlowState.IDLE

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Begin (or resume) the login when the screen is entered.

        With no session in progress nobody asked for a login, so the host is
        sent straight back. A session that was already started is left alone
        (the user came back from an incidental navigation).

        Returns:
            ``True`` if the surface was pointed at the start URI.
        """
        session = self._broker.session
        if session is None or not session.in_progress:
            logger.info("Login screen entered without an authentication in progress")
            self._surface.go_back()
            return False

        if session.started:
            logger.debug("Login already started; not restarting navigation")
            return False

        session.started = True
        session.finished = False
        logger.info("Navigating to login start page")
        self._surface.navigate(session.start_uri)
        return True

    def on_back_cancel(self) -> None:
        """Record a user cancel; delivery waits for :meth:`on_navigating_away`."""
        self._cancellation.request_cancel(self._broker.session)

    def on_navigating_away(self, incidental: bool = False) -> None:
        """Deliver the recorded outcome as the host leaves the login screen.

        Args:
            incidental: The host is only stepping away (suspended, system
                screen) and will come back. The session is kept and its
                ``started`` flag preserved so re-entry does not reload the
                provider's page.
        """
        session = self._broker.session
        if session is None or not session.in_progress:
            return
        if incidental:
            logger.debug("Incidental navigation away; keeping the session alive")
            return

        outcome = self._cancellation.resolve(session)
        session.started = False
        session.finished = False
        self._broker.complete(outcome)

    # ------------------------------------------------------------------
    # Surface events
    # ------------------------------------------------------------------

    def handle_event(self, event: NavigationEvent) -> None:
        """Dispatch a surface event to the matching ``on_*`` handler."""
        if event.kind == NavigationKind.NAVIGATING:
            self.on_navigating(event)
        elif event.kind == NavigationKind.NAVIGATED:
            self.on_navigated(event)
        elif event.kind == NavigationKind.LOAD_COMPLETED:
            self.on_load_completed(event)
        elif event.kind == NavigationKind.FAILED:
            self.on_navigation_failed(event)

    def on_navigating(self, event: NavigationEvent) -> bool:
        """Cover the browser and check whether the login just ended.

        On the callback URI the navigation is cancelled and the finish
        sequence runs.

        Returns:
            ``True`` if the navigation was terminal.
        """
        self._progress.show()
        session = self._broker.session
        if session is None or not session.in_progress:
            return False

        result = classify(event.uri, session.start_uri, session.end_uri)
        if not result.terminal or result.outcome is None:
            return False

        logger.info("Callback reached with status '%s'", result.outcome.status.value)
        event.cancel = True
        self._record(session, result.outcome)
        self._finish()
        return True

    def on_navigated(self, event: NavigationEvent) -> None:
        self._progress.schedule_hide()

    def on_load_completed(self, event: NavigationEvent) -> None:
        self._progress.schedule_hide()

    def on_navigation_failed(self, event: NavigationEvent) -> None:
        """Treat any navigation failure as a terminal transport error."""
        event.handled = True
        logger.info(
            "Navigation to %s failed (status %s)",
            event.uri or "<unknown>",
            event.status_code if event.status_code is not None else "unknown",
        )
        session = self._broker.session
        if session is not None and session.in_progress:
            self._record(session, Outcome.transport_error(event.status_code))
        self._finish()

    # ------------------------------------------------------------------
    # Finish sequence
    # ------------------------------------------------------------------

    @staticmethod
    def _record(session: Session, outcome: Outcome) -> None:
        if session.finished and session.outcome is not None:
            logger.debug(
                "Outcome '%s' already recorded; ignoring '%s'",
                session.outcome.status.value,
                outcome.status.value,
            )
            return
        session.outcome = outcome
        session.finished = True

    def _finish(self) -> None:
        self._progress.show()

        session = self._broker.session
        if (
            session is not None
            and self._broker.authentication_in_progress
            and session.finished
            and session.outcome is not None
        ):
            session.started = False
            session.finished = False
            self._broker.complete(session.outcome)

        self._surface.go_back()

"""End-to-end login runners.

* :func:`run_login` -- run one login against any
  :class:`~authview.surfaces.base.NavigationSurface`, with an optional
  timeout that behaves like the user pressing back.
* :func:`replay_transcript` -- replay a recorded
  :class:`~authview.models.Transcript` through a
  :class:`~authview.surfaces.scripted.ScriptedSurface` and report both the
  outcome and every call the controller made on the surface.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from authview.broker import AuthenticationBroker
from authview.debounce import Scheduler
from authview.exceptions import InvalidUsageError
from authview.models import FlowSettings, Outcome, StepKind, Transcript, TranscriptStep
from authview.screen import LoginScreen
from authview.surfaces.base import NavigationSurface
from authview.surfaces.scripted import ScriptedSurface

logger = logging.getLogger(__name__)


def validate_uri(uri: str, label: str) -> None:
    """Raise :class:`InvalidUsageError` unless *uri* is absolute (scheme + host or path)."""
    try:
        parts = urlsplit(uri)
    except ValueError as exc:
        raise InvalidUsageError(f"Invalid {label} '{uri}': {exc}") from exc
    if not parts.scheme or not (parts.netloc or parts.path):
        raise InvalidUsageError(f"Invalid {label} '{uri}': expected an absolute URI")


async def run_login(
    surface: NavigationSurface,
    start_uri: str,
    end_uri: str,
    settings: Optional[FlowSettings] = None,
    broker: Optional[AuthenticationBroker] = None,
    scheduler: Optional[Scheduler] = None,
) -> Outcome:
    """Run a login on *surface* and return its outcome.

    Args:
        surface: Surface that shows the provider's pages.
        start_uri: The provider's login page.
        end_uri: The callback URI that ends the login.
        settings: Flow settings; ``clear_cookies`` and ``timeout_seconds``
            are honoured here.
        broker: Broker to run the session on. A fresh one by default.
        scheduler: Timer source for the progress debouncer.

    Returns:
        The delivered :class:`~authview.models.Outcome`. A timeout yields
        ``UserCancel`` unless a terminal navigation won the race.

    Raises:
        InvalidUsageError: If either URI is not absolute.
        FlowError: If *broker* already has a session in progress.
    """
    validate_uri(start_uri, "start URI")
    validate_uri(end_uri, "end URI")
    settings = settings or FlowSettings()
    broker = broker or AuthenticationBroker()
    screen = LoginScreen(broker, surface, settings, scheduler)

    if settings.clear_cookies:
        await screen.clear_cookies()

    login = asyncio.ensure_future(
        broker.authenticate(start_uri, end_uri, launcher=screen.entered)
    )
    try:
        outcome = await asyncio.wait_for(asyncio.shield(login), settings.timeout_seconds)
    except asyncio.TimeoutError:
        logger.info("Login timed out after %s seconds", settings.timeout_seconds)
        screen.back_pressed()
        screen.leaving()
        outcome = await login
    except asyncio.CancelledError:
        login.cancel()
        raise
    finally:
        screen.controller.progress.cancel()
    return outcome


class ReplayResult(BaseModel):
    """What a transcript replay produced."""

    outcome: Outcome
    navigations: list[str] = Field(default_factory=list)
    go_back_count: int = 0
    progress_history: list[bool] = Field(default_factory=list)
    steps_played: int = 0


def _play_step(screen: LoginScreen, surface: ScriptedSurface, step: TranscriptStep) -> None:
    navigation_kind = step.kind.navigation_kind
    if navigation_kind is not None:
        surface.play(navigation_kind, step.uri, step.status_code)
    elif step.kind == StepKind.ENTERED:
        screen.entered()
    elif step.kind == StepKind.LEAVING:
        screen.leaving()
    elif step.kind == StepKind.SUSPENDED:
        screen.leaving(incidental=True)
    elif step.kind == StepKind.BACK_PRESSED:
        screen.back_pressed()


async def replay_transcript(
    transcript: Transcript,
    settings: Optional[FlowSettings] = None,
) -> ReplayResult:
    """Replay *transcript* through the real controller on a scripted surface.

    Every step is played, including steps after the outcome was delivered.
    If the session is still in progress once the steps run out, the screen
    is left (which delivers ``UserCancel`` unless an outcome was recorded).
    """
    validate_uri(transcript.start_uri, "start URI")
    validate_uri(transcript.end_uri, "end URI")
    surface = ScriptedSurface()
    broker = AuthenticationBroker()
    screen = LoginScreen(broker, surface, settings)

    login = asyncio.ensure_future(
        broker.authenticate(
            transcript.start_uri, transcript.end_uri, launcher=screen.entered
        )
    )
    # Let the login task begin the session and enter the screen.
    await asyncio.sleep(0)

    played = 0
    for step in transcript.steps:
        if step.delay_ms:
            await asyncio.sleep(step.delay_ms / 1000)
        _play_step(screen, surface, step)
        played += 1
        await asyncio.sleep(0)

    if broker.authentication_in_progress:
        logger.debug("Transcript ended with the login in progress; leaving the screen")
        screen.leaving()

    outcome = await login
    screen.controller.progress.cancel()
    return ReplayResult(
        outcome=outcome,
        navigations=list(surface.navigations),
        go_back_count=surface.go_back_count,
        progress_history=list(surface.progress_history),
        steps_played=played,
    )

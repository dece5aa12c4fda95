"""Tests for authview.controller -- the login state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from authview.broker import AuthenticationBroker
from authview.controller import FlowController, FlowState
from authview.models import (
    AuthenticationStatus,
    FlowSettings,
    NavigationEvent,
    NavigationKind,
    Outcome,
)
from authview.surfaces.scripted import ScriptedSurface


START = "https://tenant.example.com/authorize?client_id=abc&response_type=code"
END = "https://tenant.example.com/mobile"


@pytest.fixture
def controller(
    broker: AuthenticationBroker, surface: ScriptedSurface, scheduler
) -> FlowController:
    return FlowController(broker, surface, FlowSettings(hide_delay_ms=150), scheduler)


def _nav(uri: str, kind: NavigationKind = NavigationKind.NAVIGATING, **kwargs) -> NavigationEvent:
    return NavigationEvent(uri=uri, kind=kind, **kwargs)


# ---------------------------------------------------------------------------
# start()
# ---------------------------------------------------------------------------


class TestStart:
    def test_without_session_goes_back_and_never_navigates(
        self, controller: FlowController, surface: ScriptedSurface
    ) -> None:
        assert controller.start() is False
        assert surface.navigations == []
        assert surface.go_back_count == 1
        assert controller.state == FlowState.IDLE

    def test_after_completion_goes_back(
        self,
        controller: FlowController,
        broker: AuthenticationBroker,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        broker.complete(Outcome.user_cancel())
        assert controller.start() is False
        assert surface.navigations == []
        assert surface.go_back_count == 1

    def test_navigates_to_start_uri(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        assert controller.start() is True
        assert surface.navigations == [START]
        assert controller.state == FlowState.STARTED
        assert controller.session is not None and controller.session.started

    def test_reentry_while_started_does_not_restart(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        assert controller.start() is False
        assert surface.navigations == [START]
        assert surface.go_back_count == 0

    def test_reentry_after_back_cancel_restarts(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        controller.on_back_cancel()
        assert controller.state == FlowState.IDLE

        assert controller.start() is True
        assert surface.navigations == [START, START]
        assert not future.done()


# ---------------------------------------------------------------------------
# Navigation events
# ---------------------------------------------------------------------------


class TestNavigating:
    def test_intermediate_page_continues(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        event = _nav("https://tenant.example.com/login")
        assert controller.on_navigating(event) is False
        assert not event.cancel
        assert surface.progress_visible is True
        assert surface.go_back_count == 0
        assert not future.done()

    def test_callback_success_finishes_once(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        event = _nav(END + "?code=abc123")
        assert controller.on_navigating(event) is True

        assert event.cancel
        assert future.result() == Outcome.success(END + "?code=abc123")
        assert surface.go_back_count == 1
        assert surface.progress_visible is True
        assert controller.state == FlowState.FINISHED

    def test_callback_provider_error(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_navigating(
            _nav(END + "?error=access_denied&error_description=User%20cancelled")
        )
        outcome = future.result()
        assert outcome.status == AuthenticationStatus.ERROR_SERVER
        assert outcome.error_detail == "Error: access_denied. Description: User cancelled"

    def test_callback_after_back_cancel_wins(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_back_cancel()
        controller.on_navigating(_nav(END + "?code=late"))
        assert future.result().status == AuthenticationStatus.SUCCESS

    def test_without_session_only_shows_progress(
        self, controller: FlowController, surface: ScriptedSurface
    ) -> None:
        assert controller.on_navigating(_nav(END + "?code=1")) is False
        assert surface.progress_history == [True]
        assert surface.go_back_count == 0

    def test_settled_page_reveals_browser_after_delay(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
        scheduler,
    ) -> None:
        controller.start()
        controller.handle_event(_nav("https://tenant.example.com/login"))
        controller.handle_event(_nav("https://tenant.example.com/login", NavigationKind.NAVIGATED))
        controller.handle_event(
            _nav("https://tenant.example.com/login", NavigationKind.LOAD_COMPLETED)
        )
        assert surface.progress_visible is True

        scheduler.advance(0.2)
        assert surface.progress_history == [True, False]
        assert controller.state == FlowState.STARTED

    def test_load_completed_then_navigation_never_flashes(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
        scheduler,
    ) -> None:
        controller.start()
        controller.handle_event(_nav("https://idp.example.com/a"))
        controller.handle_event(_nav("https://idp.example.com/a", NavigationKind.LOAD_COMPLETED))
        scheduler.advance(0.1)
        controller.handle_event(_nav("https://idp.example.com/b"))
        scheduler.advance(0.5)

        assert False not in surface.progress_history


class TestNavigationFailed:
    def test_transport_error_with_status(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        event = _nav("https://tenant.example.com/login", NavigationKind.FAILED, status_code=503)
        controller.handle_event(event)

        assert event.handled
        outcome = future.result()
        assert outcome.status == AuthenticationStatus.ERROR_HTTP
        assert outcome.status_code == 503
        assert outcome.error_detail == "Error code: 503"
        assert surface.go_back_count == 1

    def test_transport_error_without_details(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_navigation_failed(_nav("", NavigationKind.FAILED))
        assert future.result().error_detail == "No details available."

    def test_exactly_one_completion_and_go_back(
        self,
        controller: FlowController,
        broker: AuthenticationBroker,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        with patch.object(broker, "complete", wraps=broker.complete) as complete:
            controller.on_navigation_failed(_nav(START, NavigationKind.FAILED, status_code=404))
            controller.on_navigating_away()

        assert complete.call_count == 1
        assert surface.go_back_count == 1

    def test_failure_without_session_still_handled(
        self, controller: FlowController, surface: ScriptedSurface
    ) -> None:
        event = _nav(START, NavigationKind.FAILED, status_code=500)
        controller.on_navigation_failed(event)
        assert event.handled
        assert surface.go_back_count == 1


# ---------------------------------------------------------------------------
# Host signals
# ---------------------------------------------------------------------------


class TestNavigatingAway:
    def test_leaving_without_outcome_is_user_cancel(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_navigating_away()
        assert future.result() == Outcome.user_cancel()
        assert controller.state == FlowState.FINISHED

    def test_back_then_leaving_is_user_cancel(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_back_cancel()
        assert not future.done()

        controller.on_navigating_away()
        assert future.result().status == AuthenticationStatus.USER_CANCEL

    def test_incidental_leaving_keeps_session(
        self,
        controller: FlowController,
        future: asyncio.Future[Outcome],
        surface: ScriptedSurface,
    ) -> None:
        controller.start()
        controller.on_navigating_away(incidental=True)
        assert not future.done()
        assert controller.state == FlowState.STARTED

        controller.start()
        assert surface.navigations == [START]

    def test_leaving_after_finish_is_ignored(
        self,
        controller: FlowController,
        broker: AuthenticationBroker,
        future: asyncio.Future[Outcome],
    ) -> None:
        controller.start()
        controller.on_navigating(_nav(END + "?code=1"))
        with patch.object(broker, "complete") as complete:
            controller.on_navigating_away()
            controller.on_navigating_away()
        complete.assert_not_called()
        assert future.result().status == AuthenticationStatus.SUCCESS

    def test_back_after_finish_changes_nothing(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_navigating(_nav(END + "?code=1"))
        controller.on_back_cancel()
        controller.on_navigating_away()
        assert future.result().status == AuthenticationStatus.SUCCESS


class TestState:
    def test_abandoned_session_is_idle(self, surface: ScriptedSurface, scheduler) -> None:
        broker = AuthenticationBroker()
        controller = FlowController(broker, surface, FlowSettings(), scheduler)

        async def scenario() -> None:
            task = asyncio.ensure_future(
                broker.authenticate(START, END, launcher=controller.start)
            )
            await asyncio.sleep(0)
            assert controller.state == FlowState.STARTED
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert controller.session is not None and controller.session.started
        assert controller.state == FlowState.IDLE

    def test_back_cancel_while_started_is_idle(
        self, controller: FlowController, future: asyncio.Future[Outcome]
    ) -> None:
        controller.start()
        controller.on_back_cancel()
        assert controller.state == FlowState.IDLE

"""Tests for authview.debounce -- deferred reveal of the browser surface."""

from __future__ import annotations

import asyncio

from authview.debounce import ProgressDebouncer
from authview.surfaces.scripted import ScriptedSurface


def _debouncer(surface: ScriptedSurface, scheduler, in_progress: list[bool]) -> ProgressDebouncer:
    return ProgressDebouncer(surface, lambda: in_progress[0], delay=0.15, scheduler=scheduler)


class TestShow:
    def test_show_covers_immediately(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        debouncer.show()
        assert surface.progress_history == [True]
        assert not debouncer.pending

    def test_show_cancels_pending_hide(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        debouncer.schedule_hide()
        debouncer.show()

        scheduler.advance(1.0)
        assert surface.progress_history == [True]
        assert not debouncer.pending


class TestScheduleHide:
    def test_reveals_after_delay_while_in_progress(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        debouncer.show()
        debouncer.schedule_hide()

        scheduler.advance(0.1)
        assert surface.progress_visible is True
        assert debouncer.pending

        scheduler.advance(0.06)
        assert surface.progress_visible is False
        assert not debouncer.pending

    def test_keeps_indicator_when_login_over(self, surface: ScriptedSurface, scheduler) -> None:
        in_progress = [True]
        debouncer = _debouncer(surface, scheduler, in_progress)
        debouncer.show()
        debouncer.schedule_hide()
        in_progress[0] = False

        scheduler.advance(0.2)
        assert surface.progress_history == [True]

    def test_restart_cancels_previous_timer(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        debouncer.schedule_hide()
        scheduler.advance(0.1)
        debouncer.schedule_hide()

        assert len(scheduler.pending) == 1
        scheduler.advance(0.1)
        assert surface.progress_history == []
        scheduler.advance(0.06)
        assert surface.progress_history == [False]

    def test_rapid_navigation_never_flashes(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        for _ in range(5):
            debouncer.show()
            debouncer.schedule_hide()
            scheduler.advance(0.1)
        debouncer.show()
        scheduler.advance(1.0)

        assert False not in surface.progress_history

    def test_cancel_drops_timer(self, surface: ScriptedSurface, scheduler) -> None:
        debouncer = _debouncer(surface, scheduler, [True])
        debouncer.schedule_hide()
        debouncer.cancel()
        scheduler.advance(1.0)
        assert surface.progress_history == []


class TestDefaultScheduler:
    def test_uses_running_loop(self, surface: ScriptedSurface) -> None:
        debouncer = ProgressDebouncer(surface, lambda: True, delay=0.01)

        async def scenario() -> None:
            debouncer.show()
            debouncer.schedule_hide()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert surface.progress_history == [True, False]

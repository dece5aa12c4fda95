"""Shared test fixtures for authview.

Provides a manually advanced scheduler for the progress debouncer, scripted
surfaces and brokers, isolated config directories, and output/logging
state resets. Fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from authview.broker import AuthenticationBroker
from authview.models import Outcome
from authview.output import OutputFormat, OutputManager, reset_output, set_output
from authview.surfaces.scripted import ScriptedSurface


FIXTURES_DIR = Path(__file__).parent / "fixtures"

START_URI = "https://tenant.example.com/authorize?client_id=abc&response_type=code"
END_URI = "https://tenant.example.com/mobile"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and drop CLI log handlers after every test.

    Both cache references to the stderr stream that Typer's CliRunner
    replaces during a test.
    """
    yield
    reset_output()
    logger = logging.getLogger("authview")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Fake scheduler
# ---------------------------------------------------------------------------


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """call_later-compatible scheduler whose clock only moves on advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (h for h in self.pending if h.when <= self.now), key=lambda h: h.when
        )
        for handle in due:
            self.handles.remove(handle)
            if not handle.cancelled:
                handle.callback(*handle.args)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


# ---------------------------------------------------------------------------
# Flow fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def surface() -> ScriptedSurface:
    """Scripted surface that reports leaving when asked to go back."""
    return ScriptedSurface()


@pytest.fixture
def loop() -> asyncio.AbstractEventLoop:
    """A private event loop for tests that create futures without running it."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def broker() -> AuthenticationBroker:
    return AuthenticationBroker()


@pytest.fixture
def future(
    broker: AuthenticationBroker, loop: asyncio.AbstractEventLoop
) -> asyncio.Future[Outcome]:
    """Begin a session on *broker* and return the caller's pending future."""
    return broker.begin(START_URI, END_URI, loop=loop)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at tmp_path, clear AUTHVIEW_* env, chdir to tmp_path."""
    monkeypatch.setattr("authview.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["AUTHVIEW_HIDE_DELAY_MS", "AUTHVIEW_TIMEOUT", "AUTHVIEW_LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()

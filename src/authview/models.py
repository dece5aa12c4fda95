"""Canonical Pydantic models shared across all authview modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Flow models** -- the state of a single login attempt:
    :class:`AuthenticationStatus`, :class:`Outcome`, :class:`NavigationKind`,
    :class:`NavigationEvent`, and :class:`Session`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`FlowSettings`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Transcript models** -- recorded navigation sequences replayed by
``authview replay``:
    :class:`StepKind`, :class:`TranscriptStep`, and :class:`Transcript`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


NO_DETAILS_AVAILABLE = "No details available."
"""Fixed error detail used when neither the provider nor the transport said why."""


# --- Flow Models ---


class AuthenticationStatus(str, enum.Enum):
    """Terminal classification of a login attempt.

    ``ERROR_SERVER`` is an error reported by the identity provider on the
    callback URI; ``ERROR_HTTP`` is a navigation or load failure before the
    callback was reached.
    """

    SUCCESS = "success"
    ERROR_SERVER = "error_server"
    ERROR_HTTP = "error_http"
    USER_CANCEL = "user_cancel"


class Outcome(BaseModel):
    """The single result delivered to the caller that started a login.

    Exactly one ``Outcome`` is produced per :class:`Session`. Use the
    classmethod constructors rather than building one field by field, so
    that ``error_detail`` always follows the documented format. Outcomes
    are immutable once built.

    Example::

        outcome = Outcome.provider_error("access_denied", "User said no")
        assert outcome.error_detail == (
            "Error: access_denied. Description: User said no"
        )
    """

    model_config = ConfigDict(frozen=True)

    status: AuthenticationStatus
    response_data: str = Field(
        default="", description="Full callback URI on success, empty otherwise"
    )
    error: Optional[str] = Field(
        default=None, description="Provider 'error' query parameter"
    )
    error_description: Optional[str] = Field(
        default=None, description="Provider 'error_description' query parameter"
    )
    status_code: Optional[int] = Field(
        default=None, description="HTTP status of a failed navigation, if known"
    )
    error_detail: str = Field(default="", description="Human-readable error detail")

    @classmethod
    def success(cls, uri: str) -> Outcome:
        return cls(status=AuthenticationStatus.SUCCESS, response_data=uri)

    @classmethod
    def provider_error(cls, error: str, description: str) -> Outcome:
        return cls(
            status=AuthenticationStatus.ERROR_SERVER,
            error=error,
            error_description=description,
            error_detail=f"Error: {error}. Description: {description}",
        )

    @classmethod
    def provider_error_without_details(cls) -> Outcome:
        return cls(
            status=AuthenticationStatus.ERROR_SERVER,
            error_detail=NO_DETAILS_AVAILABLE,
        )

    @classmethod
    def transport_error(cls, status_code: Optional[int] = None) -> Outcome:
        detail = (
            f"Error code: {status_code}"
            if status_code is not None
            else NO_DETAILS_AVAILABLE
        )
        return cls(
            status=AuthenticationStatus.ERROR_HTTP,
            status_code=status_code,
            error_detail=detail,
        )

    @classmethod
    def user_cancel(cls) -> Outcome:
        return cls(status=AuthenticationStatus.USER_CANCEL)

    @property
    def is_error(self) -> bool:
        """True for provider and transport errors (not for cancellation)."""
        return self.status in (
            AuthenticationStatus.ERROR_SERVER,
            AuthenticationStatus.ERROR_HTTP,
        )


class NavigationKind(str, enum.Enum):
    """Kinds of events a navigation surface reports to the flow controller."""

    NAVIGATING = "navigating"
    NAVIGATED = "navigated"
    LOAD_COMPLETED = "load_completed"
    FAILED = "failed"


class NavigationEvent(BaseModel):
    """A single navigation event emitted by a browser surface.

    Events are ephemeral: the surface creates one, hands it to the bound
    handler synchronously, then inspects the two feedback flags.

    ``cancel`` is set by the controller on a ``navigating`` event that hit
    the callback URI; the surface must not continue loading it.
    ``handled`` is set on a ``failed`` event so the surface does not surface
    its own error page or dialog.
    """

    uri: str
    kind: NavigationKind
    status_code: Optional[int] = None
    cancel: bool = False
    handled: bool = False


class Session(BaseModel):
    """The single in-flight login attempt held by an authentication broker.

    ``in_progress`` is owned by the broker and flips to ``False`` exactly once,
    when the outcome is delivered. ``started``, ``finished`` and ``outcome``
    are owned by the flow controller; ``started`` survives incidental host
    navigations so that coming back to the login screen does not restart
    the provider's login page.
    """

    start_uri: str
    end_uri: str
    in_progress: bool = True
    started: bool = False
    finished: bool = False
    outcome: Optional[Outcome] = None


# --- Configuration Models ---


class FlowSettings(BaseModel):
    """Tunables for a login flow, stored under ``flow`` in :class:`GlobalConfig`."""

    hide_delay_ms: int = Field(
        default=150,
        ge=0,
        description="Delay before revealing the browser after a page settles",
    )
    clear_cookies: bool = Field(
        default=False, description="Clear surface cookies before each login"
    )
    timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Cancel the login after this many seconds"
    )
    max_redirects: int = Field(
        default=10, ge=1, description="Redirect hops followed by the HTTP surface"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/authview/config.json``.

    Loaded and saved by :func:`~authview.config.load_global_config` and
    :func:`~authview.config.save_global_config`. See
    :func:`~authview.config.resolve_config` for the full precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    flow: FlowSettings = Field(default_factory=FlowSettings)
    log_level: str = Field(
        default="WARNING", description="Logging level for the authview logger"
    )


# --- Transcript Models ---


class StepKind(str, enum.Enum):
    """What a single transcript step replays.

    The first four mirror :class:`NavigationKind` and are emitted by the
    scripted surface. The host signals drive the login screen's lifecycle
    hooks, and ``WAIT`` only lets time pass (for the progress debouncer).
    """

    NAVIGATING = "navigating"
    NAVIGATED = "navigated"
    LOAD_COMPLETED = "load_completed"
    FAILED = "failed"
    ENTERED = "entered"
    LEAVING = "leaving"
    SUSPENDED = "suspended"
    BACK_PRESSED = "back_pressed"
    WAIT = "wait"

    @property
    def navigation_kind(self) -> Optional[NavigationKind]:
        """The matching :class:`NavigationKind`, or ``None`` for host signals."""
        try:
            return NavigationKind(self.value)
        except ValueError:
            return None


class TranscriptStep(BaseModel):
    """One recorded step: a navigation event, a host signal, or a pause."""

    kind: StepKind
    uri: Optional[str] = None
    status_code: Optional[int] = None
    delay_ms: int = Field(default=0, ge=0, description="Pause before this step")

    @model_validator(mode="after")
    def _uri_required_for_navigation(self) -> TranscriptStep:
        if self.kind in (StepKind.NAVIGATING, StepKind.NAVIGATED) and not self.uri:
            raise ValueError(f"'{self.kind.value}' steps require a 'uri'")
        return self


class Transcript(BaseModel):
    """A recorded login attempt against a configured start/end URI pair."""

    start_uri: str
    end_uri: str
    steps: list[TranscriptStep] = Field(default_factory=list)

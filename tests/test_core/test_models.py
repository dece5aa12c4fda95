"""Tests for authview.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from authview.models import (
    NO_DETAILS_AVAILABLE,
    AuthenticationStatus,
    FlowSettings,
    GlobalConfig,
    NavigationKind,
    Outcome,
    StepKind,
    Transcript,
    TranscriptStep,
)


class TestOutcome:
    def test_success_carries_uri(self) -> None:
        outcome = Outcome.success("https://app.example.com/cb?code=1")
        assert outcome.status == AuthenticationStatus.SUCCESS
        assert outcome.response_data == "https://app.example.com/cb?code=1"
        assert outcome.error_detail == ""
        assert not outcome.is_error

    def test_provider_error_detail_format(self) -> None:
        outcome = Outcome.provider_error("access_denied", "User said no")
        assert outcome.error_detail == "Error: access_denied. Description: User said no"
        assert outcome.is_error

    def test_provider_error_without_details(self) -> None:
        outcome = Outcome.provider_error_without_details()
        assert outcome.status == AuthenticationStatus.ERROR_SERVER
        assert outcome.error_detail == NO_DETAILS_AVAILABLE

    @pytest.mark.parametrize(
        ("status_code", "detail"),
        [(404, "Error code: 404"), (0, "Error code: 0"), (None, NO_DETAILS_AVAILABLE)],
    )
    def test_transport_error_detail(self, status_code, detail) -> None:
        outcome = Outcome.transport_error(status_code)
        assert outcome.status == AuthenticationStatus.ERROR_HTTP
        assert outcome.status_code == status_code
        assert outcome.error_detail == detail

    def test_user_cancel_is_not_an_error(self) -> None:
        outcome = Outcome.user_cancel()
        assert outcome.status == AuthenticationStatus.USER_CANCEL
        assert outcome.response_data == ""
        assert not outcome.is_error

    def test_is_frozen(self) -> None:
        outcome = Outcome.user_cancel()
        with pytest.raises(ValidationError):
            outcome.status = AuthenticationStatus.SUCCESS
        assert outcome.status == AuthenticationStatus.USER_CANCEL

    def test_serialises_status_as_string(self) -> None:
        data = Outcome.transport_error(503).model_dump(mode="json")
        assert data["status"] == "error_http"
        assert data["status_code"] == 503


class TestSettings:
    def test_defaults(self) -> None:
        settings = FlowSettings()
        assert settings.hide_delay_ms == 150
        assert settings.timeout_seconds is None
        assert not settings.clear_cookies

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError):
            FlowSettings(timeout_seconds=0)

    def test_global_config_round_trip(self) -> None:
        config = GlobalConfig.model_validate({"flow": {"hide_delay_ms": 300}})
        assert config.flow.hide_delay_ms == 300
        assert config.output.format == "auto"
        assert config.log_level == "WARNING"


class TestTranscript:
    def test_navigation_kind_mapping(self) -> None:
        assert StepKind.NAVIGATING.navigation_kind == NavigationKind.NAVIGATING
        assert StepKind.FAILED.navigation_kind == NavigationKind.FAILED
        assert StepKind.BACK_PRESSED.navigation_kind is None
        assert StepKind.WAIT.navigation_kind is None

    @pytest.mark.parametrize("kind", ["navigating", "navigated"])
    def test_uri_required_for_navigation_steps(self, kind: str) -> None:
        with pytest.raises(ValidationError, match="require a 'uri'"):
            TranscriptStep(kind=kind)

    def test_signal_steps_need_no_uri(self) -> None:
        step = TranscriptStep(kind="back_pressed", delay_ms=20)
        assert step.uri is None
        assert step.delay_ms == 20

    def test_unknown_step_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Transcript.model_validate(
                {"start_uri": "https://a/", "end_uri": "https://b/", "steps": [{"kind": "jump"}]}
            )

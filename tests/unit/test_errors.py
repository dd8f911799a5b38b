"""Unit tests for the sonarEDM exception hierarchy."""

from __future__ import annotations

import pytest

from src.utils.errors import (
    ERROR_CODES,
    AuthorizationError,
    ConfigurationError,
    DataShapeError,
    EnhancementError,
    NotFoundError,
    PipelineError,
    ProviderUnavailableError,
    RateLimitError,
    SonarEDMError,
    UpstreamTimeoutError,
)


class TestSonarEDMError:
    def test_str_prefixes_provider(self) -> None:
        assert str(NotFoundError("Track not found", provider_name="reccobeats")) == "[reccobeats] Track not found"

    def test_str_without_provider(self) -> None:
        assert str(PipelineError("store offline")) == "store offline"

    def test_default_messages(self) -> None:
        assert RateLimitError().message == "Rate limit exceeded"
        assert SonarEDMError().provider_name is None

    @pytest.mark.parametrize(
        "error_cls",
        [
            ConfigurationError,
            ProviderUnavailableError,
            UpstreamTimeoutError,
            RateLimitError,
            AuthorizationError,
            NotFoundError,
            DataShapeError,
            EnhancementError,
            PipelineError,
        ],
    )
    def test_all_derive_from_base(self, error_cls: type[SonarEDMError]) -> None:
        assert issubclass(error_cls, SonarEDMError)


class TestSpecificErrors:
    def test_timeout_is_unavailable(self) -> None:
        error = UpstreamTimeoutError(provider_name="spotify")
        assert isinstance(error, ProviderUnavailableError)
        assert error.code == "TIMEOUT"

    def test_authorization_carries_status(self) -> None:
        error = AuthorizationError("forbidden", provider_name="reccobeats", status_code=403)
        assert error.status_code == 403
        assert error.code == "AUTH_ERROR"

    def test_enhancement_carries_event_id(self) -> None:
        error = EnhancementError("write failed", event_id="tm:123")
        assert error.event_id == "tm:123"

    def test_stat_codes_cover_upstream_failures(self) -> None:
        assert ERROR_CODES == {
            "NOT_CONFIGURED",
            "AUTH_ERROR",
            "NOT_FOUND",
            "RATE_LIMITED",
            "TIMEOUT",
            "UPSTREAM_ERROR",
            "INVALID_RESPONSE",
        }

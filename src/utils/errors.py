"""Exception hierarchy for sonarEDM.

Every application error derives from :class:`SonarEDMError`, which carries
an optional ``provider_name`` naming the upstream service involved
("reccobeats", "spotify", "ticketmaster", "sqlite").

    SonarEDMError  (base)
    +-- ConfigurationError       (missing/invalid credentials or settings)
    +-- ProviderUnavailableError (network failure, 5xx)
    |   +-- UpstreamTimeoutError (request exceeded its timeout)
    +-- RateLimitError           (HTTP 429)
    +-- AuthorizationError       (HTTP 401/403)
    +-- NotFoundError            (artist/track/event absent upstream)
    +-- DataShapeError           (response missing expected fields)
    +-- EnhancementError         (a single event failed enhancement)
    +-- PipelineError            (batch orchestration failure)

Provider adapters raise these; services catch them at their fallback
boundary and translate each one into an :data:`ERROR_CODES` entry for the
statistics surface.  Anything that is not a ``SonarEDMError`` is treated
as a programming error and propagates.
"""


class SonarEDMError(Exception):
    """Base exception for all sonarEDM errors.

    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[reccobeats] Track not found``.
    """

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(SonarEDMError):
    """Raised when a required credential or setting is missing.

    Not transient: components that see it switch to their fallback tier
    for the rest of the process instead of retrying.
    """

    code = "NOT_CONFIGURED"

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Upstream / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(SonarEDMError):
    """Raised when an upstream service is unreachable or answers 5xx."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamTimeoutError(ProviderUnavailableError):
    """Raised when an upstream call exceeds its configured timeout."""

    code = "TIMEOUT"

    def __init__(
        self,
        message: str = "Upstream request timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(SonarEDMError):
    """Raised when an upstream answers HTTP 429."""

    code = "RATE_LIMITED"

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthorizationError(SonarEDMError):
    """Raised on HTTP 401/403.

    Counted separately from generic failures so monitoring can tell bad
    credentials apart from an outage.  Never retried with the same
    credentials.
    """

    code = "AUTH_ERROR"

    def __init__(
        self,
        message: str = "Upstream rejected the credentials",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class NotFoundError(SonarEDMError):
    """Raised when the requested artist, track or record does not exist upstream."""

    code = "NOT_FOUND"

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DataShapeError(SonarEDMError):
    """Raised when a response is missing the fields the pipeline consumes."""

    code = "INVALID_RESPONSE"

    def __init__(
        self,
        message: str = "Upstream response is missing expected fields",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

class EnhancementError(SonarEDMError):
    """Raised when one event cannot be enhanced (malformed record, store write failure)."""

    code = "ENHANCEMENT_FAILED"

    def __init__(
        self,
        message: str = "Event enhancement failed",
        provider_name: str | None = None,
        event_id: str | None = None,
    ) -> None:
        self._event_id = event_id
        super().__init__(message=message, provider_name=provider_name)

    @property
    def event_id(self) -> str | None:
        return self._event_id


class PipelineError(SonarEDMError):
    """Raised when batch orchestration itself fails (store unreachable, bad arguments)."""

    code = "PIPELINE_ERROR"

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# Stable codes surfaced in provider statistics and health responses.
ERROR_CODES: frozenset[str] = frozenset(
    {
        ConfigurationError.code,
        AuthorizationError.code,
        NotFoundError.code,
        RateLimitError.code,
        UpstreamTimeoutError.code,
        ProviderUnavailableError.code,
        DataShapeError.code,
    }
)

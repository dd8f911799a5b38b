"""Utility modules for sonarEDM.

- **confidence** -- weighted confidence math and the graded tiers attached
  to scores.
- **errors** -- exception hierarchy rooted at SonarEDMError; adapters
  raise typed errors that services translate into fallback behaviour.
- **concurrency** -- the shared request-spacing RateLimiter and the
  semaphore-bounded gather used by the batch worker pool.
- **logging** -- structlog setup (console in development, JSON in
  production).
- **text_normalizer** -- artist matching keys, title cleaning/splitting
  and name similarity.
"""

from src.utils.concurrency import RateLimiter, throttled_gather
from src.utils.confidence import (
    ConfidenceLevel,
    calculate_confidence,
    confidence_to_level,
    grade_artist_resolution,
)
from src.utils.errors import (
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
from src.utils.logging import configure_logging, get_logger
from src.utils.text_normalizer import (
    name_similarity,
    normalize_for_matching,
    split_on_first_separator,
    strip_title_suffix,
)

__all__ = [
    "AuthorizationError",
    "ConfidenceLevel",
    "ConfigurationError",
    "DataShapeError",
    "EnhancementError",
    "NotFoundError",
    "PipelineError",
    "ProviderUnavailableError",
    "RateLimitError",
    "RateLimiter",
    "SonarEDMError",
    "UpstreamTimeoutError",
    "calculate_confidence",
    "configure_logging",
    "confidence_to_level",
    "get_logger",
    "grade_artist_resolution",
    "name_similarity",
    "normalize_for_matching",
    "split_on_first_separator",
    "strip_title_suffix",
    "throttled_gather",
]

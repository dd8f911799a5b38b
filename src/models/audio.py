"""Audio-feature models.

Every :class:`AudioFeatureVector` is full-shape: all seven descriptors are
always present, whatever tier produced it.  ``source`` records which tier
that was and ``confidence`` how much the vector should be trusted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

FEATURE_NAMES: tuple[str, ...] = (
    "energy",
    "danceability",
    "valence",
    "tempo",
    "acousticness",
    "instrumentalness",
    "speechiness",
)


class AudioFeatureSource(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Provenance of an audio-feature vector."""

    LIVE_API = "live_api"
    CACHED = "cached"
    GENRE_FALLBACK = "genre_fallback"
    METADATA_ESTIMATE = "metadata_estimate"
    UNKNOWN_DEFAULT = "unknown_default"


class AudioFeatureVector(BaseModel):
    """Normalized audio descriptors (tempo in BPM) plus provenance."""

    model_config = ConfigDict(frozen=True)

    energy: float = Field(ge=0.0, le=1.0)
    danceability: float = Field(ge=0.0, le=1.0)
    valence: float = Field(ge=0.0, le=1.0)
    tempo: float = Field(ge=0.0)
    acousticness: float = Field(ge=0.0, le=1.0)
    instrumentalness: float = Field(ge=0.0, le=1.0)
    speechiness: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    source: AudioFeatureSource
    matched_genre: str | None = None    # Table key used by the genre fallback
    track_name: str | None = None       # Track analysed by the live tier

    def features(self) -> dict[str, float]:
        """The seven descriptors as a plain dict."""
        return {name: getattr(self, name) for name in FEATURE_NAMES}


class AudioProviderStats(BaseModel):
    """Running counters exposed for health/monitoring views."""

    model_config = ConfigDict(frozen=True)

    total_requests: int = 0
    cache_hits: int = 0
    live_fetches: int = 0
    fallback_usages: int = 0
    errors: int = 0
    auth_errors: int = 0
    live_disabled: bool = False
    last_error: str | None = None
    last_error_code: str | None = None
    last_error_at: datetime | None = None
    last_successful_fetch: datetime | None = None
    cache_size: int = 0

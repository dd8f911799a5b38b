"""Abstract base class for live audio-analysis services.

A feature lookup is three chained remote calls (artist search, artist
track list, per-track features), each of which can fail on its own.
Implementations raise the typed errors from ``src.utils.errors``:

    ConfigurationError    no credentials configured
    AuthorizationError    HTTP 401/403
    NotFoundError         no artist / no tracks / unknown track
    RateLimitError        HTTP 429
    UpstreamTimeoutError  request exceeded its timeout
    ProviderUnavailableError  network failure or 5xx
    DataShapeError        response missing expected fields

The audio-feature service translates each into fallback behaviour; none
of them reaches the scoring pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AnalysisArtist:
    """An artist as known to the audio-analysis catalog."""

    id: str
    name: str


@dataclass(frozen=True)
class AnalysisTrack:
    """A track as known to the audio-analysis catalog."""

    id: str
    name: str
    artists: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TrackAudioFeatures:
    """Raw descriptor values for one track (tempo in BPM)."""

    track_id: str
    energy: float
    danceability: float
    valence: float
    tempo: float
    acousticness: float
    instrumentalness: float
    speechiness: float


class IAudioAnalysisProvider(ABC):
    """Contract for the three-step live audio-feature lookup."""

    @abstractmethod
    async def search_artist(self, name: str) -> AnalysisArtist:
        """Find the catalog artist best matching *name*.  Raises NotFoundError if none."""

    @abstractmethod
    async def get_artist_tracks(self, artist_id: str) -> list[AnalysisTrack]:
        """Return the artist's tracks.  Raises NotFoundError if the list is empty."""

    @abstractmethod
    async def get_track_features(self, track_id: str) -> TrackAudioFeatures:
        """Return the track's descriptors.  Raises DataShapeError if any are missing."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when credentials are configured."""

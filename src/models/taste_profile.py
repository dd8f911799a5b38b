"""User taste profile models.

A :class:`TasteProfile` is always recomputed wholesale from the
listening-history source (never patched in place) and cached for a bounded
freshness window.  Its :attr:`TasteProfile.version` participates in score
cache keys, so a recomputed profile automatically moves scoring onto a
fresh key space.

Temporal windows are keyed by :class:`ListeningWindow`:

    RECENT     ~ last 4 weeks   (Spotify ``short_term``)
    MEDIUM     ~ last 6 months  (Spotify ``medium_term``)
    LONG_TERM  several years    (Spotify ``long_term``)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.audio import AudioFeatureVector


class ListeningWindow(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Recency windows of listening history."""

    RECENT = "recent"
    MEDIUM = "medium"
    LONG_TERM = "long_term"

    @property
    def time_range(self) -> str:
        """The listening-history API's name for this window."""
        return {
            ListeningWindow.RECENT: "short_term",
            ListeningWindow.MEDIUM: "medium_term",
            ListeningWindow.LONG_TERM: "long_term",
        }[self]


class TopArtistEntry(BaseModel):
    """One ranked artist from a listening-history window."""

    model_config = ConfigDict(frozen=True)

    name: str
    genres: list[str] = Field(default_factory=list)
    popularity: int = Field(default=50, ge=0, le=100)


class TrackEntry(BaseModel):
    """One ranked track from a listening-history window (or a removed track)."""

    model_config = ConfigDict(frozen=True)

    name: str
    artists: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    popularity: int = Field(default=50, ge=0, le=100)


class PlaylistEntry(BaseModel):
    """An abandoned playlist and the genres it was built around."""

    model_config = ConfigDict(frozen=True)

    name: str
    genres: list[str] = Field(default_factory=list)


class WeightedArtist(BaseModel):
    """An artist in the aggregated profile with its relative weight."""

    model_config = ConfigDict(frozen=True)

    name: str
    weight: float = Field(ge=0.0, le=100.0)
    popularity: int = Field(default=50, ge=0, le=100)


class TemporalWindowProfile(BaseModel):
    """Genres and tracks observed in one recency window."""

    model_config = ConfigDict(frozen=True)

    genres: list[str] = Field(default_factory=list)
    tracks: list[TrackEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.genres and not self.tracks


class NegativeSignals(BaseModel):
    """Content the user pushed away; used only for the score penalty.

    All lists default to empty so the penalty is always well-defined.
    """

    model_config = ConfigDict(frozen=True)

    removed_tracks: list[TrackEntry] = Field(default_factory=list)
    skipped_artists: list[str] = Field(default_factory=list)
    abandoned_playlists: list[PlaylistEntry] = Field(default_factory=list)

    @property
    def removed_track_genres(self) -> list[str]:
        return _unique(g for track in self.removed_tracks for g in track.genres)

    @property
    def abandoned_playlist_genres(self) -> list[str]:
        return _unique(g for playlist in self.abandoned_playlists for g in playlist.genres)

    @property
    def is_empty(self) -> bool:
        return not (self.removed_tracks or self.skipped_artists or self.abandoned_playlists)


class TasteTrends(BaseModel):
    """Genre movement between windows, derived by plain set difference."""

    model_config = ConfigDict(frozen=True)

    trending_up: list[str] = Field(default_factory=list)
    trending_down: list[str] = Field(default_factory=list)
    new_discoveries: list[str] = Field(default_factory=list)


class TasteProfile(BaseModel):
    """Aggregated music taste of one user."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    genres: dict[str, float] = Field(default_factory=dict)      # genre -> relative weight 0-100
    top_artists: list[WeightedArtist] = Field(default_factory=list)
    temporal: dict[ListeningWindow, TemporalWindowProfile] = Field(default_factory=dict)
    negative: NegativeSignals = Field(default_factory=NegativeSignals)
    trends: TasteTrends = Field(default_factory=TasteTrends)
    seasonal: dict[str, list[str]] = Field(default_factory=dict)  # season -> preferred genres
    sound_centroid: AudioFeatureVector | None = None
    last_updated: datetime
    is_default: bool = False

    @property
    def version(self) -> str:
        """Snapshot identifier used in score cache keys."""
        return self.last_updated.isoformat()

    def window(self, window: ListeningWindow) -> TemporalWindowProfile:
        return self.temporal.get(window, TemporalWindowProfile())

    @property
    def max_genre_weight(self) -> float:
        return max(self.genres.values(), default=0.0)


def _unique(values: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        lowered = value.lower()
        if lowered not in seen:
            seen.append(lowered)
    return seen

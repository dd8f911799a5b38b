"""Taste profile aggregation from listening history.

Builds a :class:`TasteProfile` for one user out of three listening-history
windows plus optional negative and seasonal signals, then caches it for a
bounded freshness window (30 minutes by default).  Profiles are never
patched: a rebuild replaces the whole object and moves its ``version``.

# ─── HOW GENRE WEIGHTS ARE COMPUTED (Junior Developer Guide) ───────────
#
# Every top artist in every window contributes to each of its genres:
#
#   contribution = window_weight x rank_decay
#   rank_decay   = 1 / (1 + 0.1 x rank)          rank 0 = favourite
#   window_weight: recent 0.6, medium 0.3, long_term 0.1
#
# The totals are then rescaled so the strongest genre is 100:
#
#   {"techno": 1.42, "house": 0.71}  ->  {"techno": 100.0, "house": 50.0}
#
# Trends are plain set differences between window genre lists:
#
#   trending_up      recent    - long_term
#   trending_down    long_term - recent
#   new_discoveries  recent    - medium
#
# A window whose fetch fails counts as empty (logged).  When every window
# is empty the user gets the default EDM profile with is_default=True.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable

import structlog
from pydantic import ValidationError

from src.config.domain_knowledge import DEFAULT_PROFILE_GENRES, DEFAULT_SEASONAL_GENRES, season_for
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.listening_history_provider import IListeningHistoryProvider
from src.interfaces.taste_signal_provider import ITasteSignalProvider
from src.models.audio import AudioFeatureVector
from src.models.taste_profile import (
    ListeningWindow,
    NegativeSignals,
    TasteProfile,
    TasteTrends,
    TemporalWindowProfile,
    TopArtistEntry,
    TrackEntry,
    WeightedArtist,
)
from src.services.audio_feature_service import blend_vectors, genre_vector
from src.utils.errors import SonarEDMError
from src.utils.logging import get_logger

_RANK_DECAY = 0.1
_MAX_TOP_ARTISTS = 50

DEFAULT_WINDOW_WEIGHTS: dict[ListeningWindow, float] = {
    ListeningWindow.RECENT: 0.6,
    ListeningWindow.MEDIUM: 0.3,
    ListeningWindow.LONG_TERM: 0.1,
}

_WindowData = tuple[list[TopArtistEntry], list[TrackEntry]]


class TasteProfileService:
    """Builds and caches per-user taste profiles.

    Parameters
    ----------
    history:
        Listening-history source, or ``None`` to always serve the
        default profile.
    cache:
        Profile cache, keyed ``profile:<user_id>``.
    signals:
        Optional negative-signal / seasonal-preference source.
    cache_ttl:
        Seconds a built profile is served from cache.
    window_weights:
        Per-window weights keyed by window name (``recent``, ``medium``,
        ``long_term``); missing keys keep their defaults.
    clock:
        Wall-clock source; drives ``last_updated`` and the current season.
    """

    def __init__(
        self,
        history: IListeningHistoryProvider | None,
        cache: ICacheProvider,
        signals: ITasteSignalProvider | None = None,
        cache_ttl: int = 1800,
        window_weights: dict[str, float] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._history = history
        self._cache = cache
        self._signals = signals
        self._cache_ttl = cache_ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._window_weights = dict(DEFAULT_WINDOW_WEIGHTS)
        for name, weight in (window_weights or {}).items():
            self._window_weights[ListeningWindow(name)] = float(weight)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def build_profile(self, user_id: str) -> TasteProfile:
        """Return the user's profile, from cache when still fresh."""
        key = _cache_key(user_id)
        cached = await self._cache.get(key)
        if isinstance(cached, TasteProfile):
            return cached

        profile = await self._compute(user_id)
        await self._cache.set(key, profile, ttl=self._cache_ttl)
        self._logger.info(
            "taste_profile_built",
            user_id=user_id,
            genres=len(profile.genres),
            top_artists=len(profile.top_artists),
            is_default=profile.is_default,
        )
        return profile

    async def invalidate(self, user_id: str) -> None:
        """Forget the cached profile; the next call rebuilds it."""
        await self._cache.delete(_cache_key(user_id))

    def current_season(self) -> str:
        return season_for(self._clock())

    def default_profile(
        self,
        user_id: str,
        negative: NegativeSignals | None = None,
        seasonal: dict[str, list[str]] | None = None,
    ) -> TasteProfile:
        """The generic EDM profile served to users with no listening data."""
        genres = dict(DEFAULT_PROFILE_GENRES)
        return TasteProfile(
            user_id=user_id,
            genres=genres,
            negative=negative or NegativeSignals(),
            seasonal=seasonal or _default_seasonal(),
            sound_centroid=_sound_centroid(genres),
            last_updated=self._clock(),
            is_default=True,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _compute(self, user_id: str) -> TasteProfile:
        negative, seasonal = await self._load_signals(user_id)

        if self._history is None:
            return self.default_profile(user_id, negative, seasonal)

        windows = list(ListeningWindow)
        fetched = await asyncio.gather(*(self._fetch_window(self._history, user_id, window) for window in windows))
        data: dict[ListeningWindow, _WindowData] = {
            window: result for window, result in zip(windows, fetched) if result is not None
        }

        if not any(artists or tracks for artists, tracks in data.values()):
            self._logger.info("taste_profile_default", user_id=user_id, reason="no listening data")
            return self.default_profile(user_id, negative, seasonal)

        genre_totals: dict[str, float] = defaultdict(float)
        artist_totals: dict[str, float] = defaultdict(float)
        artist_entries: dict[str, TopArtistEntry] = {}
        temporal: dict[ListeningWindow, TemporalWindowProfile] = {}

        for window in windows:
            artists, tracks = data.get(window, ([], []))
            window_weight = self._window_weights.get(window, 0.0)
            window_genres: dict[str, float] = defaultdict(float)
            genres_by_artist: dict[str, list[str]] = {}

            for rank, artist in enumerate(artists):
                decay = 1.0 / (1.0 + _RANK_DECAY * rank)
                key = artist.name.lower()
                artist_totals[key] += window_weight * decay
                artist_entries.setdefault(key, artist)
                genres = [genre.lower() for genre in artist.genres]
                genres_by_artist[key] = genres
                for genre in genres:
                    window_genres[genre] += decay
                    genre_totals[genre] += window_weight * decay

            temporal[window] = TemporalWindowProfile(
                genres=_ranked(window_genres),
                tracks=[_with_artist_genres(track, genres_by_artist) for track in tracks],
            )

        genres = _rescale(genre_totals)
        artist_weights = _rescale(artist_totals)
        top_artists = [
            WeightedArtist(
                name=artist_entries[key].name,
                weight=artist_weights[key],
                popularity=artist_entries[key].popularity,
            )
            for key in _ranked(artist_totals)[:_MAX_TOP_ARTISTS]
        ]

        return TasteProfile(
            user_id=user_id,
            genres=genres,
            top_artists=top_artists,
            temporal=temporal,
            negative=negative,
            trends=_trends(temporal),
            seasonal=seasonal,
            sound_centroid=_sound_centroid(genres),
            last_updated=self._clock(),
        )

    async def _fetch_window(
        self,
        history: IListeningHistoryProvider,
        user_id: str,
        window: ListeningWindow,
    ) -> _WindowData | None:
        try:
            artists = await history.get_top_artists(user_id, window.time_range)
            tracks = await history.get_top_tracks(user_id, window.time_range)
        except (SonarEDMError, ValidationError) as exc:
            self._logger.warning(
                "listening_window_failed",
                user_id=user_id,
                window=window.value,
                code=getattr(exc, "code", "INVALID_RESPONSE"),
                error=str(exc),
            )
            return None
        return artists, tracks

    async def _load_signals(self, user_id: str) -> tuple[NegativeSignals, dict[str, list[str]]]:
        if self._signals is None:
            return NegativeSignals(), _default_seasonal()
        try:
            negative = await self._signals.get_negative_signals(user_id)
            seasonal = await self._signals.get_seasonal_preferences(user_id)
        except SonarEDMError as exc:
            self._logger.warning("taste_signals_failed", user_id=user_id, code=exc.code, error=str(exc))
            return NegativeSignals(), _default_seasonal()
        return negative or NegativeSignals(), seasonal or _default_seasonal()


def _cache_key(user_id: str) -> str:
    return f"profile:{user_id}"


def _default_seasonal() -> dict[str, list[str]]:
    return {season: list(genres) for season, genres in DEFAULT_SEASONAL_GENRES.items()}


def _ranked(totals: dict[str, float]) -> list[str]:
    """Keys by descending total; ties keep insertion order."""
    return [key for key, _ in sorted(totals.items(), key=lambda item: -item[1])]


def _rescale(totals: dict[str, float]) -> dict[str, float]:
    """Scale so the largest value is 100, rounded to one decimal."""
    peak = max(totals.values(), default=0.0)
    if peak <= 0:
        return {}
    return {key: round(value / peak * 100.0, 1) for key, value in sorted(totals.items(), key=lambda item: -item[1])}


def _with_artist_genres(track: TrackEntry, genres_by_artist: dict[str, list[str]]) -> TrackEntry:
    if track.genres:
        return track
    genres: list[str] = []
    for artist in track.artists:
        for genre in genres_by_artist.get(artist.lower(), []):
            if genre not in genres:
                genres.append(genre)
    return track.model_copy(update={"genres": genres}) if genres else track


def _trends(temporal: dict[ListeningWindow, TemporalWindowProfile]) -> TasteTrends:
    recent = temporal.get(ListeningWindow.RECENT, TemporalWindowProfile()).genres
    medium = set(temporal.get(ListeningWindow.MEDIUM, TemporalWindowProfile()).genres)
    long_term_list = temporal.get(ListeningWindow.LONG_TERM, TemporalWindowProfile()).genres
    long_term = set(long_term_list)
    recent_set = set(recent)
    return TasteTrends(
        trending_up=[genre for genre in recent if genre not in long_term],
        trending_down=[genre for genre in long_term_list if genre not in recent_set],
        new_discoveries=[genre for genre in recent if genre not in medium],
    )


def _sound_centroid(genres: dict[str, float]) -> AudioFeatureVector | None:
    """Genre-weighted blend of the static genre audio profiles."""
    vectors: list[AudioFeatureVector] = []
    weights: list[float] = []
    for genre, weight in genres.items():
        vector = genre_vector([genre])
        if vector is not None and weight > 0:
            vectors.append(vector)
            weights.append(weight)
    if not vectors:
        return None
    return blend_vectors(vectors, weights)

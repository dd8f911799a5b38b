"""Audio-feature service: a full seven-descriptor vector for any artist.

Wraps the live audio-analysis upstream with a cache and two static
fallbacks so that callers always get a complete vector back, whatever the
upstream is doing.

# ─── HOW THE FALLBACK CHAIN WORKS (Junior Developer Guide) ─────────────
#
# The tiers are a plain ordered list, tried top to bottom until one
# returns a vector:
#
#   "cache"            previous live result for this artist (24 h)
#   "live"             search artist -> list tracks -> track features
#   "genre_fallback"   static per-genre profile (domain_knowledge.py)
#   "unknown_default"  neutral profile, confidence 0.3; always succeeds
#
# Live-tier failures are typed (see src/utils/errors.py).  A missing key
# (ConfigurationError) or rejected credentials (AuthorizationError) turn
# the live tier off for the rest of the process.  Everything else is
# counted and the chain moves on to the next tier.
#
# Only live results are cached.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable

import structlog

from src.config.domain_knowledge import (
    UNKNOWN_AUDIO_PROFILE,
    lookup_genre_profile,
    representative_track,
)
from src.interfaces.audio_analysis_provider import AnalysisTrack, IAudioAnalysisProvider
from src.interfaces.cache_provider import ICacheProvider
from src.models.artist import ArtistIdentity
from src.models.audio import FEATURE_NAMES, AudioFeatureSource, AudioFeatureVector, AudioProviderStats
from src.models.event import Event
from src.utils.confidence import calculate_confidence
from src.utils.errors import AuthorizationError, ConfigurationError, SonarEDMError
from src.utils.logging import get_logger
from src.utils.text_normalizer import normalize_for_matching

_REPRESENTATIVE_TRACK_CONFIDENCE = 0.9
_FIRST_TRACK_CONFIDENCE = 0.85

_Strategy = Callable[[str, list[str]], Awaitable[AudioFeatureVector | None]]


@dataclass
class _Counters:
    """Mutable running totals behind :meth:`AudioFeatureService.get_stats`."""

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


def genre_vector(genres: list[str]) -> AudioFeatureVector | None:
    """Static fallback vector for the first genre with a table entry.

    Within one genre string the longest table key wins ("deep house"
    before "house").  Returns ``None`` when no genre matches.
    """
    for genre in genres:
        hit = lookup_genre_profile(genre)
        if hit is None:
            continue
        key, profile = hit
        return AudioFeatureVector(
            **{name: profile[name] for name in FEATURE_NAMES},
            confidence=profile["confidence"],
            source=AudioFeatureSource.GENRE_FALLBACK,
            matched_genre=key,
        )
    return None


def unknown_vector() -> AudioFeatureVector:
    """The neutral last-resort vector."""
    return AudioFeatureVector(
        **{name: UNKNOWN_AUDIO_PROFILE[name] for name in FEATURE_NAMES},
        confidence=UNKNOWN_AUDIO_PROFILE["confidence"],
        source=AudioFeatureSource.UNKNOWN_DEFAULT,
    )


def blend_vectors(vectors: list[AudioFeatureVector], weights: list[float] | None = None) -> AudioFeatureVector:
    """Weighted mean of several vectors.

    Parameters
    ----------
    vectors:
        At least one vector.
    weights:
        One non-negative weight per vector; defaults to each vector's
        confidence.  All-zero weights fall back to a plain mean.

    Returns
    -------
    AudioFeatureVector
        Descriptors and confidence averaged with *weights*.  ``source`` is
        kept when every input shares it, otherwise ``metadata_estimate``.
    """
    if not vectors:
        raise ValueError("blend_vectors needs at least one vector")
    if len(vectors) == 1:
        return vectors[0]

    if weights is None:
        weights = [vector.confidence for vector in vectors]
    total = sum(weights)
    if total <= 0:
        weights = [1.0] * len(vectors)
        total = float(len(vectors))

    blended = {
        name: sum(getattr(vector, name) * weight for vector, weight in zip(vectors, weights)) / total
        for name in FEATURE_NAMES
    }
    confidence = calculate_confidence([vector.confidence for vector in vectors], weights)

    sources = {vector.source for vector in vectors}
    matched = {vector.matched_genre for vector in vectors}
    return AudioFeatureVector(
        **blended,
        confidence=confidence,
        source=sources.pop() if len(sources) == 1 else AudioFeatureSource.METADATA_ESTIMATE,
        matched_genre=matched.pop() if len(matched) == 1 else None,
    )


class AudioFeatureService:
    """Audio descriptors per artist and per event, never failing.

    Parameters
    ----------
    provider:
        Live audio-analysis upstream, or ``None`` to run on fallbacks only.
    cache:
        Cache for live results, keyed ``audio:<matching key>``.
    cache_ttl:
        Seconds a live result stays cached.
    clock:
        Wall-clock source for the statistics timestamps.
    """

    def __init__(
        self,
        provider: IAudioAnalysisProvider | None,
        cache: ICacheProvider,
        cache_ttl: int = 86400,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._counters = _Counters()
        self._logger: structlog.BoundLogger = get_logger(__name__)

        self._strategies: list[tuple[str, _Strategy]] = [
            ("cache", self._from_cache),
            ("live", self._from_live),
            ("genre_fallback", self._from_genres),
            ("unknown_default", self._from_unknown),
        ]

    @property
    def strategy_names(self) -> list[str]:
        return [name for name, _ in self._strategies]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_features(self, artist: str, genres: list[str] | None = None) -> AudioFeatureVector:
        """Return a complete vector for *artist*.

        Parameters
        ----------
        artist:
            Artist name as resolved (or as written, if unresolved).
        genres:
            Genres to fall back on when the live tier has nothing.
        """
        self._counters.total_requests += 1
        genre_list = list(genres or [])

        for name, strategy in self._strategies:
            vector = await strategy(artist, genre_list)
            if vector is not None:
                self._logger.debug(
                    "audio_features_resolved",
                    artist=artist,
                    tier=name,
                    source=vector.source.value,
                    confidence=vector.confidence,
                )
                return vector

        # The last tier always answers; reaching here means the list was edited.
        raise RuntimeError("audio strategy list has no terminal tier")

    async def get_event_features(self, event: Event, identities: list[ArtistIdentity]) -> AudioFeatureVector:
        """Aggregate sound characteristics for a whole event.

        Each identity's vector is looked up (its own genres first, then the
        event's) and blended by confidence.  With no identities the event's
        genres alone drive the genre fallback.
        """
        event_genres = event.scoring_genres
        if not identities:
            self._counters.fallback_usages += 1
            return genre_vector(event_genres) or unknown_vector()

        vectors = [
            await self.get_features(identity.name, identity.genres or event_genres)
            for identity in identities
        ]
        return blend_vectors(vectors)

    def get_stats(self) -> AudioProviderStats:
        counters = self._counters
        return AudioProviderStats(
            total_requests=counters.total_requests,
            cache_hits=counters.cache_hits,
            live_fetches=counters.live_fetches,
            fallback_usages=counters.fallback_usages,
            errors=counters.errors,
            auth_errors=counters.auth_errors,
            live_disabled=counters.live_disabled,
            last_error=counters.last_error,
            last_error_code=counters.last_error_code,
            last_error_at=counters.last_error_at,
            last_successful_fetch=counters.last_successful_fetch,
            cache_size=self._cache.size(),
        )

    # ------------------------------------------------------------------
    # Strategy tiers
    # ------------------------------------------------------------------

    async def _from_cache(self, artist: str, genres: list[str]) -> AudioFeatureVector | None:
        key = _cache_key(artist)
        if key is None:
            return None
        cached = await self._cache.get(key)
        if not isinstance(cached, AudioFeatureVector):
            return None
        self._counters.cache_hits += 1
        return cached.model_copy(update={"source": AudioFeatureSource.CACHED})

    async def _from_live(self, artist: str, genres: list[str]) -> AudioFeatureVector | None:
        provider = self._provider
        if provider is None or self._counters.live_disabled or not artist.strip():
            return None
        if not provider.is_available():
            self._disable_live(ConfigurationError("API key not set", provider_name=provider.get_provider_name()))
            return None

        try:
            match = await provider.search_artist(artist)
            tracks = await provider.get_artist_tracks(match.id)
            track, confidence = _pick_track(artist, tracks)
            raw = await provider.get_track_features(track.id)
        except (ConfigurationError, AuthorizationError) as exc:
            self._disable_live(exc)
            return None
        except SonarEDMError as exc:
            self._record_error(exc)
            self._logger.warning(
                "audio_live_fetch_failed",
                artist=artist,
                code=exc.code,
                error=str(exc),
            )
            return None

        vector = AudioFeatureVector(
            **{name: _clamp_feature(name, getattr(raw, name)) for name in FEATURE_NAMES},
            confidence=confidence,
            source=AudioFeatureSource.LIVE_API,
            track_name=track.name,
        )
        self._counters.live_fetches += 1
        self._counters.last_successful_fetch = self._clock()

        key = _cache_key(artist)
        if key is not None:
            await self._cache.set(key, vector, ttl=self._cache_ttl)
        return vector

    async def _from_genres(self, artist: str, genres: list[str]) -> AudioFeatureVector | None:
        vector = genre_vector(genres)
        if vector is not None:
            self._counters.fallback_usages += 1
        return vector

    async def _from_unknown(self, artist: str, genres: list[str]) -> AudioFeatureVector | None:
        self._counters.fallback_usages += 1
        return unknown_vector()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _record_error(self, exc: SonarEDMError) -> None:
        self._counters.errors += 1
        self._counters.last_error = str(exc)
        self._counters.last_error_code = exc.code
        self._counters.last_error_at = self._clock()

    def _disable_live(self, exc: SonarEDMError) -> None:
        self._record_error(exc)
        if isinstance(exc, AuthorizationError):
            self._counters.auth_errors += 1
        self._counters.live_disabled = True
        self._logger.warning("audio_live_disabled", code=exc.code, error=str(exc))


def _cache_key(artist: str) -> str | None:
    key = normalize_for_matching(artist)
    return f"audio:{key}" if key else None


def _pick_track(artist: str, tracks: list[AnalysisTrack]) -> tuple[AnalysisTrack, float]:
    """The artist's flagship track when listed, else the first track."""
    flagship = representative_track(artist)
    if flagship:
        wanted = normalize_for_matching(flagship)
        for track in tracks:
            if wanted and wanted in normalize_for_matching(track.name):
                return track, _REPRESENTATIVE_TRACK_CONFIDENCE
    return tracks[0], _FIRST_TRACK_CONFIDENCE


def _clamp_feature(name: str, value: float) -> float:
    if name == "tempo":
        return max(0.0, float(value))
    return min(1.0, max(0.0, float(value)))

"""Personalized event scoring.

Turns one ``(event, taste profile)`` pair into a 0-99 integer plus the
per-factor breakdown behind it.  The factor weights live in
:class:`ScoringWeights` (see ``src/models/scoring.py`` for the table) and
come from ``config/config.yaml``.

Order of operations:

    1. Gate: non-music events get a fixed low band (5-15), confidence
       very_low, and skip everything else.
    2. Cache: ``score:<event>:<user>:<profile version>:<weights>``.  The
       same snapshot always returns the same integer.
    3. Factors, penalty, genre-affinity multiplier, clamp to [0, 99],
       round half-up.

Confidence is graded separately from the number, by how many of the
event's artists resolved against the catalog.
"""

from __future__ import annotations

import math
import zlib
from datetime import datetime, timezone
from typing import Callable

import structlog

from src.config.domain_knowledge import EDM_RELEVANCE_KEYWORDS, season_for, venue_quality
from src.interfaces.cache_provider import ICacheProvider
from src.models.audio import AudioFeatureVector
from src.models.event import Event
from src.models.scoring import ScoreBreakdown, ScoreResult, ScoringWeights
from src.models.taste_profile import TasteProfile
from src.services.artist_resolver import ArtistResolver
from src.services.music_event_classifier import MusicEventClassifier
from src.services.taste_profile_service import DEFAULT_WINDOW_WEIGHTS
from src.utils.confidence import ConfidenceLevel, grade_artist_resolution
from src.utils.logging import get_logger

_MAX_SCORE = 99.0
_NEUTRAL_FACTOR = 50.0

_GENRE_BASE = 30.0
_GENRE_EXACT_BONUS = 25.0
_GENRE_PARTIAL_BONUS = 15.0
_PARTIAL_AFFINITY = 0.6

_ARTIST_BASE = 30.0
_ARTIST_BONUS = 40.0

_EDM_BASE = 40.0
_EDM_KEYWORD_BONUS = 12.0

_REMOVED_GENRE_PENALTY = 50.0
_SKIPPED_ARTIST_PENALTY = 25.0
_ABANDONED_GENRE_PENALTY = 15.0
_MAX_PENALTY = 75.0

_TRENDING_UP_BONUS = 20.0
_TRENDING_DOWN_PENALTY = 10.0
_DISCOVERY_BONUS = 15.0
_EVOLUTION_RANGE = (-30.0, 50.0)

_TEMPO_TOLERANCE_BPM = 40.0
_SOUND_FEATURES = ("energy", "danceability", "valence", "acousticness", "instrumentalness")


# ---------------------------------------------------------------------------
# Factor functions (pure; each returns a value on a 0-100 scale)
# ---------------------------------------------------------------------------


def genre_match(event_genres: list[str], user_genres: dict[str, float]) -> tuple[float, list[str]]:
    """Additive genre match between an event and weighted user genres.

    Base 30, +25 per exact pair and +15 per partial (substring either way)
    pair, each bonus scaled by the user genre's weight relative to the
    strongest one, capped at 100.  Either side empty scores a neutral 50.

    Returns
    -------
    tuple[float, list[str]]
        The score and the event genres that matched something.
    """
    if not event_genres or not user_genres:
        return _NEUTRAL_FACTOR, []

    peak = max(user_genres.values())
    score = _GENRE_BASE
    matched: list[str] = []
    for user_genre, weight in user_genres.items():
        relative = weight / peak if peak > 0 else 1.0
        wanted = user_genre.lower()
        for genre in event_genres:
            if genre == wanted:
                score += _GENRE_EXACT_BONUS * relative
            elif genre in wanted or wanted in genre:
                score += _GENRE_PARTIAL_BONUS * relative
            else:
                continue
            if genre not in matched:
                matched.append(genre)
    return min(100.0, score), matched


def genre_affinity(event_genres: list[str], user_genres: dict[str, float]) -> float | None:
    """Strongest user-weighted match in [0, 1]; ``None`` when either side is empty."""
    if not event_genres or not user_genres:
        return None
    peak = max(user_genres.values())
    best = 0.0
    for user_genre, weight in user_genres.items():
        relative = weight / peak if peak > 0 else 1.0
        wanted = user_genre.lower()
        for genre in event_genres:
            if genre == wanted:
                best = max(best, relative)
            elif genre in wanted or wanted in genre:
                best = max(best, _PARTIAL_AFFINITY * relative)
    return best


def genre_overlap(genres: list[str], others: list[str]) -> float:
    """Fraction of *genres* with a substring match (either way) in *others*."""
    if not genres or not others:
        return 0.0
    lowered = [other.lower() for other in others]
    hits = sum(1 for genre in genres if any(genre in other or other in genre for other in lowered))
    return hits / len(genres)


def artist_match(event: Event, profile: TasteProfile) -> tuple[float, list[str]]:
    """Base 30 plus ``40 x popularity/100`` per top artist named on the event."""
    if not profile.top_artists:
        return _ARTIST_BASE, []

    title = event.name.lower()
    listed = [name.lower() for name in event.artist_names]
    score = _ARTIST_BASE
    matched: list[str] = []
    for artist in profile.top_artists:
        key = artist.name.lower()
        if not key:
            continue
        if key in title or any(key in name for name in listed):
            score += _ARTIST_BONUS * artist.popularity / 100.0
            matched.append(artist.name)
    return min(100.0, score), matched


def edm_relevance(event: Event, genres: list[str]) -> float:
    text = " ".join([event.name, *event.artist_names, *genres]).lower()
    hits = sum(1 for keyword in EDM_RELEVANCE_KEYWORDS if keyword in text)
    return min(100.0, _EDM_BASE + _EDM_KEYWORD_BONUS * hits)


def negative_penalty(event: Event, genres: list[str], profile: TasteProfile) -> float:
    """Penalty in [0, 75] from removed tracks, skipped artists and abandoned playlists."""
    signals = profile.negative
    if signals.is_empty:
        return 0.0

    penalty = genre_overlap(genres, signals.removed_track_genres) * _REMOVED_GENRE_PENALTY

    title = event.name.lower()
    listed = [name.lower() for name in event.artist_names]
    for skipped in signals.skipped_artists:
        key = skipped.lower().strip()
        if not key:
            continue
        if key in title or any(key in name or name in key for name in listed):
            penalty += _SKIPPED_ARTIST_PENALTY

    penalty += genre_overlap(genres, signals.abandoned_playlist_genres) * _ABANDONED_GENRE_PENALTY
    return min(_MAX_PENALTY, penalty)


def taste_evolution(genres: list[str], profile: TasteProfile) -> float:
    trends = profile.trends
    value = (
        genre_overlap(genres, trends.trending_up) * _TRENDING_UP_BONUS
        - genre_overlap(genres, trends.trending_down) * _TRENDING_DOWN_PENALTY
        + genre_overlap(genres, trends.new_discoveries) * _DISCOVERY_BONUS
    )
    low, high = _EVOLUTION_RANGE
    return max(low, min(high, value))


def time_weighted_preferences(genres: list[str], profile: TasteProfile) -> float:
    """Genre match against each listening window, weighted 0.6/0.3/0.1.

    An empty window is matched against the profile's overall genres.
    """
    total = 0.0
    for window, weight in DEFAULT_WINDOW_WEIGHTS.items():
        window_genres = profile.window(window).genres
        reference = {genre: 1.0 for genre in window_genres} if window_genres else profile.genres
        total += weight * genre_match(genres, reference)[0]
    return total


def sound_compatibility(event_sound: AudioFeatureVector | None, centroid: AudioFeatureVector | None) -> float | None:
    """Similarity between an event's sound and the user's centroid, 0-100."""
    if event_sound is None or centroid is None:
        return None
    similarities = [math.exp(-3.0 * abs(getattr(event_sound, name) - getattr(centroid, name))) for name in _SOUND_FEATURES]
    tempo_gap = abs(event_sound.tempo - centroid.tempo)
    similarities.append(max(0.0, 1.0 - tempo_gap / _TEMPO_TOLERANCE_BPM))
    return 100.0 * sum(similarities) / len(similarities)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ScoringEngine:
    """Computes personalized match scores.

    Parameters
    ----------
    classifier:
        Gate for events whose ``is_music_event`` has not been derived yet.
    cache:
        Score cache.  ``None`` disables caching.
    resolver:
        Used to grade confidence when the event carries no artist metadata.
    weights:
        Factor weights; defaults to :class:`ScoringWeights` defaults.
    cache_ttl:
        Seconds a score stays cached.
    non_music_band:
        Inclusive ``(low, high)`` range for gated events.
    clock:
        Wall-clock source; determines the current season.
    """

    def __init__(
        self,
        classifier: MusicEventClassifier,
        cache: ICacheProvider | None = None,
        resolver: ArtistResolver | None = None,
        weights: ScoringWeights | None = None,
        cache_ttl: int = 86400,
        non_music_band: tuple[int, int] = (5, 15),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        low, high = non_music_band
        if not 0 <= low <= high <= 100:
            raise ValueError(f"invalid non-music band {non_music_band!r}")
        self._classifier = classifier
        self._cache = cache
        self._resolver = resolver
        self._weights = weights or ScoringWeights()
        self._cache_ttl = cache_ttl
        self._band = (low, high)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def score(self, event: Event, profile: TasteProfile) -> ScoreResult:
        """Score *event* for the owner of *profile*."""
        is_music = event.is_music_event
        if is_music is None:
            is_music = self._classifier.is_music_event(event)
        if not is_music:
            return self._gated(event, profile)

        key = self._cache_key(event, profile)
        if self._cache is not None:
            cached = await self._cache.get(key)
            if isinstance(cached, ScoreResult):
                return cached.model_copy(update={"cached": True})

        breakdown = self._breakdown(event, profile)
        result = ScoreResult(
            event_id=event.id,
            user_id=profile.user_id,
            profile_version=profile.version,
            score=round_half_up(max(0.0, min(_MAX_SCORE, breakdown.raw_total * breakdown.multiplier))),
            confidence=await self._grade_confidence(event),
            breakdown=breakdown,
        )

        if self._cache is not None:
            await self._cache.set(key, result, ttl=self._cache_ttl)
        self._logger.debug(
            "event_scored",
            event_id=event.id,
            user_id=profile.user_id,
            score=result.score,
            confidence=result.confidence.value,
        )
        return result

    async def score_many(self, events: list[Event], profile: TasteProfile) -> list[ScoreResult]:
        """Score several events; best first, ties in input order."""
        results = [await self.score(event, profile) for event in events]
        return sorted(results, key=lambda result: -result.score)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _cache_key(self, event: Event, profile: TasteProfile) -> str:
        return f"score:{event.id}:{profile.user_id}:{profile.version}:{self._weights.fingerprint()}"

    def _gated(self, event: Event, profile: TasteProfile) -> ScoreResult:
        low, high = self._band
        value = low + zlib.crc32(event.id.encode("utf-8")) % (high - low + 1)
        return ScoreResult(
            event_id=event.id,
            user_id=profile.user_id,
            profile_version=profile.version,
            score=value,
            confidence=ConfidenceLevel.VERY_LOW,
            breakdown=ScoreBreakdown(raw_total=float(value), gated=True, weights=self._weights),
        )

    def _breakdown(self, event: Event, profile: TasteProfile) -> ScoreBreakdown:
        weights = self._weights
        genres = event.scoring_genres
        season = season_for(self._clock())

        genre_score, matched_genres = genre_match(genres, profile.genres)
        artist_score, matched_artists = artist_match(event, profile)
        venue_score = float(venue_quality(event.venue_name))
        edm_score = edm_relevance(event, genres)
        temporal_score = time_weighted_preferences(genres, profile)
        penalty = negative_penalty(event, genres, profile)
        evolution = taste_evolution(genres, profile)

        seasonal_genres = profile.seasonal.get(season) or []
        if seasonal_genres:
            seasonal_score = genre_match(genres, {genre: 1.0 for genre in seasonal_genres})[0]
        else:
            seasonal_score = _NEUTRAL_FACTOR

        sound_score = sound_compatibility(event.sound_characteristics, profile.sound_centroid)

        raw = (
            weights.genre_matching * genre_score
            + weights.artist_matching * artist_score
            + weights.venue_quality * venue_score
            + weights.edm_relevance * edm_score
            + weights.time_weighted_preferences * temporal_score
            + weights.taste_evolution * evolution
            + weights.seasonal_context * seasonal_score
            - weights.negative_signals * penalty
        )
        if sound_score is not None:
            raw += weights.sound_compatibility * sound_score

        affinity = genre_affinity(genres, profile.genres)
        if affinity is None:
            multiplier = 1.0
        else:
            multiplier = weights.genre_affinity_floor + weights.genre_affinity_gain * affinity

        return ScoreBreakdown(
            genre_matching=round(genre_score, 2),
            artist_matching=round(artist_score, 2),
            venue_quality=venue_score,
            edm_relevance=edm_score,
            time_weighted_preferences=round(temporal_score, 2),
            negative_signals=round(penalty, 2),
            taste_evolution=round(evolution, 2),
            seasonal_context=round(seasonal_score, 2),
            sound_compatibility=round(sound_score, 2) if sound_score is not None else None,
            genre_affinity=round(affinity or 0.0, 3),
            multiplier=multiplier,
            raw_total=raw,
            matched_genres=matched_genres,
            matched_artists=matched_artists,
            season=season,
            weights=weights,
        )

    async def _grade_confidence(self, event: Event) -> ConfidenceLevel:
        identities = list(event.artist_metadata)
        if not identities and event.artists:
            if self._resolver is None:
                resolved = sum(1 for ref in event.artists if ref.resolved is not None and ref.resolved.verified)
                return grade_artist_resolution(resolved, len(event.artists))
            identities = await self._resolver.resolve_many(event.artist_names)
        return grade_artist_resolution(sum(1 for identity in identities if identity.verified), len(identities))

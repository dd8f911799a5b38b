"""Scoring models: the factor weight table and score results.

# ─── SCORING WEIGHTS (Junior Developer Guide) ──────────────────────────
#
# The personalized score is a weighted sum of factor scores (each 0-100):
#
#   genre_matching              0.30   event genres vs. user genres
#   artist_matching             0.20   user's top artists named in the event
#   venue_quality               0.15   premium-venue table + keywords
#   edm_relevance               0.10   EDM keywords in name/artists/genres
#   time_weighted_preferences   0.15   recent/medium/long-term genre match
#   negative_signals            0.10   SUBTRACTED (penalty capped at 75)
#   taste_evolution             0.05   trending genres bonus/penalty
#   seasonal_context            0.05   current-season genre match
#   sound_compatibility         0.00   audio vs. user sound centroid (opt-in)
#
# The weighted sum is then multiplied by the genre-affinity multiplier
#
#   genre_affinity_floor + genre_affinity_gain * affinity     (0.5 .. 1.4)
#
# where affinity (0..1) is the strongest user-weighted genre match.  An
# event in the user's top genre is lifted; an event in none of the user's
# genres is halved.  Result is clamped to [0, 99] and rounded half-up.
#
# Weights come from config/config.yaml (scoring.weights).  Unknown keys
# are rejected so a typo cannot silently disable a factor.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.utils.confidence import ConfidenceLevel


class ScoringWeights(BaseModel):
    """Factor weights for the personalized score.

    The weighted factor sum (negative signals subtracted) is multiplied by
    ``genre_affinity_floor + genre_affinity_gain * affinity`` before the
    0-99 clamp, where affinity is the strongest user-weighted match
    between the event's genres and the listener's, in [0, 1].  Setting
    ``genre_affinity_floor=1.0`` and ``genre_affinity_gain=0.0`` gives the
    plain clamped weighted sum.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    genre_matching: float = Field(default=0.30, ge=0.0, le=1.0)
    artist_matching: float = Field(default=0.20, ge=0.0, le=1.0)
    venue_quality: float = Field(default=0.15, ge=0.0, le=1.0)
    edm_relevance: float = Field(default=0.10, ge=0.0, le=1.0)
    time_weighted_preferences: float = Field(default=0.15, ge=0.0, le=1.0)
    negative_signals: float = Field(default=0.10, ge=0.0, le=1.0)
    taste_evolution: float = Field(default=0.05, ge=0.0, le=1.0)
    seasonal_context: float = Field(default=0.05, ge=0.0, le=1.0)
    sound_compatibility: float = Field(default=0.0, ge=0.0, le=1.0)
    genre_affinity_floor: float = Field(default=0.5, ge=0.0, le=2.0)
    genre_affinity_gain: float = Field(default=0.9, ge=0.0, le=2.0)

    def fingerprint(self) -> str:
        """Compact identifier of this weight set, used in score cache keys."""
        return ",".join(f"{value:g}" for value in self.model_dump().values())


class ScoreBreakdown(BaseModel):
    """Per-factor values (0-100, evolution -30..50) behind one score."""

    model_config = ConfigDict(frozen=True)

    genre_matching: float = 0.0
    artist_matching: float = 0.0
    venue_quality: float = 0.0
    edm_relevance: float = 0.0
    time_weighted_preferences: float = 0.0
    negative_signals: float = 0.0
    taste_evolution: float = 0.0
    seasonal_context: float = 0.0
    sound_compatibility: float | None = None
    genre_affinity: float = 0.0
    multiplier: float = 1.0
    raw_total: float = 0.0
    matched_genres: list[str] = Field(default_factory=list)
    matched_artists: list[str] = Field(default_factory=list)
    season: str | None = None
    weights: ScoringWeights | None = None
    gated: bool = False  # True when the classifier short-circuited scoring


class ScoreResult(BaseModel):
    """A personalized match score for one (event, user, profile version)."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    user_id: str
    profile_version: str
    score: int = Field(ge=0, le=100)
    confidence: ConfidenceLevel
    breakdown: ScoreBreakdown
    cached: bool = False

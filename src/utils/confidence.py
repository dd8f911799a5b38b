"""Confidence helpers shared by the resolver, audio service and scoring engine.

Numeric confidences (0.0--1.0) appear on every resolved artist and every
audio-feature vector.  Scores themselves carry a *graded* confidence
instead, derived from how many of the event's artists resolved.

1. **calculate_confidence** -- weighted average of several signals, used
   when audio vectors from several artists are blended into one event
   vector.
2. **confidence_to_level** -- numeric score to a display tier.
3. **grade_artist_resolution** -- resolved/total artist counts to the
   tier attached to a personalized score.
"""

from enum import Enum


class ConfidenceLevel(str, Enum):  # noqa: UP042
    """Display tiers for confidence values."""

    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def calculate_confidence(
    scores: list[float],
    weights: list[float] | None = None,
) -> float:
    """Compute a weighted average confidence score.

    Args:
        scores: Individual confidence scores, each in [0.0, 1.0].
        weights: Optional weights for each score. Defaults to equal weighting.

    Returns:
        Weighted average clamped to [0.0, 1.0].

    Raises:
        ValueError: If scores is empty or lengths of scores and weights differ.
    """
    if not scores:
        raise ValueError("scores must not be empty")

    if weights is None:
        weights = [1.0] * len(scores)

    if len(scores) != len(weights):
        raise ValueError("scores and weights must have the same length")

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0

    weighted_sum = sum(s * w for s, w in zip(scores, weights, strict=True))
    return max(0.0, min(1.0, weighted_sum / total_weight))


def confidence_to_level(score: float) -> ConfidenceLevel:
    """Map a numeric confidence to a tier.

    Thresholds: below 0.3 very low (the unknown-default vector and
    unresolved artists), below 0.6 low, below 0.8 medium, else high
    (exact or strong fuzzy matches, live audio data).
    """
    if score < 0.3:
        return ConfidenceLevel.VERY_LOW
    if score < 0.6:
        return ConfidenceLevel.LOW
    if score < 0.8:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def grade_artist_resolution(resolved: int, total: int) -> ConfidenceLevel:
    """Grade a score by how many of the event's artists resolved.

    Args:
        resolved: Artists matched against the catalog (exact or verified fuzzy).
        total: Artists listed on the event.

    Returns:
        HIGH when all resolved, MEDIUM when some did, LOW when none did,
        VERY_LOW when the event listed no artists at all.
    """
    if total <= 0:
        return ConfidenceLevel.VERY_LOW
    if resolved >= total:
        return ConfidenceLevel.HIGH
    if resolved > 0:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW

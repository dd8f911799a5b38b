"""Unit tests for confidence scoring utilities."""

from __future__ import annotations

import pytest

from src.utils.confidence import (
    ConfidenceLevel,
    calculate_confidence,
    confidence_to_level,
    grade_artist_resolution,
)


# ======================================================================
# calculate_confidence
# ======================================================================


class TestCalculateConfidence:
    def test_equal_weights(self) -> None:
        assert calculate_confidence([0.8, 0.6, 0.4]) == pytest.approx(0.6)

    def test_custom_weights(self) -> None:
        assert calculate_confidence([1.0, 0.0], weights=[3.0, 1.0]) == pytest.approx(0.75)

    def test_empty_list_raises(self) -> None:
        with pytest.raises(ValueError, match="scores must not be empty"):
            calculate_confidence([])

    def test_mismatched_lengths_raises(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            calculate_confidence([0.5, 0.5], weights=[1.0])

    def test_all_zero_weights_returns_zero(self) -> None:
        assert calculate_confidence([0.8, 0.6], weights=[0.0, 0.0]) == 0.0


# ======================================================================
# confidence_to_level
# ======================================================================


class TestConfidenceToLevel:
    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (0.0, ConfidenceLevel.VERY_LOW),
            (0.29, ConfidenceLevel.VERY_LOW),
            (0.3, ConfidenceLevel.LOW),
            (0.59, ConfidenceLevel.LOW),
            (0.6, ConfidenceLevel.MEDIUM),
            (0.79, ConfidenceLevel.MEDIUM),
            (0.8, ConfidenceLevel.HIGH),
            (1.0, ConfidenceLevel.HIGH),
        ],
    )
    def test_thresholds(self, score: float, level: ConfidenceLevel) -> None:
        assert confidence_to_level(score) == level


# ======================================================================
# grade_artist_resolution
# ======================================================================


class TestGradeArtistResolution:
    def test_all_resolved_is_high(self) -> None:
        assert grade_artist_resolution(2, 2) == ConfidenceLevel.HIGH

    def test_some_resolved_is_medium(self) -> None:
        assert grade_artist_resolution(1, 3) == ConfidenceLevel.MEDIUM

    def test_none_resolved_is_low(self) -> None:
        assert grade_artist_resolution(0, 2) == ConfidenceLevel.LOW

    def test_no_artists_is_very_low(self) -> None:
        assert grade_artist_resolution(0, 0) == ConfidenceLevel.VERY_LOW

    def test_level_values_serialise_as_strings(self) -> None:
        assert ConfidenceLevel.HIGH.value == "high"

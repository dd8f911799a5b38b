"""Unit tests for the music/non-music keyword classifier."""

from __future__ import annotations

import pytest

from src.services.music_event_classifier import MusicEventClassifier
from tests.conftest import make_event


class TestMusicEventClassifier:
    def test_general_admission_without_music_keywords_is_non_music(self, classifier: MusicEventClassifier) -> None:
        event = make_event(name="Casa Loma General Admission", artists=[], genres=[])

        result = classifier.classify(event)

        assert result.is_music_event is False
        assert result.general_admission_override is True
        assert "general admission" in result.non_music_keywords

    def test_general_admission_with_music_keyword_uses_counts(self, classifier: MusicEventClassifier) -> None:
        event = make_event(
            name="Techno Night General Admission",
            description="DJ sets all night at the club",
            artists=[],
        )

        result = classifier.classify(event)

        assert result.general_admission_override is False
        assert result.is_music_event is True

    def test_music_event(self, classifier: MusicEventClassifier) -> None:
        event = make_event(name="Charlotte de Witte Live", description="Techno DJ set")

        assert classifier.is_music_event(event) is True

    def test_museum_exhibition_is_non_music(self, classifier: MusicEventClassifier) -> None:
        event = make_event(
            name="Royal Ontario Museum Exhibition",
            description="Visit the historic gallery",
            artists=[],
            genres=[],
        )

        result = classifier.classify(event)

        assert result.is_music_event is False
        assert result.general_admission_override is False

    def test_tie_is_non_music(self) -> None:
        classifier = MusicEventClassifier(music_keywords=("party",), non_music_keywords=("museum",))
        event = make_event(name="Museum Party", artists=[], genres=[])

        assert classifier.is_music_event(event) is False

    def test_venue_name_counts(self, classifier: MusicEventClassifier) -> None:
        event = make_event(name="Saturday", description="", artists=[], genres=[], venue="Toronto Music Hall")

        result = classifier.classify(event)

        assert "music" in result.music_keywords
        assert result.is_music_event is True

    @pytest.mark.parametrize("name", ["Casa Loma Castle Tour Admission", "Historic Castle Visit"])
    def test_tourist_listings(self, classifier: MusicEventClassifier, name: str) -> None:
        event = make_event(name=name, artists=[], genres=[])
        assert classifier.is_music_event(event) is False

"""Shared pytest fixtures for the sonarEDM test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.audio_analysis_provider import IAudioAnalysisProvider
from src.interfaces.listening_history_provider import IListeningHistoryProvider
from src.models.artist import CatalogArtist
from src.models.event import Event, Venue
from src.models.taste_profile import TasteProfile
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.catalog.memory_catalog import InMemoryArtistCatalog
from src.services.artist_resolver import ArtistResolver
from src.services.music_event_classifier import MusicEventClassifier

# A fixed October afternoon: season "fall".
FIXED_NOW = datetime(2025, 10, 15, 18, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Clock & configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def fixed_clock():
    """Wall clock frozen at :data:`FIXED_NOW`."""
    return lambda: FIXED_NOW


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal resolved configuration for testing."""
    return {
        "app": {"name": "sonarEDM", "version": "0.1.0"},
        "scoring": {
            "weights": {
                "genre_matching": 0.30,
                "artist_matching": 0.20,
                "venue_quality": 0.15,
                "edm_relevance": 0.10,
                "time_weighted_preferences": 0.15,
                "negative_signals": 0.10,
                "taste_evolution": 0.05,
                "seasonal_context": 0.05,
            },
            "non_music_band": [5, 15],
        },
        "resolver": {"fuzzy_floor": 0.6, "fuzzy_accept": 0.8, "max_alternatives": 3},
        "profile": {"window_weights": {"recent": 0.6, "medium": 0.3, "long_term": 0.1}},
        "batch": {"size": 25},
    }


# ---------------------------------------------------------------------------
# Catalog & resolver
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog_artists() -> list[CatalogArtist]:
    return [
        CatalogArtist(name="Charlotte de Witte", genres=["techno", "acid techno"], external_id="cdw", popularity=82),
        CatalogArtist(name="Amelie Lens", genres=["techno"], popularity=78),
        CatalogArtist(
            name="DJ Snake",
            original_name="William Grigahcine",
            genres=["edm", "trap", "electro house"],
            popularity=88,
        ),
        CatalogArtist(name="Skrillex", genres=["dubstep", "edm", "bass"], popularity=90),
        CatalogArtist(name="Above & Beyond", genres=["trance", "progressive house"], popularity=80),
        CatalogArtist(name="Eric Prydz", genres=["progressive house", "techno"], popularity=79),
        CatalogArtist(name="Fisher", genres=["tech house"], popularity=77),
    ]


@pytest.fixture
def catalog(catalog_artists: list[CatalogArtist]) -> InMemoryArtistCatalog:
    return InMemoryArtistCatalog(catalog_artists)


@pytest.fixture
def resolver(catalog: InMemoryArtistCatalog) -> ArtistResolver:
    return ArtistResolver(catalog)


@pytest.fixture
def classifier() -> MusicEventClassifier:
    return MusicEventClassifier()


# ---------------------------------------------------------------------------
# Caches & provider doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_cache() -> MemoryCacheProvider:
    return MemoryCacheProvider(max_size=100, ttl=3600, name="test")


@pytest.fixture
def mock_audio_provider() -> MagicMock:
    """Audio-analysis double that is configured but has no behaviour set."""
    provider = MagicMock(spec=IAudioAnalysisProvider)
    provider.get_provider_name.return_value = "mock_audio"
    provider.is_available.return_value = True
    provider.search_artist = AsyncMock()
    provider.get_artist_tracks = AsyncMock()
    provider.get_track_features = AsyncMock()
    return provider


@pytest.fixture
def mock_history() -> MagicMock:
    history = MagicMock(spec=IListeningHistoryProvider)
    history.get_provider_name.return_value = "mock_history"
    history.get_top_artists = AsyncMock(return_value=[])
    history.get_top_tracks = AsyncMock(return_value=[])
    return history


# ---------------------------------------------------------------------------
# Events & profiles
# ---------------------------------------------------------------------------


def make_event(
    source_id: str = "evt-1",
    name: str = "Charlotte de Witte Live",
    artists: list[Any] | None = None,
    genres: list[str] | None = None,
    description: str = "",
    venue: str | None = None,
    **extra: Any,
) -> Event:
    """Build an Event with sensible defaults for tests."""
    return Event(
        source="test",
        source_id=source_id,
        name=name,
        description=description,
        artists=artists if artists is not None else ["Charlotte de Witte"],
        genres=genres if genres is not None else ["techno"],
        venue=Venue(name=venue) if venue else None,
        **extra,
    )


def make_profile(user_id: str = "user-1", genres: dict[str, float] | None = None, **extra: Any) -> TasteProfile:
    """Build a TasteProfile stamped at :data:`FIXED_NOW`."""
    return TasteProfile(
        user_id=user_id,
        genres=genres if genres is not None else {"techno": 80.0, "house": 60.0},
        last_updated=FIXED_NOW,
        **extra,
    )


@pytest.fixture
def techno_event() -> Event:
    return make_event()


@pytest.fixture
def non_music_event() -> Event:
    return make_event(
        source_id="casa-loma",
        name="Casa Loma General Admission",
        artists=[],
        genres=[],
    )


@pytest.fixture
def techno_profile() -> TasteProfile:
    return make_profile()


@pytest.fixture
def country_profile() -> TasteProfile:
    return make_profile(user_id="user-2", genres={"country": 80.0, "folk": 60.0})

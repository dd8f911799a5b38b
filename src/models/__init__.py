"""sonarEDM domain models — re-exports all public model classes.

The models are organized by pipeline concern:
    - artist.py        — catalog entries, resolved identities, event artist refs
    - audio.py         — audio-feature vectors and provider statistics
    - event.py         — events, venues and the enhancement bookkeeping block
    - enhancement.py   — classifier output, the atomic enhancement payload,
                         batch summaries
    - taste_profile.py — per-user taste profile and its parts
    - scoring.py       — factor weights and score results

If you add a new model class, add it to ``__all__`` too.
"""

from __future__ import annotations

from src.models.artist import ArtistIdentity, ArtistRef, CatalogArtist, ResolutionSource
from src.models.audio import AudioFeatureSource, AudioFeatureVector, AudioProviderStats
from src.models.enhancement import Classification, EnhancementSummary, EventEnhancement
from src.models.event import EnhancementBlock, EnhancementStatus, Event, Venue
from src.models.scoring import ScoreBreakdown, ScoreResult, ScoringWeights
from src.models.taste_profile import (
    ListeningWindow,
    NegativeSignals,
    PlaylistEntry,
    TasteProfile,
    TasteTrends,
    TemporalWindowProfile,
    TopArtistEntry,
    TrackEntry,
    WeightedArtist,
)

__all__ = [
    "ArtistIdentity",
    "ArtistRef",
    "AudioFeatureSource",
    "AudioFeatureVector",
    "AudioProviderStats",
    "CatalogArtist",
    "Classification",
    "EnhancementBlock",
    "EnhancementStatus",
    "EnhancementSummary",
    "Event",
    "EventEnhancement",
    "ListeningWindow",
    "NegativeSignals",
    "PlaylistEntry",
    "ResolutionSource",
    "ScoreBreakdown",
    "ScoreResult",
    "ScoringWeights",
    "TasteProfile",
    "TasteTrends",
    "TemporalWindowProfile",
    "TopArtistEntry",
    "TrackEntry",
    "Venue",
    "WeightedArtist",
]

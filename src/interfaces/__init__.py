"""Public interface definitions for all external collaborators.

Every upstream service and store in sonarEDM is reached only through the
abstract base classes in this package.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``; tests inject
fakes or mocks instead.

CONCRETE PROVIDER MAP:
    Interface                   →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    ICacheProvider              →  MemoryCacheProvider
    IArtistCatalogProvider      →  InMemoryArtistCatalog, SQLiteArtistCatalog
    IAudioAnalysisProvider      →  ReccoBeatsAudioProvider
    IListeningHistoryProvider   →  SpotifyListeningHistoryProvider
    ITasteSignalProvider        →  StaticTasteSignalProvider
    IEventStoreProvider         →  InMemoryEventStore, SQLiteEventStore
    IEventSourceProvider        →  TicketmasterEventSource
"""

from src.interfaces.artist_catalog_provider import IArtistCatalogProvider
from src.interfaces.audio_analysis_provider import (
    AnalysisArtist,
    AnalysisTrack,
    IAudioAnalysisProvider,
    TrackAudioFeatures,
)
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.event_source_provider import IEventSourceProvider
from src.interfaces.event_store_provider import IEventStoreProvider
from src.interfaces.listening_history_provider import IListeningHistoryProvider
from src.interfaces.taste_signal_provider import ITasteSignalProvider

__all__ = [
    "AnalysisArtist",
    "AnalysisTrack",
    "IArtistCatalogProvider",
    "IAudioAnalysisProvider",
    "ICacheProvider",
    "IEventSourceProvider",
    "IEventStoreProvider",
    "IListeningHistoryProvider",
    "ITasteSignalProvider",
    "TrackAudioFeatures",
]

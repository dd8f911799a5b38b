"""sonarEDM FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

``build_services`` is also used by the CLI, so the web server and the
command line construct exactly the same object graph.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.artist_catalog_provider import IArtistCatalogProvider
from src.models.scoring import ScoringWeights
from src.pipeline.batch_enhancer import BatchEnhancer
from src.pipeline.progress_tracker import ProgressTracker
from src.providers.audio.reccobeats_provider import ReccoBeatsAudioProvider
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.catalog.memory_catalog import InMemoryArtistCatalog
from src.providers.catalog.sqlite_catalog import SQLiteArtistCatalog
from src.providers.event.ticketmaster_provider import TicketmasterEventSource
from src.providers.event_store.sqlite_store import SQLiteEventStore
from src.providers.listening.spotify_history_provider import SpotifyListeningHistoryProvider, TokenLookup
from src.providers.signals.static_signal_provider import StaticTasteSignalProvider
from src.services.artist_resolver import ArtistResolver
from src.services.audio_feature_service import AudioFeatureService
from src.services.music_event_classifier import MusicEventClassifier
from src.services.scoring_engine import ScoringEngine
from src.services.taste_profile_service import TasteProfileService
from src.utils.concurrency import RateLimiter
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=settings.json_logs or settings.app_env == "production",
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _token_lookup(tokens: dict[str, str]) -> TokenLookup:
    """Bearer tokens come from the host application; unknown users have none."""

    async def _lookup(user_id: str) -> str | None:
        return tokens.get(user_id)

    return _lookup


def _build_catalog(app_settings: Settings) -> IArtistCatalogProvider:
    if app_settings.artist_catalog_path:
        return InMemoryArtistCatalog.from_yaml(app_settings.artist_catalog_path)
    return SQLiteArtistCatalog(app_settings.database_path)


def build_services(app_settings: Settings, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Parameters
    ----------
    app_settings:
        Environment settings.
    config:
        Resolved configuration from :func:`load_config`; loaded from
        ``app_settings.config_path`` when omitted.

    Returns
    -------
    dict
        Flat dict of named components, stored on ``app.state`` by the
        web app and used directly by the CLI.
    """
    config = config if config is not None else load_config(app_settings.config_path, app_settings)
    scoring_config = config.get("scoring", {})
    resolver_config = config.get("resolver", {})
    profile_config = config.get("profile", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)
    audio_limiter = RateLimiter(app_settings.audio_request_spacing_ms / 1000.0, name="reccobeats")
    user_tokens: dict[str, str] = {}

    # -- Caches (one instance per concern) --
    audio_cache = MemoryCacheProvider(
        max_size=app_settings.cache_max_entries,
        ttl=app_settings.audio_cache_ttl_seconds,
        name="audio",
    )
    profile_cache = MemoryCacheProvider(
        max_size=app_settings.cache_max_entries,
        ttl=app_settings.profile_cache_ttl_seconds,
        name="profile",
    )
    score_cache = MemoryCacheProvider(
        max_size=app_settings.cache_max_entries,
        ttl=app_settings.score_cache_ttl_seconds,
        name="score",
    )

    # -- Providers --
    catalog = _build_catalog(app_settings)
    audio_provider = ReccoBeatsAudioProvider(
        http_client=http_client,
        api_key=app_settings.reccobeats_api_key,
        rate_limiter=audio_limiter,
        base_url=app_settings.reccobeats_base_url,
        timeout=app_settings.audio_timeout_seconds,
    )
    history = SpotifyListeningHistoryProvider(
        http_client=http_client,
        token_lookup=_token_lookup(user_tokens),
        base_url=app_settings.spotify_api_base_url,
        timeout=app_settings.listening_timeout_seconds,
    )
    signals = StaticTasteSignalProvider()
    event_store = SQLiteEventStore(app_settings.database_path)
    event_source = TicketmasterEventSource(
        http_client=http_client,
        api_key=app_settings.ticketmaster_api_key,
        base_url=app_settings.ticketmaster_base_url,
        timeout=app_settings.event_source_timeout_seconds,
    )

    # -- Services --
    classifier = MusicEventClassifier()
    resolver = ArtistResolver(
        catalog,
        fuzzy_floor=float(resolver_config.get("fuzzy_floor", 0.6)),
        fuzzy_accept=float(resolver_config.get("fuzzy_accept", 0.8)),
        max_alternatives=int(resolver_config.get("max_alternatives", 3)),
    )
    audio_service = AudioFeatureService(
        audio_provider,
        audio_cache,
        cache_ttl=app_settings.audio_cache_ttl_seconds,
    )
    profile_service = TasteProfileService(
        history,
        profile_cache,
        signals=signals,
        cache_ttl=app_settings.profile_cache_ttl_seconds,
        window_weights=profile_config.get("window_weights"),
    )
    low, high = scoring_config.get("non_music_band", (5, 15))
    scoring_engine = ScoringEngine(
        classifier,
        cache=score_cache,
        resolver=resolver,
        weights=ScoringWeights(**scoring_config.get("weights", {})),
        cache_ttl=app_settings.score_cache_ttl_seconds,
        non_music_band=(int(low), int(high)),
    )

    # -- Pipeline --
    progress_tracker = ProgressTracker()
    batch_enhancer = BatchEnhancer(
        event_store,
        classifier,
        resolver,
        audio_service,
        progress_tracker=progress_tracker,
        version=app_settings.enhancement_version,
        concurrency=app_settings.batch_concurrency,
    )

    return {
        "http_client": http_client,
        "user_tokens": user_tokens,
        "catalog": catalog,
        "event_store": event_store,
        "event_source": event_source,
        "signals": signals,
        "classifier": classifier,
        "resolver": resolver,
        "audio_service": audio_service,
        "profile_service": profile_service,
        "scoring_engine": scoring_engine,
        "progress_tracker": progress_tracker,
        "batch_enhancer": batch_enhancer,
        "default_batch_size": app_settings.batch_size,
        "configured_upstreams": app_settings.get_configured_upstreams(),
    }


async def initialize_services(components: dict[str, Any]) -> None:
    """Create database tables for the SQLite-backed components."""
    await components["event_store"].initialize()
    catalog = components["catalog"]
    if isinstance(catalog, SQLiteArtistCatalog):
        await catalog.initialize()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_services(settings)
    await initialize_services(components)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        upstreams=components["configured_upstreams"],
        database=settings.database_path,
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="sonarEDM API",
        version=_VERSION,
        description=(
            "Personalized relevance scoring for electronic music events: "
            "artist resolution, audio-feature enhancement and taste-profile "
            "matching."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )

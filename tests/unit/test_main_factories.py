"""Unit tests for factory functions in src/main.py.

Tests build_services wiring, initialize_services and the create_app
factory with temporary storage paths, so no network calls or API keys
are required.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import pytest
from fastapi import FastAPI

from src.config.settings import Settings
from src.main import _token_lookup, build_services, create_app, initialize_services
from src.providers.catalog.memory_catalog import InMemoryArtistCatalog
from src.providers.catalog.sqlite_catalog import SQLiteArtistCatalog
from src.services.scoring_engine import ScoringEngine

_EXPECTED_KEYS = {
    "http_client",
    "user_tokens",
    "catalog",
    "event_store",
    "event_source",
    "signals",
    "classifier",
    "resolver",
    "audio_service",
    "profile_service",
    "scoring_engine",
    "progress_tracker",
    "batch_enhancer",
    "default_batch_size",
    "configured_upstreams",
}


# ======================================================================
# Shared helpers
# ======================================================================


def _settings(tmp_path: Path, **overrides) -> Settings:
    """Settings with every upstream unconfigured and storage under tmp_path."""
    defaults = {
        "reccobeats_api_key": "",
        "ticketmaster_api_key": "",
        "database_path": str(tmp_path / "sonar.db"),
        "artist_catalog_path": "",
        "config_path": "config/config.yaml",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


# ======================================================================
# build_services
# ======================================================================


class TestBuildServices:
    @pytest.mark.asyncio
    async def test_all_components_present(self, tmp_path: Path) -> None:
        components = build_services(_settings(tmp_path))
        try:
            assert set(components) == _EXPECTED_KEYS
            assert isinstance(components["scoring_engine"], ScoringEngine)
            assert isinstance(components["catalog"], SQLiteArtistCatalog)
            assert components["configured_upstreams"] == []
            assert components["default_batch_size"] == 25
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_yaml_catalog_selected_when_path_set(self, tmp_path: Path) -> None:
        components = build_services(_settings(tmp_path, artist_catalog_path="config/catalog.example.yaml"))
        try:
            catalog = components["catalog"]
            assert isinstance(catalog, InMemoryArtistCatalog)
            assert await catalog.find_exact("charlotte de witte") is not None
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_unconfigured_audio_falls_back_without_network(self, tmp_path: Path) -> None:
        components = build_services(_settings(tmp_path))
        try:
            vector = await components["audio_service"].get_features("Amelie Lens", ["techno"])
            assert vector.source.value == "genre_fallback"
            assert components["audio_service"].get_stats().live_disabled is True
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_explicit_config_overrides_file(self, tmp_path: Path, mock_config: dict) -> None:
        mock_config["scoring"]["weights"]["venue_quality"] = 0.0
        components = build_services(_settings(tmp_path, batch_size=7), mock_config)
        try:
            assert components["scoring_engine"].weights.venue_quality == 0.0
            assert components["default_batch_size"] == 7
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_configured_upstreams_reported(self, tmp_path: Path) -> None:
        components = build_services(_settings(tmp_path, reccobeats_api_key="k", ticketmaster_api_key="t"))
        try:
            assert components["configured_upstreams"] == ["reccobeats", "ticketmaster"]
        finally:
            await components["http_client"].aclose()


class TestInitializeServices:
    @pytest.mark.asyncio
    async def test_creates_event_and_artist_tables(self, tmp_path: Path) -> None:
        components = build_services(_settings(tmp_path))
        try:
            await initialize_services(components)
        finally:
            await components["http_client"].aclose()

        async with aiosqlite.connect(str(tmp_path / "sonar.db")) as db:
            cursor = await db.execute("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
            tables = [row[0] for row in await cursor.fetchall()]
        assert tables == ["artists", "events"]


class TestTokenLookup:
    @pytest.mark.asyncio
    async def test_known_and_unknown_users(self) -> None:
        lookup = _token_lookup({"user-1": "tok"})
        assert await lookup("user-1") == "tok"
        assert await lookup("user-2") is None


# ======================================================================
# create_app
# ======================================================================


class TestCreateApp:
    def test_returns_fastapi_with_routes(self) -> None:
        application = create_app()

        assert isinstance(application, FastAPI)
        paths = set(application.openapi()["paths"])
        assert {
            "/api/v1/health",
            "/api/v1/events/score",
            "/api/v1/events/classify",
            "/api/v1/artists/resolve",
            "/api/v1/enhance",
        } <= paths

"""Unit tests for the httpx-backed providers (ReccoBeats, Spotify, Ticketmaster)."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.providers.audio.reccobeats_provider import ReccoBeatsAudioProvider
from src.providers.event.ticketmaster_provider import TicketmasterEventSource
from src.providers.listening.spotify_history_provider import SpotifyListeningHistoryProvider
from src.utils.concurrency import RateLimiter
from src.utils.errors import (
    AuthorizationError,
    ConfigurationError,
    DataShapeError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    UpstreamTimeoutError,
)


def _response(status_code: int = 200, payload: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json = MagicMock(return_value=payload if payload is not None else {})
    return response


def _client(*responses: Any) -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(side_effect=list(responses))
    return client


_FEATURES = {
    "energy": 0.91,
    "danceability": 0.74,
    "valence": 0.32,
    "tempo": 132,
    "acousticness": 0.01,
    "instrumentalness": 0.88,
    "speechiness": 0.05,
}


# ======================================================================
# ReccoBeats
# ======================================================================


class TestReccoBeatsAudioProvider:
    def _provider(self, client: MagicMock, api_key: str = "key-123") -> ReccoBeatsAudioProvider:
        return ReccoBeatsAudioProvider(
            http_client=client,
            api_key=api_key,
            rate_limiter=RateLimiter(0.0, name="reccobeats"),
            base_url="https://api.example.test/v1/",
            timeout=4.0,
        )

    @pytest.mark.asyncio
    async def test_three_step_lookup(self) -> None:
        client = _client(
            _response(payload={"artists": [{"id": "a1", "name": "Amelie Lens"}]}),
            _response(payload={"tracks": [{"id": "t1", "name": "Feel It", "artists": [{"name": "Amelie Lens"}]}]}),
            _response(payload=_FEATURES),
        )
        provider = self._provider(client)

        artist = await provider.search_artist("Amelie Lens")
        tracks = await provider.get_artist_tracks(artist.id)
        features = await provider.get_track_features(tracks[0].id)

        assert artist.id == "a1"
        assert tracks[0].artists == ["Amelie Lens"]
        assert features.tempo == 132.0
        first_url = client.get.await_args_list[0].args[0]
        assert first_url == "https://api.example.test/v1/search/artist?q=Amelie%20Lens"
        assert client.get.await_args_list[2].kwargs["timeout"] == 4.0
        assert client.get.await_args_list[0].kwargs["headers"]["X-API-Key"] == "key-123"

    @pytest.mark.asyncio
    async def test_missing_key_raises_without_request(self) -> None:
        client = _client()
        provider = self._provider(client, api_key="")

        with pytest.raises(ConfigurationError):
            await provider.search_artist("Fisher")
        client.get.assert_not_awaited()
        assert provider.is_available() is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (401, AuthorizationError),
            (403, AuthorizationError),
            (404, NotFoundError),
            (429, RateLimitError),
            (503, ProviderUnavailableError),
        ],
    )
    async def test_status_mapping(self, status: int, error: type[Exception]) -> None:
        provider = self._provider(_client(_response(status)))

        with pytest.raises(error):
            await provider.search_artist("Fisher")

    @pytest.mark.asyncio
    async def test_timeout_mapped(self) -> None:
        provider = self._provider(_client(httpx.ReadTimeout("slow")))

        with pytest.raises(UpstreamTimeoutError):
            await provider.get_track_features("t1")

    @pytest.mark.asyncio
    async def test_network_error_mapped(self) -> None:
        provider = self._provider(_client(httpx.ConnectError("refused")))

        with pytest.raises(ProviderUnavailableError):
            await provider.get_artist_tracks("a1")

    @pytest.mark.asyncio
    async def test_empty_search_is_not_found(self) -> None:
        provider = self._provider(_client(_response(payload={"artists": []})))

        with pytest.raises(NotFoundError):
            await provider.search_artist("Nobody")

    @pytest.mark.asyncio
    async def test_incomplete_features_rejected(self) -> None:
        partial = {key: value for key, value in _FEATURES.items() if key != "valence"}
        provider = self._provider(_client(_response(payload=partial)))

        with pytest.raises(DataShapeError, match="valence"):
            await provider.get_track_features("t1")


# ======================================================================
# Spotify
# ======================================================================


class TestSpotifyListeningHistoryProvider:
    def _provider(self, client: MagicMock, token: str | None = "tok") -> SpotifyListeningHistoryProvider:
        return SpotifyListeningHistoryProvider(client, AsyncMock(return_value=token), timeout=2.0)

    @pytest.mark.asyncio
    async def test_top_artists_parsed(self) -> None:
        payload = {
            "items": [
                {"name": "Charlotte de Witte", "genres": ["techno", 3], "popularity": 82},
                {"name": "", "genres": []},
                "junk",
            ]
        }
        client = _client(_response(payload=payload))

        artists = await self._provider(client).get_top_artists("user-1", "short_term", limit=80)

        assert [a.name for a in artists] == ["Charlotte de Witte"]
        assert artists[0].genres == ["techno"]
        call = client.get.await_args
        assert call.args[0] == "https://api.spotify.com/v1/me/top/artists"
        assert call.kwargs["params"] == {"time_range": "short_term", "limit": 50}
        assert call.kwargs["headers"] == {"Authorization": "Bearer tok"}

    @pytest.mark.asyncio
    async def test_top_tracks_parsed(self) -> None:
        payload = {"items": [{"name": "Strobe", "artists": [{"name": "deadmau5"}], "popularity": 70}]}

        tracks = await self._provider(_client(_response(payload=payload))).get_top_tracks("u", "long_term")

        assert tracks[0].artists == ["deadmau5"]

    @pytest.mark.asyncio
    async def test_malformed_artist_items_clamped_or_skipped(self) -> None:
        payload = {
            "items": [
                {"name": "Amelie Lens", "genres": ["techno"], "popularity": 101},
                {"name": "Boris Brejcha", "popularity": -4},
                {"name": "Kolsch", "popularity": "very"},
                {"name": 42, "genres": ["house"]},
                {"name": "Anyma", "genres": 7},
            ]
        }

        artists = await self._provider(_client(_response(payload=payload))).get_top_artists("u", "short_term")

        assert [a.name for a in artists] == ["Amelie Lens", "Boris Brejcha", "Kolsch"]
        assert [a.popularity for a in artists] == [100, 0, 50]

    @pytest.mark.asyncio
    async def test_malformed_track_items_skipped(self) -> None:
        payload = {
            "items": [
                {"name": ["not", "a", "string"]},
                {"name": "Opus", "artists": [{"name": "Eric Prydz"}, {"name": 5}], "popularity": 300},
            ]
        }

        tracks = await self._provider(_client(_response(payload=payload))).get_top_tracks("u", "short_term")

        assert [t.name for t in tracks] == ["Opus"]
        assert tracks[0].artists == ["Eric Prydz"]
        assert tracks[0].popularity == 100

    @pytest.mark.asyncio
    async def test_no_token_means_no_history(self) -> None:
        client = _client()

        assert await self._provider(client, token=None).get_top_artists("u", "medium_term") == []
        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_time_range(self) -> None:
        with pytest.raises(ValueError):
            await self._provider(_client()).get_top_artists("u", "forever")

    @pytest.mark.asyncio
    async def test_expired_token(self) -> None:
        with pytest.raises(AuthorizationError):
            await self._provider(_client(_response(401))).get_top_tracks("u", "short_term")

    @pytest.mark.asyncio
    async def test_missing_items(self) -> None:
        with pytest.raises(DataShapeError):
            await self._provider(_client(_response(payload={"error": "x"}))).get_top_artists("u", "short_term")


# ======================================================================
# Ticketmaster
# ======================================================================


_TM_EVENT = {
    "id": "G5vYZ9",
    "name": "Amelie Lens at Rebel",
    "url": "https://tickets.example.test/G5vYZ9",
    "info": "All night long",
    "dates": {"start": {"localDate": "2025-11-08", "localTime": "22:00:00"}},
    "classifications": [{"genre": {"name": "Dance/Electronic"}, "subGenre": {"name": "Techno"}}],
    "images": [{"url": "https://img.example.test/1.jpg"}],
    "_embedded": {
        "venues": [
            {
                "name": "Rebel",
                "city": {"name": "Toronto"},
                "state": {"name": "Ontario"},
                "country": {"name": "Canada"},
                "address": {"line1": "11 Polson St"},
                "location": {"latitude": "43.64", "longitude": "-79.35"},
            }
        ],
        "attractions": [{"name": "Amelie Lens"}],
    },
}


class TestTicketmasterEventSource:
    def _source(self, client: MagicMock, api_key: str = "tm-key") -> TicketmasterEventSource:
        return TicketmasterEventSource(client, api_key=api_key, timeout=3.0)

    @pytest.mark.asyncio
    async def test_events_normalized(self) -> None:
        client = _client(_response(payload={"_embedded": {"events": [_TM_EVENT, {"id": "no-name"}]}}))

        events = await self._source(client).search_events(43.65, -79.38, radius_km=25, keyword="techno")

        assert len(events) == 1
        event = events[0]
        assert event.id == "ticketmaster:G5vYZ9"
        assert event.artist_names == ["Amelie Lens"]
        assert event.genres == ["Dance/Electronic", "Techno"]
        assert event.venue is not None
        assert event.venue.city == "Toronto"
        assert event.venue.latitude == 43.64
        assert event.start is not None and event.start.hour == 22
        params = client.get.await_args.kwargs["params"]
        assert params["latlong"] == "43.65,-79.38"
        assert params["radius"] == 25
        assert params["classificationName"] == "music"
        assert params["keyword"] == "techno"

    @pytest.mark.asyncio
    async def test_partial_record_normalized(self) -> None:
        client = _client(_response(payload={"_embedded": {"events": [{"id": "x1", "name": "Warehouse Party"}]}}))

        events = await self._source(client).search_events(0.0, 0.0)

        assert events[0].venue is None
        assert events[0].artists == []
        assert events[0].genres == []
        assert events[0].start is None

    @pytest.mark.asyncio
    async def test_wrongly_typed_nested_fields_treated_as_absent(self) -> None:
        odd = {
            "id": "a",
            "name": "Techno Night",
            "classifications": [{"genre": "Electronic", "subGenre": {"name": "Techno"}}, "Music"],
            "dates": {"start": "tonight"},
            "images": ["https://img.example.test/raw.jpg", {"url": "https://img.example.test/2.jpg"}],
            "_embedded": {
                "venues": [{"name": "Rebel", "city": "Toronto", "state": None, "address": ["11 Polson St"]}],
                "attractions": ["Amelie Lens", {"name": "Kobosil"}],
            },
        }
        payload = {"_embedded": {"events": [odd, {"id": "b", "name": "House Party", "_embedded": "none"}]}}

        events = await self._source(_client(_response(payload=payload))).search_events(0.0, 0.0)

        assert [event.source_id for event in events] == ["a", "b"]
        first = events[0]
        assert first.genres == ["Techno"]
        assert first.artist_names == ["Kobosil"]
        assert first.start is None
        assert first.image_url == "https://img.example.test/2.jpg"
        assert first.venue is not None
        assert first.venue.name == "Rebel"
        assert first.venue.city is None
        assert first.venue.address is None
        assert events[1].venue is None

    @pytest.mark.asyncio
    async def test_events_field_not_a_list(self) -> None:
        client = _client(_response(payload={"_embedded": {"events": {"id": "a"}}}))

        assert await self._source(client).search_events(0.0, 0.0) == []

    @pytest.mark.asyncio
    async def test_transient_error_retries_broader(self) -> None:
        client = _client(_response(503), _response(payload={"_embedded": {"events": [_TM_EVENT]}}))

        events = await self._source(client).search_events(43.65, -79.38, keyword="minimal techno")

        assert len(events) == 1
        retry_params = client.get.await_args_list[1].kwargs["params"]
        assert retry_params["keyword"] == "electronic"
        assert "classificationName" not in retry_params

    @pytest.mark.asyncio
    async def test_retry_failure_returns_empty(self) -> None:
        client = _client(httpx.ReadTimeout("slow"), _response(500))

        assert await self._source(client).search_events(43.65, -79.38) == []
        assert client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self) -> None:
        client = _client(_response(401))

        assert await self._source(client).search_events(43.65, -79.38) == []
        assert client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_key_returns_empty(self) -> None:
        client = _client()
        source = self._source(client, api_key="")

        assert await source.search_events(43.65, -79.38) == []
        assert source.is_available() is False
        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_embedded_block(self) -> None:
        assert await self._source(_client(_response(payload={"page": {}}))).search_events(1.0, 2.0) == []

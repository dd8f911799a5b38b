"""ReccoBeats provider implementing IAudioAnalysisProvider.

Three chained endpoints back one lookup:

    GET /search/artist?q=<name>          -> {"artists": [{"id", "name"}, ...]}
    GET /artist/<id>/tracks              -> {"tracks": [{"id", "name"}, ...]}
    GET /track/<id>/audio-features       -> {"energy", "danceability", ...}

Each HTTP outcome is mapped to a typed error so the audio-feature service
can tell a missing key from bad credentials from a transient outage.
Every request waits on the shared RateLimiter first and carries an
explicit timeout.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from src.interfaces.audio_analysis_provider import (
    AnalysisArtist,
    AnalysisTrack,
    IAudioAnalysisProvider,
    TrackAudioFeatures,
)
from src.models.audio import FEATURE_NAMES
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
from src.utils.logging import get_logger

_PROVIDER = "reccobeats"
_DEFAULT_BASE_URL = "https://api.reccobeats.com/v1"
_USER_AGENT = "sonarEDM/0.1.0"


class ReccoBeatsAudioProvider(IAudioAnalysisProvider):
    """Audio-analysis provider backed by the ReccoBeats API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        ReccoBeats key.  Empty means "not configured": every call raises
        :class:`ConfigurationError` without touching the network.
    rate_limiter:
        Limiter shared by all callers of this upstream.
    base_url:
        API root, without trailing slash.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        rate_limiter: RateLimiter,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._limiter = rate_limiter
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": _USER_AGENT,
            "Authorization": f"Bearer {self._api_key}",
            "X-API-Key": self._api_key,
        }

    async def _get_json(self, path: str) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError("RECCOBEATS_API_KEY is not set", provider_name=_PROVIDER)

        await self._limiter.acquire()
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.get(url, headers=self._headers(), timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"Timed out after {self._timeout}s: {path}", provider_name=_PROVIDER) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f"Request failed: {exc}", provider_name=_PROVIDER) from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthorizationError(
                f"Credentials rejected ({status}) for {path}",
                provider_name=_PROVIDER,
                status_code=status,
            )
        if status == 404:
            raise NotFoundError(f"Not found: {path}", provider_name=_PROVIDER)
        if status == 429:
            raise RateLimitError(f"Rate limited on {path}", provider_name=_PROVIDER)
        if status >= 400:
            raise ProviderUnavailableError(f"HTTP {status} for {path}", provider_name=_PROVIDER)

        try:
            data = response.json()
        except ValueError as exc:
            raise DataShapeError(f"Non-JSON body for {path}", provider_name=_PROVIDER) from exc
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a JSON object for {path}", provider_name=_PROVIDER)
        return data

    # -- IAudioAnalysisProvider implementation ---------------------------------

    async def search_artist(self, name: str) -> AnalysisArtist:
        data = await self._get_json(f"/search/artist?q={quote(name)}")
        artists = data.get("artists")
        if not isinstance(artists, list) or not artists:
            raise NotFoundError(f"No artist found for {name!r}", provider_name=_PROVIDER)
        first = artists[0]
        if not isinstance(first, dict) or not first.get("id"):
            raise DataShapeError("Artist entry without id", provider_name=_PROVIDER)
        return AnalysisArtist(id=str(first["id"]), name=str(first.get("name") or name))

    async def get_artist_tracks(self, artist_id: str) -> list[AnalysisTrack]:
        data = await self._get_json(f"/artist/{quote(artist_id)}/tracks")
        raw_tracks = data.get("tracks")
        if not isinstance(raw_tracks, list) or not raw_tracks:
            raise NotFoundError(f"No tracks for artist {artist_id}", provider_name=_PROVIDER)

        tracks: list[AnalysisTrack] = []
        for item in raw_tracks:
            if not isinstance(item, dict) or not item.get("id"):
                continue
            artists = [a.get("name", "") for a in item.get("artists", []) if isinstance(a, dict)]
            tracks.append(AnalysisTrack(id=str(item["id"]), name=str(item.get("name", "")), artists=artists))
        if not tracks:
            raise DataShapeError(f"Track list for {artist_id} has no usable entries", provider_name=_PROVIDER)
        return tracks

    async def get_track_features(self, track_id: str) -> TrackAudioFeatures:
        data = await self._get_json(f"/track/{quote(track_id)}/audio-features")
        missing = [name for name in FEATURE_NAMES if not isinstance(data.get(name), (int, float))]
        if missing:
            self._logger.debug("reccobeats_incomplete_features", track_id=track_id, missing=missing)
            raise DataShapeError(
                f"Audio features for {track_id} missing {', '.join(missing)}",
                provider_name=_PROVIDER,
            )
        return TrackAudioFeatures(track_id=track_id, **{name: float(data[name]) for name in FEATURE_NAMES})

    def get_provider_name(self) -> str:
        return _PROVIDER

    def is_available(self) -> bool:
        return bool(self._api_key)

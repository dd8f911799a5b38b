"""Spotify provider implementing IListeningHistoryProvider.

Uses ``GET /me/top/artists`` and ``GET /me/top/tracks`` with a
``time_range`` of ``short_term``, ``medium_term`` or ``long_term``.
Authentication is not handled here: an injected ``token_lookup``
coroutine maps a user id to a bearer token (``None`` when the user has
not connected Spotify, in which case the user simply has no history).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError

from src.interfaces.listening_history_provider import IListeningHistoryProvider
from src.models.taste_profile import TopArtistEntry, TrackEntry
from src.utils.errors import (
    AuthorizationError,
    DataShapeError,
    ProviderUnavailableError,
    RateLimitError,
    UpstreamTimeoutError,
)
from src.utils.logging import get_logger

_PROVIDER = "spotify"
_DEFAULT_BASE_URL = "https://api.spotify.com/v1"
_VALID_TIME_RANGES = frozenset({"short_term", "medium_term", "long_term"})

TokenLookup = Callable[[str], Awaitable[str | None]]


class SpotifyListeningHistoryProvider(IListeningHistoryProvider):
    """Listening history from the Spotify Web API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    token_lookup:
        ``async (user_id) -> access_token | None``.
    base_url:
        API root, without trailing slash.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_lookup: TokenLookup,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = 5.0,
    ) -> None:
        self._http = http_client
        self._token_lookup = token_lookup
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def _get_items(self, user_id: str, kind: str, time_range: str, limit: int) -> list[dict[str, Any]]:
        if time_range not in _VALID_TIME_RANGES:
            raise ValueError(f"Unknown time_range {time_range!r}")

        token = await self._token_lookup(user_id)
        if not token:
            self._logger.debug("spotify_no_token", user_id=user_id)
            return []

        url = f"{self._base_url}/me/top/{kind}"
        try:
            response = await self._http.get(
                url,
                params={"time_range": time_range, "limit": min(max(limit, 1), 50)},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"Timed out fetching top {kind}", provider_name=_PROVIDER) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f"Request failed: {exc}", provider_name=_PROVIDER) from exc

        if response.status_code in (401, 403):
            raise AuthorizationError(
                f"Token rejected for user {user_id}",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        if response.status_code == 429:
            raise RateLimitError(provider_name=_PROVIDER)
        if response.status_code >= 400:
            raise ProviderUnavailableError(f"HTTP {response.status_code} for top {kind}", provider_name=_PROVIDER)

        try:
            data = response.json()
        except ValueError as exc:
            raise DataShapeError("Non-JSON body", provider_name=_PROVIDER) from exc
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise DataShapeError(f"Top {kind} response has no items list", provider_name=_PROVIDER)
        return [item for item in items if isinstance(item, dict)]

    # -- IListeningHistoryProvider implementation ------------------------------

    async def get_top_artists(self, user_id: str, time_range: str, limit: int = 50) -> list[TopArtistEntry]:
        items = await self._get_items(user_id, "artists", time_range, limit)
        entries: list[TopArtistEntry] = []
        for item in items:
            if not item.get("name"):
                continue
            try:
                entries.append(
                    TopArtistEntry(
                        name=item["name"],
                        genres=[g for g in item.get("genres") or [] if isinstance(g, str)],
                        popularity=_popularity(item),
                    )
                )
            except (TypeError, ValidationError) as exc:
                self._logger.debug("spotify_item_skipped", kind="artists", error=str(exc))
        return entries

    async def get_top_tracks(self, user_id: str, time_range: str, limit: int = 50) -> list[TrackEntry]:
        items = await self._get_items(user_id, "tracks", time_range, limit)
        entries: list[TrackEntry] = []
        for item in items:
            if not item.get("name"):
                continue
            try:
                entries.append(
                    TrackEntry(
                        name=item["name"],
                        artists=[
                            a["name"]
                            for a in item.get("artists") or []
                            if isinstance(a, dict) and isinstance(a.get("name"), str)
                        ],
                        popularity=_popularity(item),
                    )
                )
            except (TypeError, ValidationError) as exc:
                self._logger.debug("spotify_item_skipped", kind="tracks", error=str(exc))
        return entries

    def get_provider_name(self) -> str:
        return _PROVIDER


def _popularity(item: dict[str, Any]) -> int:
    """Spotify popularity clamped to 0-100; 50 when absent or unparseable."""
    value = item.get("popularity")
    if value is None:
        return 50
    try:
        return max(0, min(100, int(value)))
    except (TypeError, ValueError):
        return 50

"""Ticketmaster provider implementing IEventSourceProvider.

Queries ``GET /events.json`` on the Discovery API by ``latlong`` +
``radius`` (km), with an optional keyword and classification filter.

Failure policy:
    - Missing API key: no request, empty result (logged once per call).
    - 401/403: empty result, never retried with the same key.
    - Timeout, 429, 5xx, network error: retried once with a single broader
      keyword and no classification filter, then an empty result.
    - Partial records (no classifications, no venue, no attractions) are
      normalized into events with empty fields.
    - Nested fields of the wrong type are treated as absent; a record that
      still cannot be built is skipped without losing the rest of the page.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from src.interfaces.event_source_provider import IEventSourceProvider
from src.models.event import Event, Venue
from src.utils.errors import (
    AuthorizationError,
    ConfigurationError,
    DataShapeError,
    ProviderUnavailableError,
    RateLimitError,
    SonarEDMError,
    UpstreamTimeoutError,
)
from src.utils.logging import get_logger

_PROVIDER = "ticketmaster"
_DEFAULT_BASE_URL = "https://app.ticketmaster.com/discovery/v2"
_USER_AGENT = "sonarEDM/0.1.0"
_BROAD_KEYWORD = "electronic"

_TRANSIENT_ERRORS = (UpstreamTimeoutError, RateLimitError, ProviderUnavailableError)


class TicketmasterEventSource(IEventSourceProvider):
    """Event listings from the Ticketmaster Discovery API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def _fetch(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError("TICKETMASTER_API_KEY is not set", provider_name=_PROVIDER)
        try:
            response = await self._http.get(
                f"{self._base_url}/events.json",
                params={"apikey": self._api_key, **params},
                headers={"Accept": "application/json", "User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("Event search timed out", provider_name=_PROVIDER) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f"Request failed: {exc}", provider_name=_PROVIDER) from exc

        if response.status_code in (401, 403):
            raise AuthorizationError(provider_name=_PROVIDER, status_code=response.status_code)
        if response.status_code == 429:
            raise RateLimitError(provider_name=_PROVIDER)
        if response.status_code >= 400:
            raise ProviderUnavailableError(f"HTTP {response.status_code}", provider_name=_PROVIDER)
        try:
            data = response.json()
        except ValueError as exc:
            raise DataShapeError("Non-JSON body", provider_name=_PROVIDER) from exc
        if not isinstance(data, dict):
            raise DataShapeError("Expected a JSON object", provider_name=_PROVIDER)
        return data

    # -- IEventSourceProvider implementation -----------------------------------

    async def search_events(
        self,
        latitude: float,
        longitude: float,
        radius_km: int = 50,
        keyword: str | None = None,
        classification: str | None = "music",
        size: int = 50,
    ) -> list[Event]:
        params: dict[str, Any] = {
            "latlong": f"{latitude},{longitude}",
            "radius": radius_km,
            "unit": "km",
            "size": size,
            "sort": "date,asc",
        }
        if keyword:
            params["keyword"] = keyword
        if classification:
            params["classificationName"] = classification

        try:
            data = await self._fetch(params)
        except _TRANSIENT_ERRORS as exc:
            self._logger.warning("event_search_retrying_broader", error=str(exc), keyword=keyword)
            broader = {k: v for k, v in params.items() if k != "classificationName"}
            broader["keyword"] = _BROAD_KEYWORD
            try:
                data = await self._fetch(broader)
            except SonarEDMError as retry_exc:
                self._logger.warning("event_search_failed", error=str(retry_exc), code=retry_exc.code)
                return []
        except SonarEDMError as exc:
            self._logger.warning("event_search_failed", error=str(exc), code=exc.code)
            return []

        raw_events = _mapping(data.get("_embedded")).get("events")
        events: list[Event] = []
        for raw in raw_events if isinstance(raw_events, list) else []:
            try:
                event = self._normalize(raw)
            except (TypeError, ValueError, ValidationError) as exc:
                self._logger.warning("event_record_skipped", reason="malformed record", error=str(exc))
                continue
            if event is not None:
                events.append(event)
        self._logger.info("events_fetched", count=len(events), keyword=params.get("keyword"))
        return events

    def get_provider_name(self) -> str:
        return _PROVIDER

    def is_available(self) -> bool:
        return bool(self._api_key)

    # -- Normalization ---------------------------------------------------------

    def _normalize(self, raw: Any) -> Event | None:
        if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
            self._logger.debug("event_record_skipped", reason="missing id or name")
            return None

        embedded = _mapping(raw.get("_embedded"))
        venues = _sequence(embedded.get("venues"))
        attractions = _sequence(embedded.get("attractions"))

        genres: list[str] = []
        for classification in _sequence(raw.get("classifications")):
            for key in ("genre", "subGenre"):
                name = _name(_mapping(classification).get(key))
                if name and name not in genres:
                    genres.append(name)

        return Event(
            source=_PROVIDER,
            source_id=str(raw["id"]),
            name=str(raw["name"]),
            description=str(raw.get("info") or raw.get("description") or ""),
            start=_parse_start(_mapping(raw.get("dates"))),
            venue=_parse_venue(venues[0]) if venues and isinstance(venues[0], dict) else None,
            artists=[name for name in (_name(a) for a in attractions) if name],
            genres=genres,
            image_url=next(
                (img["url"] for img in _sequence(raw.get("images")) if isinstance(_mapping(img).get("url"), str)),
                None,
            ),
            ticket_url=raw.get("url") if isinstance(raw.get("url"), str) else None,
        )


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _sequence(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _name(value: Any) -> str | None:
    """``value["name"]`` when *value* is an object with a string name."""
    name = _mapping(value).get("name")
    return name if isinstance(name, str) and name else None


def _parse_start(dates: dict[str, Any]) -> datetime | None:
    start = _mapping(dates.get("start"))
    candidates = [start.get("dateTime")]
    if start.get("localDate"):
        candidates.append(f"{start['localDate']}T{start.get('localTime') or '00:00:00'}")
    for value in candidates:
        if not value:
            continue
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            continue
    return None


def _parse_venue(raw: dict[str, Any]) -> Venue:
    location = _mapping(raw.get("location"))

    def _coordinate(key: str) -> float | None:
        try:
            return float(location[key])
        except (KeyError, TypeError, ValueError):
            return None

    address = _mapping(raw.get("address")).get("line1")
    return Venue(
        name=raw["name"] if isinstance(raw.get("name"), str) else "",
        address=address if isinstance(address, str) else None,
        latitude=_coordinate("latitude"),
        longitude=_coordinate("longitude"),
        city=_name(raw.get("city")),
        region=_name(raw.get("state")),
        country=_name(raw.get("country")),
    )

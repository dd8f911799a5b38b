"""Artist resolver: free-text event titles to canonical artist identities.

Ticketing sources rarely give a clean artist list.  A listing titled
"DJ Snake & Skrillex Festival Tour 2025" has to become two catalog
identities before any genre or audio lookup can happen.

# ─── HOW RESOLUTION WORKS (Junior Developer Guide) ─────────────────────
#
#   "DJ Snake & Skrillex Festival Tour 2025"
#        │ strip_title_suffix
#        ▼
#   "DJ Snake & Skrillex" ──exact catalog hit?──→ [identity]   (e.g. "Above & Beyond")
#        │ split_on_first_separator
#        ▼
#   ["DJ Snake", "Skrillex"]
#        │ per candidate:
#        ▼
#   1. exact      matching key found in catalog       confidence 1.0
#   2. fuzzy      best similarity >= 0.8              confidence = score
#   3. extraction nothing close enough                confidence 0.0
#
# The resolver never fails: a candidate with no catalog match still comes
# back as an unverified identity carrying the raw text, so the event keeps
# its artist names even when the catalog does not know them.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import structlog

from src.interfaces.artist_catalog_provider import IArtistCatalogProvider
from src.models.artist import ArtistIdentity, CatalogArtist, ResolutionSource
from src.utils.logging import get_logger
from src.utils.text_normalizer import (
    best_matches,
    normalize_for_matching,
    split_on_first_separator,
    strip_title_suffix,
)


class ArtistResolver:
    """Maps raw artist strings and event titles to :class:`ArtistIdentity`.

    Parameters
    ----------
    catalog:
        Known-artist reference data.  Only read.
    fuzzy_floor:
        Similarity at or below which a catalog entry is not a candidate.
    fuzzy_accept:
        Minimum similarity for a fuzzy candidate to count as verified.
    max_alternatives:
        How many fuzzy candidates are kept on the identity.
    """

    def __init__(
        self,
        catalog: IArtistCatalogProvider,
        fuzzy_floor: float = 0.6,
        fuzzy_accept: float = 0.8,
        max_alternatives: int = 3,
    ) -> None:
        self._catalog = catalog
        self._fuzzy_floor = fuzzy_floor
        self._fuzzy_accept = fuzzy_accept
        self._max_alternatives = max_alternatives
        # matching key -> canonical name, and canonical name -> entry.
        # Built lazily on the first fuzzy lookup; see refresh().
        self._fuzzy_index: dict[str, str] | None = None
        self._by_name: dict[str, CatalogArtist] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, text: str) -> list[ArtistIdentity]:
        """Resolve an event title or artist string into identities.

        Parameters
        ----------
        text:
            Raw title, e.g. ``"Charlotte de Witte - Live at Coda"``.

        Returns
        -------
        list[ArtistIdentity]
            One identity per candidate, in title order.  Empty only when
            *text* holds nothing but a suffix or whitespace.
        """
        cleaned = strip_title_suffix(text or "")
        if not cleaned:
            return []

        whole = await self._catalog.find_exact(normalize_for_matching(cleaned))
        if whole is not None:
            return [self._from_catalog(whole, cleaned, ResolutionSource.EXACT, 1.0)]

        identities = [await self.resolve_candidate(part) for part in split_on_first_separator(cleaned)]

        self._logger.debug(
            "artists_resolved",
            text=text,
            candidates=len(identities),
            verified=sum(1 for identity in identities if identity.verified),
        )
        return identities

    async def resolve_many(self, names: list[str]) -> list[ArtistIdentity]:
        """Resolve several raw artist strings, de-duplicated by matching key.

        Each name may itself expand to several identities (``"A & B"``).
        Order follows first appearance.
        """
        seen: set[str] = set()
        resolved: list[ArtistIdentity] = []
        for name in names:
            for identity in await self.resolve(name):
                key = normalize_for_matching(identity.name)
                if key in seen:
                    continue
                seen.add(key)
                resolved.append(identity)
        return resolved

    async def resolve_candidate(self, candidate: str) -> ArtistIdentity:
        """Resolve a single, already split candidate name."""
        candidate = candidate.strip()
        key = normalize_for_matching(candidate)
        if not key:
            return ArtistIdentity(name=candidate, query=candidate)

        exact = await self._catalog.find_exact(key)
        if exact is not None:
            return self._from_catalog(exact, candidate, ResolutionSource.EXACT, 1.0)

        index = await self._get_fuzzy_index()
        ranked = best_matches(key, index, floor=self._fuzzy_floor, limit=self._max_alternatives)
        if not ranked:
            return ArtistIdentity(name=candidate, query=candidate)

        best_name, best_score = ranked[0]
        alternatives = [name for name, _ in ranked]
        if best_score >= self._fuzzy_accept:
            identity = self._from_catalog(
                self._by_name[best_name],
                candidate,
                ResolutionSource.FUZZY,
                round(best_score, 4),
                alternatives=alternatives[1:],
            )
            self._logger.debug("artist_fuzzy_match", query=candidate, match=best_name, score=round(best_score, 3))
            return identity

        # Close but not close enough: keep the raw text, record what was near.
        return ArtistIdentity(name=candidate, query=candidate, alternatives=alternatives)

    def refresh(self) -> None:
        """Drop the fuzzy index so the next lookup re-reads the catalog."""
        self._fuzzy_index = None
        self._by_name = {}

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_fuzzy_index(self) -> dict[str, str]:
        if self._fuzzy_index is None:
            index: dict[str, str] = {}
            by_name: dict[str, CatalogArtist] = {}
            for artist in await self._catalog.get_all_artists():
                by_name[artist.name] = artist
                for spelling in (artist.name, artist.original_name):
                    if spelling:
                        index.setdefault(normalize_for_matching(spelling), artist.name)
            self._fuzzy_index = index
            self._by_name = by_name
            self._logger.debug("artist_fuzzy_index_built", entries=len(index))
        return self._fuzzy_index

    @staticmethod
    def _from_catalog(
        artist: CatalogArtist,
        query: str,
        source: ResolutionSource,
        confidence: float,
        alternatives: list[str] | None = None,
    ) -> ArtistIdentity:
        return ArtistIdentity(
            name=artist.name,
            query=query,
            genres=list(artist.genres),
            external_id=artist.external_id,
            popularity=artist.popularity,
            confidence=confidence,
            source=source,
            alternatives=alternatives or [],
        )

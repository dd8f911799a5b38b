"""Artist models: catalog entries, resolved identities and event artist references.

An event's artist list arrives from ticketing sources in whatever shape the
source uses (bare strings, ``{"name": ...}`` objects).  It is normalized
to :class:`ArtistRef` at the model boundary (see
``src/models/event.py``) and never re-inspected downstream.

Key relationships:
    - CatalogArtist is the read-mostly reference data the resolver matches
      against (populated by a separate ingestion process).
    - ArtistIdentity is the resolver's output: one per candidate name,
      verified or not.
    - ArtistRef pairs the raw name with its identity once resolved.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_genres(value: object) -> list[str]:
    """Lowercase, strip and de-duplicate genre tags, keeping first-seen order."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    seen: list[str] = []
    for item in value:  # type: ignore[union-attr]
        if not isinstance(item, str):
            continue
        genre = " ".join(item.lower().split())
        if genre and genre not in seen:
            seen.append(genre)
    return seen


class ResolutionSource(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """How an ArtistIdentity was obtained.

    Fuzzy matches carry their score in the serialized source tag
    (``fuzzy:0.89``); see :attr:`ArtistIdentity.source_tag`.
    """

    EXACT = "exact"
    FUZZY = "fuzzy"
    TITLE_EXTRACTION = "title_extraction"


class CatalogArtist(BaseModel):
    """One known artist in the reference catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    original_name: str | None = None   # Alternate spelling / legal name also matched exactly
    genres: list[str] = Field(default_factory=list)
    external_id: str | None = None
    popularity: int = Field(default=50, ge=0, le=100)

    @field_validator("genres", mode="before")
    @classmethod
    def normalize_genres(cls, value: object) -> list[str]:
        return _clean_genres(value)


class ArtistIdentity(BaseModel):
    """A canonical artist identity produced by the resolver.

    ``confidence`` is 1.0 for exact matches, the similarity score for
    verified fuzzy matches, and 0.0 for unverified extractions (which keep
    the candidate text as ``name`` and an empty genre list).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    query: str = ""                         # Candidate text this identity was resolved from
    genres: list[str] = Field(default_factory=list)
    external_id: str | None = None
    popularity: int | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: ResolutionSource = ResolutionSource.TITLE_EXTRACTION
    alternatives: list[str] = Field(default_factory=list)  # Other fuzzy candidates, best first

    @field_validator("genres", mode="before")
    @classmethod
    def normalize_genres(cls, value: object) -> list[str]:
        return _clean_genres(value)

    @property
    def verified(self) -> bool:
        return self.source != ResolutionSource.TITLE_EXTRACTION

    @property
    def source_tag(self) -> str:
        """Serialized tag: ``exact``, ``fuzzy:<score>`` or ``title_extraction``."""
        if self.source == ResolutionSource.FUZZY:
            return f"fuzzy:{self.confidence:.2f}"
        return self.source.value


class ArtistRef(BaseModel):
    """An artist named on an event, with its resolved identity once known."""

    model_config = ConfigDict(frozen=True)

    name: str
    resolved: ArtistIdentity | None = None

    @classmethod
    def coerce(cls, value: object) -> ArtistRef | None:
        """Build an ArtistRef from a string, mapping or ArtistRef; None if unusable."""
        if isinstance(value, ArtistRef):
            return value
        if isinstance(value, str):
            name = value.strip()
            return cls(name=name) if name else None
        if isinstance(value, dict):
            name = value.get("name")
            if isinstance(name, str) and name.strip():
                resolved = value.get("resolved")
                return cls(name=name.strip(), resolved=resolved)
        return None

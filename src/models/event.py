"""Event models for the enhancement and scoring pipeline.

An :class:`Event` is created by ingestion from a ticketing source and then
mutated exactly once per enhancement version by the batch enhancer, which
fills in the derived block (``artist_metadata``, ``enhanced_genres``,
``sound_characteristics``, ``is_music_event``, ``edm_weight``,
``enhancement``).  The source never writes derived fields.

A personalized score is deliberately *not* a field here: it only means
something for one ``(user_id, profile_version)`` pair and lives on
:class:`src.models.scoring.ScoreResult`.

Architecture note:
    Artist entries are normalized to :class:`ArtistRef` by a before-validator,
    so ``["Carl Cox"]``, ``[{"name": "Carl Cox"}]`` and ``[ArtistRef(...)]``
    all produce the same model.  Entries without a usable name are dropped
    at this boundary.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from src.config.domain_knowledge import SENTINEL_GENRES
from src.models.artist import ArtistIdentity, ArtistRef
from src.models.audio import AudioFeatureVector

DERIVED_FIELDS = (
    "artist_metadata",
    "enhanced_genres",
    "sound_characteristics",
    "is_music_event",
    "edm_weight",
    "enhancement",
)


class EnhancementStatus(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Enhancement lifecycle of an event record."""

    PENDING = "pending"
    COMPLETED = "completed"


class EnhancementBlock(BaseModel):
    """Bookkeeping written alongside the derived fields."""

    model_config = ConfigDict(frozen=True)

    status: EnhancementStatus = EnhancementStatus.PENDING
    version: str | None = None
    last_updated: datetime | None = None


class Venue(BaseModel):
    """Where an event happens.  Every field except ``name`` may be absent."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None


class Event(BaseModel):
    """One (candidate) music event plus its pipeline-derived fields."""

    model_config = ConfigDict(frozen=True)

    # --- Identity and source-reported fields ---
    source: str = "manual"
    source_id: str
    name: str
    description: str = ""
    start: datetime | None = None
    venue: Venue | None = None
    artists: list[ArtistRef] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    image_url: str | None = None
    ticket_url: str | None = None

    # --- Derived fields (written only by the pipeline) ---
    artist_metadata: list[ArtistIdentity] = Field(default_factory=list)
    enhanced_genres: list[str] = Field(default_factory=list)
    sound_characteristics: AudioFeatureVector | None = None
    is_music_event: bool | None = None
    edm_weight: int | None = None
    enhancement: EnhancementBlock = Field(default_factory=EnhancementBlock)

    @field_validator("artists", mode="before")
    @classmethod
    def normalize_artists(cls, value: object) -> list[ArtistRef]:
        if value is None:
            return []
        if isinstance(value, (str, dict, ArtistRef)):
            value = [value]
        refs = [ArtistRef.coerce(item) for item in value]  # type: ignore[union-attr]
        return [ref for ref in refs if ref is not None]

    @field_validator("genres", mode="before")
    @classmethod
    def normalize_raw_genres(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]  # type: ignore[union-attr]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        """Source-qualified identifier, e.g. ``ticketmaster:G5vYZ9...``."""
        return f"{self.source}:{self.source_id}"

    @property
    def artist_names(self) -> list[str]:
        return [artist.name for artist in self.artists]

    @property
    def usable_genres(self) -> list[str]:
        """Raw genres lowercased, de-duplicated, with sentinel values removed."""
        cleaned: list[str] = []
        for genre in self.genres:
            lowered = genre.lower()
            if lowered not in SENTINEL_GENRES and lowered not in cleaned:
                cleaned.append(lowered)
        return cleaned

    @property
    def scoring_genres(self) -> list[str]:
        """Enhanced genres when available, otherwise the usable raw genres."""
        return list(self.enhanced_genres) if self.enhanced_genres else self.usable_genres

    @property
    def venue_name(self) -> str:
        return self.venue.name if self.venue else ""

    def without_derived(self) -> Event:
        """Copy with every pipeline-derived field reset to its default."""
        fields = type(self).model_fields
        return self.model_copy(
            update={name: fields[name].get_default(call_default_factory=True) for name in DERIVED_FIELDS}
        )

    def text_blob(self) -> str:
        """Name, description and venue name as one lowercase string."""
        return " ".join(part for part in (self.name, self.description, self.venue_name) if part).lower()

    def is_enhanced(self, version: str) -> bool:
        return (
            self.enhancement.status == EnhancementStatus.COMPLETED
            and self.enhancement.version == version
        )

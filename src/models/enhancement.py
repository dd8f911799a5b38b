"""Models produced by the classifier and the batch enhancer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.artist import ArtistIdentity
from src.models.audio import AudioFeatureVector
from src.models.event import EnhancementBlock, EnhancementStatus, Event


class Classification(BaseModel):
    """Music/non-music decision with the evidence behind it."""

    model_config = ConfigDict(frozen=True)

    is_music_event: bool
    music_keywords: list[str] = Field(default_factory=list)
    non_music_keywords: list[str] = Field(default_factory=list)
    general_admission_override: bool = False


class EventEnhancement(BaseModel):
    """Every derived field of one event, written to the store in one operation."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    is_music_event: bool
    artist_metadata: list[ArtistIdentity] = Field(default_factory=list)
    enhanced_genres: list[str] = Field(default_factory=list)
    sound_characteristics: AudioFeatureVector | None = None
    edm_weight: int | None = None
    version: str
    last_updated: datetime

    @property
    def block(self) -> EnhancementBlock:
        return EnhancementBlock(
            status=EnhancementStatus.COMPLETED,
            version=self.version,
            last_updated=self.last_updated,
        )

    def apply_to(self, event: Event) -> Event:
        """Return *event* with this enhancement's derived fields set."""
        return event.model_copy(
            update={
                "is_music_event": self.is_music_event,
                "artist_metadata": list(self.artist_metadata),
                "enhanced_genres": list(self.enhanced_genres),
                "sound_characteristics": self.sound_characteristics,
                "edm_weight": self.edm_weight,
                "enhancement": self.block,
            }
        )


class EnhancementSummary(BaseModel):
    """Result of one ``enhance_all`` run."""

    model_config = ConfigDict(frozen=True)

    processed: int = 0
    enhanced: int = 0
    skipped: int = 0
    errors: int = 0
    batches: int = 0
    version: str = ""
    duration_seconds: float = 0.0
    failed_event_ids: list[str] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Share of processed events that did not error, as a percentage."""
        if self.processed == 0:
            return 100.0
        return round((self.processed - self.errors) / self.processed * 100.0, 1)

    @property
    def events_per_second(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return round(self.processed / self.duration_seconds, 2)

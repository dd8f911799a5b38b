"""Pydantic request/response schemas for the sonarEDM API.

Defines the public contract for the REST endpoints: scoring,
classification, artist resolution, batch enhancement and health.

# ─── HOW SCHEMAS WORK (Junior Developer Guide) ────────────────────────
#
# These Pydantic models define the *shape* of every HTTP request body
# and response body in the API.  FastAPI uses them for:
#
#   1. **Validation** — Incoming JSON is automatically validated against
#      the schema.  Invalid requests get a 422 error with details.
#   2. **Serialization** — Outgoing objects are automatically converted
#      to JSON matching the schema (via response_model=...).
#   3. **Documentation** — FastAPI generates OpenAPI/Swagger docs from
#      these schemas automatically (visible at /docs).
#
# Convention: Request schemas end with "Request", response schemas
# end with "Response".  Domain models (Event, TasteProfile, ScoreResult)
# are embedded directly rather than mirrored field by field.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from src.models.enhancement import EnhancementSummary
from src.models.event import Event
from src.models.scoring import ScoreResult
from src.models.taste_profile import TasteProfile


class ScoreEventRequest(BaseModel):
    """An event to score for one user.

    When ``profile`` is supplied it is used as-is; otherwise the user's
    profile is built (or read from cache) from listening history.
    Pipeline-derived fields on ``event`` are discarded, and an inline
    profile must belong to ``user_id``.
    """

    event: Event
    user_id: str = Field(..., min_length=1, max_length=200)
    profile: TasteProfile | None = None

    @field_validator("event")
    @classmethod
    def drop_derived_fields(cls, value: Event) -> Event:
        return value.without_derived()

    @model_validator(mode="after")
    def check_profile_owner(self) -> ScoreEventRequest:
        if self.profile is not None and self.profile.user_id != self.user_id:
            raise ValueError("profile.user_id must match user_id")
        return self


class ScoreEventResponse(BaseModel):
    """Personalized score plus whether the generic default profile was used."""

    result: ScoreResult
    profile_is_default: bool = False


class ClassifyEventRequest(BaseModel):
    event: Event


class ClassifyEventResponse(BaseModel):
    """Music/non-music decision with keyword evidence."""

    event_id: str
    is_music_event: bool
    music_keyword_count: int
    non_music_keyword_count: int
    music_keywords: list[str] = Field(default_factory=list)
    non_music_keywords: list[str] = Field(default_factory=list)
    general_admission_override: bool = False


class ResolveArtistsRequest(BaseModel):
    """Free text to resolve: an event title or an artist string."""

    text: str = Field(..., min_length=1, max_length=500)


class ResolvedArtistResponse(BaseModel):
    """One resolved (or unverified) artist identity."""

    name: str
    query: str
    verified: bool
    source: str = Field(description="exact, fuzzy:<score> or title_extraction")
    confidence: float = Field(ge=0.0, le=1.0)
    confidence_level: str
    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    alternatives: list[str] = Field(default_factory=list)


class ResolveArtistsResponse(BaseModel):
    text: str
    artists: list[ResolvedArtistResponse] = Field(default_factory=list)


class EnhanceRequest(BaseModel):
    """Parameters for one batch enhancement run; omitted values use settings."""

    batch_size: int | None = Field(default=None, ge=1, le=500)
    limit: int | None = Field(default=None, ge=0)


class EnhanceResponse(BaseModel):
    """Summary of a batch enhancement run."""

    summary: EnhancementSummary
    success_rate: float
    events_per_second: float


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    code: str | None = None
    detail: str | None = None

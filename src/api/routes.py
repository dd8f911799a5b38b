"""FastAPI API routes for sonarEDM.

Provides REST endpoints for personalized scoring, music/non-music
classification, artist resolution, batch enhancement and health.  Service
dependencies are resolved from ``app.state`` via FastAPI's ``Depends``
using the ``Annotated`` pattern.

# ─── API ROUTE MAP (Junior Developer Guide) ───────────────────────────
#
# Endpoint                     Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/events/score         POST    Score one event for one user
# /api/v1/events/classify      POST    Music/non-music decision + evidence
# /api/v1/artists/resolve      POST    Title/artist text → identities
# /api/v1/enhance              POST    Run one batch enhancement pass
# /api/v1/health               GET     Health + audio stats + store counts
#
# DEPENDENCY INJECTION PATTERN:
# Each route function declares its dependencies as type-annotated params.
# FastAPI resolves these via Depends() which calls helper functions that
# read from app.state (populated at startup by main.py's build_services).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request

from src.api.schemas import (
    ClassifyEventRequest,
    ClassifyEventResponse,
    EnhanceRequest,
    EnhanceResponse,
    ErrorResponse,
    HealthResponse,
    ResolveArtistsRequest,
    ResolveArtistsResponse,
    ResolvedArtistResponse,
    ScoreEventRequest,
    ScoreEventResponse,
)
from src.interfaces.event_store_provider import IEventStoreProvider
from src.pipeline.batch_enhancer import BatchEnhancer
from src.services.artist_resolver import ArtistResolver
from src.services.audio_feature_service import AudioFeatureService
from src.services.music_event_classifier import MusicEventClassifier
from src.services.scoring_engine import ScoringEngine
from src.services.taste_profile_service import TasteProfileService
from src.utils.confidence import confidence_to_level
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# All routes in this file are prefixed with /api/v1.
router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"
_DEFAULT_BATCH_SIZE = 25


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------
# Each helper reads one component from app.state.  The Annotated aliases
# below are what route signatures use.


def _get_scoring_engine(request: Request) -> ScoringEngine:
    return request.app.state.scoring_engine


def _get_profile_service(request: Request) -> TasteProfileService:
    return request.app.state.profile_service


def _get_classifier(request: Request) -> MusicEventClassifier:
    return request.app.state.classifier


def _get_resolver(request: Request) -> ArtistResolver:
    return request.app.state.resolver


def _get_batch_enhancer(request: Request) -> BatchEnhancer:
    return request.app.state.batch_enhancer


ScoringEngineDep = Annotated[ScoringEngine, Depends(_get_scoring_engine)]
ProfileServiceDep = Annotated[TasteProfileService, Depends(_get_profile_service)]
ClassifierDep = Annotated[MusicEventClassifier, Depends(_get_classifier)]
ResolverDep = Annotated[ArtistResolver, Depends(_get_resolver)]
BatchEnhancerDep = Annotated[BatchEnhancer, Depends(_get_batch_enhancer)]


# ---------------------------------------------------------------------------
# Scoring & classification
# ---------------------------------------------------------------------------


@router.post(
    "/events/score",
    response_model=ScoreEventResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Score one event for one user",
)
async def score_event(
    body: ScoreEventRequest,
    engine: ScoringEngineDep,
    profiles: ProfileServiceDep,
) -> ScoreEventResponse:
    """Return the personalized match score and its breakdown."""
    profile = body.profile or await profiles.build_profile(body.user_id)
    result = await engine.score(body.event, profile)
    return ScoreEventResponse(result=result, profile_is_default=profile.is_default)


@router.post(
    "/events/classify",
    response_model=ClassifyEventResponse,
    summary="Classify an event as music or non-music",
)
async def classify_event(body: ClassifyEventRequest, classifier: ClassifierDep) -> ClassifyEventResponse:
    classification = classifier.classify(body.event)
    return ClassifyEventResponse(
        event_id=body.event.id,
        is_music_event=classification.is_music_event,
        music_keyword_count=len(classification.music_keywords),
        non_music_keyword_count=len(classification.non_music_keywords),
        music_keywords=classification.music_keywords,
        non_music_keywords=classification.non_music_keywords,
        general_admission_override=classification.general_admission_override,
    )


# ---------------------------------------------------------------------------
# Artist resolution
# ---------------------------------------------------------------------------


@router.post(
    "/artists/resolve",
    response_model=ResolveArtistsResponse,
    summary="Resolve an event title or artist string to catalog identities",
)
async def resolve_artists(body: ResolveArtistsRequest, resolver: ResolverDep) -> ResolveArtistsResponse:
    identities = await resolver.resolve(body.text)
    return ResolveArtistsResponse(
        text=body.text,
        artists=[
            ResolvedArtistResponse(
                name=identity.name,
                query=identity.query,
                verified=identity.verified,
                source=identity.source_tag,
                confidence=identity.confidence,
                confidence_level=confidence_to_level(identity.confidence).value,
                genres=identity.genres,
                popularity=identity.popularity,
                alternatives=identity.alternatives,
            )
            for identity in identities
        ],
    )


# ---------------------------------------------------------------------------
# Batch enhancement
# ---------------------------------------------------------------------------


@router.post(
    "/enhance",
    response_model=EnhanceResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Run one batch enhancement pass over pending events",
)
async def run_enhancement(
    body: EnhanceRequest,
    request: Request,
    enhancer: BatchEnhancerDep,
) -> EnhanceResponse:
    """Enhance pending events and return the run summary.

    Runs inline: the response is sent once every pending event (up to
    ``limit``) has been processed.
    """
    batch_size = body.batch_size or getattr(request.app.state, "default_batch_size", _DEFAULT_BATCH_SIZE)
    summary = await enhancer.enhance_all(batch_size=batch_size, limit=body.limit)
    return EnhanceResponse(
        summary=summary,
        success_rate=summary.success_rate,
        events_per_second=summary.events_per_second,
    )


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return health, audio-provider statistics and event-store counts.

    ``degraded`` means the app still answers but the live audio tier is
    off or the event store could not be read.
    """
    providers: dict[str, Any] = {}
    degraded = False

    audio_service: AudioFeatureService | None = getattr(request.app.state, "audio_service", None)
    if audio_service is not None:
        stats = audio_service.get_stats()
        providers["audio"] = stats.model_dump(mode="json")
        degraded = degraded or stats.live_disabled

    store: IEventStoreProvider | None = getattr(request.app.state, "event_store", None)
    if store is not None:
        try:
            providers["events"] = await store.count_by_status()
        except Exception as exc:
            _logger.warning("health_event_store_failed", error=str(exc))
            providers["events"] = None
            degraded = True

    providers["configured_upstreams"] = list(getattr(request.app.state, "configured_upstreams", []))

    return HealthResponse(
        status="degraded" if degraded else "healthy",
        version=_VERSION,
        providers=providers,
    )

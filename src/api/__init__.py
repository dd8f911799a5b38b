"""sonarEDM API layer — routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    ClassifyEventResponse,
    EnhanceResponse,
    ErrorResponse,
    HealthResponse,
    ResolveArtistsResponse,
    ScoreEventRequest,
    ScoreEventResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ClassifyEventResponse",
    "EnhanceResponse",
    "ErrorResponse",
    "HealthResponse",
    "ResolveArtistsResponse",
    "ScoreEventRequest",
    "ScoreEventResponse",
]

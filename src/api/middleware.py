"""API middleware: CORS, request-scoped logging context and error mapping.

# ─── MIDDLEWARE STACK (Junior Developer Guide) ─────────────────────────
#
# create_app() in main.py adds, in this order:
#
#     app.add_middleware(ErrorHandlingMiddleware)   # inner
#     app.add_middleware(RequestLoggingMiddleware)  # outer
#
# Starlette runs the last-added middleware first, so a request passes
# RequestLogging → ErrorHandling → route, and the response comes back the
# other way.  That ordering matters twice:
#
#   - RequestLogging binds ``request_id`` into structlog's contextvars
#     before anything else runs, so every log line emitted while serving
#     the request (services, providers, the error handler) carries it.
#   - RequestLogging records the status *after* ErrorHandling has turned
#     a SonarEDMError into its mapped 4xx/5xx JSON response.
#
# Error code → status:
#
#     NOT_CONFIGURED     503   the feature has no credentials in this deployment
#     AUTH_ERROR         502   upstream rejected our credentials
#     NOT_FOUND          404
#     RATE_LIMITED       429
#     TIMEOUT            504
#     UPSTREAM_ERROR     502
#     INVALID_RESPONSE   502   upstream answered with an unexpected shape
#     (anything else)    500   pipeline / enhancement failures
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import SonarEDMError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_BY_CODE: dict[str, int] = {
    "NOT_CONFIGURED": 503,
    "AUTH_ERROR": 502,
    "NOT_FOUND": 404,
    "RATE_LIMITED": 429,
    "TIMEOUT": 504,
    "UPSTREAM_ERROR": 502,
    "INVALID_RESPONSE": 502,
}


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow browser clients from *allowed_origins* (every origin when omitted).

    Credentials are only allowed for an explicit origin list; browsers
    reject a wildcard origin combined with credentials anyway.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one ``http_request`` line for it.

    A caller-supplied ``X-Request-ID`` is reused so ids line up across
    services; otherwise a short random id is generated.  The id is echoed
    back in the response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        status_code = 500

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                _logger.info(
                    "http_request",
                    method=request.method,
                    path=request.url.path,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )


def error_status(exc: SonarEDMError) -> int:
    return _STATUS_BY_CODE.get(exc.code, 500)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``SonarEDMError`` into an :class:`ErrorResponse` with a mapped status.

    Only the error class, code and message reach the client.  Anything
    that is not a SonarEDMError is left to FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except SonarEDMError as exc:
            status = error_status(exc)
            log = _logger.warning if status < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                code=exc.code,
                status=status,
                provider=exc.provider_name,
                error=exc.message,
                path=request.url.path,
            )
            body = ErrorResponse(error=type(exc).__name__, code=exc.code, detail=exc.message)
            return JSONResponse(status_code=status, content=body.model_dump())

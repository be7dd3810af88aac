"""
api/main.py -- FastAPI application entry point for ReliefMap.

Exposes the credential authority and the resource directory over HTTP. The
map front end (rendering, search box, geocoding) is a separate client that
only speaks this contract.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers (with credentials) for the front end
  2. log_requests   -- one log line per request with latency

Lifespan creates the process-wide store handles exactly once before the
first request and disposes them on shutdown. Handlers reach them through
app.state; nothing opens a connection pool per request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.resources import router as resources_router
from auth.store import UserStore
from core.config import get_settings
from core.errors import InternalError, ReliefMapError
from directory.store import ResourceStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("reliefmap.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the store handles for the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown, so teardown mirrors startup even when a request failed.
    """
    logger.info("ReliefMap API starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.resource_store = ResourceStore(_settings.database_url)
    logger.info("Stores initialized")

    yield

    app.state.resource_store.close()
    app.state.user_store.close()
    logger.info("ReliefMap API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ReliefMap API",
    description="Directory of verified disaster-relief locations: shelters, food, medical posts and safe zones.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(resources_router, tags=["Resources"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error leaves as {"error": "<message>"} so the front end parses one
# shape regardless of status code.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(ReliefMapError)
async def reliefmap_error_handler(request: Request, exc: ReliefMapError) -> JSONResponse:
    """Map a typed core failure onto its stable status code.

    InternalError is replaced by its generic message whatever it carried;
    the chained cause was already logged where it was raised.
    """
    if isinstance(exc, InternalError):
        return _error(exc.status_code, InternalError.default_message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or a body of the wrong shape is the client's fault: 400."""
    return _error(400, "Invalid request body.")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, InternalError.default_message)


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)

"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from streamrelay.infrastructure.config import AppConfig
from streamrelay.interfaces.app_state import AppState
from streamrelay.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

# Answered on every OPTIONS request, preflight or not.
_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Range",
}

_USAGE = {
    "movie": "GET /movie/:tmdb_id",
    "tv": "GET /tv/:tmdb_id/:season/:episode",
    "stream": "GET /stream?url=<stream_url>&referer=<referer>",
}


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, resolver pipeline, stream proxy) are created in
    lifespan().
    """
    app = FastAPI(
        title="streamrelay",
        description="Resolves TMDB titles to playable streams and proxies playback",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Range"],
    )

    @app.middleware("http")
    async def answer_options(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=_PREFLIGHT_HEADERS)
        return await call_next(request)

    from streamrelay.interfaces.api.streams import router as streams_router

    app.include_router(streams_router)

    @app.get("/")
    async def health() -> dict[str, str | dict[str, str]]:
        """Liveness probe plus a usage summary."""
        return {"status": "ok", "usage": _USAGE}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app

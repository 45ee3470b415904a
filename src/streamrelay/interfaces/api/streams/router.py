"""Stream resolution and playback proxy endpoints."""

from __future__ import annotations

import re
from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from streamrelay.domain.entities.media import MediaRequest, ProxyRequest, ResolvedMedia
from streamrelay.domain.exceptions import (
    ConfigError,
    IdentifierNotFoundError,
    NoStreamsFoundError,
    ProxyError,
    ResolutionError,
)
from streamrelay.infrastructure.stream.proxy import build_proxy_path
from streamrelay.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["streams"])

# Leading integer, like JS parseInt ("3", " 03", "2x" -> 2).
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _error(message: str, *, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def _parse_int(value: str) -> int | None:
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def _stream_entries(resolved: ResolvedMedia) -> list[dict[str, str]]:
    return [
        {
            "url": build_proxy_path(c),
            "originalUrl": c.media_url,
            "referer": c.referer,
        }
        for c in resolved.candidates
    ]


async def _resolve(request: Request, media: MediaRequest) -> ResolvedMedia | JSONResponse:
    """Run the resolution use case, mapping failures to JSON error responses."""
    state = cast(AppState, request.app.state)
    try:
        return await state.resolve_streams_uc.execute(media)

    except (IdentifierNotFoundError, NoStreamsFoundError) as e:
        log.info("resolve_not_found", tmdb_id=media.tmdb_id, reason=str(e))
        return _error(str(e), status_code=404)

    except (ConfigError, ResolutionError) as e:
        log.error("resolve_failed", tmdb_id=media.tmdb_id, error=str(e))
        return _error(str(e), status_code=500)

    except Exception as e:
        log.exception("resolve_unhandled_error", tmdb_id=media.tmdb_id)
        return _error(str(e) or type(e).__name__, status_code=500)


@router.get("/movie/{tmdb_id}")
async def resolve_movie(request: Request, tmdb_id: str) -> Response:
    """Resolve playable streams for a movie by TMDB ID."""
    tmdb_id = tmdb_id.strip()
    if not tmdb_id:
        return _error("TMDB ID required", status_code=400)

    result = await _resolve(request, MediaRequest.movie(tmdb_id))
    if isinstance(result, JSONResponse):
        return result

    payload: dict[str, Any] = {
        "tmdb_id": tmdb_id,
        "imdb_id": result.imdb_id,
        "type": "movie",
        "streams": _stream_entries(result),
    }
    return JSONResponse(content=payload)


@router.get("/tv/{tmdb_id}/{season}/{episode}")
async def resolve_episode(
    request: Request,
    tmdb_id: str,
    season: str,
    episode: str,
) -> Response:
    """Resolve playable streams for one TV episode by TMDB ID."""
    tmdb_id = tmdb_id.strip()
    season_no = _parse_int(season)
    episode_no = _parse_int(episode)
    if not tmdb_id or season_no is None or episode_no is None:
        return _error("TMDB ID, season, and episode required", status_code=400)

    result = await _resolve(
        request, MediaRequest.tv_episode(tmdb_id, season_no, episode_no)
    )
    if isinstance(result, JSONResponse):
        return result

    payload: dict[str, Any] = {
        "tmdb_id": tmdb_id,
        "imdb_id": result.imdb_id,
        "season": season_no,
        "episode": episode_no,
        "type": "tv",
        "streams": _stream_entries(result),
    }
    return JSONResponse(content=payload)


@router.get("/stream")
async def proxy_stream(
    request: Request,
    url: str | None = Query(default=None, description="Resolved media URL"),
    referer: str | None = Query(default=None, description="Referer to send upstream"),
) -> Response:
    """Relay a resolved media URL with spoofed headers and Range passthrough.

    No host check is made on *url*: any URL can be proxied.
    """
    if not url:
        return _error("Stream URL required", status_code=400)

    state = cast(AppState, request.app.state)
    proxy_request = ProxyRequest(
        media_url=url,
        referer=referer or "",
        range_header=request.headers.get("range", ""),
    )

    try:
        upstream = await state.stream_proxy.open(proxy_request)
    except ProxyError as e:
        log.error("stream_proxy_failed", url=url, error=str(e))
        return _error(str(e), status_code=500)
    except Exception as e:
        log.exception("stream_proxy_unhandled_error", url=url)
        return _error(str(e) or type(e).__name__, status_code=500)

    return StreamingResponse(
        upstream.body,
        status_code=upstream.status_code,
        headers=upstream.headers,
    )

"""Stream proxy: replays a resolved media URL with spoofed headers.

The media CDN only serves requests carrying the redirect site's
``Referer`` and a browser ``User-Agent``, which players cannot set
themselves.  The proxy issues the request server-side, passes the client's
``Range`` header through and relays the body chunk by chunk without
buffering it.
"""

from __future__ import annotations

import random
from collections.abc import AsyncIterator
from dataclasses import dataclass
from urllib.parse import quote

import httpx
import structlog

from streamrelay.domain.entities.media import ProxyRequest, StreamCandidate
from streamrelay.domain.exceptions import ProxyError
from streamrelay.infrastructure.common.user_agents import (
    ACCEPT_LANGUAGE,
    pick_user_agent,
)

log = structlog.get_logger(__name__)

# Upstream response headers relayed to the client when present.
_FORWARDED_HEADERS = (
    "content-length",
    "content-range",
    "accept-ranges",
    "content-encoding",
)

_DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Relayed with its Content-Range instead of raising ProxyError.
_RANGE_NOT_SATISFIABLE = 416

# JS encodeURIComponent leaves these unescaped.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_proxy_path(candidate: StreamCandidate, route: str = "/stream") -> str:
    """Self-referencing proxy path for a resolved candidate.

    >>> build_proxy_path(StreamCandidate("https://cdn.example/a b.mp4", "https://r.example"))
    '/stream?url=https%3A%2F%2Fcdn.example%2Fa%20b.mp4&referer=https%3A%2F%2Fr.example'
    """
    url = quote(candidate.media_url, safe=_URI_COMPONENT_SAFE)
    referer = quote(candidate.referer, safe=_URI_COMPONENT_SAFE)
    return f"{route}?url={url}&referer={referer}"


@dataclass(frozen=True)
class UpstreamStream:
    """An open upstream media response ready to be relayed."""

    status_code: int
    headers: dict[str, str]
    body: AsyncIterator[bytes]


class StreamProxy:
    """Opens upstream media streams with spoofed playback headers."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        default_referer: str,
        chunk_size: int = 65_536,
        rng: random.Random | None = None,
    ) -> None:
        self._http = http_client
        self._default_referer = default_referer
        self._chunk_size = chunk_size
        self._rng = rng

    def upstream_headers(self, request: ProxyRequest) -> dict[str, str]:
        """Headers sent upstream; an empty Range asks for the full resource."""
        return {
            "User-Agent": pick_user_agent(self._rng),
            "Referer": request.referer or self._default_referer,
            "Accept": "*/*",
            "Accept-Language": ACCEPT_LANGUAGE,
            "Range": request.range_header or "",
        }

    async def open(self, request: ProxyRequest) -> UpstreamStream:
        """Open the upstream response and return a lazily-read body.

        The upstream connection is released when the body iterator is
        exhausted, fails, or is closed early (client disconnect).

        Raises:
            ProxyError: Connection failure or upstream error status. A 416
                is relayed as-is with its Content-Range.
        """
        log.info(
            "stream_proxy_open",
            url=request.media_url,
            referer=request.referer or self._default_referer,
            range=request.range_header or None,
        )
        try:
            resp = await self._http.send(
                self._http.build_request(
                    "GET",
                    request.media_url,
                    headers=self.upstream_headers(request),
                ),
                stream=True,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            log.warning("stream_proxy_upstream_failed", url=request.media_url, error=str(e))
            raise ProxyError(f"Upstream request failed: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # Malformed URLs are rejected before any I/O.
            raise ProxyError(f"Invalid stream URL: {e}") from e

        if resp.status_code >= 400 and resp.status_code != _RANGE_NOT_SATISFIABLE:
            await resp.aclose()
            log.warning(
                "stream_proxy_upstream_status",
                url=request.media_url,
                status=resp.status_code,
            )
            raise ProxyError(f"Upstream responded with HTTP {resp.status_code}")

        headers = {
            "Content-Type": resp.headers.get("content-type", _DEFAULT_CONTENT_TYPE),
            "Access-Control-Allow-Origin": "*",
        }
        for name in _FORWARDED_HEADERS:
            value = resp.headers.get(name)
            if value:
                headers[name.title()] = value

        async def _iter() -> AsyncIterator[bytes]:
            sent = 0
            try:
                # Raw bytes: Content-Length/Encoding are forwarded verbatim.
                async for chunk in resp.aiter_raw(chunk_size=self._chunk_size):
                    sent += len(chunk)
                    yield chunk
            except httpx.HTTPError:
                log.warning(
                    "stream_proxy_interrupted",
                    url=request.media_url,
                    bytes_sent=sent,
                    exc_info=True,
                )
                raise
            finally:
                await resp.aclose()
                log.debug("stream_proxy_closed", url=request.media_url, bytes_sent=sent)

        return UpstreamStream(
            status_code=resp.status_code,
            headers=headers,
            body=_iter(),
        )

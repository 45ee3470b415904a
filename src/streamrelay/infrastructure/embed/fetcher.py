"""Embed page fetcher: builds the embed URL and derives the redirect domain.

URLs:
    {embed_base_url}/movie/{imdb_id}
    {embed_base_url}/tv/{imdb_id}/{season}-{episode}

The page embeds the player as an iframe on a separate redirect domain
(historically ``cloudnestra.com``).  That domain hosts the ``/rcp`` and
``/prorcp`` hops, so it is read from the first ``src="..."`` attribute.
"""

from __future__ import annotations

import random

import httpx
import structlog

from streamrelay.domain.entities.media import BaseDomain, EmbedPage, MediaRequest
from streamrelay.infrastructure.common.extractors import (
    IFRAME_SRC_RE,
    extract_first_match,
)
from streamrelay.infrastructure.common.user_agents import browser_headers

log = structlog.get_logger(__name__)


def build_embed_url(base_url: str, imdb_id: str, request: MediaRequest) -> str:
    """Build the embed page URL for a movie or a TV episode."""
    base = base_url.rstrip("/")
    if request.kind == "tv":
        return f"{base}/tv/{imdb_id}/{request.season}-{request.episode}"
    return f"{base}/movie/{imdb_id}"


def derive_base_domain(html: str, fallback: BaseDomain) -> BaseDomain:
    """Return the redirect domain from the first ``src="..."`` in *html*.

    Protocol-relative sources (``//host/path``) are treated as https.
    Falls back to *fallback* when there is no source or it has no host.
    """
    src = extract_first_match(html, IFRAME_SRC_RE)
    if not src:
        return fallback
    return BaseDomain.from_url(src) or fallback


class EmbedFetcher:
    """Fetches embed pages with spoofed iframe headers.

    Implements ``EmbedFetcherPort`` from domain.ports.embed.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str,
        fallback_base_domain: str,
        rng: random.Random | None = None,
    ) -> None:
        fallback = BaseDomain.from_url(fallback_base_domain)
        if fallback is None:
            raise ValueError(f"invalid fallback base domain: {fallback_base_domain!r}")
        self._http = http_client
        self._base_url = base_url
        self._fallback = fallback
        self._rng = rng

    async def fetch(self, imdb_id: str, request: MediaRequest) -> EmbedPage:
        """Fetch the embed page. Transport errors propagate (httpx.HTTPError)."""
        url = build_embed_url(self._base_url, imdb_id, request)
        log.info("embed_fetch", url=url, kind=request.kind)

        resp = await self._http.get(url, headers=browser_headers(self._rng))
        html = resp.text

        base_domain = derive_base_domain(html, self._fallback)
        if base_domain is self._fallback:
            log.debug("embed_base_domain_fallback", url=url, base=base_domain.origin)
        else:
            log.debug("embed_base_domain", url=url, base=base_domain.origin)

        return EmbedPage(url=url, html=html, base_domain=base_domain)

"""Stream resolution use case.

TMDB ID -> IMDb ID -> embed page -> server tokens
-> rcp/prorcp chain -> StreamCandidate list.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from streamrelay.domain.entities.media import (
    MediaRequest,
    ResolvedMedia,
    successful_candidates,
)
from streamrelay.domain.exceptions import (
    IdentifierNotFoundError,
    NoServersFoundError,
    NoStreamsFoundError,
)
from streamrelay.domain.ports.embed import ChainResolverPort, EmbedFetcherPort
from streamrelay.domain.ports.metadata import MetadataClientPort

log = structlog.get_logger(__name__)


class ResolveStreamsUseCase:
    """Resolves a movie or TV episode into every playable stream candidate.

    Flow:
        1. Translate the TMDB ID into an IMDb ID (absent -> not found)
        2. Fetch the embed page and derive the redirect domain
        3. Extract server tokens from the page markup
        4. Resolve each token through the redirect chain (best effort)
        5. Fail only when no token produced a candidate
    """

    def __init__(
        self,
        *,
        metadata: MetadataClientPort,
        embeds: EmbedFetcherPort,
        chain: ChainResolverPort,
        extract_servers: Callable[[str], list[str]],
    ) -> None:
        """Initialize use case with dependencies.

        Args:
            metadata: TMDB -> IMDb lookup.
            embeds: Embed page fetcher.
            chain: Redirect-chain resolver.
            extract_servers: ``html -> list[str]``; raises NoServersFoundError.
        """
        self._metadata = metadata
        self._embeds = embeds
        self._chain = chain
        self._extract_servers = extract_servers

    async def execute(self, request: MediaRequest) -> ResolvedMedia:
        """Run the pipeline for *request*.

        Raises:
            IdentifierNotFoundError: TMDB has no IMDb cross-reference.
            NoStreamsFoundError: No servers listed, or every token failed.
            ConfigError / ResolutionError: From the TMDB lookup.
        """
        log.info(
            "resolve_streams_request",
            tmdb_id=request.tmdb_id,
            kind=request.kind,
            season=request.season,
            episode=request.episode,
        )

        imdb_id = await self._metadata.resolve_imdb_id(request.tmdb_id, request.kind)
        if not imdb_id:
            raise IdentifierNotFoundError("IMDB ID not found for this TMDB ID")

        page = await self._embeds.fetch(imdb_id, request)

        try:
            tokens = self._extract_servers(page.html)
        except NoServersFoundError as e:
            log.warning("resolve_streams_no_servers", url=page.url, imdb_id=imdb_id)
            raise NoStreamsFoundError("No streams found") from e

        outcomes = await self._chain.resolve_all(tokens, page.base_domain)
        candidates = successful_candidates(outcomes)
        if not candidates:
            log.warning(
                "resolve_streams_none_resolved",
                imdb_id=imdb_id,
                tokens=len(tokens),
            )
            raise NoStreamsFoundError("No streams found")

        log.info(
            "resolve_streams_response",
            tmdb_id=request.tmdb_id,
            imdb_id=imdb_id,
            tokens=len(tokens),
            streams=len(candidates),
        )
        return ResolvedMedia(request=request, imdb_id=imdb_id, candidates=candidates)

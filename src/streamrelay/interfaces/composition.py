"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from streamrelay.application.use_cases.resolve_streams import ResolveStreamsUseCase
from streamrelay.infrastructure.config.schema import AppConfig
from streamrelay.infrastructure.embed.chain import ChainResolver
from streamrelay.infrastructure.embed.fetcher import EmbedFetcher
from streamrelay.infrastructure.embed.servers import extract_servers
from streamrelay.infrastructure.stream.proxy import StreamProxy
from streamrelay.infrastructure.tmdb.client import HttpxTmdbClient
from streamrelay.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def wire_services(state: AppState, config: AppConfig) -> None:
    """Build the resolution pipeline and stream proxy on top of state.http_client."""
    tmdb = HttpxTmdbClient(
        api_key=config.tmdb_api_key,
        http_client=state.http_client,
        base_url=config.tmdb_base_url,
    )
    if not config.tmdb_api_key:
        log.warning("tmdb_api_key_missing", effect="lookups will fail with 500")

    embeds = EmbedFetcher(
        http_client=state.http_client,
        base_url=config.embed_base_url,
        fallback_base_domain=config.fallback_base_domain,
    )
    chain = ChainResolver(
        http_client=state.http_client,
        max_concurrency=config.chain_max_concurrency,
    )
    state.resolve_streams_uc = ResolveStreamsUseCase(
        metadata=tmdb,
        embeds=embeds,
        chain=chain,
        extract_servers=extract_servers,
    )
    state.stream_proxy = StreamProxy(
        http_client=state.http_client,
        default_referer=config.fallback_base_domain,
        chunk_size=config.proxy_chunk_size,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (shared by every outbound call)
        2. TMDB client, embed fetcher, chain resolver -> use case
        3. Stream proxy
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client. No default User-Agent, every call spoofs its own.
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        follow_redirects=True,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) + 3)
    wire_services(state, config)
    log.info(
        "app_startup_complete",
        embed_base_url=config.embed_base_url,
        chain_max_concurrency=config.chain_max_concurrency,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")
        log.info("app_shutdown_complete")

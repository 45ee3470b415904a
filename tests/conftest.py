"""Shared test fixtures for streamrelay test suite."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from streamrelay.domain.entities.media import (
    BaseDomain,
    EmbedPage,
    MediaRequest,
    StreamCandidate,
    TokenOutcome,
)

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def movie_request() -> MediaRequest:
    """Inception (TMDB 27205)."""
    return MediaRequest.movie("27205")


@pytest.fixture()
def episode_request() -> MediaRequest:
    """Breaking Bad (TMDB 1396) S01E03."""
    return MediaRequest.tv_episode("1396", 1, 3)


@pytest.fixture()
def base_domain() -> BaseDomain:
    return BaseDomain(scheme="https", host="cloudnestra.com")


@pytest.fixture()
def embed_page(base_domain: BaseDomain) -> EmbedPage:
    return EmbedPage(
        url="https://vidsrc.xyz/embed/movie/tt1375666",
        html='<div class="serversList"><div class="server" data-hash="abc123"></div></div>',
        base_domain=base_domain,
    )


@pytest.fixture()
def stream_candidate() -> StreamCandidate:
    return StreamCandidate(
        media_url="https://cdn.example.com/hls/master.m3u8",
        referer="https://cloudnestra.com",
    )


@pytest.fixture()
def seeded_rng() -> random.Random:
    """Deterministic random source for header spoofing."""
    return random.Random(42)


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_metadata() -> AsyncMock:
    """Mock MetadataClientPort resolving to Inception's IMDb ID."""
    metadata = AsyncMock()
    metadata.resolve_imdb_id = AsyncMock(return_value="tt1375666")
    return metadata


@pytest.fixture()
def mock_embeds(embed_page: EmbedPage) -> AsyncMock:
    """Mock EmbedFetcherPort."""
    embeds = AsyncMock()
    embeds.fetch = AsyncMock(return_value=embed_page)
    return embeds


@pytest.fixture()
def mock_chain(stream_candidate: StreamCandidate) -> AsyncMock:
    """Mock ChainResolverPort returning one successful outcome."""
    chain = AsyncMock()
    chain.resolve_all = AsyncMock(
        return_value=[TokenOutcome(token="abc123", candidate=stream_candidate)]
    )
    return chain


@pytest.fixture()
def mock_extract_servers() -> MagicMock:
    """Synchronous ``html -> tokens`` extractor."""
    return MagicMock(return_value=["abc123"])

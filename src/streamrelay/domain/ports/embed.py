"""Ports for the embed site: page fetch and redirect-chain resolution."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from streamrelay.domain.entities.media import (
    BaseDomain,
    EmbedPage,
    MediaRequest,
    TokenOutcome,
)


@runtime_checkable
class EmbedFetcherPort(Protocol):
    """Fetches the embed page for an IMDb ID and derives its redirect domain."""

    async def fetch(self, imdb_id: str, request: MediaRequest) -> EmbedPage:
        ...


@runtime_checkable
class ChainResolverPort(Protocol):
    """Resolves server tokens through the rcp -> prorcp redirect chain."""

    async def resolve_all(
        self, tokens: list[str], base_domain: BaseDomain
    ) -> list[TokenOutcome]:
        """Return one outcome per token, in token order. Never raises per token."""
        ...

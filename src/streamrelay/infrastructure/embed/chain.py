"""Redirect-chain resolver: server token -> rcp -> prorcp -> media file URL.

Flow per token:
  1. {base}/rcp/{token}       -> script with ``src: '/prorcp/<path>'``
  2. {base}/prorcp/{path}     -> player setup with ``file: '<media url>'``

Each token is resolved in isolation: a failed fetch or a missing pattern
turns into a failed ``TokenOutcome`` and never aborts the other tokens.
"""

from __future__ import annotations

import asyncio
import random

import httpx
import structlog

from streamrelay.domain.entities.media import (
    BaseDomain,
    StreamCandidate,
    TokenOutcome,
)
from streamrelay.infrastructure.common.extractors import (
    PRORCP_FILE_RE,
    RCP_SRC_RE,
    extract_first_match,
    strip_prorcp_prefix,
)
from streamrelay.infrastructure.common.user_agents import browser_headers

log = structlog.get_logger(__name__)


class ChainStepError(Exception):
    """A hop returned no usable redirect target."""


class ChainResolver:
    """Resolves server tokens through the rcp/prorcp redirect chain.

    Implements ``ChainResolverPort`` from domain.ports.embed.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        max_concurrency: int = 4,
        rng: random.Random | None = None,
    ) -> None:
        self._http = http_client
        self._max_concurrency = max(1, max_concurrency)
        self._rng = rng

    async def _get_text(self, url: str) -> str:
        resp = await self._http.get(url, headers=browser_headers(self._rng))
        return resp.text

    async def resolve_token(self, token: str, base_domain: BaseDomain) -> StreamCandidate:
        """Follow both hops for one token.

        Raises:
            ChainStepError: A hop did not contain the expected pattern.
            httpx.HTTPError: A hop could not be fetched.
        """
        origin = base_domain.origin

        rcp_text = await self._get_text(f"{origin}/rcp/{token}")
        rcp_src = extract_first_match(rcp_text, RCP_SRC_RE)
        if rcp_src is None:
            raise ChainStepError("no prorcp source in rcp page")

        prorcp_path = strip_prorcp_prefix(rcp_src)
        prorcp_text = await self._get_text(f"{origin}/prorcp/{prorcp_path}")
        media_url = extract_first_match(prorcp_text, PRORCP_FILE_RE)
        if not media_url:
            raise ChainStepError("no file url in prorcp page")

        return StreamCandidate(media_url=media_url, referer=origin)

    async def _outcome(
        self,
        token: str,
        base_domain: BaseDomain,
        semaphore: asyncio.Semaphore,
    ) -> TokenOutcome:
        async with semaphore:
            try:
                candidate = await self.resolve_token(token, base_domain)
            except (ChainStepError, httpx.HTTPError) as e:
                log.warning("chain_token_failed", token=token, error=str(e))
                return TokenOutcome(token=token, error=str(e))
            except Exception as e:  # noqa: BLE001
                log.warning("chain_token_failed", token=token, exc_info=True)
                return TokenOutcome(token=token, error=str(e) or type(e).__name__)

        log.debug("chain_token_resolved", token=token, media_url=candidate.media_url)
        return TokenOutcome(token=token, candidate=candidate)

    async def resolve_all(
        self, tokens: list[str], base_domain: BaseDomain
    ) -> list[TokenOutcome]:
        """Resolve every token with bounded fan-out; outcomes follow token order."""
        if not tokens:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(
            *(self._outcome(t, base_domain, semaphore) for t in tokens)
        )

        resolved = sum(1 for o in outcomes if o.ok)
        log.info(
            "chain_resolved",
            base=base_domain.origin,
            tokens=len(tokens),
            resolved=resolved,
            failed=len(tokens) - resolved,
        )
        return list(outcomes)

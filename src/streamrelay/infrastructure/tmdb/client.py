"""TMDB API client: TMDB ID -> IMDb ID translation over async httpx."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from streamrelay.domain.entities.media import MediaKind
from streamrelay.domain.exceptions import ConfigError, ResolutionError

log = structlog.get_logger(__name__)

_DEFAULT_BASE_URL = "https://api.themoviedb.org/3"


class HttpxTmdbClient:
    """Async TMDB client using httpx.

    Implements ``MetadataClientPort`` from domain.ports.metadata.

    The primary title payload only carries ``external_ids`` when requested
    via ``append_to_response``; otherwise the dedicated
    ``/external_ids`` sub-resource is queried as a second step.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        http_client: httpx.AsyncClient,
        base_url: str = _DEFAULT_BASE_URL,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _endpoint(self, tmdb_id: str, kind: MediaKind) -> str:
        segment = "tv" if kind == "tv" else "movie"
        return f"{self._base_url}/{segment}/{tmdb_id}"

    async def _get(self, url: str) -> dict[str, Any] | None:
        """GET a TMDB resource. Returns parsed JSON, or None on 404.

        Raises ResolutionError on transport errors, other error statuses
        and non-object JSON bodies.
        """
        try:
            resp = await self._http.get(url, params={"api_key": self._api_key})
        except httpx.HTTPError as e:
            log.warning("tmdb_network_error", url=url, exc_info=True)
            raise ResolutionError(
                f"Failed to convert TMDB ID to IMDB ID: {e}"
            ) from e

        if resp.status_code == 404:
            log.debug("tmdb_resource_not_found", url=url)
            return None
        if resp.status_code == 401:
            log.error("tmdb_api_key_invalid", status=401)
        if resp.is_error:
            raise ResolutionError(
                f"Failed to convert TMDB ID to IMDB ID: HTTP {resp.status_code}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            log.warning("tmdb_invalid_json", url=url)
            raise ResolutionError(
                f"Failed to convert TMDB ID to IMDB ID: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ResolutionError(
                "Failed to convert TMDB ID to IMDB ID: unexpected response shape"
            )
        return data

    @staticmethod
    def _imdb_id_from(payload: dict[str, Any] | None) -> str | None:
        if not payload:
            return None
        imdb_id = payload.get("imdb_id")
        return imdb_id or None

    # ------------------------------------------------------------------
    # Public API (MetadataClientPort)
    # ------------------------------------------------------------------

    async def resolve_imdb_id(self, tmdb_id: str, kind: MediaKind) -> str | None:
        """Translate a TMDB ID into its IMDb ID.

        Args:
            tmdb_id: TMDB numeric ID (as given in the request path).
            kind: "movie" or "tv".

        Returns:
            IMDb ID (``tt...``) or None when TMDB has no cross-reference.

        Raises:
            ConfigError: No API key configured.
            ResolutionError: Upstream lookup failed.
        """
        if not self._api_key:
            raise ConfigError("TMDB_API_KEY environment variable is not set")

        endpoint = self._endpoint(tmdb_id, kind)
        log.info("tmdb_lookup", tmdb_id=tmdb_id, kind=kind)

        data = await self._get(endpoint)
        if data is None:
            return None

        external_ids = data.get("external_ids")
        if isinstance(external_ids, dict):
            imdb_id = self._imdb_id_from(external_ids)
        else:
            log.debug("tmdb_external_ids_fallback", tmdb_id=tmdb_id, kind=kind)
            imdb_id = self._imdb_id_from(await self._get(f"{endpoint}/external_ids"))

        if imdb_id is None:
            log.info("tmdb_no_imdb_id", tmdb_id=tmdb_id, kind=kind)
        else:
            log.debug("tmdb_imdb_id_resolved", tmdb_id=tmdb_id, imdb_id=imdb_id)
        return imdb_id

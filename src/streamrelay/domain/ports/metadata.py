"""Port for catalog-id -> cross-reference-id lookups."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from streamrelay.domain.entities.media import MediaKind


@runtime_checkable
class MetadataClientPort(Protocol):
    """Async interface for TMDB -> IMDb identifier translation."""

    async def resolve_imdb_id(self, tmdb_id: str, kind: MediaKind) -> str | None:
        """Return the IMDb ID for a TMDB title.

        Returns None when TMDB has no cross-reference (not-found, not fatal).
        Raises ResolutionError / ConfigError on lookup failure.
        """
        ...

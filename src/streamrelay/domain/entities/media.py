"""Domain entities for media resolution and stream proxying.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

MediaKind = Literal["movie", "tv"]


@dataclass(frozen=True)
class MediaRequest:
    """Immutable pipeline input: a TMDB title, optionally narrowed to an episode.

    ``season``/``episode`` must be set for ``kind="tv"`` and must be absent
    for movies.
    """

    tmdb_id: str
    kind: MediaKind
    season: int | None = None
    episode: int | None = None

    def __post_init__(self) -> None:
        has_episode = self.season is not None and self.episode is not None
        if self.kind == "tv" and not has_episode:
            raise ValueError("tv requests require season and episode")
        if self.kind == "movie" and (
            self.season is not None or self.episode is not None
        ):
            raise ValueError("movie requests must not carry season/episode")

    @classmethod
    def movie(cls, tmdb_id: str) -> MediaRequest:
        return cls(tmdb_id=tmdb_id, kind="movie")

    @classmethod
    def tv_episode(cls, tmdb_id: str, season: int, episode: int) -> MediaRequest:
        return cls(tmdb_id=tmdb_id, kind="tv", season=season, episode=episode)


@dataclass(frozen=True)
class BaseDomain:
    """Scheme + host of the redirect site (e.g. ``https://cloudnestra.com``)."""

    scheme: str
    host: str

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.host}"

    @classmethod
    def from_url(cls, url: str) -> BaseDomain | None:
        """Parse an absolute or protocol-relative URL into a BaseDomain.

        >>> BaseDomain.from_url("//cloudnestra.com/rcp/abc").origin
        'https://cloudnestra.com'

        Returns None when the URL has no host.
        """
        if url.startswith("//"):
            url = f"https:{url}"
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return None
        return cls(scheme=parsed.scheme, host=parsed.netloc)


@dataclass(frozen=True)
class EmbedPage:
    """Fetched embed page plus the redirect domain derived from it."""

    url: str
    html: str
    base_domain: BaseDomain


@dataclass(frozen=True)
class StreamCandidate:
    """A directly fetchable media URL and the referer it must be fetched with."""

    media_url: str
    referer: str


@dataclass(frozen=True)
class TokenOutcome:
    """Result of resolving one server token: a candidate or the failure."""

    token: str
    candidate: StreamCandidate | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.candidate is not None


@dataclass(frozen=True)
class ProxyRequest:
    """Per-playback upstream request built from a previously returned candidate."""

    media_url: str
    referer: str
    range_header: str = ""


@dataclass(frozen=True)
class ResolvedMedia:
    """Use case output: the request, its cross-reference id and all candidates."""

    request: MediaRequest
    imdb_id: str
    candidates: list[StreamCandidate] = field(default_factory=list)


def successful_candidates(outcomes: list[TokenOutcome]) -> list[StreamCandidate]:
    """Keep the candidates of successful outcomes, preserving order."""
    return [o.candidate for o in outcomes if o.candidate is not None]

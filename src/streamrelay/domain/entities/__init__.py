from .media import (
    BaseDomain,
    EmbedPage,
    MediaKind,
    MediaRequest,
    ProxyRequest,
    ResolvedMedia,
    StreamCandidate,
    TokenOutcome,
    successful_candidates,
)

__all__ = [
    "BaseDomain",
    "EmbedPage",
    "MediaKind",
    "MediaRequest",
    "ProxyRequest",
    "ResolvedMedia",
    "StreamCandidate",
    "TokenOutcome",
    "successful_candidates",
]

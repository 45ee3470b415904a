"""Resolution and proxy exceptions."""

from __future__ import annotations


class StreamRelayError(Exception):
    """Base class for all resolution and proxy errors."""


class ConfigError(StreamRelayError):
    """Raised when a required setting (e.g. the TMDB API key) is missing."""


class ResolutionError(StreamRelayError):
    """Raised when the TMDB -> IMDb lookup fails (network, status, bad JSON)."""


class IdentifierNotFoundError(StreamRelayError):
    """Raised when TMDB legitimately has no IMDb cross-reference for a title."""


class NoServersFoundError(StreamRelayError):
    """Raised when the embed page lists no playback servers."""


class NoStreamsFoundError(StreamRelayError):
    """Raised when no server token resolved through the redirect chain."""


class ProxyError(StreamRelayError):
    """Raised when the upstream media fetch fails."""

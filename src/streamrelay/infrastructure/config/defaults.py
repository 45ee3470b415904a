"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "streamrelay",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "tmdb": {
        "api_key": None,
        "base_url": "https://api.themoviedb.org/3",
    },
    "embed": {
        "base_url": "https://vidsrc.xyz/embed",
        "fallback_base_domain": "https://cloudnestra.com",
        "chain_max_concurrency": 4,
    },
    "proxy": {
        "chunk_size": 65_536,
    },
}

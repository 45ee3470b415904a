"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

import httpx
from starlette.datastructures import State

from streamrelay.application.use_cases.resolve_streams import ResolveStreamsUseCase
from streamrelay.infrastructure.config import AppConfig
from streamrelay.infrastructure.stream.proxy import StreamProxy


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Application services
    resolve_streams_uc: ResolveStreamsUseCase
    stream_proxy: StreamProxy

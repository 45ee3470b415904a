"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _strip_trailing_slash(value: str) -> str:
    return value.rstrip("/")


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/tmdb/embed/proxy).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="streamrelay", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout for every outbound fetch.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # TMDB (YAML section: tmdb.*)
    tmdb_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "tmdb_api_key",
            AliasPath("tmdb", "api_key"),
        ),
        description="TMDB API key. Missing key fails lookups, not startup.",
    )
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        validation_alias=AliasChoices(
            "tmdb_base_url",
            AliasPath("tmdb", "base_url"),
        ),
        description="TMDB API root.",
    )

    # Embed site (YAML section: embed.*)
    embed_base_url: str = Field(
        default="https://vidsrc.xyz/embed",
        validation_alias=AliasChoices(
            "embed_base_url",
            AliasPath("embed", "base_url"),
        ),
        description="Embed page root; /movie/{imdb} and /tv/{imdb}/{s}-{e} are appended.",
    )
    fallback_base_domain: str = Field(
        default="https://cloudnestra.com",
        validation_alias=AliasChoices(
            "fallback_base_domain",
            AliasPath("embed", "fallback_base_domain"),
        ),
        description="Redirect domain used when the embed page has no iframe src.",
    )
    chain_max_concurrency: int = Field(
        default=4,
        validation_alias=AliasChoices(
            "chain_max_concurrency",
            AliasPath("embed", "chain_max_concurrency"),
        ),
        description="Max server tokens resolved in parallel (1 = sequential).",
    )

    # Stream proxy (YAML section: proxy.*)
    proxy_chunk_size: int = Field(
        default=65_536,
        validation_alias=AliasChoices(
            "proxy_chunk_size",
            AliasPath("proxy", "chunk_size"),
        ),
        description="Chunk size (bytes) when relaying upstream media.",
    )

    @field_validator("tmdb_base_url", "embed_base_url", "fallback_base_domain")
    @classmethod
    def _validate_urls(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got: {v!r}")
        return _strip_trailing_slash(v)

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("chain_max_concurrency", "proxy_chunk_size")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.

        The API key is masked.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {"timeout_seconds": self.http_timeout_seconds},
            "logging": {"level": self.log_level, "format": self.log_format},
            "tmdb": {
                "api_key": "***" if self.tmdb_api_key else None,
                "base_url": self.tmdb_base_url,
            },
            "embed": {
                "base_url": self.embed_base_url,
                "fallback_base_domain": self.fallback_base_domain,
                "chain_max_concurrency": self.chain_max_concurrency,
            },
            "proxy": {"chunk_size": self.proxy_chunk_size},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read STREAMRELAY_* variables, converts
    them to a dict of set values and merges that over YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - STREAMRELAY_ENVIRONMENT
    - STREAMRELAY_HTTP_TIMEOUT_SECONDS
    - STREAMRELAY_LOG_LEVEL
    - STREAMRELAY_EMBED_BASE_URL
    - TMDB_API_KEY (also STREAMRELAY_TMDB_API_KEY)
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMRELAY_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    tmdb_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("STREAMRELAY_TMDB_API_KEY", "TMDB_API_KEY"),
    )
    tmdb_base_url: Optional[str] = None

    embed_base_url: Optional[str] = None
    fallback_base_domain: Optional[str] = None
    chain_max_concurrency: Optional[int] = None

    proxy_chunk_size: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)

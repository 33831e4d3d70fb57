"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the
default transport and the persister.

Usage:
    from actorflow.config import TransportSettings, PersisterSettings

    # Load from environment variables (ACTORFLOW_HTTP_*, ACTORFLOW_PERSIST_*)
    http = TransportSettings()

    # Or override with explicit values
    http = TransportSettings(base_url="https://api.example.com", timeout=5.0)
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for HttpxTransport and request epics.

    Attributes:
        base_url: Prefix for relative request URLs.
        timeout: Default request timeout in seconds.
        headers: Headers sent with every request.
        default_content_type: Injected when a call names no content type.
        max_attempts: Transport-level attempts for network failures (1 = no retry).
        backoff: Delay strategy between attempts.
        base_delay: Base delay in seconds for backoff calculation.

    Environment Variables:
        ACTORFLOW_HTTP_BASE_URL
        ACTORFLOW_HTTP_TIMEOUT
        ACTORFLOW_HTTP_HEADERS (JSON object)
        ACTORFLOW_HTTP_DEFAULT_CONTENT_TYPE
        ACTORFLOW_HTTP_MAX_ATTEMPTS
        ACTORFLOW_HTTP_BACKOFF
        ACTORFLOW_HTTP_BASE_DELAY
    """

    model_config = SettingsConfigDict(
        env_prefix="ACTORFLOW_HTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = ""
    timeout: float = 30.0
    headers: dict[str, str] = {}
    default_content_type: str = "application/json"
    max_attempts: int = 1
    backoff: Literal["none", "linear", "exponential"] = "none"
    base_delay: float = 0.1


class PersisterSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the key-value persister.

    Attributes:
        namespace: Prefix applied to every stored key.
        default_ttl_seconds: Lifetime of entries saved without an explicit ttl.

    Environment Variables:
        ACTORFLOW_PERSIST_NAMESPACE
        ACTORFLOW_PERSIST_DEFAULT_TTL_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="ACTORFLOW_PERSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    namespace: str = ""
    default_ttl_seconds: int = 24 * 3600

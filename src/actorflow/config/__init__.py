"""Configuration module using Pydantic Settings.

Provides typed configuration for the transport and persister with
environment variable support.

Usage:
    from actorflow.config import TransportSettings, PersisterSettings

    settings = TransportSettings(base_url="https://api.example.com")
    persist = PersisterSettings(default_ttl_seconds=600)
"""

from actorflow.config.settings import PersisterSettings, TransportSettings

__all__ = [
    "TransportSettings",
    "PersisterSettings",
]

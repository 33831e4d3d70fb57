"""Persistence collaborator: expiring, selective key-value persistence of state."""

from actorflow.persistence.memory import InMemoryStore
from actorflow.persistence.models import (
    PERSISTED_KEYS,
    HydrateResult,
    KeyOptions,
    PersistResult,
    StoredValue,
)
from actorflow.persistence.persister import Persister
from actorflow.persistence.protocol import KeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "Persister",
    "KeyOptions",
    "StoredValue",
    "HydrateResult",
    "PersistResult",
    "PERSISTED_KEYS",
]

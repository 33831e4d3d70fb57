"""Selective, expiring persistence of state-container keys.

The state declares which of its keys persist under the ``$$persistedKeys``
entry. ``sync`` is called with every new state; it writes keys whose value
changed (by identity) and deletes keys that left the state. ``hydrate``
reads everything back on startup.

Usage:
    persister = Persister(InMemoryStore(), PersisterSettings(default_ttl_seconds=600))

    state = {"$$persistedKeys": {"session": {"expires_in": 3600}}, "session": {...}}
    result = await persister.sync(state)

    restored = await persister.hydrate()
    initial_state = restored.data
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from actorflow.config import PersisterSettings
from actorflow.persistence.models import (
    PERSISTED_KEYS,
    HydrateResult,
    KeyOptions,
    PersistResult,
    StoredValue,
    normalize_key_options,
)
from actorflow.persistence.protocol import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Persister:
    """Expiring key-value persistence over a KeyValueStore.

    Single store operations (save/load/remove/clear) raise store errors.
    Batch operations (hydrate/sync) collect them into their result instead.

    Args:
        store: Backend holding the envelopes.
        settings: Namespace and default ttl.
        clock: Returns the current time in seconds.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: PersisterSettings | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._store = store
        self._settings = settings or PersisterSettings()
        self._clock = clock
        self._key_options: dict[str, KeyOptions] = {}
        self._previous: Mapping[str, Any] = {}

    @property
    def key_options(self) -> dict[str, KeyOptions]:
        return dict(self._key_options)

    def _store_key(self, key: str) -> str:
        namespace = self._settings.namespace
        return f"{namespace}:{key}" if namespace else key

    async def save(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds`` (default from settings)."""
        if key != PERSISTED_KEYS:
            self._key_options[key] = KeyOptions(expires_in=ttl_seconds)

        ttl = ttl_seconds or self._settings.default_ttl_seconds
        envelope = StoredValue(values=value, expired_at=self._clock() + ttl)
        await self._store.set_item(self._store_key(key), envelope.to_dict())

    async def load(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or None if absent or expired."""
        envelope = StoredValue.from_dict(await self._store.get_item(self._store_key(key)))
        if envelope is None or not envelope.is_alive(self._clock()):
            return None
        return envelope.values

    async def remove(self, key: str) -> None:
        self._key_options.pop(key, None)
        await self._store.remove_item(self._store_key(key))

    async def clear(self) -> None:
        """Delete every entry this persister owns.

        Without a namespace the whole store is cleared. With one, only keys
        carrying its prefix are removed so persisters sharing the store keep
        their entries.
        """
        self._key_options.clear()
        self._previous = {}
        namespace = self._settings.namespace
        if not namespace:
            await self._store.clear()
            return
        prefix = f"{namespace}:"
        owned = [key for key in await self._store.keys() if key.startswith(prefix)]
        await asyncio.gather(*(self._store.remove_item(key) for key in owned))

    async def hydrate(self) -> HydrateResult:
        """Load every persisted key that has not expired.

        Returns:
            Live values plus per-key errors. An unreadable index is reported
            under the ``$$persistedKeys`` key.
        """
        result = HydrateResult()
        try:
            index = await self.load(PERSISTED_KEYS)
            self._key_options = normalize_key_options(index)
        except Exception as exc:
            logger.warning("Cannot read persisted key index: %s", exc)
            result.errors[PERSISTED_KEYS] = exc
            return result

        keys = list(self._key_options)
        outcomes = await asyncio.gather(*(self.load(key) for key in keys), return_exceptions=True)
        for key, outcome in zip(keys, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.warning("Cannot hydrate %r: %s", key, outcome)
                result.errors[key] = outcome
            elif outcome is not None:
                result.data[key] = outcome
        return result

    async def sync(self, state: Mapping[str, Any]) -> PersistResult:
        """Persist the difference between ``state`` and the previously synced state.

        Args:
            state: Next state. Its ``$$persistedKeys`` entry selects the keys
                to persist and their options.

        Returns:
            Keys saved and removed, plus per-key errors.
        """
        self._key_options = normalize_key_options(state.get(PERSISTED_KEYS))
        previous, self._previous = self._previous, dict(state)

        changed: dict[str, Any] = {}
        removed: list[str] = []
        for key in self._key_options:
            if key not in state:
                removed.append(key)
            elif previous.get(key) is not state[key]:
                changed[key] = state[key]

        result = PersistResult()
        operations: dict[str, Awaitable[None]] = {}
        if changed:
            index = {key: options.to_dict() for key, options in self._key_options.items()}
            operations[PERSISTED_KEYS] = self.save(PERSISTED_KEYS, index)
            for key, value in changed.items():
                operations[key] = self.save(key, value, self._key_options[key].expires_in)
        for key in removed:
            operations[key] = self._store.remove_item(self._store_key(key))

        if not operations:
            return result

        outcomes = await asyncio.gather(*operations.values(), return_exceptions=True)
        for key, outcome in zip(operations, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.warning("Cannot persist %r: %s", key, outcome)
                result.errors[key] = outcome
            elif key in changed:
                result.saved.append(key)
            elif key != PERSISTED_KEYS:
                result.removed.append(key)
        return result

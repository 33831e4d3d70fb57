"""Key-value store protocol for swappable persistence backends.

Usage:
    store = InMemoryStore()
    persister = Persister(store)
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Async key-value backend. Values must survive a JSON round trip."""

    async def get_item(self, key: str) -> Any | None:
        """Return the stored value, or None if the key is unknown."""
        ...

    async def set_item(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""
        ...

    async def remove_item(self, key: str) -> None:
        """Delete key. No-op if absent."""
        ...

    async def keys(self) -> list[str]:
        """Return every stored key."""
        ...

    async def clear(self) -> None:
        """Delete every key."""
        ...

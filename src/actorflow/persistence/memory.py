"""In-memory key-value store (default backend, also used in tests)."""

from __future__ import annotations

import copy
from typing import Any


class InMemoryStore:
    """Dict-backed KeyValueStore. Values are deep-copied on the way in and out."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    async def get_item(self, key: str) -> Any | None:
        if key not in self._items:
            return None
        return copy.deepcopy(self._items[key])

    async def set_item(self, key: str, value: Any) -> None:
        self._items[key] = copy.deepcopy(value)

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def clear(self) -> None:
        self._items.clear()

    async def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

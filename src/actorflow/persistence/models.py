"""Persistence data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

PERSISTED_KEYS = "$$persistedKeys"
"""State key (and store key) holding the per-key persistence options."""


@dataclass(frozen=True, slots=True)
class KeyOptions:
    """How one state key is persisted.

    Attributes:
        expires_in: Lifetime in seconds (None = persister default).
    """

    expires_in: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"expires_in": self.expires_in}

    @classmethod
    def from_value(cls, value: Any) -> KeyOptions:
        """Accept KeyOptions, a ``{"expires_in": n}`` mapping, a bare int or None."""
        if isinstance(value, KeyOptions):
            return value
        if isinstance(value, Mapping):
            return cls(expires_in=value.get("expires_in"))
        if value is None or isinstance(value, int):
            return cls(expires_in=value)
        raise TypeError(f"Invalid persistence options: {value!r}")


def normalize_key_options(raw: Mapping[str, Any] | None) -> dict[str, KeyOptions]:
    if not raw:
        return {}
    return {key: KeyOptions.from_value(value) for key, value in raw.items()}


@dataclass(slots=True)
class StoredValue:
    """Envelope written to the store for every persisted key."""

    values: Any
    expired_at: float

    def is_alive(self, now: float) -> bool:
        return self.expired_at >= now

    def to_dict(self) -> dict[str, Any]:
        return {"values": self.values, "expired_at": self.expired_at}

    @classmethod
    def from_dict(cls, data: Any) -> StoredValue | None:
        """Parse an envelope, returning None for anything malformed."""
        if not isinstance(data, Mapping) or "expired_at" not in data:
            return None
        try:
            expired_at = float(data["expired_at"])
        except (TypeError, ValueError):
            return None
        return cls(values=data.get("values"), expired_at=expired_at)


@dataclass(slots=True)
class HydrateResult:
    """Outcome of ``Persister.hydrate``.

    Attributes:
        data: Live values by key.
        errors: Store failures by key; these keys are missing from ``data``.
    """

    data: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class PersistResult:
    """Outcome of ``Persister.sync``.

    Attributes:
        saved: Keys written in this sync.
        removed: Keys deleted in this sync.
        errors: Store failures by key.
    """

    saved: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def is_empty(self) -> bool:
        return not self.saved and not self.removed and not self.errors

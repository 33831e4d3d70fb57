"""Cooperative cancellation: tokens and the uid-keyed registry."""

from actorflow.cancellation.registry import CancellationRegistry
from actorflow.cancellation.token import CancelToken

__all__ = [
    "CancelToken",
    "CancellationRegistry",
]

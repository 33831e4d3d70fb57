"""Core functionalities: stateless actor types and predicates.

Architecture Note:
    core/ contains pure, immutable value types with no runtime state.
    For stateful services, see cancellation/, transport/ and epic/.
"""

from actorflow.core.actor import (
    CancelRequest,
    Done,
    Failed,
    LifecycleActor,
    PreRequest,
    RequestActor,
    Started,
    is_cancel_request,
    is_pre_request,
    is_terminal,
)

__all__ = [
    # Actors
    "RequestActor",
    "LifecycleActor",
    "PreRequest",
    "Started",
    "Done",
    "Failed",
    "CancelRequest",
    # Predicates
    "is_pre_request",
    "is_cancel_request",
    "is_terminal",
]

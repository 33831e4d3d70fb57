"""Request actor functionality: lifecycle variants and filtering predicates."""

from actorflow.core.actor.models import (
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
    "RequestActor",
    "LifecycleActor",
    "PreRequest",
    "Started",
    "Done",
    "Failed",
    "CancelRequest",
    "is_pre_request",
    "is_cancel_request",
    "is_terminal",
]

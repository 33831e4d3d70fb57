"""Request actor variants.

A lineage is the ordered sequence ``PreRequest -> Started -> Done | Failed``
sharing one ``uid``. ``CancelRequest`` is an out-of-band control actor that
references another lineage by uid.

Usage:
    pre = PreRequest(uid="users", request_config=RequestConfig(url="/users"))
    started = pre.started(pre.request_config)
    done = pre.done(response)

    match actor:
        case PreRequest(uid=uid):
            ...
        case CancelRequest(parent_uid=parent):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeGuard

if TYPE_CHECKING:
    from actorflow.transport.errors import RequestError
    from actorflow.transport.models import RequestConfig, Response


@dataclass(frozen=True, slots=True)
class PreRequest:
    """Initial actor of a lineage: asks for a call to be issued."""

    uid: str
    request_config: RequestConfig

    def started(self, request_config: RequestConfig) -> Started:
        """Derive the ``Started`` actor of this lineage."""
        return Started(uid=self.uid, request_config=request_config)

    def done(self, response: Response) -> Done:
        """Derive the successful terminal actor of this lineage."""
        return Done(uid=self.uid, response=response)

    def failed(self, error: RequestError) -> Failed:
        """Derive the failed terminal actor of this lineage."""
        return Failed(uid=self.uid, error=error)

    def cancel(self) -> CancelRequest:
        """Build a control actor cancelling this lineage."""
        return CancelRequest(parent_uid=self.uid)


@dataclass(frozen=True, slots=True)
class Started:
    """Call accepted and handed to the transport."""

    uid: str
    request_config: RequestConfig


@dataclass(frozen=True, slots=True)
class Done:
    """Terminal success."""

    uid: str
    response: Response


@dataclass(frozen=True, slots=True)
class Failed:
    """Terminal failure: network, HTTP status or cancellation."""

    uid: str
    error: RequestError

    @property
    def cancelled(self) -> bool:
        """True when the call was aborted by request rather than by the server/network."""
        return self.error.cancelled


@dataclass(frozen=True, slots=True)
class CancelRequest:
    """Control actor revoking the in-flight call of ``parent_uid``.

    Never part of its parent's lineage and never emitted on the output stream.
    """

    parent_uid: str


RequestActor = PreRequest | Started | Done | Failed | CancelRequest
"""Closed union of every actor the request subsystem understands."""

LifecycleActor = Started | Done | Failed
"""Actors that appear on the epic's output stream."""


def is_pre_request(actor: Any) -> TypeGuard[PreRequest]:
    """Check whether ``actor`` asks for a call to be issued."""
    return isinstance(actor, PreRequest)


def is_cancel_request(actor: Any) -> TypeGuard[CancelRequest]:
    """Check whether ``actor`` asks for a call to be cancelled."""
    return isinstance(actor, CancelRequest)


def is_terminal(actor: Any) -> bool:
    """Check whether ``actor`` ends its lineage."""
    return isinstance(actor, Done | Failed)

"""Transport error hierarchy.

Every failed call surfaces as a RequestError subclass so consumers of
``Failed`` actors can branch on one type. ``cancelled`` is the marker that
separates "aborted by request" from server/network errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from actorflow.transport.models import RequestConfig, Response


class RequestError(Exception):
    """Base class for failures of a dispatched call."""

    cancelled: bool = False

    def __init__(
        self,
        message: str,
        config: RequestConfig | None = None,
        response: Response | None = None,
    ) -> None:
        super().__init__(message)
        self.config = config
        self.response = response


class NetworkError(RequestError):
    """The request never produced a response (connect, read, timeout...)."""


class HTTPStatusError(RequestError):
    """A response arrived but its status failed validation."""

    @property
    def status(self) -> int | None:
        return self.response.status if self.response is not None else None


class RequestCancelledError(RequestError):
    """The call was revoked through its cancel token before it settled."""

    cancelled = True

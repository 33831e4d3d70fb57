"""Transport protocol for swappable HTTP clients.

The request epic only needs something that can issue a configured call,
expose interceptor chains and honor ``config.cancel_token``.

Usage:
    transport = HttpxTransport.from_settings(TransportSettings(base_url=...))
    epic = RequestEpic(transport)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from actorflow.transport.interceptors import InterceptorManager
from actorflow.transport.models import RequestConfig, Response


@runtime_checkable
class Transport(Protocol):
    """Issues calls on behalf of a request epic.

    Implementations must:
    - Run request interceptors before sending and response interceptors after.
    - Stop the call and raise RequestCancelledError when ``config.cancel_token``
      is cancelled while the call is in flight.
    - Raise RequestError subclasses for every failure.
    """

    @property
    def request_interceptors(self) -> InterceptorManager[RequestConfig]:
        """Chain applied to every outgoing configuration."""
        ...

    @property
    def response_interceptors(self) -> InterceptorManager[Response]:
        """Chain applied to every settled call (rejected handlers see errors)."""
        ...

    async def issue(self, config: RequestConfig) -> Response:
        """Issue the call described by ``config``.

        Args:
            config: Call configuration, possibly carrying a cancel token.

        Returns:
            Response whose status passed validation.

        Raises:
            RequestError: On network failure, invalid status or cancellation.
        """
        ...

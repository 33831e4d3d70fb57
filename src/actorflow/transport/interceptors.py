"""Request and response interceptor chains.

Interceptors are capability hooks run on every call issued by a transport,
e.g. header normalization or auth injection. A manager keeps them in
registration order; each handler may be sync or async.

Usage:
    def add_auth(request: InterceptorManager[RequestConfig],
                 response: InterceptorManager[Response]) -> None:
        request.use(lambda config: config.copy(headers={**config.headers, "Authorization": token}))

    epic = RequestEpic(transport, add_auth)
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from actorflow.transport.models import RequestConfig, Response

T = TypeVar("T")

Fulfilled = Callable[[T], T | Awaitable[T]]
Rejected = Callable[[BaseException], T | Awaitable[T]]


@dataclass(frozen=True, slots=True)
class Interceptor(Generic[T]):
    """A registered pair of handlers.

    Attributes:
        fulfilled: Transforms the value flowing through the chain.
        rejected: Sees the error raised upstream; may recover with a value or
            raise again. None lets the error pass through.
    """

    fulfilled: Fulfilled[T] | None
    rejected: Rejected[T] | None = None


class InterceptorManager(Generic[T]):
    """Ordered, ejectable interceptor chain for one value type."""

    def __init__(self) -> None:
        self._handlers: dict[int, Interceptor[T]] = {}
        self._next_id = 0

    def use(
        self,
        fulfilled: Fulfilled[T] | None = None,
        rejected: Rejected[T] | None = None,
    ) -> int:
        """Append an interceptor and return its handle for ``eject``."""
        handle_id = self._next_id
        self._next_id += 1
        self._handlers[handle_id] = Interceptor(fulfilled, rejected)
        return handle_id

    def eject(self, handle_id: int) -> bool:
        return self._handlers.pop(handle_id, None) is not None

    def clear(self) -> None:
        self._handlers.clear()

    def __iter__(self) -> Iterator[Interceptor[T]]:
        return iter(list(self._handlers.values()))

    def __len__(self) -> int:
        return len(self._handlers)

    async def run(self, value: T, error: BaseException | None = None) -> T:
        """Thread ``value`` (or ``error``) through the chain.

        Each step sees either the value produced by the previous step or the
        exception it raised. An error left unhandled at the end is re-raised.
        """
        for interceptor in self:
            handler = interceptor.fulfilled if error is None else interceptor.rejected
            if handler is None:
                continue
            try:
                result = handler(value) if error is None else handler(error)  # type: ignore[arg-type]
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                error = exc
                continue
            value, error = result, None

        if error is not None:
            raise error
        return value


RequestInterceptor = Callable[
    ["InterceptorManager[RequestConfig]", "InterceptorManager[Response]"], None
]
"""Signature: (request_manager, response_manager) -> None. Registers hooks once."""

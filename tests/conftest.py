"""Shared test fixtures."""

import asyncio
import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from actorflow import (
    CancellationRegistry,
    InterceptorManager,
    RequestCancelledError,
    RequestConfig,
    Response,
)


class ControlledTransport:
    """Transport whose calls stay pending until the test settles them.

    Honors cancel tokens by rejecting the pending call with
    RequestCancelledError, like a real transport would.
    """

    def __init__(self) -> None:
        self.calls: list[RequestConfig] = []
        self.futures: list[asyncio.Future[Response]] = []
        self._request_interceptors: InterceptorManager[RequestConfig] = InterceptorManager()
        self._response_interceptors: InterceptorManager[Response] = InterceptorManager()

    @property
    def request_interceptors(self) -> InterceptorManager[RequestConfig]:
        return self._request_interceptors

    @property
    def response_interceptors(self) -> InterceptorManager[Response]:
        return self._response_interceptors

    async def issue(self, config: RequestConfig) -> Response:
        config = await self._request_interceptors.run(config)
        future: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        self.calls.append(config)
        self.futures.append(future)

        def abort(reason: str) -> None:
            if not future.done():
                future.set_exception(RequestCancelledError(reason, config))

        if config.cancel_token is not None:
            config.cancel_token.on_cancel(abort)
        return await future

    def resolve(self, index: int, data: object = None, status: int = 200) -> None:
        self.futures[index].set_result(Response(status=status, data=data, config=self.calls[index]))

    def reject(self, index: int, error: BaseException) -> None:
        self.futures[index].set_exception(error)


async def _wait_for_calls(transport: ControlledTransport, count: int, rounds: int = 100) -> None:
    for _ in range(rounds):
        if len(transport.calls) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} transport calls, saw {len(transport.calls)}")


@pytest.fixture
def registry():
    """Fresh CancellationRegistry instance."""
    return CancellationRegistry()


@pytest.fixture
def transport():
    """Transport with manually settled calls."""
    return ControlledTransport()


@pytest.fixture
def wait_for_calls():
    """Yield to the event loop until the transport has seen N calls."""
    return _wait_for_calls


@pytest.fixture
def settle():
    """Let pending callbacks and tasks run."""

    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle

"""Request epic: the public entry point of the request subsystem.

An epic transforms an input stream of actors into an output stream of
lifecycle actors. Calling the epic splits the input by actor kind, feeds
PreRequest actors to the dispatch pipeline and CancelRequest actors to the
cancel pipeline, and yields the merged output.

Usage:
    epic = create_request_epic(TransportSettings(base_url="https://api.example.com"))

    actors = ActorStream()
    actors.emit(PreRequest(uid="users", request_config=RequestConfig(url="/users")))
    actors.close()

    async for actor in epic(actors):
        match actor:
            case Started(uid=uid):
                ...
            case Done(uid=uid, response=response):
                ...
            case Failed(uid=uid, error=error) if error.cancelled:
                ...
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx

from actorflow.cancellation import CancellationRegistry
from actorflow.config import TransportSettings
from actorflow.core.actor import CancelRequest, LifecycleActor, PreRequest, RequestActor
from actorflow.epic.pipelines import CancelPipeline, DispatchPipeline
from actorflow.transport.httpx_transport import HttpxTransport
from actorflow.transport.interceptors import RequestInterceptor
from actorflow.transport.models import RetryPolicy
from actorflow.transport.protocol import Transport

logger = logging.getLogger(__name__)

_WAKE = object()


class RequestEpic:
    """Multiplexes request lineages over one transport with uid-keyed cancellation.

    The cancellation registry is private to the epic instance and shared by
    every stream it runs.

    Args:
        transport: Transport all calls are issued on.
        *interceptors: Hooks receiving the transport's request and response
            interceptor managers, applied once at construction.
        settings: Source of the default content type.
        owns_transport: Whether ``aclose`` should close the transport.
    """

    def __init__(
        self,
        transport: Transport,
        *interceptors: RequestInterceptor,
        settings: TransportSettings | None = None,
        owns_transport: bool = False,
    ) -> None:
        self._transport = transport
        self._settings = settings or TransportSettings()
        self._owns_transport = owns_transport
        self._registry = CancellationRegistry()

        for interceptor in interceptors:
            interceptor(transport.request_interceptors, transport.response_interceptors)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def in_flight(self) -> frozenset[str]:
        """Uids currently holding a live cancel token."""
        return frozenset(self._registry.active())

    def is_in_flight(self, uid: str) -> bool:
        return uid in self._registry

    def __call__(self, actors: AsyncIterable[RequestActor | Any]) -> AsyncIterator[LifecycleActor]:
        return self.run(actors)

    async def run(self, actors: AsyncIterable[RequestActor | Any]) -> AsyncIterator[LifecycleActor]:
        """Consume ``actors`` and yield Started/Done/Failed actors.

        The output ends once the input is exhausted and every dispatched call
        has settled. Actors other than PreRequest and CancelRequest are
        ignored. Closing the output early cancels pending calls.

        Raises:
            Exception: Whatever the input stream raised, after pending calls
                were cancelled.
        """
        output: asyncio.Queue[Any] = asyncio.Queue()

        def wake() -> None:
            output.put_nowait(_WAKE)

        dispatch = DispatchPipeline(
            self._transport,
            self._registry,
            output.put_nowait,
            default_content_type=self._settings.default_content_type,
            on_settled=wake,
        )
        cancel = CancelPipeline(self._registry)

        async def route() -> None:
            async for actor in actors:
                match actor:
                    case PreRequest():
                        dispatch.accept(actor)
                    case CancelRequest():
                        cancel.accept(actor)
                    case _:
                        continue

        reader = asyncio.create_task(route(), name="request-epic:reader")
        reader.add_done_callback(lambda _task: wake())

        try:
            while True:
                item = await output.get()
                if item is not _WAKE:
                    yield item
                    continue
                if not reader.done():
                    continue
                if not reader.cancelled() and reader.exception() is not None:
                    raise reader.exception()  # type: ignore[misc]
                if dispatch.pending == 0:
                    # Nothing else can be produced; flush what settled meanwhile
                    while not output.empty():
                        item = output.get_nowait()
                        if item is not _WAKE:
                            yield item
                    break
        finally:
            if not reader.done():
                reader.cancel()
                await asyncio.gather(reader, return_exceptions=True)
            await dispatch.shutdown()

    async def aclose(self) -> None:
        """Close the transport if this epic created it."""
        if self._owns_transport:
            await self._transport.aclose()  # type: ignore[attr-defined]


def create_request_epic(
    settings: TransportSettings | None = None,
    *interceptors: RequestInterceptor,
    client: httpx.AsyncClient | None = None,
    retry_policy: RetryPolicy | None = None,
) -> RequestEpic:
    """Create an epic over a fresh HttpxTransport.

    Args:
        settings: Transport settings (base URL, timeout, headers, retry).
        *interceptors: Interceptor hooks shared by every call.
        client: Optional pre-built httpx client.
        retry_policy: Overrides the retry defaults from ``settings``.

    Returns:
        Epic owning its transport; call ``aclose`` when done.
    """
    settings = settings or TransportSettings()
    transport = HttpxTransport(client, settings=settings, retry_policy=retry_policy)
    return RequestEpic(transport, *interceptors, settings=settings, owns_transport=True)

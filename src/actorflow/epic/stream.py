"""Actor stream helpers.

ActorStream is a hot, push-based input stream: producers ``emit`` actors
while an epic iterates it. ``collect`` drains any async iterable.

Usage:
    actors = ActorStream()
    output = epic(actors)
    actors.emit(PreRequest(uid="u1", request_config=RequestConfig(url="/a")))
    actors.close()
    results = await collect(output)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")

_END = object()


class ActorStream(Generic[T]):
    """Unbounded async iterable fed by ``emit`` and terminated by ``close``."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, *actors: T) -> None:
        """Push actors onto the stream.

        Raises:
            RuntimeError: If the stream was closed.
        """
        if self._closed:
            raise RuntimeError("Cannot emit on a closed ActorStream")
        for actor in actors:
            self._queue.put_nowait(actor)

    def close(self) -> None:
        """End the stream once already-emitted actors are consumed. Idempotent."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_END)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        item = await self._queue.get()
        if item is _END:
            # Keep the sentinel so later iterations stop as well
            self._queue.put_nowait(_END)
            raise StopAsyncIteration
        return item  # type: ignore[return-value]


async def from_iterable(items: Iterable[T]) -> AsyncIterator[T]:
    """Wrap a finite iterable as an async stream."""
    for item in items:
        yield item


async def collect(stream: AsyncIterable[T]) -> list[T]:
    """Drain an async iterable into a list."""
    return [item async for item in stream]

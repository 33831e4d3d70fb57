"""Dispatch and cancel pipelines.

Both pipelines are fed by RequestEpic after it splits the input stream by
actor kind. The dispatch pipeline turns each PreRequest into one asyncio task
and pushes lifecycle actors onto the epic's output channel. The cancel
pipeline only has side effects on the shared registry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from actorflow.cancellation import CancellationRegistry, CancelToken
from actorflow.core.actor import CancelRequest, LifecycleActor, PreRequest
from actorflow.transport.errors import RequestCancelledError, RequestError
from actorflow.transport.models import RequestConfig, with_default_content_type
from actorflow.transport.protocol import Transport

logger = logging.getLogger(__name__)

Emit = Callable[[LifecycleActor], None]


class DispatchPipeline:
    """Issues one transport call per accepted PreRequest.

    Per lineage the pipeline emits ``Started`` synchronously on acceptance and
    exactly one of ``Done``/``Failed`` when the call settles, then clears the
    lineage's registry entry. Lineages interleave in settlement order.

    Args:
        transport: Shared transport every call is issued on.
        registry: Registry owned by the enclosing epic.
        emit: Pushes an actor onto the output channel. Must not suspend.
        default_content_type: Injected into calls naming no content type.
        on_settled: Called after each dispatch task has finished.
    """

    def __init__(
        self,
        transport: Transport,
        registry: CancellationRegistry,
        emit: Emit,
        default_content_type: str = "application/json",
        on_settled: Callable[[], None] | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._emit = emit
        self._default_content_type = default_content_type
        self._on_settled = on_settled
        self._tasks: dict[asyncio.Task[None], tuple[str, CancelToken]] = {}

    @property
    def pending(self) -> int:
        """Number of dispatched calls that have not settled yet."""
        return len(self._tasks)

    def build_call_config(self, actor: PreRequest) -> RequestConfig:
        """Copy the caller's configuration and apply the default content type."""
        return with_default_content_type(actor.request_config.copy(), self._default_content_type)

    def accept(self, actor: PreRequest) -> asyncio.Task[None]:
        """Register, emit ``Started`` and spawn the call for ``actor``."""
        config = self.build_call_config(actor)
        token = self._registry.register(actor.uid)
        config.cancel_token = token

        self._emit(actor.started(config))
        logger.debug("Dispatching %s %s as %r", config.method, config.url, actor.uid)

        task = asyncio.create_task(self._issue(actor, config, token), name=f"request:{actor.uid}")
        self._tasks[task] = (actor.uid, token)
        task.add_done_callback(self._settled)
        return task

    async def _issue(self, actor: PreRequest, config: RequestConfig, token: CancelToken) -> None:
        try:
            try:
                response = await self._transport.issue(config)
            except asyncio.CancelledError:
                # A transport may honor the token by cancelling its own future
                task = asyncio.current_task()
                if not token.cancelled or (task is not None and task.cancelling()):
                    raise
                revoked = RequestCancelledError(f"Request cancelled: {token.reason}", config)
                settled: LifecycleActor = actor.failed(revoked)
            except RequestError as exc:
                settled = actor.failed(exc)
            except Exception as exc:
                error = RequestError(f"Transport failed: {exc}", config)
                error.__cause__ = exc
                settled = actor.failed(error)
            else:
                settled = actor.done(response)

            logger.debug("Request %r settled as %s", actor.uid, type(settled).__name__)
            self._emit(settled)
        finally:
            self._registry.clear(actor.uid, token)

    def _settled(self, task: asyncio.Task[None]) -> None:
        self._tasks.pop(task, None)
        if self._on_settled is not None:
            self._on_settled()

    async def shutdown(self) -> None:
        """Cancel every in-flight call and drop their registry entries."""
        if not self._tasks:
            return
        lineages = list(self._tasks.items())
        for task, _ in lineages:
            task.cancel()
        await asyncio.gather(*(task for task, _ in lineages), return_exceptions=True)
        # Tasks cancelled before their first step never reached their own cleanup
        for _, (uid, token) in lineages:
            self._registry.clear(uid, token)


class CancelPipeline:
    """Revokes in-flight calls named by CancelRequest actors. Emits nothing."""

    def __init__(self, registry: CancellationRegistry) -> None:
        self._registry = registry

    def accept(self, actor: CancelRequest) -> bool:
        """Cancel ``actor.parent_uid`` if it is in flight.

        Returns:
            True if a live call was revoked. Its ``Failed`` actor follows
            asynchronously through the dispatch pipeline.
        """
        if self._registry.cancel(actor.parent_uid):
            return True
        logger.debug("No in-flight request %r to cancel", actor.parent_uid)
        return False

"""actorflow: actor-stream driven HTTP request dispatch with cooperative cancellation.

Usage:
    from actorflow import (
        ActorStream, CancelRequest, PreRequest, RequestConfig, TransportSettings, create_request_epic,
    )

    epic = create_request_epic(TransportSettings(base_url="https://api.example.com"))

    actors = ActorStream()
    actors.emit(PreRequest(uid="users", request_config=RequestConfig(url="/users")))
    actors.emit(CancelRequest(parent_uid="users"))
    actors.close()

    async for actor in epic(actors):
        print(actor)
"""

__version__ = "0.1.0"

# Cancellation
from actorflow.cancellation import CancellationRegistry, CancelToken

# Configuration
from actorflow.config import PersisterSettings, TransportSettings

# Core primitives
from actorflow.core import (
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

# Epic
from actorflow.epic import (
    ActorStream,
    CancelPipeline,
    DispatchPipeline,
    RequestEpic,
    collect,
    create_request_epic,
    from_iterable,
)

# Persistence
from actorflow.persistence import InMemoryStore, KeyValueStore, Persister

# Transport
from actorflow.transport import (
    HTTPStatusError,
    HttpxTransport,
    InterceptorManager,
    NetworkError,
    RequestCancelledError,
    RequestConfig,
    RequestError,
    RequestInterceptor,
    Response,
    RetryPolicy,
    Transport,
)

__all__ = [
    # Version
    "__version__",
    # Core
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
    # Cancellation
    "CancelToken",
    "CancellationRegistry",
    # Epic
    "RequestEpic",
    "create_request_epic",
    "DispatchPipeline",
    "CancelPipeline",
    "ActorStream",
    "collect",
    "from_iterable",
    # Transport
    "Transport",
    "HttpxTransport",
    "RequestConfig",
    "Response",
    "RetryPolicy",
    "InterceptorManager",
    "RequestInterceptor",
    "RequestError",
    "NetworkError",
    "HTTPStatusError",
    "RequestCancelledError",
    # Persistence
    "KeyValueStore",
    "InMemoryStore",
    "Persister",
    # Configuration
    "TransportSettings",
    "PersisterSettings",
]

"""Transport collaborator: protocol, call models, interceptors and the httpx adapter.

Usage:
    from actorflow.transport import HttpxTransport, RequestConfig, Transport

    transport: Transport = HttpxTransport()
"""

from actorflow.transport.errors import (
    HTTPStatusError,
    NetworkError,
    RequestCancelledError,
    RequestError,
)
from actorflow.transport.httpx_transport import HttpxTransport
from actorflow.transport.interceptors import (
    Interceptor,
    InterceptorManager,
    RequestInterceptor,
)
from actorflow.transport.models import (
    RequestConfig,
    Response,
    RetryPolicy,
    get_header,
    has_header,
    merge_headers,
    with_default_content_type,
)
from actorflow.transport.protocol import Transport
from actorflow.transport.serialization import serialize_params, transform_request

__all__ = [
    # Protocol
    "Transport",
    "HttpxTransport",
    # Models
    "RequestConfig",
    "Response",
    "RetryPolicy",
    "get_header",
    "has_header",
    "merge_headers",
    "with_default_content_type",
    # Interceptors
    "Interceptor",
    "InterceptorManager",
    "RequestInterceptor",
    # Encoding
    "serialize_params",
    "transform_request",
    # Errors
    "RequestError",
    "NetworkError",
    "HTTPStatusError",
    "RequestCancelledError",
]

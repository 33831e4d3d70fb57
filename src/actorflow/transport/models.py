"""Transport data models.

Defines the call configuration handed to a Transport and the response it
resolves with, plus case-insensitive header helpers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from actorflow.cancellation.token import CancelToken

ParamsSerializer = Callable[[Mapping[str, Any]], str]
"""Signature: (params) -> query string without the leading '?'"""

RequestTransform = Callable[[Any, dict[str, str]], str | bytes | None]
"""Signature: (data, headers) -> encoded body"""

StatusValidator = Callable[[int], bool]

CONTENT_TYPE = "Content-Type"


def default_validate_status(status: int) -> bool:
    return 200 <= status < 300


@dataclass(slots=True)
class RequestConfig:
    """Description of one outgoing call.

    Attributes:
        url: Absolute URL, or path relative to the transport's base URL.
        method: HTTP method.
        headers: Header mapping; content-type lookups ignore letter case.
        params: Query parameters, encoded by ``params_serializer``.
        data: Request body, encoded by ``transform_request``.
        params_serializer: Overrides the transport's query serializer.
        transform_request: Overrides the transport's body encoder.
        timeout: Per-call timeout in seconds (None = transport default).
        validate_status: Accepts a status code as success (default 2xx).
        cancel_token: Slot filled by the dispatch pipeline.
    """

    url: str = ""
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    data: Any = None
    params_serializer: ParamsSerializer | None = None
    transform_request: RequestTransform | None = None
    timeout: float | None = None
    validate_status: StatusValidator | None = None
    cancel_token: CancelToken | None = None

    def copy(self, **changes: Any) -> RequestConfig:
        """Shallow copy with its own headers dict."""
        changes.setdefault("headers", dict(self.headers))
        return replace(self, **changes)


@dataclass(slots=True)
class Response:
    """Settled transport call.

    Attributes:
        status: HTTP status code.
        data: Decoded body (parsed JSON when the response declares it).
        headers: Response headers.
        config: The configuration that produced this response.
        reason: Status reason phrase.
    """

    status: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    config: RequestConfig | None = None
    reason: str = ""


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Transport-level retry for calls that never got a response.

    Cancellation and HTTP status errors are never retried.
    """

    max_attempts: int = 1
    """Maximum attempts (1 = no retry). Default: no retry."""

    backoff: Literal["none", "linear", "exponential"] = "none"
    """Backoff strategy between retries."""

    base_delay: float = 0.1
    """Base delay in seconds for backoff calculation."""


def get_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Look a header up ignoring letter case."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    return bool(get_header(headers, name))


def merge_headers(*sources: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings left to right, later keys winning regardless of case."""
    merged: dict[str, str] = {}
    lowered: dict[str, str] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            previous = lowered.get(key.lower())
            if previous is not None:
                del merged[previous]
            merged[key] = value
            lowered[key.lower()] = key
    return merged


def with_default_content_type(config: RequestConfig, content_type: str) -> RequestConfig:
    """Return ``config`` unchanged if it names a content type, else a copy that does."""
    if has_header(config.headers, CONTENT_TYPE):
        return config
    # An empty content-type entry is replaced, not kept next to the default
    return config.copy(headers=merge_headers(config.headers, {CONTENT_TYPE: content_type}))

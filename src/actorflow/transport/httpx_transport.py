"""httpx adapter implementing the Transport protocol.

Usage:
    from actorflow.config import TransportSettings
    from actorflow.transport import HttpxTransport, RequestConfig

    async with HttpxTransport.from_settings(TransportSettings(base_url="https://api.example.com")) as transport:
        response = await transport.issue(RequestConfig(url="/users", params={"page": 2}))
        print(response.status, response.data)

    # Retry network failures (never cancellations or HTTP status errors)
    transport = HttpxTransport(retry_policy=RetryPolicy(max_attempts=3, backoff="exponential"))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx
import tenacity

from actorflow.config import TransportSettings
from actorflow.transport.errors import (
    HTTPStatusError,
    NetworkError,
    RequestCancelledError,
    RequestError,
)
from actorflow.transport.interceptors import InterceptorManager
from actorflow.transport.models import (
    CONTENT_TYPE,
    ParamsSerializer,
    RequestConfig,
    RequestTransform,
    Response,
    RetryPolicy,
    default_validate_status,
    get_header,
    merge_headers,
)
from actorflow.transport.serialization import decode_body, serialize_params, transform_request

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``.

    Attributes:
        client: Underlying httpx client (closed by ``aclose`` only if owned).
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        settings: TransportSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        params_serializer: ParamsSerializer = serialize_params,
        request_transform: RequestTransform = transform_request,
    ) -> None:
        """Initialize transport.

        Args:
            client: Pre-built client (e.g. with ``httpx.MockTransport``). Built
                from ``settings`` when omitted.
            settings: Base URL, timeout, default headers and retry defaults.
            retry_policy: Overrides the retry defaults from ``settings``.
            params_serializer: Default query encoder.
            request_transform: Default body encoder.
        """
        self._settings = settings or TransportSettings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout,
            headers=self._settings.headers,
        )
        self._retry_policy = retry_policy or RetryPolicy(
            max_attempts=self._settings.max_attempts,
            backoff=self._settings.backoff,
            base_delay=self._settings.base_delay,
        )
        self._params_serializer = params_serializer
        self._request_transform = request_transform
        self._request_interceptors: InterceptorManager[RequestConfig] = InterceptorManager()
        self._response_interceptors: InterceptorManager[Response] = InterceptorManager()

    @classmethod
    def from_settings(cls, settings: TransportSettings, **kwargs: Any) -> HttpxTransport:
        return cls(settings=settings, **kwargs)

    @property
    def settings(self) -> TransportSettings:
        return self._settings

    @property
    def request_interceptors(self) -> InterceptorManager[RequestConfig]:
        return self._request_interceptors

    @property
    def response_interceptors(self) -> InterceptorManager[Response]:
        return self._response_interceptors

    async def issue(self, config: RequestConfig) -> Response:
        """Issue one call, honoring ``config.cancel_token``.

        Raises:
            RequestCancelledError: Token cancelled before the call settled.
            NetworkError: No response was received.
            HTTPStatusError: Response status failed validation.
            RequestError: Interceptor or encoding failure.
        """
        token = config.cancel_token
        if token is not None and token.cancelled:
            raise RequestCancelledError(f"Request cancelled: {token.reason}", config)

        try:
            config = await self._request_interceptors.run(config)
        except RequestError:
            raise
        except Exception as exc:
            raise RequestError(f"Request interceptor failed: {exc}", config) from exc

        send = asyncio.ensure_future(self._send_with_retry(config))
        unsubscribe: Callable[[], None] | None = None
        if token is not None:
            unsubscribe = token.on_cancel(lambda _reason: send.cancel())

        error: RequestError | None = None
        try:
            response = await send
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if token is None or not token.cancelled or (current is not None and current.cancelling()):
                raise
            logger.debug("%s %s cancelled (%s)", config.method, config.url, token.reason)
            error = RequestCancelledError(f"Request cancelled: {token.reason}", config)
        except RequestError as exc:
            error = exc
        finally:
            if unsubscribe is not None:
                unsubscribe()

        try:
            if error is not None:
                return await self._response_interceptors.run(None, error)  # type: ignore[arg-type]
            return await self._response_interceptors.run(response)
        except RequestError:
            raise
        except Exception as exc:
            raise RequestError(f"Response interceptor failed: {exc}", config) from exc

    async def _send_with_retry(self, config: RequestConfig) -> Response:
        policy = self._retry_policy
        if policy.max_attempts <= 1:
            return await self._send(config)

        retryer = self._build_retryer(policy)
        async for attempt in retryer:
            with attempt:
                return await self._send(config)

        raise RequestError("Retry loop exited without an outcome", config)  # pragma: no cover

    def _build_retryer(self, policy: RetryPolicy) -> tenacity.AsyncRetrying:
        """Build a tenacity retryer from RetryPolicy configuration."""
        stop = tenacity.stop_after_attempt(policy.max_attempts)

        wait: tenacity.wait.wait_base
        if policy.backoff == "exponential":
            wait = tenacity.wait_exponential(multiplier=policy.base_delay, min=policy.base_delay)
        elif policy.backoff == "linear":
            wait = tenacity.wait_incrementing(start=policy.base_delay, increment=policy.base_delay)
        else:
            wait = tenacity.wait_none()

        return tenacity.AsyncRetrying(
            stop=stop,
            wait=wait,
            retry=tenacity.retry_if_exception_type(NetworkError),
            before_sleep=tenacity.before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )

    async def _send(self, config: RequestConfig) -> Response:
        method = config.method.upper()
        headers = merge_headers(config.headers)

        url = config.url
        if config.params:
            serializer = config.params_serializer or self._params_serializer
            query = serializer(config.params)
            if query:
                url = f"{url}{'&' if '?' in url else '?'}{query}"

        encode = config.transform_request or self._request_transform
        try:
            content = encode(config.data, headers)
        except (TypeError, ValueError) as exc:
            raise RequestError(f"Cannot encode request body: {exc}", config) from exc

        timeout = config.timeout if config.timeout is not None else httpx.USE_CLIENT_DEFAULT
        try:
            raw = await self.client.request(
                method, url, headers=headers, content=content, timeout=timeout
            )
        except httpx.TransportError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise NetworkError(f"{method} {url} failed: {exc}", config) from exc

        response = self._to_response(raw, config)
        validate = config.validate_status or default_validate_status
        if not validate(response.status):
            raise HTTPStatusError(
                f"Request failed with status code {response.status}", config, response
            )
        return response

    def _to_response(self, raw: httpx.Response, config: RequestConfig) -> Response:
        headers = dict(raw.headers.items())
        try:
            data = decode_body(raw.content, get_header(headers, CONTENT_TYPE))
        except ValueError as exc:
            raise RequestError(f"Invalid response body: {exc}", config) from exc
        return Response(
            status=raw.status_code,
            data=data,
            headers=headers,
            config=config,
            reason=raw.reason_phrase,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

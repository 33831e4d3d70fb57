"""Tests for HttpxTransport.

Focus: request encoding, status validation, error mapping, interceptor
wiring, retry and cancel-token handling. All HTTP goes through
httpx.MockTransport.
"""

import asyncio
import json

import httpx
import pytest

from actorflow import (
    CancelToken,
    HTTPStatusError,
    HttpxTransport,
    NetworkError,
    RequestCancelledError,
    RequestConfig,
    RequestError,
    Response,
    RetryPolicy,
    Transport,
    TransportSettings,
)


def make_transport(handler, **kwargs) -> HttpxTransport:
    client = httpx.AsyncClient(base_url="https://api.test", transport=httpx.MockTransport(handler))
    return HttpxTransport(client, **kwargs)


def json_response(status: int, payload: object) -> httpx.Response:
    return httpx.Response(status, json=payload)


def test_implements_transport_protocol():
    assert isinstance(make_transport(lambda request: httpx.Response(200)), Transport)


@pytest.mark.asyncio
async def test_get_serializes_params_and_decodes_json():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(200, {"items": [1, 2]})

    transport = make_transport(handler)
    config = RequestConfig(url="/items", params={"ids": [1, 2], "active": True, "skip": None})

    response = await transport.issue(config)

    assert response.status == 200
    assert response.data == {"items": [1, 2]}
    assert response.config is config
    assert seen[0].url.path == "/items"
    assert seen[0].url.query == b"ids=1&ids=2&active=true"


@pytest.mark.asyncio
async def test_post_encodes_json_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, text="created")

    transport = make_transport(handler)
    config = RequestConfig(
        url="/items",
        method="post",
        headers={"Content-Type": "application/json"},
        data={"name": "a"},
    )

    response = await transport.issue(config)

    assert response.data == "created"
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"name": "a"}
    assert seen[0].headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_custom_serializer_and_transform_per_call():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    transport = make_transport(handler)
    config = RequestConfig(
        url="/raw?fixed=1",
        method="PUT",
        params={"q": "x"},
        data=[1, 2],
        params_serializer=lambda params: "custom=yes",
        transform_request=lambda data, headers: b"|".join(str(d).encode() for d in data),
    )

    response = await transport.issue(config)

    assert response.data is None
    assert seen[0].url.query == b"fixed=1&custom=yes"
    assert seen[0].content == b"1|2"


@pytest.mark.asyncio
async def test_error_status_raises_http_status_error():
    transport = make_transport(lambda request: json_response(404, {"detail": "missing"}))

    with pytest.raises(HTTPStatusError) as exc_info:
        await transport.issue(RequestConfig(url="/missing"))

    error = exc_info.value
    assert error.status == 404
    assert error.response.data == {"detail": "missing"}
    assert not error.cancelled


@pytest.mark.asyncio
async def test_validate_status_override():
    transport = make_transport(lambda request: httpx.Response(404))

    response = await transport.issue(
        RequestConfig(url="/missing", validate_status=lambda status: status < 500)
    )

    assert response.status == 404


@pytest.mark.asyncio
async def test_connection_failure_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport = make_transport(handler)

    with pytest.raises(NetworkError) as exc_info:
        await transport.issue(RequestConfig(url="/down"))

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_invalid_json_body_raises_request_error():
    transport = make_transport(
        lambda request: httpx.Response(
            200, content=b"{not json", headers={"Content-Type": "application/json"}
        )
    )

    with pytest.raises(RequestError, match="Invalid response body"):
        await transport.issue(RequestConfig(url="/broken"))


# Retry


@pytest.mark.asyncio
async def test_retries_network_errors():
    """Network failures are retried up to max_attempts."""
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, text="ok")

    transport = make_transport(handler, retry_policy=RetryPolicy(max_attempts=3))

    response = await transport.issue(RequestConfig(url="/flaky"))

    assert response.data == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_retry_exhaustion_reraises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport = make_transport(handler, retry_policy=RetryPolicy(max_attempts=2))

    with pytest.raises(NetworkError):
        await transport.issue(RequestConfig(url="/down"))


@pytest.mark.asyncio
async def test_status_errors_are_not_retried():
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(500)

    transport = make_transport(handler, retry_policy=RetryPolicy(max_attempts=3))

    with pytest.raises(HTTPStatusError):
        await transport.issue(RequestConfig(url="/error"))
    assert len(attempts) == 1


def test_retry_policy_defaults_from_settings():
    transport = HttpxTransport.from_settings(
        TransportSettings(base_url="https://api.test", max_attempts=4, backoff="linear")
    )

    assert transport._retry_policy == RetryPolicy(max_attempts=4, backoff="linear")
    assert transport.client.base_url.host == "api.test"


# Cancellation


@pytest.mark.asyncio
async def test_cancel_token_aborts_in_flight_call():
    """CRITICAL: Cancelling the token stops the call with RequestCancelledError.

    Why: This is how CancelRequest and supersession reach the network layer.
    """
    entered = asyncio.Event()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        entered.set()
        await release.wait()
        return httpx.Response(200)

    transport = make_transport(handler)
    token = CancelToken()
    call = asyncio.create_task(transport.issue(RequestConfig(url="/slow", cancel_token=token)))

    await entered.wait()
    token.cancel("user")

    with pytest.raises(RequestCancelledError) as exc_info:
        await call
    assert exc_info.value.cancelled
    assert "user" in str(exc_info.value)


@pytest.mark.asyncio
async def test_pre_cancelled_token_never_sends():
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200)

    transport = make_transport(handler)
    token = CancelToken()
    token.cancel()

    with pytest.raises(RequestCancelledError):
        await transport.issue(RequestConfig(url="/a", cancel_token=token))
    assert sent == []


@pytest.mark.asyncio
async def test_cancel_after_settlement_is_ignored():
    transport = make_transport(lambda request: httpx.Response(200, text="done"))
    token = CancelToken()

    response = await transport.issue(RequestConfig(url="/a", cancel_token=token))
    token.cancel()

    assert response.data == "done"


@pytest.mark.asyncio
async def test_outer_task_cancellation_is_not_converted():
    """Cancelling the calling task propagates CancelledError unchanged."""
    entered = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        entered.set()
        await asyncio.Event().wait()
        return httpx.Response(200)

    transport = make_transport(handler)
    call = asyncio.create_task(
        transport.issue(RequestConfig(url="/slow", cancel_token=CancelToken()))
    )
    await entered.wait()
    call.cancel()

    with pytest.raises(asyncio.CancelledError):
        await call


# Interceptors


@pytest.mark.asyncio
async def test_request_interceptors_rewrite_config():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    transport = make_transport(handler)

    async def add_trace(config: RequestConfig) -> RequestConfig:
        return config.copy(headers={**config.headers, "X-Trace": "abc"})

    transport.request_interceptors.use(add_trace)
    await transport.issue(RequestConfig(url="/a"))

    assert seen[0].headers["x-trace"] == "abc"


@pytest.mark.asyncio
async def test_request_interceptor_exception_is_wrapped():
    transport = make_transport(lambda request: httpx.Response(200))

    def explode(config: RequestConfig) -> RequestConfig:
        raise KeyError("token")

    transport.request_interceptors.use(explode)

    with pytest.raises(RequestError, match="Request interceptor failed") as exc_info:
        await transport.issue(RequestConfig(url="/a"))
    assert isinstance(exc_info.value.__cause__, KeyError)


@pytest.mark.asyncio
async def test_response_interceptor_can_recover_from_error():
    transport = make_transport(lambda request: httpx.Response(503))

    def fallback(error: BaseException) -> Response:
        assert isinstance(error, HTTPStatusError)
        return Response(status=200, data="cached")

    transport.response_interceptors.use(None, fallback)

    response = await transport.issue(RequestConfig(url="/a"))

    assert response.data == "cached"


@pytest.mark.asyncio
async def test_response_interceptor_transforms_success():
    transport = make_transport(lambda request: json_response(200, {"data": {"id": 7}}))
    transport.response_interceptors.use(
        lambda response: Response(status=response.status, data=response.data["data"])
    )

    response = await transport.issue(RequestConfig(url="/a"))

    assert response.data == {"id": 7}


@pytest.mark.asyncio
async def test_owned_client_is_closed():
    transport = HttpxTransport(settings=TransportSettings(base_url="https://api.test"))

    async with transport:
        pass

    assert transport.client.is_closed

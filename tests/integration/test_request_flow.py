"""End-to-end request flow: epic over HttpxTransport over httpx.MockTransport.

Why these tests exist:
- Verifies the epic, registry and real transport agree on cancellation
- Verifies interceptors registered through create_request_epic reach httpx
"""

import asyncio
import json

import httpx
import pytest

from actorflow import (
    ActorStream,
    CancelRequest,
    Done,
    Failed,
    PreRequest,
    RequestConfig,
    RetryPolicy,
    Started,
    TransportSettings,
    collect,
    create_request_epic,
    from_iterable,
)


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="https://api.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_round_trip():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 1, "echo": json.loads(request.content)})

    def add_auth(request, response):
        request.use(lambda config: config.copy(headers={**config.headers, "Authorization": "Bearer t"}))

    epic = create_request_epic(TransportSettings(), add_auth, client=client_for(handler))
    actor = PreRequest(
        uid="create",
        request_config=RequestConfig(url="/items", method="POST", data={"name": "a"}),
    )

    output = await collect(epic(from_iterable([actor])))
    await epic.aclose()

    assert [type(a) for a in output] == [Started, Done]
    assert output[1].response.data == {"id": 1, "echo": {"name": "a"}}
    assert seen[0].headers["content-type"] == "application/json"
    assert seen[0].headers["authorization"] == "Bearer t"


@pytest.mark.asyncio
async def test_cancel_request_aborts_real_call():
    entered = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        entered.set()
        await asyncio.Event().wait()
        return httpx.Response(200)

    epic = create_request_epic(client=client_for(handler))
    actors: ActorStream = ActorStream()
    consumer = asyncio.create_task(collect(epic(actors)))

    actors.emit(PreRequest(uid="slow", request_config=RequestConfig(url="/slow")))
    await entered.wait()
    actors.emit(CancelRequest(parent_uid="slow"))
    actors.close()
    output = await consumer

    assert [type(a) for a in output] == [Started, Failed]
    assert output[1].cancelled
    assert not epic.in_flight


@pytest.mark.asyncio
async def test_http_error_and_retry_surface_as_failed():
    attempts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url.path)
        if request.url.path == "/flaky" and attempts.count("/flaky") < 2:
            raise httpx.ConnectError("refused", request=request)
        if request.url.path == "/missing":
            return httpx.Response(404)
        return httpx.Response(200, text="ok")

    epic = create_request_epic(client=client_for(handler), retry_policy=RetryPolicy(max_attempts=2))
    output = await collect(
        epic(
            from_iterable(
                [
                    PreRequest(uid="flaky", request_config=RequestConfig(url="/flaky")),
                    PreRequest(uid="missing", request_config=RequestConfig(url="/missing")),
                ]
            )
        )
    )

    terminal = {a.uid: a for a in output if isinstance(a, Done | Failed)}
    assert isinstance(terminal["flaky"], Done)
    assert isinstance(terminal["missing"], Failed)
    assert terminal["missing"].error.status == 404
    assert attempts.count("/flaky") == 2
    assert attempts.count("/missing") == 1

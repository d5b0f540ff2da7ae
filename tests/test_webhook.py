import socket

import anyio
import httpx
import pytest

from telehook.api_models import Message
from telehook.errors import DecodeError, ListenerError
from telehook.webhook import ReceiverState, WebhookReceiver, decode_delivery

DELIVERY = b'{"update_id":1,"message":{"message_id":5,"text":"hello"}}'


def _client(receiver: WebhookReceiver) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=receiver.app),
        base_url="http://webhook.test",
    )


def test_decode_delivery() -> None:
    update = decode_delivery(DELIVERY)
    assert update.update_id == 1
    assert update.message == Message(message_id=5, text="hello")


@pytest.mark.parametrize(
    "body",
    [b"", b"not json", b"{}", b'{"update_id": 2}', b'{"update_id": "x", "message": {}}'],
)
def test_decode_delivery_rejects_malformed(body: bytes) -> None:
    with pytest.raises(DecodeError):
        decode_delivery(body)


@pytest.mark.anyio
async def test_delivery_is_published_then_acknowledged() -> None:
    send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)
    received: list[Message] = []

    async def consume() -> None:
        received.append(await receive_stream.receive())

    async with _client(receiver) as client, anyio.create_task_group() as tg:
        tg.start_soon(consume)
        resp = await client.post("/", content=DELIVERY)

    assert resp.status_code == 200
    assert resp.content == b""
    assert len(received) == 1
    assert received[0].message_id == 5
    assert received[0].text == "hello"


@pytest.mark.anyio
@pytest.mark.parametrize("body", [b"garbage", b'{"update_id": 3}', b"[1, 2]"])
async def test_malformed_delivery_is_acknowledged_and_dropped(body: bytes) -> None:
    send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)

    async with _client(receiver) as client:
        resp = await client.post("/", content=body)

    assert resp.status_code == 200
    assert resp.content == b""
    with pytest.raises(anyio.WouldBlock):
        receive_stream.receive_nowait()


@pytest.mark.anyio
async def test_any_path_is_accepted() -> None:
    send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)
    received: list[Message] = []

    async def consume() -> None:
        async for message in receive_stream:
            received.append(message)

    async with _client(receiver) as client, anyio.create_task_group() as tg:
        tg.start_soon(consume)
        for path in ("/", "/hook", "/bot/123/updates"):
            resp = await client.post(path, content=DELIVERY)
            assert resp.status_code == 200
        await send_stream.aclose()

    assert [m.message_id for m in received] == [5, 5, 5]


@pytest.mark.anyio
async def test_publish_blocks_until_consumed() -> None:
    send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)
    statuses: list[int] = []

    async def deliver(client: httpx.AsyncClient) -> None:
        resp = await client.post("/", content=DELIVERY)
        statuses.append(resp.status_code)

    async with _client(receiver) as client, anyio.create_task_group() as tg:
        tg.start_soon(deliver, client)
        await anyio.sleep(0.1)
        assert statuses == []
        message = await receive_stream.receive()
        assert message.message_id == 5

    assert statuses == [200]


@pytest.mark.anyio
async def test_closed_stream_still_acknowledges() -> None:
    send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)
    await receive_stream.aclose()

    async with _client(receiver) as client:
        resp = await client.post("/", content=DELIVERY)

    assert resp.status_code == 200


def test_receiver_starts_idle() -> None:
    send_stream, _ = anyio.create_memory_object_stream[Message](0)
    assert WebhookReceiver(send_stream).state is ReceiverState.IDLE


@pytest.mark.anyio
async def test_bind_conflict_raises_listener_error() -> None:
    send_stream, _ = anyio.create_memory_object_stream[Message](0)
    receiver = WebhookReceiver(send_stream)

    with socket.create_server(("127.0.0.1", 0)) as taken:
        port = taken.getsockname()[1]
        with pytest.raises(ListenerError, match="cannot listen"):
            await receiver.serve("127.0.0.1", port)

    assert receiver.state is ReceiverState.IDLE

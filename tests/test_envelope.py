import msgspec
import pytest

from telehook.api_models import User
from telehook.envelope import decode_envelope, decode_result
from telehook.errors import RemoteAPIError, TransportError


@pytest.mark.parametrize(
    "body",
    [
        b'{"ok": true}',
        b'{"ok": true, "result": true}',
        b'{"ok": true, "result": null}',
        b'{"ok": true, "result": {"id": 1}, "description": "ignored"}',
        b'{"ok": true, "result": [], "error_code": 500}',
    ],
)
def test_ok_envelope_never_raises(body: bytes) -> None:
    decode_envelope(body, method="getMe", status_code=200)


def test_ok_envelope_without_result_returns_none() -> None:
    assert decode_envelope(b'{"ok": true}', method="setWebhook") is None
    assert decode_envelope(b'{"ok": true, "result": null}', method="setWebhook") is None


def test_ok_envelope_returns_raw_result() -> None:
    raw = decode_envelope(
        b'{"ok": true, "result": {"id": 7, "username": "echo_bot"}}',
        method="getMe",
    )
    assert raw is not None
    user = decode_result(raw, User, method="getMe")
    assert user == User(id=7, username="echo_bot")


def test_api_error_message_format() -> None:
    body = b'{"ok": false, "error_code": 400, "description": "Bad Request: chat not found"}'
    with pytest.raises(RemoteAPIError) as exc:
        decode_envelope(body, method="sendMessage", status_code=400)
    assert str(exc.value) == "Bad Request: chat not found (400)"
    assert exc.value.code == 400
    assert exc.value.description == "Bad Request: chat not found"
    assert exc.value.method == "sendMessage"


def test_api_error_takes_precedence_over_status() -> None:
    body = b'{"ok": false, "error_code": 401, "description": "Unauthorized"}'
    with pytest.raises(RemoteAPIError, match=r"^Unauthorized \(401\)$"):
        decode_envelope(body, method="getMe", status_code=401)


@pytest.mark.parametrize(
    "body",
    [b"", b"<html>bad gateway</html>", b'{"result": 1}', b'{"ok": "yes"}', b"[]"],
)
def test_malformed_body_is_transport_error(body: bytes) -> None:
    with pytest.raises(TransportError) as exc:
        decode_envelope(body, method="sendChatAction", status_code=502)
    assert not isinstance(exc.value, RemoteAPIError)
    assert exc.value.method == "sendChatAction"
    assert exc.value.status_code == 502


def test_ok_envelope_with_error_status_is_transport_error() -> None:
    with pytest.raises(TransportError, match="unexpected status 500"):
        decode_envelope(b'{"ok": true}', method="getMe", status_code=500)


def test_result_of_wrong_shape_is_transport_error() -> None:
    with pytest.raises(TransportError, match="unexpected result from getMe"):
        decode_result(msgspec.Raw(b"true"), User, method="getMe")

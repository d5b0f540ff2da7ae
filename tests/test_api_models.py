from pathlib import Path

import msgspec

from telehook.api_models import Location, Message, Photo, User, decode_update
from telehook.types import InputFile


def test_decode_full_message() -> None:
    update = decode_update(
        b"""{
            "update_id": 10,
            "message": {
                "message_id": 3,
                "from": {"id": 1, "first_name": "Ada", "last_name": "L", "username": "ada"},
                "chat": {"id": -50, "title": "Engines"},
                "date": 1450000000,
                "photo": [{"file_id": "small", "width": 90, "height": 90}],
                "location": {"latitude": 51, "longitude": -0.12},
                "reply_to_message": {"message_id": 2, "text": "earlier"},
                "some_future_field": {"ignored": true}
            }
        }"""
    )

    msg = update.message
    assert msg.from_ == User(id=1, first_name="Ada", last_name="L", username="ada")
    assert msg.chat is not None and msg.chat.is_group_chat
    assert msg.photo == [Photo(file_id="small", width=90, height=90)]
    assert msg.location == Location(latitude=51.0, longitude=-0.12)
    assert msg.reply_to_message == Message(message_id=2, text="earlier")
    assert msg.text is None


def test_message_is_immutable() -> None:
    msg = Message(message_id=1, text="x")
    try:
        msg.text = "y"  # type: ignore[misc]
    except AttributeError:
        pass
    else:
        raise AssertionError("message should be frozen")


def test_to_builtins_uses_wire_names() -> None:
    msg = Message(message_id=1, from_=User(id=2))
    data = msgspec.to_builtins(msg)
    assert data["from"]["id"] == 2
    assert "from_" not in data


def test_is_group_chat() -> None:
    assert User(id=-1, title="group").is_group_chat
    assert not User(id=1, first_name="solo").is_group_chat
    assert not User(id=1, title="").is_group_chat


def test_message_str_for_user() -> None:
    msg = Message(
        message_id=1,
        from_=User(id=1, first_name="Ada", last_name="Lovelace", username="ada"),
        text="hello",
    )
    assert str(msg) == 'From user: "Ada Lovelace (ada)"  Message: "hello"'


def test_message_str_for_group() -> None:
    msg = Message(message_id=1, from_=User(id=-5, title="Engines"), text="hi")
    assert str(msg) == 'From group: "Engines"  Message: "hi"'


def test_input_file_predicates() -> None:
    remote = InputFile(url="https://example.com/a.png")
    assert remote.is_remote and not remote.exists and not remote.is_local

    stored = InputFile(file_id="AgAD")
    assert stored.exists and not stored.is_remote

    local = InputFile(path=Path("a.png"))
    assert local.is_local and not local.is_remote


def test_message_str_escapes_quotes() -> None:
    msg = Message(message_id=1, from_=User(id=1, first_name="Ada"), text='say "hi"\n')
    assert str(msg) == 'From user: "Ada ()"  Message: "say \\"hi\\"\\n"'

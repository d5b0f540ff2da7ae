import json

from telehook.markup import (
    ForceReply,
    HideKeyboard,
    Keyboard,
    MarkupKind,
    encode_reply_markup,
)


def test_keyboard_encoding() -> None:
    markup = Keyboard(rows=[["yes", "no"], ["maybe"]], one_time=True)
    assert markup.kind is MarkupKind.KEYBOARD
    assert json.loads(encode_reply_markup(markup)) == {
        "keyboard": [["yes", "no"], ["maybe"]],
        "resize_keyboard": False,
        "one_time_keyboard": True,
        "selective": False,
    }


def test_hide_keyboard_encoding() -> None:
    markup = HideKeyboard(selective=True)
    assert markup.kind is MarkupKind.HIDE_KEYBOARD
    assert json.loads(encode_reply_markup(markup)) == {
        "hide_keyboard": True,
        "selective": True,
    }


def test_force_reply_encoding() -> None:
    assert json.loads(encode_reply_markup(ForceReply())) == {
        "force_reply": True,
        "selective": False,
    }


def test_kind_is_not_serialized() -> None:
    assert "kind" not in encode_reply_markup(ForceReply(selective=True))

"""Reply markup attached to outbound messages.

Exactly one of :class:`Keyboard`, :class:`HideKeyboard` or :class:`ForceReply`
can be attached to a send; each variant carries its ``kind`` tag and encoding
dispatches on that tag.
"""

from __future__ import annotations

import enum
from typing import Any, ClassVar

import msgspec

__all__ = [
    "ForceReply",
    "HideKeyboard",
    "Keyboard",
    "MarkupKind",
    "ReplyMarkup",
    "encode_reply_markup",
]


class MarkupKind(enum.Enum):
    KEYBOARD = "keyboard"
    HIDE_KEYBOARD = "hide_keyboard"
    FORCE_REPLY = "force_reply"


class Keyboard(msgspec.Struct, frozen=True):
    """Custom keyboard; each inner list is one row of button labels."""

    kind: ClassVar[MarkupKind] = MarkupKind.KEYBOARD

    rows: list[list[str]]
    resize: bool = False
    one_time: bool = False
    selective: bool = False


class HideKeyboard(msgspec.Struct, frozen=True):
    """Ask clients to hide the custom keyboard and show the default one."""

    kind: ClassVar[MarkupKind] = MarkupKind.HIDE_KEYBOARD

    selective: bool = False


class ForceReply(msgspec.Struct, frozen=True):
    """Ask clients to show a reply interface, as if the user tapped Reply."""

    kind: ClassVar[MarkupKind] = MarkupKind.FORCE_REPLY

    selective: bool = False


ReplyMarkup = Keyboard | HideKeyboard | ForceReply


def _markup_payload(markup: ReplyMarkup) -> dict[str, Any]:
    match markup.kind:
        case MarkupKind.KEYBOARD:
            return {
                "keyboard": [list(row) for row in markup.rows],
                "resize_keyboard": markup.resize,
                "one_time_keyboard": markup.one_time,
                "selective": markup.selective,
            }
        case MarkupKind.HIDE_KEYBOARD:
            return {"hide_keyboard": True, "selective": markup.selective}
        case MarkupKind.FORCE_REPLY:
            return {"force_reply": True, "selective": markup.selective}
    raise ValueError(f"unknown reply markup kind: {markup.kind!r}")


def encode_reply_markup(markup: ReplyMarkup) -> str:
    return msgspec.json.encode(_markup_payload(markup)).decode()

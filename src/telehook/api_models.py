from __future__ import annotations

import msgspec

__all__ = [
    "Audio",
    "Contact",
    "Document",
    "Location",
    "Message",
    "Photo",
    "Sticker",
    "Update",
    "User",
    "Venue",
    "Video",
    "Voice",
    "decode_update",
]


class User(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    """A Telegram user, bot or group chat.

    The remote service puts users and group chats in the same slot; group
    chats carry a ``title``.
    """

    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    title: str | None = None

    @property
    def is_group_chat(self) -> bool:
        return bool(self.title)


class Photo(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int = 0
    height: int = 0
    file_size: int | None = None


class Audio(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    duration: int = 0
    performer: str | None = None
    title: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Document(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    file_name: str | None = None
    thumb: Photo | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Sticker(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int = 0
    height: int = 0
    thumb: Photo | None = None
    file_size: int | None = None


class Video(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int = 0
    height: int = 0
    duration: int = 0
    thumb: Photo | None = None
    mime_type: str | None = None
    caption: str | None = None
    file_size: int | None = None


class Voice(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    duration: int = 0
    mime_type: str | None = None
    file_size: int | None = None


class Contact(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    phone_number: str
    first_name: str
    last_name: str | None = None
    user_id: int | None = None


class Location(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    latitude: float
    longitude: float


class Venue(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    location: Location
    title: str
    address: str
    foursquare_id: str | None = None


class Message(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    message_id: int
    from_: User | None = msgspec.field(default=None, name="from")
    date: int = 0
    chat: User | None = None
    forward_from: User | None = None
    forward_date: int | None = None
    reply_to_message: Message | None = None
    text: str | None = None
    audio: Audio | None = None
    document: Document | None = None
    photo: list[Photo] | None = None
    sticker: Sticker | None = None
    video: Video | None = None
    voice: Voice | None = None
    contact: Contact | None = None
    location: Location | None = None
    venue: Venue | None = None
    new_chat_participant: User | None = None
    left_chat_participant: User | None = None
    new_chat_title: str | None = None
    new_chat_photo: list[Photo] | None = None
    delete_chat_photo: bool = False
    group_chat_created: bool = False

    def __str__(self) -> str:
        sender = self.from_
        if sender is not None and sender.is_group_chat:
            origin = f"From group: {_quote(sender.title or '')}"
        elif sender is not None:
            name = " ".join(
                part for part in (sender.first_name, sender.last_name) if part
            )
            origin = f'From user: "{name} ({sender.username or ""})"'
        else:
            origin = "From unknown sender"
        return f"{origin}  Message: {_quote(self.text or '')}"


def _quote(value: str) -> str:
    return msgspec.json.encode(value).decode()


class Update(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    update_id: int
    message: Message


_UPDATE_DECODER = msgspec.json.Decoder(Update)


def decode_update(payload: bytes | str) -> Update:
    return _UPDATE_DECODER.decode(payload)

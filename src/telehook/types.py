from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

from .markup import ReplyMarkup


class ParseMode(enum.StrEnum):
    NONE = ""
    MARKDOWN = "markdown"


class ChatAction(enum.StrEnum):
    TYPING = "typing"
    UPLOADING_PHOTO = "upload_photo"
    UPLOADING_VIDEO = "upload_video"
    UPLOADING_AUDIO = "upload_audio"
    UPLOADING_DOCUMENT = "upload_document"
    FINDING_LOCATION = "find_location"


@dataclass(frozen=True, slots=True)
class InputFile:
    """Source of an outbound media upload.

    ``file_id`` refers to a file already stored by Telegram, ``url`` to a file
    on a remote server and ``path`` to the local filesystem.
    """

    file_id: str | None = None
    url: str | None = None
    path: Path | None = None

    @property
    def exists(self) -> bool:
        return bool(self.file_id)

    @property
    def is_local(self) -> bool:
        return self.path is not None

    @property
    def is_remote(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True, slots=True)
class SendOptions:
    reply_to_message_id: int | None = None
    reply_markup: ReplyMarkup | None = None

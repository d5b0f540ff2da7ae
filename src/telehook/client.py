from __future__ import annotations

from decimal import Decimal
from typing import Any, NoReturn

import httpx
import msgspec

from .api_models import (
    Audio,
    Document,
    Location,
    Message,
    Sticker,
    User,
    Venue,
    Video,
    Voice,
)
from .envelope import decode_envelope, decode_result
from .errors import (
    FetchError,
    TransportError,
    UnsupportedOperationError,
    UnsupportedSourceError,
)
from .logging import get_logger
from .markup import encode_reply_markup
from .types import ChatAction, InputFile, ParseMode, SendOptions

logger = get_logger(__name__)

BASE_URL = "https://api.telegram.org/bot"
PHOTO_UPLOAD_NAME = "image.jpg"

Recipient = int | User


def _chat_id(recipient: Recipient) -> int:
    if isinstance(recipient, User):
        return recipient.id
    return recipient


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        # repr keeps the shortest round-tripping digits; Decimal drops exponents
        return format(Decimal(repr(value)), "f")
    return str(value)


def _apply_options(fields: dict[str, Any], options: SendOptions | None) -> None:
    if options is None:
        return
    if options.reply_to_message_id is not None:
        fields["reply_to_message_id"] = options.reply_to_message_id
    if options.reply_markup is not None:
        fields["reply_markup"] = encode_reply_markup(options.reply_markup)


def _unsupported(operation: str) -> NoReturn:
    raise UnsupportedOperationError(f"{operation} is not implemented")


class TelegramClient:
    """Outbound side of the Bot API.

    Every call is a single request/response round trip: no retries, no
    queueing. Form posts are used for plain parameters and multipart posts
    for uploads; the response of each goes through :func:`decode_envelope`.
    """

    def __init__(
        self,
        token: str,
        timeout_s: float = 120,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise ValueError("Telegram token is empty")
        self._base = f"{BASE_URL}{token}"
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> TelegramClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _send(
        self,
        method: str,
        fields: dict[str, Any],
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> msgspec.Raw | None:
        data = {key: _form_value(value) for key, value in fields.items()}
        logger.debug(
            "telegram.request",
            method=method,
            payload=data,
            files=sorted(files) if files else None,
        )
        try:
            resp = await self._client.post(
                f"{self._base}/{method}", data=data, files=files
            )
        except httpx.HTTPError as e:
            logger.error(
                "telegram.network_error",
                method=method,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            raise TransportError(
                f"{method} request failed: {e}", method=method
            ) from e

        result = decode_envelope(
            resp.content, method=method, status_code=resp.status_code
        )
        logger.debug("telegram.response", method=method, status=resp.status_code)
        return result

    async def _send_for_message(
        self,
        method: str,
        fields: dict[str, Any],
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> Message | None:
        raw = await self._send(method, fields, files)
        if raw is None:
            return None
        return decode_result(raw, Message, method=method)

    async def _fetch(self, url: str) -> bytes:
        try:
            async with self._client.stream(
                "GET", url, follow_redirects=True
            ) as resp:
                if not resp.is_success:
                    logger.error(
                        "telegram.fetch_failed", url=url, status=resp.status_code
                    )
                    raise FetchError(url, status_code=resp.status_code)
                return await resp.aread()
        except httpx.HTTPError as e:
            logger.error(
                "telegram.fetch_failed",
                url=url,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            raise FetchError(url) from e

    async def get_me(self) -> User:
        raw = await self._send("getMe", {})
        if raw is None:
            raise TransportError("getMe returned no result", method="getMe")
        return decode_result(raw, User, method="getMe")

    async def set_webhook(self, url: str) -> None:
        await self._send("setWebhook", {"url": url})

    async def send_message(
        self,
        recipient: Recipient,
        text: str,
        mode: ParseMode | str = ParseMode.NONE,
        preview: bool = True,
        options: SendOptions | None = None,
    ) -> Message | None:
        fields: dict[str, Any] = {
            "chat_id": _chat_id(recipient),
            "text": text,
            "parse_mode": str(mode),
            "disable_web_page_preview": not preview,
        }
        _apply_options(fields, options)
        return await self._send_for_message("sendMessage", fields)

    async def send_photo(
        self,
        recipient: Recipient,
        photo: InputFile,
        caption: str = "",
        options: SendOptions | None = None,
    ) -> Message | None:
        """Upload ``photo`` to ``recipient``.

        Only remote URLs are supported: the photo is downloaded and sent as a
        multipart upload.
        """
        if photo.exists:
            raise UnsupportedSourceError(
                "files stored on Telegram servers can not be sent yet"
            )
        if photo.is_local:
            raise UnsupportedSourceError("local files can not be sent yet")
        if not photo.is_remote or photo.url is None:
            raise UnsupportedSourceError("photo has no remote URL")

        content = await self._fetch(photo.url)
        fields: dict[str, Any] = {"chat_id": _chat_id(recipient)}
        if caption:
            fields["caption"] = caption
        _apply_options(fields, options)
        return await self._send_for_message(
            "sendPhoto", fields, files={"photo": (PHOTO_UPLOAD_NAME, content)}
        )

    async def send_location(
        self,
        recipient: Recipient,
        location: Location,
        options: SendOptions | None = None,
    ) -> Message | None:
        fields: dict[str, Any] = {
            "chat_id": _chat_id(recipient),
            "latitude": float(location.latitude),
            "longitude": float(location.longitude),
        }
        _apply_options(fields, options)
        return await self._send_for_message("sendLocation", fields)

    async def send_venue(
        self,
        recipient: Recipient,
        venue: Venue,
        options: SendOptions | None = None,
    ) -> Message | None:
        fields: dict[str, Any] = {
            "chat_id": _chat_id(recipient),
            "latitude": float(venue.location.latitude),
            "longitude": float(venue.location.longitude),
            "title": venue.title,
            "address": venue.address,
        }
        if venue.foursquare_id:
            fields["foursquare_id"] = venue.foursquare_id
        _apply_options(fields, options)
        return await self._send_for_message("sendVenue", fields)

    async def send_chat_action(
        self, recipient: Recipient, action: ChatAction | str
    ) -> None:
        await self._send(
            "sendChatAction",
            {"chat_id": _chat_id(recipient), "action": str(action)},
        )

    async def forward_message(
        self, recipient: Recipient, message: Message
    ) -> Message | None:
        _unsupported("forward_message")

    async def send_audio(
        self,
        recipient: Recipient,
        audio: Audio,
        options: SendOptions | None = None,
    ) -> Message | None:
        _unsupported("send_audio")

    async def send_document(
        self,
        recipient: Recipient,
        document: Document,
        options: SendOptions | None = None,
    ) -> Message | None:
        _unsupported("send_document")

    async def send_sticker(
        self,
        recipient: Recipient,
        sticker: Sticker,
        options: SendOptions | None = None,
    ) -> Message | None:
        _unsupported("send_sticker")

    async def send_video(
        self,
        recipient: Recipient,
        video: Video,
        options: SendOptions | None = None,
    ) -> Message | None:
        _unsupported("send_video")

    async def send_voice(
        self,
        recipient: Recipient,
        voice: Voice,
        options: SendOptions | None = None,
    ) -> Message | None:
        _unsupported("send_voice")

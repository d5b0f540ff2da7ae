from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
import httpx
from anyio.abc import TaskStatus
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

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
from .client import Recipient, TelegramClient
from .errors import ListenerError
from .logging import get_logger
from .types import ChatAction, InputFile, ParseMode, SendOptions
from .webhook import ReceiverState, WebhookReceiver

logger = get_logger(__name__)


class Bot:
    """A Telegram bot: its token, its identity and both directions of traffic.

    Build one with :meth:`create`, which resolves the bot identity up front::

        bot = await Bot.create("123:abc")
        await bot.set_webhook("https://example.com/hook")
        async with bot.listen("127.0.0.1", 1986) as messages:
            async for message in messages:
                await bot.send_message(message.chat, message.text or "")
    """

    def __init__(self, token: str, identity: User, client: TelegramClient) -> None:
        self._token = token
        self._identity = identity
        self._client = client
        self._receiver: WebhookReceiver | None = None

    @classmethod
    async def create(
        cls,
        token: str,
        *,
        timeout_s: float = 120,
        http_client: httpx.AsyncClient | None = None,
    ) -> Bot:
        client = TelegramClient(token, timeout_s=timeout_s, client=http_client)
        try:
            identity = await client.get_me()
        except BaseException:
            await client.close()
            raise
        logger.info("bot.identity", bot_id=identity.id, username=identity.username)
        return cls(token, identity, client)

    @property
    def token(self) -> str:
        return self._token

    @property
    def identity(self) -> User:
        return self._identity

    @property
    def listener_state(self) -> ReceiverState:
        if self._receiver is None:
            return ReceiverState.IDLE
        return self._receiver.state

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> Bot:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @asynccontextmanager
    async def listen(
        self, host: str, port: int
    ) -> AsyncIterator[MemoryObjectReceiveStream[Message]]:
        """Serve webhook deliveries on ``host:port`` and yield the messages.

        The stream has no buffer: a delivery is acknowledged only after a
        consumer received its message. Leaving the context stops the listener.
        """
        if self._receiver is not None:
            raise ListenerError("bot is already listening")
        send_stream, receive_stream = anyio.create_memory_object_stream[Message](0)
        receiver = WebhookReceiver(send_stream)
        self._receiver = receiver
        error: BaseException | None = None
        try:
            async with anyio.create_task_group() as tg:
                await tg.start(self._run_receiver, receiver, send_stream, host, port)
                try:
                    async with receive_stream:
                        yield receive_stream
                finally:
                    tg.cancel_scope.cancel()
        except BaseExceptionGroup as excgroup:
            if len(excgroup.exceptions) != 1:
                raise
            error = excgroup.exceptions[0]
        finally:
            receive_stream.close()
            self._receiver = None
        # a single failure leaves the group unwrapped
        if error is not None:
            raise error

    async def _run_receiver(
        self,
        receiver: WebhookReceiver,
        send_stream: MemoryObjectSendStream[Message],
        host: str,
        port: int,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        async with send_stream:
            await receiver.serve(host, port, task_status=task_status)

    async def set_webhook(self, url: str) -> None:
        await self._client.set_webhook(url)

    async def send_message(
        self,
        recipient: Recipient,
        text: str,
        mode: ParseMode | str = ParseMode.NONE,
        preview: bool = True,
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_message(recipient, text, mode, preview, options)

    async def send_photo(
        self,
        recipient: Recipient,
        photo: InputFile,
        caption: str = "",
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_photo(recipient, photo, caption, options)

    async def send_location(
        self,
        recipient: Recipient,
        location: Location,
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_location(recipient, location, options)

    async def send_venue(
        self,
        recipient: Recipient,
        venue: Venue,
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_venue(recipient, venue, options)

    async def send_chat_action(
        self, recipient: Recipient, action: ChatAction | str
    ) -> None:
        await self._client.send_chat_action(recipient, action)

    async def forward_message(
        self, recipient: Recipient, message: Message
    ) -> Message | None:
        return await self._client.forward_message(recipient, message)

    async def send_audio(
        self, recipient: Recipient, audio: Audio, options: SendOptions | None = None
    ) -> Message | None:
        return await self._client.send_audio(recipient, audio, options)

    async def send_document(
        self,
        recipient: Recipient,
        document: Document,
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_document(recipient, document, options)

    async def send_sticker(
        self,
        recipient: Recipient,
        sticker: Sticker,
        options: SendOptions | None = None,
    ) -> Message | None:
        return await self._client.send_sticker(recipient, sticker, options)

    async def send_video(
        self, recipient: Recipient, video: Video, options: SendOptions | None = None
    ) -> Message | None:
        return await self._client.send_video(recipient, video, options)

    async def send_voice(
        self, recipient: Recipient, voice: Voice, options: SendOptions | None = None
    ) -> Message | None:
        return await self._client.send_voice(recipient, voice, options)

from __future__ import annotations

import enum
import socket

import anyio
import msgspec
import uvicorn
from anyio.abc import TaskStatus
from anyio.streams.memory import MemoryObjectSendStream
from fastapi import FastAPI, Request, Response

from .api_models import Message, Update, decode_update
from .errors import DecodeError, ListenerError
from .logging import get_logger

logger = get_logger(__name__)

SHUTDOWN_TIMEOUT_S = 5.0


class ReceiverState(enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    SERVING = "serving"


def decode_delivery(body: bytes) -> Update:
    try:
        return decode_update(body)
    except msgspec.DecodeError as exc:
        raise DecodeError(str(exc)) from exc


class WebhookReceiver:
    """HTTP endpoint for webhook deliveries.

    Each decoded update has its message published on ``send_stream``; the
    request is answered only once a consumer took the message. Every delivery
    is answered with an empty ``200 OK``, malformed ones included, so Telegram
    never retries.
    """

    def __init__(self, send_stream: MemoryObjectSendStream[Message]) -> None:
        self._send_stream = send_stream
        self._server: uvicorn.Server | None = None
        self.app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
        self.app.add_api_route(
            "/{path:path}", self.handle_delivery, methods=["POST"]
        )

    @property
    def state(self) -> ReceiverState:
        if self._server is None:
            return ReceiverState.IDLE
        if self._server.started:
            return ReceiverState.SERVING
        return ReceiverState.LISTENING

    async def handle_delivery(self, request: Request) -> Response:
        body = await request.body()
        try:
            update = decode_delivery(body)
        except DecodeError as exc:
            logger.warning(
                "webhook.decode_failed",
                path=request.url.path,
                error=str(exc),
            )
            return Response(status_code=200)

        logger.debug(
            "webhook.update",
            update_id=update.update_id,
            message_id=update.message.message_id,
        )
        try:
            await self._send_stream.send(update.message)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.warning(
                "webhook.stream_closed",
                update_id=update.update_id,
                message_id=update.message.message_id,
            )
        return Response(status_code=200)

    async def serve(
        self,
        host: str,
        port: int,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Bind ``host:port`` and serve until cancelled or shut down.

        Raises :class:`ListenerError` when the socket can not be bound or the
        server fails; the listener is never restarted.
        """
        if self._server is not None:
            raise ListenerError("webhook receiver is already listening")
        try:
            sock = socket.create_server((host, port))
        except OSError as exc:
            logger.error("webhook.bind_failed", host=host, port=port, error=str(exc))
            raise ListenerError(f"cannot listen on {host}:{port}: {exc}") from exc

        config = uvicorn.Config(
            self.app,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        logger.info("webhook.listening", host=host, port=port)
        task_status.started()
        try:
            await self._server.serve(sockets=[sock])
        except anyio.get_cancelled_exc_class():
            if self._server.started:
                with anyio.move_on_after(SHUTDOWN_TIMEOUT_S, shield=True):
                    await self._server.shutdown()
            raise
        except Exception as exc:
            logger.error(
                "webhook.serve_failed",
                host=host,
                port=port,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise ListenerError(f"webhook listener failed: {exc}") from exc
        finally:
            sock.close()
            self._server = None
        logger.info("webhook.stopped", host=host, port=port)

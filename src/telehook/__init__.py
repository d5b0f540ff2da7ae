"""Telegram Bot API client with a webhook receiver."""

from __future__ import annotations

from .api_models import Message, Update, User
from .bot import Bot
from .errors import (
    DecodeError,
    FetchError,
    ListenerError,
    RemoteAPIError,
    TelehookError,
    TransportError,
    UnsupportedOperationError,
    UnsupportedSourceError,
)
from .markup import ForceReply, HideKeyboard, Keyboard
from .types import ChatAction, InputFile, ParseMode, SendOptions

__version__ = "0.1.0"

__all__ = [
    "Bot",
    "ChatAction",
    "DecodeError",
    "FetchError",
    "ForceReply",
    "HideKeyboard",
    "InputFile",
    "Keyboard",
    "ListenerError",
    "Message",
    "ParseMode",
    "RemoteAPIError",
    "SendOptions",
    "TelehookError",
    "TransportError",
    "UnsupportedOperationError",
    "UnsupportedSourceError",
    "Update",
    "User",
    "__version__",
]

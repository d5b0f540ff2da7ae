"""Decoding of the ``{"ok": ..., "result": ...}`` envelope wrapping every
Bot API response."""

from __future__ import annotations

from typing import TypeVar

import msgspec

from .errors import RemoteAPIError, TransportError
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RemoteEnvelope(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    ok: bool
    result: msgspec.Raw = msgspec.Raw()
    error_code: int = 0
    description: str = ""


_ENVELOPE_DECODER = msgspec.json.Decoder(RemoteEnvelope)


def decode_envelope(
    content: bytes,
    *,
    method: str,
    status_code: int | None = None,
) -> msgspec.Raw | None:
    """Decode ``content`` and classify it.

    Returns the raw ``result`` of a successful call (``None`` when absent).
    Raises :class:`TransportError` for an undecodable body and
    :class:`RemoteAPIError` when the service reports ``ok: false``.
    """
    try:
        envelope = _ENVELOPE_DECODER.decode(content)
    except msgspec.DecodeError as exc:
        logger.error(
            "telegram.bad_response",
            method=method,
            status=status_code,
            error=str(exc),
            body=content[:512].decode(errors="replace"),
        )
        raise TransportError(
            f"malformed response body from {method}: {exc}",
            method=method,
            status_code=status_code,
        ) from exc

    if not envelope.ok:
        logger.error(
            "telegram.api_error",
            method=method,
            status=status_code,
            error_code=envelope.error_code,
            description=envelope.description,
        )
        raise RemoteAPIError(
            envelope.description, envelope.error_code, method=method
        )

    if status_code is not None and not 200 <= status_code < 300:
        raise TransportError(
            f"unexpected status {status_code} from {method}",
            method=method,
            status_code=status_code,
        )

    raw = envelope.result
    if len(raw) == 0 or bytes(raw) == b"null":
        return None
    return raw


def decode_result(raw: msgspec.Raw, result_type: type[T], *, method: str) -> T:
    try:
        return msgspec.json.decode(raw, type=result_type)
    except msgspec.DecodeError as exc:
        raise TransportError(
            f"unexpected result from {method}: {exc}", method=method
        ) from exc

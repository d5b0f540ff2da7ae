from __future__ import annotations


class TelehookError(Exception):
    pass


class TransportError(TelehookError):
    """Network failure, unexpected status or malformed response body."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.status_code = status_code


class FetchError(TransportError):
    def __init__(self, url: str, *, status_code: int | None = None) -> None:
        if status_code is None:
            message = f"Fetch failed. Remote URL: {url!r}"
        else:
            message = f"Fetch failed (errcode: {status_code}). Remote URL: {url!r}"
        super().__init__(message, status_code=status_code)
        self.url = url


class ListenerError(TransportError):
    pass


class RemoteAPIError(TelehookError):
    """The remote service answered with ``ok: false``."""

    def __init__(
        self,
        description: str,
        code: int,
        *,
        method: str | None = None,
    ) -> None:
        super().__init__(f"{description} ({code})")
        self.description = description
        self.code = code
        self.method = method


class UnsupportedOperationError(TelehookError):
    pass


class UnsupportedSourceError(UnsupportedOperationError):
    pass


class DecodeError(TelehookError):
    pass

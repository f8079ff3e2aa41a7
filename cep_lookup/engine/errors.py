"""Error taxonomy shared by fetchers and the race coordinator."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Categories an error envelope can carry."""

    REQUEST_BUILD = "request_build"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


class FetchError(Exception):
    """Base error for a single provider lookup."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class RequestBuildError(FetchError):
    """The outbound request could not be constructed."""

    kind = ErrorKind.REQUEST_BUILD


class TransportError(FetchError):
    """Connection, DNS, read failure, timeout or cancellation mid-transfer."""

    kind = ErrorKind.TRANSPORT


class HTTPStatusError(FetchError):
    """The backend answered with a non-2xx status."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Unexpected status {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class DecodeError(FetchError):
    """The body is not a JSON object of the expected shape."""

    kind = ErrorKind.DECODE


class NotFoundError(DecodeError):
    """The backend explicitly reported that the code does not exist."""

    kind = ErrorKind.NOT_FOUND


class UnexpectedFetchError(FetchError):
    """Wraps an exception a fetcher leaked past its boundary."""

    kind = ErrorKind.UNEXPECTED


class RaceTimeoutError(TimeoutError):
    """No provider produced an answer before the race deadline."""

    def __init__(self, key: str, timeout: float) -> None:
        super().__init__(f"No provider answered for {key!r} within {timeout:g}s")
        self.key = key
        self.timeout = timeout


__all__ = [
    "DecodeError",
    "ErrorKind",
    "FetchError",
    "HTTPStatusError",
    "NotFoundError",
    "RaceTimeoutError",
    "RequestBuildError",
    "TransportError",
    "UnexpectedFetchError",
]

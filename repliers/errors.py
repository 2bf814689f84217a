"""Exceptions raised by the Repliers client.

Every failure surfaced by the client is one of a closed set of kinds.  Catch
:class:`RepliersError` to handle them all in one place, or a subclass for finer
control::

    try:
        listing = client.get_listing("RTC2788401")
    except NotFoundError:
        ...
    except TransportError as exc:
        if exc.timed_out:
            ...
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Tag identifying which kind of failure an error represents."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    API = "api"
    DECODE = "decode"


class RepliersError(RuntimeError):
    """Base class of every error raised by the client."""

    kind: ErrorKind


class ValidationError(RepliersError):
    """Raised when caller input is rejected before any request is sent."""

    kind = ErrorKind.VALIDATION


class TransportError(RepliersError):
    """Raised when the HTTP request itself could not be completed."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class AuthenticationError(RepliersError):
    """Raised when the API key is rejected (HTTP 401/403)."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RepliersError):
    """Raised when the API reports that nothing exists at the path (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = 404


class ApiError(RepliersError):
    """Raised when the API reports a failure other than auth or not-found."""

    kind = ErrorKind.API

    def __init__(self, code: int | str, message: str, *, status_code: int) -> None:
        super().__init__(f"API error {code}: {message}")
        self.code = code
        self.message = message
        self.status_code = status_code


class DecodeError(RepliersError):
    """Raised when a response body does not have the expected shape."""

    kind = ErrorKind.DECODE

    def __init__(self, reason: str, *, snippet: str = "", status_code: Optional[int] = None) -> None:
        message = reason if not snippet else f"{reason} (body: {snippet!r})"
        super().__init__(message)
        self.reason = reason
        self.snippet = snippet
        self.status_code = status_code

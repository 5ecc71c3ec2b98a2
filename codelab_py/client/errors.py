"""Exceptions raised by the API client layer."""

from typing import Any, Optional


class ApiError(Exception):
    """Base class for failures talking to the backend."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


class TransportError(ApiError):
    """Network failure, timeout or non-2xx response."""


class UnauthorizedError(TransportError):
    """The backend rejected the bearer token (HTTP 401)."""


class ProtocolError(ApiError):
    """A 2xx response that does not carry a usable envelope."""


class LessonNotFoundError(ApiError):
    """The requested lesson or challenge does not exist."""

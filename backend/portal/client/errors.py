"""Errors surfaced by the events API client."""
from typing import Any, Optional


class EventsClientError(Exception):
    """Base class; carries the HTTP status and the server's ``detail`` payload."""

    def __init__(self, detail: Any = None, status_code: Optional[int] = None):
        super().__init__(detail if isinstance(detail, str) else repr(detail))
        self.detail = detail
        self.status_code = status_code


class ValidationFailed(EventsClientError):
    pass


class PermissionDenied(EventsClientError):
    pass


class EventNotFound(EventsClientError):
    pass


class NotAuthenticated(EventsClientError):
    pass


class TransientFetchError(EventsClientError):
    """Network failure or a 5xx from the server."""


class MalformedResponse(EventsClientError):
    """A success status whose body is not JSON or does not match the expected shape."""


_BY_STATUS = {
    400: ValidationFailed,
    401: NotAuthenticated,
    403: PermissionDenied,
    404: EventNotFound,
    422: ValidationFailed,
}


def error_for_status(status_code: int, detail: Any) -> EventsClientError:
    if status_code >= 500:
        return TransientFetchError(detail, status_code)
    return _BY_STATUS.get(status_code, EventsClientError)(detail, status_code)

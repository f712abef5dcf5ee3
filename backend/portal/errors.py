"""HTTP-facing error taxonomy raised by the service layer."""
from typing import Any

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Input parsed fine but violates an event/participant invariant."""

    def __init__(self, detail: Any = "Invalid input"):
        super().__init__(status_code=422, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: Any = "Not allowed"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: Any = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class NotAuthenticated(HTTPException):
    def __init__(self, detail: Any = "Authentication required"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

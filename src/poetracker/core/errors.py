"""
Error Taxonomy

Domain exceptions raised by the store, policy, workflow, reporting and export
layers. They propagate to the request boundary, where ``register_error_handlers``
maps each to an HTTP status and a JSON body.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PoETrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str | None]:
        return {"detail": self.message, "error": type(self).__name__}


class ValidationError(PoETrackerError):
    """Raised when input fails validation."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        return {**super().to_dict(), "field": self.field}


class FileRejectedError(ValidationError):
    """Raised when an uploaded file breaks the type, size or count constraint."""

    def __init__(self, message: str, constraint: str, file_name: str | None = None) -> None:
        super().__init__(message, field="files")
        self.constraint = constraint
        self.file_name = file_name

    def to_dict(self) -> dict[str, str | None]:
        return {**super().to_dict(), "constraint": self.constraint, "file_name": self.file_name}


class AuthenticationRequired(PoETrackerError):
    """No valid session for a non-public endpoint."""

    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(PoETrackerError):
    """Authenticated, but the authorization policy denied the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PoETrackerError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(PoETrackerError):
    """A precondition for the operation does not hold."""

    status_code = status.HTTP_409_CONFLICT


class UpstreamFailure(PoETrackerError):
    """An external collaborator (document renderer, file storage) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY


async def handle_poetracker_error(request: Request, exc: Exception) -> JSONResponse:
    """Translate a domain error into its HTTP response."""
    assert isinstance(exc, PoETrackerError)
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationRequired) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PoETrackerError, handle_poetracker_error)

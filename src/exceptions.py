"""Domain errors raised by the services.

Each kind maps to exactly one HTTP status in ``src.api.errors``. Anything
that is not an ``AppError`` is treated as an unclassified internal failure.
"""

from typing import Any


class AppError(Exception):
    """Base class for every error a service may raise."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a response body."""
        body: dict[str, Any] = {"message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Input failed validation before reaching a store."""


class ConflictError(AppError):
    """A unique resource already exists."""


class UnauthorizedError(AppError):
    """Missing, malformed or badly signed credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidCredentialsError(UnauthorizedError):
    """Login failed; the message never says which half was wrong."""

    def __init__(self):
        super().__init__("Email or password wrong")


class ForbiddenError(AppError):
    """Authenticated caller may not touch this resource."""


class NotFoundError(AppError):
    """Resource (or any search result) does not exist."""


class BlobStoreError(AppError):
    """Uploading to or deleting from the blob store failed."""

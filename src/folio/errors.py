# ABOUTME: Error taxonomy shared by the service, HTTP API, and CLI.
# ABOUTME: Each error carries the HTTP status code it surfaces as.

from typing import Any


class FolioError(Exception):
    """Base class for errors that map to a user-facing response."""

    status_code = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(FolioError):
    """Raised when request input fails validation."""

    status_code = 400


class InvalidIsbnError(ValidationError):
    """Raised when a string is not a valid ISBN-10 or ISBN-13."""


class NotFoundError(FolioError):
    """Raised when a requested resource does not exist."""

    status_code = 404


class ConflictError(FolioError):
    """Raised when a create or import would duplicate an existing record."""

    status_code = 409


class DuplicateIsbnError(ConflictError):
    """Raised when a book with the same ISBN is already in the local catalog."""


class ServiceUnavailableError(FolioError):
    """Raised when external providers cannot be reached or are short-circuited."""

    status_code = 503

"""
Exception types raised by the advocate record sources and routes.

Each exception carries the HTTP status and the client-facing message.
Diagnostic context (the failing search, the offending record) stays on the
exception for server-side logging and is never put in the response body.
"""

from typing import Any


class AdvocateError(Exception):
    """Base class for errors that map to a JSON error response."""

    status_code = 500
    public_message = "Failed to fetch advocates"

    def __init__(self, message: str = "", **context: Any) -> None:
        super().__init__(message or self.public_message)
        self.context = context

    def to_body(self) -> dict[str, Any]:
        return {"error": self.public_message}


class InvalidQueryError(AdvocateError):
    """Query parameters failed validation (HTTP 400)."""

    status_code = 400
    public_message = "Invalid query parameters"

    def __init__(self, details: list[dict[str, Any]]) -> None:
        super().__init__(self.public_message)
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"error": self.public_message, "details": self.details}


class StoreUnavailableError(AdvocateError):
    """No store is configured and the fallback policy is "error"."""

    public_message = "Database connection not established"


class StoreQueryError(AdvocateError):
    """The store could not be reached or the query failed."""


class RecordValidationError(AdvocateError):
    """A stored record does not match the advocate shape."""

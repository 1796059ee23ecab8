"""
Error taxonomy for the Carthooks client.

Every failure reaches the caller as one of these exceptions; nothing is
recovered internally.
"""

from typing import Any


class CarthooksError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message, "kind": type(self).__name__}
        if self.details:
            result["details"] = self.details
        return result


class BuildError(CarthooksError):
    """The request could not be constructed (malformed URL, unserializable body)."""


class TransportError(CarthooksError):
    """Network or I/O failure: connection refused, DNS, timeout."""


class DecodeError(CarthooksError):
    """Malformed JSON, or a payload that does not match the bound shape."""


class ValidationError(CarthooksError):
    """Validation error for local input/data issues (not API errors)."""


class APIError(CarthooksError):
    """The API answered, but not with success."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class HTTPStatusError(APIError):
    """
    Non-OK HTTP status.

    The body is not parsed; its raw text is kept on ``body`` for diagnostics.
    """

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"unexpected status code: {status}", status=status)
        self.body = body


class DomainError(APIError):
    """
    Business error declared by the server in the envelope's ``error`` field.

    ``key`` is the stable value to branch on.
    """

    def __init__(self, message: str, type: str = "", key: str = "", trace_id: str = "", status: int = 0):
        super().__init__(message or f"error: {key}", status=status)
        self.type = type
        self.key = key
        self.trace_id = trace_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["type"] = self.type
        result["key"] = self.key
        if self.trace_id:
            result["trace_id"] = self.trace_id
        return result

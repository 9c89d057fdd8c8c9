"""Custom exceptions for Pipedrive API errors."""

from typing import Any


class PipedriveError(Exception):
    """Base exception for Pipedrive API errors."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details or {}


class MissingArgumentError(PipedriveError):
    """A required argument (id, title) was not supplied."""

    def __init__(self, name: str, message: str | None = None):
        super().__init__(message or f"A {name.upper()} is required")
        self.name = name


class InvalidArgumentError(PipedriveError):
    """A supplied value is outside its allowed set."""

    def __init__(self, field: str, value: Any, allowed: tuple):
        allowed_str = ", ".join(str(v) for v in allowed)
        super().__init__(
            f"'{value}' is not a valid {field} value. Valid values are: {allowed_str}"
        )
        self.field = field
        self.value = value
        self.allowed = allowed


class RateLimitError(PipedriveError):
    """429 - Rate limit exceeded."""

    def __init__(self, retry_after: float | None, details: dict | None = None):
        if retry_after is None:
            message = "API rate limit exceeded"
        else:
            message = f"API rate limit exceeded, retry after {retry_after} seconds"
        super().__init__(message, status_code=429, details=details)
        self.retry_after = retry_after


class TransportError(PipedriveError):
    """Network failure or undecodable response body."""

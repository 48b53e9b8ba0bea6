"""Exception hierarchy for TheTVDB client errors."""

from __future__ import annotations

from typing import Optional


class TVDBError(Exception):
    """Base exception for TheTVDB client errors."""


class InvalidArgumentError(TVDBError, ValueError):
    """Raised for caller input the service cannot accept (e.g. a non-positive id)."""


class AuthError(TVDBError):
    """Raised when the API key cannot be exchanged for a bearer token."""


class TransportError(TVDBError):
    """Raised when a request fails on the network or with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(TransportError):
    """Resource not found (404)."""


class DecodeError(TVDBError):
    """Raised when a response body is not valid JSON."""

"""Central error types used across the application."""

from __future__ import annotations


class AuthError(RuntimeError):
    """Raised when a request has no session or no bearer token for its user."""


class StravaAPIError(RuntimeError):
    """Base error for Strava API failures."""


class TransportError(StravaAPIError):
    """Raised when Strava cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(StravaAPIError):
    """Raised when a Strava response body cannot be decompressed or parsed."""


class UpstreamError(StravaAPIError):
    """Raised when any page of an activity fetch fails."""


__all__ = [
    "AuthError",
    "StravaAPIError",
    "TransportError",
    "DecodeError",
    "UpstreamError",
]

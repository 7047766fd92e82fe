"""Error taxonomy for the Authn8 API client.

Every failure surfaced by the client is one of the classes below. HTTP
status codes are mapped in exactly one place, :func:`error_for_response`.
"""

from __future__ import annotations

import httpx


class Authn8Error(Exception):
    """Base class for all Authn8 failures.

    Attributes:
        message: Human readable description, safe to show to the agent.
        status_code: Upstream HTTP status when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(Authn8Error):
    """The token is invalid or expired (401)."""


class ConfigError(AuthError):
    """The token is not configured at all."""


class ScopeError(Authn8Error):
    """The token lacks permission for the resource (403)."""


class NotFoundError(Authn8Error):
    """Unknown account or resource (404)."""


class RateLimitError(Authn8Error):
    """Upstream rate limit hit (429)."""

    def __init__(self, message: str, retry_after: str | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class UpstreamError(Authn8Error):
    """Any other non-2xx response, or a transport failure."""


class ValidationError(Authn8Error):
    """Tool arguments were missing or malformed."""


# Passed through unchanged by startup validation.
DOMAIN_ERRORS: tuple[type[Authn8Error], ...] = (
    AuthError,
    ScopeError,
    NotFoundError,
    RateLimitError,
)


def error_for_response(response: httpx.Response) -> Authn8Error:
    """Map a non-2xx response to the matching taxonomy class."""
    status = response.status_code
    if status == 401:
        return AuthError(
            "Token is invalid or expired. Please check your token in the Authn8 dashboard.",
            status_code=401,
        )
    if status == 403:
        return ScopeError(
            "Token does not have permission to access this resource.",
            status_code=403,
        )
    if status == 404:
        return NotFoundError("Resource not found.", status_code=404)
    if status == 429:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            return RateLimitError(
                f"Rate limited. Retry after {retry_after} seconds.",
                retry_after=retry_after,
            )
        return RateLimitError("Rate limited. Please try again later.")
    return UpstreamError(
        f"API request failed with status {status}", status_code=status
    )

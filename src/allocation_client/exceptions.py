"""Allocation client custom exceptions.

Exception Design Principles:
1. Every failure surfaced by ApiClient is an ApiError (the normalized error shape)
2. Subclasses split on what the caller can do about it:
   - Connectivity failure, nothing came back (NetworkError)
   - Client-imposed deadline elapsed (RequestTimeoutError)
   - Session is gone and the user must log in again (SessionExpiredError)
   - Anything else the backend reported (plain ApiError)
3. Setup problems outside a request are ConfigError, never ApiError
"""

from typing import Any

import httpx


class AllocationClientError(Exception):
    """Base exception for all allocation client errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize AllocationClientError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(AllocationClientError):
    """Configuration errors - recoverable by user reconfiguration.

    Covers setup issues that prevent the client from starting:
    - Unreadable or malformed session storage file
    - File system permission issues for the storage directory

    Does NOT include runtime HTTP errors - those are ApiError.
    """

    pass


class ApiError(AllocationClientError):
    """Normalized error raised for every failed request.

    Attributes:
        status: HTTP status code, None when no response was obtained.
        response: The raw httpx.Response when one is available.
        details: Structured ``details`` payload from the error body, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response: httpx.Response | None = None,
        details: Any = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status = status
        self.response = response
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


class NetworkError(ApiError):
    """No response was obtained - the backend could not be reached."""

    pass


class RequestTimeoutError(ApiError):
    """The request was aborted by its timeout or cancellation signal."""

    pass


class SessionExpiredError(ApiError):
    """The session has been torn down and the user must authenticate again.

    Raised both by the pre-flight token check (status None) and by the
    401 session-expiration heuristic (status 401).
    """

    pass
